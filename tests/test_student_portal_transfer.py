import pytest

from admissions.application.admissions_office import AdmissionOffice
from admissions.domain.models import AdmissionApplication, ApplicationStatus
from admissions.infrastructure.db.repositories.application_repository import ApplicationRepository
from admissions.infrastructure.db.repositories.student_repository import StudentRegistrationRepository
from admissions.infrastructure.transfer.student_portal_transfer import (
    StudentPortalTransfer, missing_sections, to_student_registration
)
from admissions.services.sequence_allocator import SequenceAllocator


@pytest.fixture
def office(session_factory, academic_year_2026):
    # no transfer given: the student-portal transfer is used
    office = AdmissionOffice(
        session_factory,
        allocator=SequenceAllocator(session_factory, prefix="UCAES", backoff_ms=0),
        transfer_enabled=True,
        transfer_timeout=10.0,
    )
    yield office
    office.close()


def accept_new(office, sections, **kw):
    draft = office.create_draft("user-1", **sections(**kw))
    app_id = office.submit(draft.id).application_id
    office.claim(app_id, reviewer="staff-1")
    return app_id, office.accept(app_id, reviewer="director")


def test_accepted_application_becomes_student(office, session, sections):
    app_id, result = accept_new(office, sections)

    assert result.transfer.success
    assert result.transfer.registration_number == app_id

    student = StudentRegistrationRepository(session).get_by_registration_number(app_id)
    assert student.application_id == app_id
    assert student.surname == "MENSAH"
    assert student.other_names == "AMA"
    assert student.email == "ama.mensah@example.com"
    assert student.programme == "BSc Agriculture"
    assert student.current_level == "100"
    assert student.schedule_type == "Regular"
    assert student.entry_academic_year == "2025/2026"
    assert office.get(app_id).registration_number == app_id


def test_same_email_reuses_existing_student(office, sections):
    first_id, _ = accept_new(office, sections, email="twice@example.com")
    second_id, result = accept_new(office, sections, email="TWICE@example.com")

    assert result.transfer.success
    assert result.transfer.registration_number == first_id
    assert result.transfer.error == "Student already transferred to portal"
    assert office.get(second_id).registration_number == first_id


def test_transfer_is_repeatable(office, session_factory, sections):
    app_id, _ = accept_new(office, sections)
    again = StudentPortalTransfer(session_factory).transfer(app_id)
    assert again.success
    assert again.registration_number == app_id


def test_not_accepted_application_is_refused(office, session_factory, sections):
    draft = office.create_draft("user-1", **sections())
    app_id = office.submit(draft.id).application_id

    result = StudentPortalTransfer(session_factory).transfer(app_id)
    assert not result.success
    assert result.error == "Application must be accepted before transfer"


def test_unknown_application(session_factory):
    result = StudentPortalTransfer(session_factory).transfer("UCAES20260404")
    assert not result.success
    assert result.error == "Admission application not found"


def test_incomplete_accepted_application(session, session_factory):
    repo = ApplicationRepository(session)
    repo.add(AdmissionApplication(id="legacy-2", user_id="u2", application_id="UCAES20250017",
                                  status=ApplicationStatus.ACCEPTED,
                                  personal_info={"firstName": "Yaw", "lastName": "Osei"}))
    repo.commit()

    result = StudentPortalTransfer(session_factory).transfer("UCAES20250017")
    assert not result.success
    assert result.error.startswith("Incomplete admission data. Missing: ")
    assert "contact_info" in result.error


def test_mapping_defaults(sections):
    data = sections()
    data["program_selection"] = {"program": "Diploma in Horticulture"}
    app = AdmissionApplication(id="k", user_id="u", application_id="UCAES20260005", **data)

    assert missing_sections(app) == []
    student = to_student_registration(app, "2025/2026")
    assert student.registration_number == "UCAES20260005"
    assert student.programme == "Diploma in Horticulture"
    assert student.entry_level == "undergraduate"
    assert student.current_level == "100"
    assert student.schedule_type == "Regular"


def test_registration_number_already_taken(office, session, sections):
    draft = office.create_draft("user-1", **sections())
    app_id = office.submit(draft.id).application_id
    office.claim(app_id, reviewer="staff-1")

    students = StudentRegistrationRepository(session)
    students.add(to_student_registration(
        AdmissionApplication(id="other", user_id="u0", application_id=app_id,
                             **sections(email="someone.else@example.com")),
        "2025/2026",
    ))
    students.commit()

    result = office.accept(app_id, reviewer="director")

    assert result.status is ApplicationStatus.ACCEPTED
    assert result.partial_failure
    assert "already belongs to someone.else@example.com" in result.transfer.error
    assert office.get(app_id).registration_number is None
