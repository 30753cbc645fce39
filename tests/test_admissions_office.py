import pytest

from admissions.application.admissions_office import AdmissionOffice
from admissions.domain.errors import IncompleteApplication, InvalidTransition, NotFound
from admissions.domain.models import AdmissionApplication, ApplicationStatus, TransferResult
from admissions.infrastructure.db.repositories.application_repository import ApplicationRepository
from admissions.services.sequence_allocator import SequenceAllocator


@pytest.fixture
def transfer(fake_transfer):
    return fake_transfer()


@pytest.fixture
def make_office(session_factory):
    offices = []

    def _make(transfer=None, transfer_enabled=True, timeout=5.0):
        office = AdmissionOffice(
            session_factory,
            transfer=transfer,
            allocator=SequenceAllocator(session_factory, prefix="UCAES", backoff_ms=0),
            transfer_enabled=transfer_enabled,
            transfer_timeout=timeout,
        )
        offices.append(office)
        return office

    yield _make
    for office in offices:
        office.close()


@pytest.fixture
def office(make_office, transfer, academic_year_2026):
    return make_office(transfer)


def submit_new(office, sections, user_id="user-1", **kw):
    draft = office.create_draft(user_id, **sections(**kw))
    return draft, office.submit(draft.id)


def accepted(office, sections, **kw):
    draft, submitted = submit_new(office, sections, **kw)
    office.claim(submitted.application_id, reviewer="staff-1")
    return submitted.application_id, office.accept(submitted.application_id, reviewer="director")


class TestSubmission:

    def test_draft_has_no_application_id(self, office, sections):
        draft = office.create_draft("user-1", **sections())
        assert draft.status is ApplicationStatus.DRAFT
        assert draft.application_id is None
        assert office.get(draft.id).application_id is None

    def test_submit_assigns_sequential_ids(self, office, sections):
        _, first = submit_new(office, sections, email="a@example.com")
        _, second = submit_new(office, sections, email="b@example.com")

        assert first.status is ApplicationStatus.SUBMITTED
        assert first.application_id == "UCAES20260001"
        assert second.application_id == "UCAES20260002"

        stored = office.get("UCAES20260001")
        assert stored.submitted_at is not None
        assert not stored.application_id_provisional

    def test_incomplete_draft_cannot_be_submitted(self, office, session_factory):
        draft = office.create_draft("user-1", personal_info={"firstName": "Ama"})

        with pytest.raises(IncompleteApplication) as exc:
            office.submit(draft.id)

        assert "payment" in exc.value.missing
        assert office.get(draft.id).status is ApplicationStatus.DRAFT
        # no number was consumed
        assert SequenceAllocator(session_factory).peek("UCAES2026") == 0

    def test_submit_twice_is_rejected(self, office, sections):
        draft, _ = submit_new(office, sections)
        with pytest.raises(InvalidTransition):
            office.submit(draft.id)

    def test_calendar_year_used_without_configuration(self, make_office, sections):
        office = make_office()
        _, result = submit_new(office, sections)
        assert result.application_id.startswith("UCAES")
        assert result.application_id.endswith("0001")


class TestStaffListing:

    def test_drafts_are_never_listed(self, office, sections):
        office.create_draft("user-draft", **sections(email="draft@example.com"))
        _, submitted = submit_new(office, sections, email="sub@example.com")

        listed = office.list_for_staff()
        assert [a.application_id for a in listed] == [submitted.application_id]
        assert office.list_for_staff(status="draft") == []

    def test_filters(self, office, sections):
        _, a = submit_new(office, sections, email="ama@example.com", first="Ama", last="Mensah")
        _, b = submit_new(office, sections, email="kofi@example.com", first="Kofi", last="Boateng")
        office.claim(b.application_id, reviewer="staff-1")

        assert [x.application_id for x in office.list_for_staff(status="under_review")] == [b.application_id]
        assert [x.application_id for x in office.list_for_staff(search="mensah")] == [a.application_id]
        assert [x.application_id for x in office.list_for_staff(search="KOFI@")] == [b.application_id]
        assert len(office.list_for_staff(program="BSc Agriculture")) == 2
        assert office.list_for_staff(program="BSc Nursing") == []
        assert len(office.list_for_staff(payment_status="paid")) == 2


class TestLookup:

    def test_get_is_stable(self, office, sections):
        draft, submitted = submit_new(office, sections)
        first = office.get(submitted.application_id)
        again = office.get(submitted.application_id)
        by_key = office.get(draft.id)
        assert first.application_id == again.application_id == by_key.application_id

    def test_unknown_key(self, office):
        with pytest.raises(NotFound):
            office.get("UCAES20269999")

    def test_legacy_record_without_id_is_found_by_key(self, office, session, sections):
        repo = ApplicationRepository(session)
        repo.add(AdmissionApplication(id="legacy-1", user_id="u9",
                                      status=ApplicationStatus.SUBMITTED, **sections()))
        repo.commit()

        result = office.claim("legacy-1", reviewer="staff-1")
        assert result.application_id is None
        assert result.status is ApplicationStatus.UNDER_REVIEW


class TestReview:

    def test_claim_has_no_side_effects_on_ids(self, office, sections):
        _, submitted = submit_new(office, sections)
        result = office.claim(submitted.application_id, reviewer="staff-1")

        app = office.get(submitted.application_id)
        assert result.status is ApplicationStatus.UNDER_REVIEW
        assert app.application_id == submitted.application_id
        assert app.registration_number is None
        assert app.last_reviewed_by == "staff-1"

    def test_cannot_accept_before_claim(self, office, sections, transfer):
        _, submitted = submit_new(office, sections)
        with pytest.raises(InvalidTransition):
            office.accept(submitted.application_id, reviewer="director")
        assert transfer.calls == []

    def test_reject_is_terminal(self, office, sections):
        _, submitted = submit_new(office, sections)
        office.claim(submitted.application_id, reviewer="staff-1")
        result = office.reject(submitted.application_id, reviewer="staff-1", notes="WASSCE grades")

        assert result.status is ApplicationStatus.REJECTED
        assert office.get(submitted.application_id).review_notes == "WASSCE grades"
        with pytest.raises(InvalidTransition):
            office.accept(submitted.application_id, reviewer="director")

    def test_annotate_keeps_status(self, office, sections):
        draft = office.create_draft("user-1", **sections())
        result = office.annotate(draft.id, "call applicant", reviewer="staff-2")

        app = office.get(draft.id)
        assert result.status is ApplicationStatus.DRAFT
        assert app.review_notes == "call applicant"
        assert app.last_reviewed_by == "staff-2"


class TestAcceptance:

    def test_successful_transfer_sets_registration_number(self, office, sections, transfer):
        app_id, result = accepted(office, sections)

        assert result.status is ApplicationStatus.ACCEPTED
        assert result.transfer.success
        assert not result.partial_failure
        assert transfer.calls == [app_id]

        app = office.get(app_id)
        assert app.registration_number == app_id
        assert app.transferred_to_portal
        assert app.transferred_at is not None
        assert app.transfer_error is None

    def test_failed_transfer_keeps_acceptance(self, make_office, fake_transfer, sections, academic_year_2026):
        office = make_office(fake_transfer(result=TransferResult.fail("portal offline")))
        app_id, result = accepted(office, sections)

        assert result.status is ApplicationStatus.ACCEPTED
        assert result.partial_failure
        assert result.transfer.error == "portal offline"

        app = office.get(app_id)
        assert app.status is ApplicationStatus.ACCEPTED
        assert app.registration_number is None
        assert app.transfer_error == "portal offline"

    def test_raising_transfer_is_reported_as_failure(self, make_office, fake_transfer, sections,
                                                     academic_year_2026):
        office = make_office(fake_transfer(exc=RuntimeError("connection reset")))
        app_id, result = accepted(office, sections)

        assert result.partial_failure
        assert "connection reset" in result.transfer.error
        assert office.get(app_id).status is ApplicationStatus.ACCEPTED

    def test_slow_transfer_times_out(self, make_office, fake_transfer, sections, academic_year_2026):
        office = make_office(fake_transfer(delay=0.5), timeout=0.05)
        app_id, result = accepted(office, sections)

        assert result.partial_failure
        assert result.transfer.error.startswith("transfer pending")
        app = office.get(app_id)
        assert app.status is ApplicationStatus.ACCEPTED
        assert app.registration_number is None

    def test_transfer_disabled(self, make_office, sections, academic_year_2026):
        office = make_office(transfer_enabled=False)
        app_id, result = accepted(office, sections)

        assert result.transfer is None
        assert office.get(app_id).registration_number is None

    def test_director_overrides(self, office, sections):
        _, submitted = submit_new(office, sections)
        office.claim(submitted.application_id, reviewer="staff-1")
        office.accept(submitted.application_id, reviewer="director",
                      approved_program="BSc Agribusiness", approved_level="200", notes="moved")

        app = office.get(submitted.application_id)
        assert app.director_approved_program == "BSc Agribusiness"
        assert app.director_approved_level == "200"
        assert app.program_selection["firstChoice"] == "BSc Agribusiness"
        assert app.program_selection["studyLevel"] == "200"
        assert app.review_notes == "moved"
        assert [a.application_id for a in office.list_for_staff(program="BSc Agribusiness")] == [
            submitted.application_id
        ]
