"""
Default student-portal transfer: turns an accepted admission application into
a student registration record. The application ID doubles as the registration
number, so students keep the ID they got during admission.
"""
from __future__ import annotations

import uuid
from typing import Callable, List

from sqlalchemy.orm import Session

from admissions.config.logger import logger
from admissions.domain.models import (
    AdmissionApplication, ApplicationStatus, StudentRegistration, TransferResult, utcnow
)
from admissions.infrastructure.db.repositories.academic_year_repository import AcademicYearRepository
from admissions.infrastructure.db.repositories.application_repository import ApplicationRepository
from admissions.infrastructure.db.repositories.student_repository import StudentRegistrationRepository
from admissions.services.academic_year_resolver import AcademicYearResolver

_REQUIRED_SECTIONS = ("personal_info", "contact_info", "program_selection", "academic_background")


def _first(*values) -> str:
    for v in values:
        if v:
            return str(v)
    return ""


def missing_sections(app: AdmissionApplication) -> List[str]:
    return [name for name in _REQUIRED_SECTIONS if not getattr(app, name)]


def to_student_registration(app: AdmissionApplication, entry_academic_year: str) -> StudentRegistration:
    ps = app.program_selection
    return StudentRegistration(
        id=uuid.uuid4().hex,
        registration_number=app.application_id,
        application_id=app.application_id,
        surname=app.personal_info.get("lastName", "").strip().upper(),
        other_names=app.personal_info.get("firstName", "").strip().upper(),
        email=app.email,
        programme=_first(ps.get("firstChoice"), ps.get("program")),
        entry_level=_first(ps.get("level"), "undergraduate"),
        current_level=_first(ps.get("studyLevel"), ps.get("level"), "100"),
        schedule_type=_first(ps.get("studyMode"), "Regular"),
        entry_academic_year=entry_academic_year,
        status="approved",
        registered_at=utcnow(),
    )


class StudentPortalTransfer:
    """
    transfer(application_id) -> TransferResult. Opens its own session, so it
    can run on a worker thread next to the request that accepted the
    application. Never raises: every failure becomes TransferResult.fail.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def transfer(self, application_id: str) -> TransferResult:
        session = self._session_factory()
        try:
            return self._transfer(session, application_id)
        except Exception as exc:
            session.rollback()
            logger.exception("Transfer of %s failed", application_id)
            return TransferResult.fail(str(exc) or exc.__class__.__name__)
        finally:
            session.close()

    def _transfer(self, session: Session, application_id: str) -> TransferResult:
        apps = ApplicationRepository(session)
        students = StudentRegistrationRepository(session)

        app = apps.find(application_id)
        if app is None:
            return TransferResult.fail("Admission application not found")
        if app.status is not ApplicationStatus.ACCEPTED:
            return TransferResult.fail("Application must be accepted before transfer")

        existing = students.get_by_email(app.email) if app.email else None
        if existing is not None:
            logger.info("Student %s already transferred as %s", app.email, existing.registration_number)
            return TransferResult.ok(existing.registration_number, error="Student already transferred to portal")

        missing = missing_sections(app)
        if missing:
            return TransferResult.fail("Incomplete admission data. Missing: " + ", ".join(missing))
        if not app.email:
            return TransferResult.fail("Student e-mail is required for transfer")

        if not app.personal_info.get("firstName") or not app.personal_info.get("lastName"):
            return TransferResult.fail("Student name is required for transfer")
        if not (app.program_selection.get("firstChoice") or app.program_selection.get("program")):
            return TransferResult.fail("Program selection is required for transfer")
        if not app.application_id:
            return TransferResult.fail("Application has no application ID yet")
        taken = students.get_by_registration_number(app.application_id)
        if taken is not None:
            return TransferResult.fail(
                f"Registration number {app.application_id} already belongs to {taken.email}"
            )

        entry_year = AcademicYearResolver(AcademicYearRepository(session)).entry_academic_year()
        student = to_student_registration(app, entry_year)
        students.add(student)
        students.commit()

        logger.info("✅ %s transferred to student portal", student.registration_number)
        return TransferResult.ok(student.registration_number)
