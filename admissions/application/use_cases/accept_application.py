from __future__ import annotations

from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from admissions.application.use_cases.get_application import load_application
from admissions.application.use_cases.transition import commit_transition
from admissions.config.logger import logger
from admissions.domain.lifecycle import ensure_transition
from admissions.domain.models import (
    AdmissionApplication, ApplicationStatus, TransferResult, TransitionResult, utcnow
)
from admissions.infrastructure.db.repositories.application_repository import ApplicationRepository
from admissions.services.transfer_dispatcher import TransferDispatcher

ACCEPT_FIELDS = (
    "program_selection", "director_approved_program", "director_approved_level",
    "last_reviewed_by", "last_reviewed_at",
)


def record_transfer(repo: ApplicationRepository, app: AdmissionApplication, result: TransferResult) -> TransferResult:
    """
    Persist the outcome of a transfer on the application. Only the transfer
    columns are written, and only while the row has no registration number,
    so notes or a registration recorded meanwhile by another request stay.
    If the write fails the student exists but the application does not know
    it yet: reported as a failure so the next retry_transfers run fixes it.
    """
    if result.success and result.registration_number:
        app.registration_number = result.registration_number
        app.transferred_to_portal = True
        app.transferred_at = utcnow()
        app.transfer_error = None
    else:
        app.transfer_error = result.error or "transfer failed"
    try:
        if not repo.record_transfer_outcome(app):
            logger.info("%s already registered by another request, outcome not recorded", app.id)
        repo.commit()
    except SQLAlchemyError as db_err:
        logger.exception("Transfer outcome for %s not saved: %s", app.application_id, db_err)
        repo.rollback()
        if result.success:
            return TransferResult.fail(
                f"registration number {result.registration_number} not recorded: {db_err}"
            )
    return result


class AcceptApplicationUseCase:
    """
    under_review -> accepted, then hand-off to the student portal.

    The status change is committed before the transfer starts; whatever the
    transfer does afterwards (fails, raises, times out) the application stays
    accepted. The transfer outcome is returned next to the new status.
    """

    def __init__(self, repo: ApplicationRepository, dispatcher: Optional[TransferDispatcher] = None):
        self._repo = repo
        self._dispatcher = dispatcher

    @staticmethod
    def _apply_overrides(app: AdmissionApplication, program: Optional[str], level: Optional[str]) -> None:
        # director's decision overrides what the applicant picked
        if program and program.strip():
            app.director_approved_program = program.strip()
            app.program_selection["firstChoice"] = program.strip()
        if level and level.strip():
            app.director_approved_level = level.strip()
            app.program_selection["studyLevel"] = level.strip()

    def execute(
            self,
            key: str,
            reviewer: str,
            approved_program: Optional[str] = None,
            approved_level: Optional[str] = None,
            notes: Optional[str] = None,
    ) -> TransitionResult:
        app = load_application(self._repo, key)
        ensure_transition(app.status, ApplicationStatus.ACCEPTED)

        self._apply_overrides(app, approved_program, approved_level)
        app.status = ApplicationStatus.ACCEPTED
        app.last_reviewed_by = reviewer
        app.last_reviewed_at = utcnow()
        fields = ACCEPT_FIELDS
        if notes:
            app.review_notes = notes
            fields += ("review_notes",)
        # only the request that moves the row dispatches the transfer
        commit_transition(self._repo, app, ApplicationStatus.UNDER_REVIEW, fields, app.application_id)
        logger.info("✅ %s accepted by %s", app.application_id, reviewer)

        if self._dispatcher is None:
            return TransitionResult(application_id=app.application_id, status=app.status)

        result = self._dispatcher.dispatch(app.application_id or app.id)
        result = record_transfer(self._repo, app, result)
        if result.success:
            logger.info("%s registered as %s", app.application_id, result.registration_number)
        else:
            logger.warning("⚠️ %s accepted, transfer failed: %s", app.application_id, result.error)
        return TransitionResult(application_id=app.application_id, status=app.status, transfer=result)
