from __future__ import annotations

from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from admissions.application.use_cases.get_application import load_application
from admissions.application.use_cases.transition import commit_transition
from admissions.config.logger import logger
from admissions.domain.lifecycle import ensure_transition
from admissions.domain.models import AdmissionApplication, ApplicationStatus, TransitionResult, utcnow
from admissions.infrastructure.db.repositories.application_repository import ApplicationRepository

REVIEW_FIELDS = ("last_reviewed_by", "last_reviewed_at")


class _ReviewUseCase:
    def __init__(self, repo: ApplicationRepository):
        self._repo = repo

    @staticmethod
    def _stamp(app: AdmissionApplication, reviewer: Optional[str], notes: Optional[str]) -> tuple:
        """Reviewer stamp; returns the fields it touched."""
        app.last_reviewed_by = reviewer or app.last_reviewed_by
        app.last_reviewed_at = utcnow()
        if notes:
            app.review_notes = notes
            return REVIEW_FIELDS + ("review_notes",)
        return REVIEW_FIELDS


class ClaimApplicationUseCase(_ReviewUseCase):
    """submitted -> under_review. No ID or registration side effects."""

    def execute(self, key: str, reviewer: str) -> TransitionResult:
        app = load_application(self._repo, key)
        ensure_transition(app.status, ApplicationStatus.UNDER_REVIEW)
        app.status = ApplicationStatus.UNDER_REVIEW
        fields = self._stamp(app, reviewer, None)
        commit_transition(self._repo, app, ApplicationStatus.SUBMITTED, fields, app.application_id)
        logger.info("%s claimed by %s", app.application_id, reviewer)
        return TransitionResult(application_id=app.application_id, status=app.status)


class RejectApplicationUseCase(_ReviewUseCase):
    """under_review -> rejected (terminal)."""

    def execute(self, key: str, reviewer: str, notes: Optional[str] = None) -> TransitionResult:
        app = load_application(self._repo, key)
        ensure_transition(app.status, ApplicationStatus.REJECTED)
        app.status = ApplicationStatus.REJECTED
        fields = self._stamp(app, reviewer, notes)
        commit_transition(self._repo, app, ApplicationStatus.UNDER_REVIEW, fields, app.application_id)
        logger.info("✕ %s rejected by %s", app.application_id, reviewer)
        return TransitionResult(application_id=app.application_id, status=app.status)


class AnnotateApplicationUseCase(_ReviewUseCase):
    """Review notes in any state; the status is left alone."""

    def execute(self, key: str, notes: str, reviewer: Optional[str] = None) -> TransitionResult:
        app = load_application(self._repo, key)
        app.review_notes = notes
        fields: tuple = ("review_notes",)
        if reviewer:
            fields = self._stamp(app, reviewer, notes)
        try:
            self._repo.update_fields(app, fields)
            self._repo.commit()
        except SQLAlchemyError as db_err:
            logger.exception("Notes on %s not saved, rolling back: %s", app.id, db_err)
            self._repo.rollback()
            raise
        return TransitionResult(application_id=app.application_id, status=app.status)
