from __future__ import annotations

from admissions.application.use_cases.get_application import load_application
from admissions.application.use_cases.transition import commit_transition
from admissions.config.logger import logger
from admissions.domain.errors import InvalidTransition
from admissions.domain.lifecycle import (
    CompletenessCheck, default_completeness_check, ensure_complete, ensure_transition
)
from admissions.domain.models import ApplicationStatus, TransitionResult, utcnow
from admissions.infrastructure.db.repositories.application_repository import ApplicationRepository
from admissions.services.academic_year_resolver import AcademicYearResolver
from admissions.services.sequence_allocator import SequenceAllocator


class SubmitApplicationUseCase:
    """
    draft -> submitted.

      1. the completeness guard must pass
      2. an application ID is allocated, unless the record already has one
      3. status, ID and submitted_at are committed together, and only
         while the stored row is still a draft without an ID

    From this commit on the application shows up in staff listings.
    """

    def __init__(
            self,
            repo: ApplicationRepository,
            allocator: SequenceAllocator,
            year_resolver: AcademicYearResolver,
            completeness_check: CompletenessCheck = default_completeness_check,
    ):
        self._repo = repo
        self._allocator = allocator
        self._year_resolver = year_resolver
        self._check = completeness_check

    def execute(self, key: str) -> TransitionResult:
        app = load_application(self._repo, key)
        ensure_transition(app.status, ApplicationStatus.SUBMITTED)
        ensure_complete(app, self._check)

        application_id_was = app.application_id
        if not app.application_id:
            allocated = self._allocator.allocate(self._year_resolver.year_key())
            app.application_id = allocated.value
            app.application_id_provisional = not allocated.sequential

        app.status = ApplicationStatus.SUBMITTED
        app.submitted_at = utcnow()
        try:
            commit_transition(self._repo, app, ApplicationStatus.DRAFT,
                              ("application_id", "application_id_provisional", "submitted_at"),
                              application_id_was)
        except InvalidTransition:
            if app.application_id != application_id_was:
                logger.warning("⚠️ %s left unused: %s was submitted by a concurrent request",
                               app.application_id, app.id)
            raise

        logger.info("→ %s submitted as %s%s", app.id, app.application_id,
                    " (provisional)" if app.application_id_provisional else "")
        return TransitionResult(application_id=app.application_id, status=app.status)
