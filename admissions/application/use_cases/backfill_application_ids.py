from __future__ import annotations

from typing import Dict

from sqlalchemy.exc import SQLAlchemyError

from admissions.config.config import settings
from admissions.config.logger import logger
from admissions.infrastructure.db.repositories.application_repository import ApplicationRepository
from admissions.services.academic_year_resolver import AcademicYearResolver
from admissions.services.sequence_allocator import SequenceAllocator


class BackfillApplicationIdsUseCase:
    """
    Gives legacy non-draft applications that never got an application ID
    a sequential one. Existing IDs are never rewritten; IDs that do not
    carry the year-key prefix are only counted.

    Each record is committed on its own, so an interrupted run can simply
    be started again.
    """

    def __init__(self, repo: ApplicationRepository, allocator: SequenceAllocator,
                 year_resolver: AcademicYearResolver, prefix: str | None = None):
        self._repo = repo
        self._allocator = allocator
        self._year_resolver = year_resolver
        self._prefix = settings.year_key_prefix if prefix is None else prefix

    def execute(self) -> Dict[str, int]:
        logger.info("=== Backfilling application IDs ===")
        counts = {"fixed": 0, "already_proper": 0, "foreign_format": 0}
        year_key = None

        for app in self._repo.get_all_non_draft():
            if app.application_id:
                if app.application_id.startswith(self._prefix):
                    counts["already_proper"] += 1
                else:
                    counts["foreign_format"] += 1
                    logger.warning("%s keeps foreign-format ID %s", app.id, app.application_id)
                continue

            if year_key is None:
                year_key = self._year_resolver.year_key()
            allocated = self._allocator.allocate(year_key)
            app.application_id = allocated.value
            app.application_id_provisional = not allocated.sequential
            try:
                assigned = self._repo.assign_application_id(app)
                self._repo.commit()
            except SQLAlchemyError as db_err:
                logger.exception("Backfill of %s failed, rolling back: %s", app.id, db_err)
                self._repo.rollback()
                raise
            if not assigned:
                # got an ID from a concurrent request after it was listed
                logger.warning("%s already has an ID, %s left unused", app.id, allocated.value)
                counts["already_proper"] += 1
                continue
            counts["fixed"] += 1
            logger.info("→ %s -> %s", app.id, app.application_id)

        logger.info("✅ Backfill done: fixed=%d, already proper=%d, foreign format=%d",
                    counts["fixed"], counts["already_proper"], counts["foreign_format"])
        return counts
