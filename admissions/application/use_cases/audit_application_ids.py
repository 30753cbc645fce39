from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

import pandas as pd
from sqlalchemy.orm import Session

from admissions.config.logger import logger
from admissions.infrastructure.db.queries.id_audit import issued_sequences, provisional_ids, status_summary
from admissions.infrastructure.db.repositories.application_repository import ApplicationRepository
from admissions.services.academic_year_resolver import AcademicYearResolver
from admissions.services.sequence_allocator import SequenceAllocator


@dataclass
class IdAuditReport:
    year_key: str
    counter_last_number: int
    highest_issued: int
    summary: pd.DataFrame
    missing_ids: List[str] = field(default_factory=list)  # record keys
    provisional_ids: List[str] = field(default_factory=list)
    pending_transfers: List[str] = field(default_factory=list)

    @property
    def counter_behind(self) -> bool:
        # the next allocation would collide with an existing ID
        return self.highest_issued > self.counter_last_number

    @property
    def healthy(self) -> bool:
        return not (self.counter_behind or self.missing_ids or self.provisional_ids)


class AuditApplicationIdsUseCase:
    """
    Health check of application IDs for the current admission year:
    counter value vs. issued IDs, records without IDs, provisional IDs
    waiting for reconciliation, accepted applications without a
    registration number.
    """

    def __init__(self, session: Session, allocator: SequenceAllocator, year_resolver: AcademicYearResolver):
        self._session = session
        self._repo = ApplicationRepository(session)
        self._allocator = allocator
        self._year_resolver = year_resolver

    def execute(self) -> IdAuditReport:
        year_key = self._year_resolver.year_key()
        issued = issued_sequences(self._session, year_key)

        report = IdAuditReport(
            year_key=year_key,
            counter_last_number=self._allocator.peek(year_key),
            highest_issued=issued[-1] if issued else 0,
            summary=status_summary(self._session),
            missing_ids=[a.id for a in self._repo.get_missing_application_ids()],
            provisional_ids=provisional_ids(self._session),
            pending_transfers=[a.application_id or a.id for a in self._repo.get_pending_transfers()],
        )

        logger.info("Audit %s: counter=%d, highest issued=%d, missing=%d, provisional=%d, pending transfers=%d",
                    year_key, report.counter_last_number, report.highest_issued,
                    len(report.missing_ids), len(report.provisional_ids), len(report.pending_transfers))
        if report.counter_behind:
            logger.error("❌ Counter %s is behind issued IDs (%d < %d)",
                         year_key, report.counter_last_number, report.highest_issued)
        return report
