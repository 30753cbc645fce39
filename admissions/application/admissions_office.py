"""
Entry point for request handlers: one short session per call, the same way
an HTTP request would use it. Wires repositories, the allocator, the
academic-year resolver and the transfer dispatcher into the use cases.
"""
from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional

from sqlalchemy.orm import Session

from admissions.application.use_cases.accept_application import AcceptApplicationUseCase
from admissions.application.use_cases.create_draft import CreateDraftApplicationUseCase
from admissions.application.use_cases.get_application import GetApplicationUseCase
from admissions.application.use_cases.list_staff_applications import ListStaffApplicationsUseCase
from admissions.application.use_cases.review_application import (
    AnnotateApplicationUseCase, ClaimApplicationUseCase, RejectApplicationUseCase
)
from admissions.application.use_cases.submit_application import SubmitApplicationUseCase
from admissions.config.config import settings
from admissions.domain.lifecycle import CompletenessCheck, default_completeness_check
from admissions.domain.models import AdmissionApplication, TransitionResult
from admissions.infrastructure.db.repositories.academic_year_repository import AcademicYearRepository
from admissions.infrastructure.db.repositories.application_repository import ApplicationRepository
from admissions.infrastructure.transfer.student_portal_transfer import StudentPortalTransfer
from admissions.services.academic_year_resolver import AcademicYearResolver
from admissions.services.sequence_allocator import SequenceAllocator
from admissions.services.transfer_dispatcher import StudentTransfer, TransferDispatcher


class AdmissionOffice:

    def __init__(
            self,
            session_factory: Callable[[], Session],
            transfer: Optional[StudentTransfer] = None,
            allocator: Optional[SequenceAllocator] = None,
            completeness_check: CompletenessCheck = default_completeness_check,
            transfer_enabled: Optional[bool] = None,
            transfer_timeout: Optional[float] = None,
    ):
        self._session_factory = session_factory
        self._allocator = allocator or SequenceAllocator(session_factory)
        self._check = completeness_check
        enabled = settings.transfer_enabled if transfer_enabled is None else transfer_enabled
        self._dispatcher: Optional[TransferDispatcher] = None
        if enabled:
            self._dispatcher = TransferDispatcher(
                transfer or StudentPortalTransfer(session_factory),
                timeout=transfer_timeout,
            )

    @contextmanager
    def _session(self) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
        finally:
            session.close()

    # ——— applicant side ——————————————————————————————————————————

    def create_draft(self, user_id: str, **sections: Dict[str, Any]) -> AdmissionApplication:
        with self._session() as session:
            repo = ApplicationRepository(session)
            return CreateDraftApplicationUseCase(repo).execute(user_id, **sections)

    def submit(self, key: str) -> TransitionResult:
        with self._session() as session:
            repo = ApplicationRepository(session)
            return SubmitApplicationUseCase(
                repo, self._allocator, AcademicYearResolver(AcademicYearRepository(session)), self._check
            ).execute(key)

    # ——— staff side ——————————————————————————————————————————————

    def list_for_staff(self, **filters: Optional[str]) -> List[AdmissionApplication]:
        with self._session() as session:
            repo = ApplicationRepository(session)
            return ListStaffApplicationsUseCase(repo).execute(**filters)

    def get(self, key: str) -> AdmissionApplication:
        with self._session() as session:
            repo = ApplicationRepository(session)
            return GetApplicationUseCase(repo).execute(key)

    def claim(self, key: str, reviewer: str) -> TransitionResult:
        with self._session() as session:
            repo = ApplicationRepository(session)
            return ClaimApplicationUseCase(repo).execute(key, reviewer)

    def accept(self, key: str, reviewer: str, approved_program: Optional[str] = None,
               approved_level: Optional[str] = None, notes: Optional[str] = None) -> TransitionResult:
        with self._session() as session:
            repo = ApplicationRepository(session)
            return AcceptApplicationUseCase(repo, self._dispatcher).execute(
                key, reviewer, approved_program=approved_program,
                approved_level=approved_level, notes=notes,
            )

    def reject(self, key: str, reviewer: str, notes: Optional[str] = None) -> TransitionResult:
        with self._session() as session:
            repo = ApplicationRepository(session)
            return RejectApplicationUseCase(repo).execute(key, reviewer, notes)

    def annotate(self, key: str, notes: str, reviewer: Optional[str] = None) -> TransitionResult:
        with self._session() as session:
            repo = ApplicationRepository(session)
            return AnnotateApplicationUseCase(repo).execute(key, notes, reviewer)

    def close(self) -> None:
        if self._dispatcher is not None:
            self._dispatcher.shutdown()
