from __future__ import annotations

from typing import List, Optional

from admissions.domain.models import AdmissionApplication
from admissions.infrastructure.db.repositories.application_repository import ApplicationRepository


class ListStaffApplicationsUseCase:
    """
    Reviewer-facing list. Drafts are private applicant state and are never
    returned, not even when asked for with status='draft'.
    """

    def __init__(self, repo: ApplicationRepository):
        self._repo = repo

    def execute(
            self,
            status: Optional[str] = None,
            payment_status: Optional[str] = None,
            program: Optional[str] = None,
            search: Optional[str] = None,
    ) -> List[AdmissionApplication]:
        return self._repo.list_for_staff(
            status=status,
            payment_status=payment_status,
            program=program,
            search=search,
        )
