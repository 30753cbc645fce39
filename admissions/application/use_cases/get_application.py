# admissions/application/use_cases/get_application.py
from __future__ import annotations

from admissions.domain.errors import NotFound
from admissions.domain.models import AdmissionApplication
from admissions.infrastructure.db.repositories.application_repository import ApplicationRepository


def load_application(repo: ApplicationRepository, key: str) -> AdmissionApplication:
    app = repo.find(key)
    if app is None:
        raise NotFound(key)
    return app


class GetApplicationUseCase:
    """
    Application by application_id, falling back to the internal record key.
    Read-only: repeated calls return the same IDs.
    """

    def __init__(self, repo: ApplicationRepository):
        self._repo = repo

    def execute(self, key: str) -> AdmissionApplication:
        return load_application(self._repo, key)
