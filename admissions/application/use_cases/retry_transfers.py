from __future__ import annotations

from typing import Dict

from admissions.application.use_cases.accept_application import record_transfer
from admissions.config.logger import logger
from admissions.domain.models import TransferResult
from admissions.infrastructure.db.repositories.application_repository import ApplicationRepository
from admissions.services.transfer_dispatcher import TransferDispatcher


class RetryPendingTransfersUseCase:
    """
    Accepted applications without a registration number get another
    transfer attempt. The transfer recognises students it already created
    (same e-mail), so repeating it is harmless.
    """

    def __init__(self, repo: ApplicationRepository, dispatcher: TransferDispatcher):
        self._repo = repo
        self._dispatcher = dispatcher

    def execute(self) -> Dict[str, TransferResult]:
        pending = self._repo.get_pending_transfers()
        logger.info("=== Retrying %d pending transfers ===", len(pending))

        results: Dict[str, TransferResult] = {}
        for app in pending:
            key = app.application_id or app.id
            result = self._dispatcher.dispatch(key)
            results[key] = record_transfer(self._repo, app, result)

        ok = sum(1 for r in results.values() if r.success)
        logger.info("Transfers: %d registered, %d still failing", ok, len(results) - ok)
        return results
