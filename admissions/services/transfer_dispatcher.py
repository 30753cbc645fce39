from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from typing import Protocol

from admissions.config.config import settings
from admissions.config.logger import logger
from admissions.domain.models import TransferResult


class StudentTransfer(Protocol):
    def transfer(self, application_id: str) -> TransferResult: ...


class TransferDispatcher:
    """
    Runs the student-portal transfer off the caller's thread and waits at
    most `timeout` seconds for it. A transfer that is still running is
    reported as failed ("pending") and left to finish in the background;
    retry_transfers picks such applications up later.
    """

    def __init__(self, transfer: StudentTransfer, timeout: float | None = None, max_workers: int = 4):
        self._transfer = transfer
        self._timeout = settings.transfer_timeout_seconds if timeout is None else timeout
        self._pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="transfer")

    def _run(self, application_id: str) -> TransferResult:
        try:
            result = self._transfer.transfer(application_id)
        except Exception as exc:
            logger.exception("Transfer collaborator raised for %s", application_id)
            return TransferResult.fail(str(exc) or exc.__class__.__name__)
        if result is None:
            return TransferResult.fail("transfer returned no result")
        return result

    def dispatch(self, application_id: str) -> TransferResult:
        future = self._pool.submit(self._run, application_id)
        try:
            return future.result(timeout=self._timeout)
        except FutureTimeout:
            logger.warning("⏳ Transfer of %s still running after %.1fs; left for reconciliation",
                           application_id, self._timeout)
            return TransferResult.fail(f"transfer pending: no answer within {self._timeout:g}s")

    def shutdown(self, wait: bool = True) -> None:
        self._pool.shutdown(wait=wait)
