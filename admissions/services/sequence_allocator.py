"""
Sequential application IDs: '{year_key}{NNNN}', one counter row per year key.

Each allocation runs in its own short transaction so that the counter row
is locked only for the duration of the increment, independently of whatever
the caller is doing with the application record.
"""
from __future__ import annotations

import time
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from admissions.config.config import settings
from admissions.config.logger import logger
from admissions.domain.errors import CounterContention
from admissions.domain.identifiers import format_application_id, provisional_application_id
from admissions.domain.models import AllocatedId
from admissions.infrastructure.db.repositories.counter_repository import CounterRepository


class SequenceAllocator:

    def __init__(
            self,
            session_factory: Callable[[], Session],
            prefix: str | None = None,
            width: int | None = None,
            max_retries: int | None = None,
            backoff_ms: int | None = None,
    ):
        self._session_factory = session_factory
        self._prefix = settings.year_key_prefix if prefix is None else prefix
        self._width = width or settings.sequence_width
        self._max_retries = max(1, max_retries or settings.counter_max_retries)
        self._backoff_ms = settings.counter_retry_backoff_ms if backoff_ms is None else backoff_ms

    def _year_of(self, year_key: str) -> str:
        if self._prefix and year_key.startswith(self._prefix):
            return year_key[len(self._prefix):]
        return year_key

    def _next_number(self, year_key: str) -> int:
        """
        Transactional increment with bounded retry. Raises CounterContention
        once every attempt has failed.
        """
        last_error: Exception | None = None
        for attempt in range(1, self._max_retries + 1):
            session = self._session_factory()
            repo = CounterRepository(session)
            try:
                number = repo.next_number(year_key, self._year_of(year_key))
                repo.commit()
                return number
            except SQLAlchemyError as exc:
                repo.rollback()
                last_error = exc
                logger.warning("Counter %s: attempt %d/%d failed: %s",
                               year_key, attempt, self._max_retries, exc)
                if attempt < self._max_retries and self._backoff_ms:
                    time.sleep(self._backoff_ms * attempt / 1000)
            finally:
                session.close()
        raise CounterContention(year_key, self._max_retries) from last_error

    def allocate(self, year_key: str) -> AllocatedId:
        """
        Next application ID for year_key. Never blocks submission for good:
        if the counter cannot be incremented a provisional, non-sequential
        ID is returned instead (sequential=False).
        """
        if not year_key:
            raise ValueError("year_key must be non-empty")
        try:
            number = self._next_number(year_key)
        except CounterContention as exc:
            value = provisional_application_id(year_key)
            logger.error("✕ %s; issued provisional ID %s for later reconciliation", exc, value)
            return AllocatedId(value=value, sequential=False)

        value = format_application_id(year_key, number, self._width)
        logger.debug("Allocated %s (last_number=%d)", value, number)
        return AllocatedId(value=value, sequential=True)

    def peek(self, year_key: str) -> int:
        """Current last_number for year_key, 0 if the counter does not exist yet."""
        session = self._session_factory()
        try:
            return CounterRepository(session).last_number(year_key)
        finally:
            session.close()
