# repositories/counter_repository.py
from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from admissions.domain.models import utcnow
from admissions.infrastructure.db.models import ApplicationCounterModel


class CounterRepository:
    """
    Per-year application counters. Every number is issued by a single
    statement (INSERT ... ON CONFLICT DO NOTHING / UPDATE ... RETURNING),
    so concurrent sessions never observe the same last_number.
    """

    def __init__(self, session: Session):
        self._session = session

    def _insert(self):
        dialect = self._session.get_bind().dialect.name
        if dialect == "postgresql":
            return pg_insert(ApplicationCounterModel)
        return sqlite_insert(ApplicationCounterModel)

    def _create_first(self, year_key: str, year: str) -> int | None:
        """
        Create the counter with last_number=1. Returns 1 when this call
        created it, None when the row already existed.
        """
        now = utcnow()
        stmt = (
            self._insert()
            .values(year_key=year_key, year=year, last_number=1, created_at=now, last_updated=now)
            .on_conflict_do_nothing(index_elements=["year_key"])
            .returning(ApplicationCounterModel.last_number)
        )
        return self._session.execute(stmt).scalar_one_or_none()

    def _increment(self, year_key: str) -> int | None:
        stmt = (
            update(ApplicationCounterModel)
            .where(ApplicationCounterModel.year_key == year_key)
            .values(
                last_number=ApplicationCounterModel.last_number + 1,
                last_updated=utcnow(),
            )
            .returning(ApplicationCounterModel.last_number)
            .execution_options(synchronize_session=False)
        )
        return self._session.execute(stmt).scalar_one_or_none()

    def next_number(self, year_key: str, year: str) -> int:
        """
        Issue the next number for year_key inside the current transaction.
        The caller commits.
        """
        number = self._create_first(year_key, year)
        if number is not None:
            return number
        number = self._increment(year_key)
        if number is None:
            # row vanished between the two statements; nothing sane to do
            raise RuntimeError(f"counter {year_key} disappeared during increment")
        return number

    def last_number(self, year_key: str) -> int:
        value = self._session.execute(
            select(ApplicationCounterModel.last_number)
            .where(ApplicationCounterModel.year_key == year_key)
        ).scalar_one_or_none()
        return value or 0

    def commit(self) -> None:
        self._session.commit()

    def rollback(self) -> None:
        self._session.rollback()
