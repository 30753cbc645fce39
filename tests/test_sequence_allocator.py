from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from admissions.domain.models import utcnow
from admissions.infrastructure.db.models import ApplicationCounterModel
from admissions.services.sequence_allocator import SequenceAllocator


@pytest.fixture
def allocator(session_factory):
    return SequenceAllocator(session_factory, prefix="UCAES", width=4, max_retries=5, backoff_ms=0)


def test_first_allocation_creates_counter(allocator, session):
    first = allocator.allocate("UCAES2026")
    assert first.value == "UCAES20260001"
    assert first.sequential

    counter = session.get(ApplicationCounterModel, "UCAES2026")
    assert counter.last_number == 1
    assert counter.year == "2026"


def test_allocations_are_consecutive(allocator):
    values = [allocator.allocate("UCAES2026").value for _ in range(3)]
    assert values == ["UCAES20260001", "UCAES20260002", "UCAES20260003"]
    assert allocator.peek("UCAES2026") == 3


def test_year_keys_are_independent(allocator):
    allocator.allocate("UCAES2026")
    allocator.allocate("UCAES2026")
    assert allocator.allocate("UCAES2027").value == "UCAES20270001"
    assert allocator.peek("UCAES2026") == 2
    assert allocator.peek("UCAES2099") == 0


def test_wide_numbers_are_not_truncated(allocator, session_factory):
    s = session_factory()
    now = utcnow()
    s.add(ApplicationCounterModel(year_key="UCAES2026", year="2026", last_number=9999,
                                  created_at=now, last_updated=now))
    s.commit()
    s.close()

    assert allocator.allocate("UCAES2026").value == "UCAES202610000"


def test_empty_year_key_rejected(allocator):
    with pytest.raises(ValueError):
        allocator.allocate("")


def test_concurrent_allocations_are_distinct(allocator):
    n = 25
    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda _: allocator.allocate("UCAES2026"), range(n)))

    values = [r.value for r in results]
    assert all(r.sequential for r in results)
    assert len(set(values)) == n
    assert sorted(values) == [f"UCAES2026{i:04d}" for i in range(1, n + 1)]
    assert allocator.peek("UCAES2026") == n


def test_falls_back_to_provisional_id_when_counter_keeps_failing():
    broken = MagicMock()
    broken.get_bind.return_value.dialect.name = "sqlite"
    broken.execute.side_effect = OperationalError("UPDATE", {}, Exception("database is locked"))
    allocator = SequenceAllocator(lambda: broken, prefix="UCAES", max_retries=3, backoff_ms=0)

    allocated = allocator.allocate("UCAES2026")

    assert not allocated.sequential
    assert allocated.value.startswith("UCAES2026P")
    assert broken.execute.call_count == 3
    assert broken.rollback.call_count == 3
    assert broken.close.call_count == 3
