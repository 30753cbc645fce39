# tests/conftest.py
"""
Fixtures: a fresh SQLite file database per test (file, not :memory:, so that
worker threads get their own connections to the same data).
"""
import threading
import time

import pytest

from admissions.domain.models import AcademicYear, TransferResult
from admissions.infrastructure.db.repositories.academic_year_repository import AcademicYearRepository
from admissions.infrastructure.db.session import make_engine, make_session_factory


@pytest.fixture
def engine(tmp_path):
    eng = make_engine(f"sqlite:///{tmp_path / 'admissions.db'}", echo=False)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def session(session_factory):
    s = session_factory()
    yield s
    s.close()


@pytest.fixture
def academic_year_2026(session):
    """Centralized config pointing at the 2025/2026 year (admission year 2026)."""
    repo = AcademicYearRepository(session)
    repo.add_years([AcademicYear(id="2025-2026", year=None, display_name="2025/2026 Academic Year",
                                 admission_status="open", is_active=True)])
    repo.set_academic_period("2025-2026", "2025/2026")
    repo.commit()
    return "UCAES2026"


def complete_sections(email="ama.mensah@example.com", first="Ama", last="Mensah"):
    return dict(
        personal_info={"firstName": first, "lastName": last, "dateOfBirth": "01-02-2005",
                       "gender": "Female", "nationality": "Ghanaian"},
        contact_info={"email": email, "phone": "0240000000", "address": "Box 1, Kumasi, Ghana"},
        academic_background={"schoolName": "Prempeh College", "qualificationType": "WASSCE",
                             "yearCompleted": "2024"},
        program_selection={"program": "BSc Agriculture", "firstChoice": "BSc Agriculture",
                           "level": "100", "studyMode": "Regular"},
        documents={"photo": {"url": "https://example.com/photo.jpg"}},
        payment_status="paid",
    )


@pytest.fixture
def sections():
    return complete_sections


class FakeTransfer:
    """Transfer collaborator with a scripted answer; records every call."""

    def __init__(self, result=None, exc=None, delay=0.0, on_call=None):
        self.result = result
        self.exc = exc
        self.delay = delay
        self.on_call = on_call
        self.calls = []
        self._lock = threading.Lock()

    def transfer(self, application_id):
        with self._lock:
            self.calls.append(application_id)
        if self.on_call is not None:
            self.on_call(application_id)
        if self.delay:
            time.sleep(self.delay)
        if self.exc is not None:
            raise self.exc
        if self.result is not None:
            return self.result
        return TransferResult.ok(application_id)


@pytest.fixture
def fake_transfer():
    return FakeTransfer
