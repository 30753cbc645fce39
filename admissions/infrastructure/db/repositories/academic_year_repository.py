# repositories/academic_year_repository.py
from typing import Iterable

from sqlalchemy.orm import Session

from admissions.domain.models import AcademicPeriod, AcademicYear, utcnow
from admissions.infrastructure.db.models import (
    AcademicSettingsModel, AcademicYearModel, SystemConfigModel
)

ACADEMIC_PERIOD_KEY = "academicPeriod"
LEGACY_CURRENT_YEAR_KEY = "current-year"


class AcademicYearRepository:
    """
    Read access to the two academic-year configuration systems:
    the centralized pointer (system_config) and the legacy settings row.
    Writers exist for seeding only.
    """

    def __init__(self, session: Session):
        self._session = session

    @staticmethod
    def _to_year_domain(m: AcademicYearModel) -> AcademicYear:
        return AcademicYear(
            id=m.id,
            year=m.year,
            display_name=m.display_name,
            admission_status=m.admission_status,
            start_date=m.start_date,
            end_date=m.end_date,
            is_active=m.is_active,
        )

    @staticmethod
    def _to_year_model(y: AcademicYear) -> AcademicYearModel:
        return AcademicYearModel(
            id=y.id,
            year=y.year,
            display_name=y.display_name,
            admission_status=y.admission_status,
            start_date=y.start_date,
            end_date=y.end_date,
            is_active=y.is_active,
        )

    # ——— reading ——————————————————————————————————————————————

    def get_academic_period(self) -> AcademicPeriod | None:
        m = self._session.get(SystemConfigModel, ACADEMIC_PERIOD_KEY)
        if not m:
            return None
        return AcademicPeriod(
            current_academic_year_id=m.current_academic_year_id,
            current_academic_year=m.current_academic_year,
        )

    def get_year(self, year_id: str) -> AcademicYear | None:
        m = self._session.get(AcademicYearModel, year_id)
        return self._to_year_domain(m) if m else None

    def get_legacy_current_year(self) -> str | None:
        m = self._session.get(AcademicSettingsModel, LEGACY_CURRENT_YEAR_KEY)
        return m.current_year if m else None

    # ——— seeding ——————————————————————————————————————————————

    def add_years(self, years: Iterable[AcademicYear]) -> None:
        for y in years:
            self._session.merge(self._to_year_model(y))

    def set_academic_period(self, year_id: str | None, display_name: str | None) -> None:
        self._session.merge(SystemConfigModel(
            key=ACADEMIC_PERIOD_KEY,
            current_academic_year_id=year_id,
            current_academic_year=display_name,
            updated_at=utcnow(),
        ))

    def set_legacy_current_year(self, current_year: str | None) -> None:
        self._session.merge(AcademicSettingsModel(
            key=LEGACY_CURRENT_YEAR_KEY,
            current_year=current_year,
            updated_at=utcnow(),
        ))

    def commit(self) -> None:
        self._session.commit()
