from __future__ import annotations

from datetime import datetime
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError

from admissions.config.config import settings
from admissions.config.logger import logger
from admissions.domain.errors import ConfigResolutionFailure
from admissions.domain.identifiers import admission_year_from_range, build_year_key, first_year
from admissions.domain.resolution import ResolverChain
from admissions.infrastructure.db.repositories.academic_year_repository import AcademicYearRepository


def _parse_year(text: str | None) -> str | None:
    # '2025/2026' -> '2026', plain '2026' -> '2026'
    return admission_year_from_range(text) or first_year(text)


class AcademicYearResolver:
    """
    Admission year used to build year keys, resolved in this order:

      1. centralized pointer -> academic year document -> 4-digit `year`
      2. display name (pointer first, then the year document): 'YYYY/YYYY' -> second
         year, a single 'YYYY' as is
      3. legacy settings `current_year`
      4. current calendar year

    A store error in any step only skips that step.
    """

    def __init__(self, repo: AcademicYearRepository, clock: Callable[[], datetime] | None = None):
        self._repo = repo
        self._clock = clock or (lambda: datetime.now(settings.timezone))

    def from_year_document(self) -> str | None:
        period = self._repo.get_academic_period()
        if not period or not period.current_academic_year_id:
            return None
        year_doc = self._repo.get_year(period.current_academic_year_id)
        if not year_doc:
            return None
        return first_year(year_doc.year)

    def from_display_name(self) -> str | None:
        period = self._repo.get_academic_period()
        if not period:
            return None
        year = _parse_year(period.current_academic_year)
        if year:
            return year
        if period.current_academic_year_id:
            year_doc = self._repo.get_year(period.current_academic_year_id)
            if year_doc:
                return _parse_year(year_doc.display_name)
        return None

    def from_legacy_settings(self) -> str | None:
        return _parse_year(self._repo.get_legacy_current_year())

    def from_calendar(self) -> str:
        return str(self._clock().year)

    def chain(self) -> ResolverChain[str]:
        return ResolverChain(
            [
                ("year_document", self.from_year_document),
                ("display_name", self.from_display_name),
                ("legacy_settings", self.from_legacy_settings),
                ("calendar_year", self.from_calendar),
            ],
            tolerate=(SQLAlchemyError,),
            logger=logger,
        )

    def admission_year(self) -> str:
        year, source = self.chain().resolve_with_source()
        if year is None:
            # unreachable while the calendar resolver is last in the chain
            raise ConfigResolutionFailure("admission year could not be resolved")
        if source == "calendar_year":
            logger.warning("⚠️ Academic year not configured, using calendar year %s", year)
        else:
            logger.debug("Admission year %s resolved from %s", year, source)
        return year

    def year_key(self, prefix: str | None = None) -> str:
        return build_year_key(self.admission_year(), settings.year_key_prefix if prefix is None else prefix)

    def entry_academic_year(self) -> str:
        """
        Display form 'YYYY/YYYY' for student records; falls back to
        '{calendar}/{calendar+1}'.
        """
        try:
            period = self._repo.get_academic_period()
        except SQLAlchemyError as exc:
            logger.warning("Academic period unavailable, using calendar year: %s", exc)
            period = None
        if period and period.current_academic_year:
            return period.current_academic_year
        year = self._clock().year
        return f"{year}/{year + 1}"
