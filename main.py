#!/usr/bin/env python3
"""
Imports academic years from academic_years.json and points the centralized
configuration at the current one:

    {"current": "2025-2026",
     "data": [{"id": "2025-2026", "year": "2025", "displayName": "2025/2026",
               "admissionStatus": "open", "startDate": "2025-09-01", "endDate": "2026-08-31"}]}
"""
import json
import sys
from datetime import date

from admissions.config.logger import logger
from admissions.domain.models import AcademicYear
from admissions.infrastructure.db.repositories.academic_year_repository import AcademicYearRepository
from admissions.infrastructure.db.session import make_engine, make_session_factory
from admissions.services.academic_year_resolver import AcademicYearResolver


def _date(value):
    return date.fromisoformat(value) if value else None


def main(path: str = "academic_years.json"):
    # 1) DB
    Session = make_session_factory(make_engine())
    session = Session()
    repo = AcademicYearRepository(session)

    # 2) JSON with a "data" key
    with open(path, encoding="utf-8") as json_file:
        payload = json.load(json_file)
        items = payload.get("data", [])
    current = payload.get("current")

    # 3) domain models
    years = [
        AcademicYear(
            id=item["id"],
            year=item.get("year"),
            display_name=item.get("displayName"),
            admission_status=item.get("admissionStatus", "pending"),
            start_date=_date(item.get("startDate")),
            end_date=_date(item.get("endDate")),
            is_active=item["id"] == current,
        )
        for item in items
    ]
    repo.add_years(years)

    if current:
        current_year = next((y for y in years if y.id == current), None)
        display = current_year.display_name if current_year else None
        repo.set_academic_period(current, display)

    # 4) save
    repo.commit()
    year_key = AcademicYearResolver(repo).year_key()
    session.close()
    logger.info("Imported %d academic years, current year key %s", len(years), year_key)
    print(f"Imported {len(years)} academic years. Current year key: {year_key}")


if __name__ == "__main__":
    main(*sys.argv[1:2])
