#!/usr/bin/env python3
import sys

from admissions.application.use_cases.backfill_application_ids import BackfillApplicationIdsUseCase
from admissions.config.logger import logger
from admissions.infrastructure.db.repositories.academic_year_repository import AcademicYearRepository
from admissions.infrastructure.db.repositories.application_repository import ApplicationRepository
from admissions.infrastructure.db.session import make_engine, make_session_factory
from admissions.services.academic_year_resolver import AcademicYearResolver
from admissions.services.sequence_allocator import SequenceAllocator


def main():
    logger.info("=== backfill_application_ids start ===")
    Session = make_session_factory(make_engine())
    session = Session()
    try:
        use_case = BackfillApplicationIdsUseCase(
            repo=ApplicationRepository(session),
            allocator=SequenceAllocator(Session),
            year_resolver=AcademicYearResolver(AcademicYearRepository(session)),
        )
        counts = use_case.execute()
        print(f"✅ Fixed: {counts['fixed']}, already proper: {counts['already_proper']}, "
              f"foreign format: {counts['foreign_format']}")
    except Exception as e:
        logger.exception("Backfill failed")
        print("❌ Backfill failed:", e, file=sys.stderr)
        sys.exit(1)
    finally:
        session.close()
        logger.info("=== backfill_application_ids done ===")


if __name__ == "__main__":
    main()
