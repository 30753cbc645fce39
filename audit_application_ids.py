#!/usr/bin/env python3
import sys

from admissions.application.use_cases.audit_application_ids import AuditApplicationIdsUseCase
from admissions.config.logger import logger
from admissions.infrastructure.db.repositories.academic_year_repository import AcademicYearRepository
from admissions.infrastructure.db.session import make_engine, make_session_factory
from admissions.services.academic_year_resolver import AcademicYearResolver
from admissions.services.sequence_allocator import SequenceAllocator


def main():
    Session = make_session_factory(make_engine())
    session = Session()
    try:
        report = AuditApplicationIdsUseCase(
            session=session,
            allocator=SequenceAllocator(Session),
            year_resolver=AcademicYearResolver(AcademicYearRepository(session)),
        ).execute()
    except Exception as e:
        logger.exception("Audit failed")
        print("❌ Audit failed:", e, file=sys.stderr)
        sys.exit(1)
    finally:
        session.close()

    print(f"Year key: {report.year_key}")
    print(f"Counter last number: {report.counter_last_number}")
    print(f"Highest issued sequence: {report.highest_issued}")
    print()
    print(report.summary.to_string(index=False) if not report.summary.empty else "No applications yet.")
    print()
    print(f"Without application ID: {len(report.missing_ids)}")
    for key in report.missing_ids[:10]:
        print("  -", key)
    print(f"Provisional IDs: {len(report.provisional_ids)}")
    for value in report.provisional_ids[:10]:
        print("  -", value)
    print(f"Accepted, waiting for registration number: {len(report.pending_transfers)}")

    if report.healthy:
        print("\n✅ Application IDs look healthy")
    else:
        print("\n⚠️ Issues found, see above")
        sys.exit(2)


if __name__ == "__main__":
    main()
