#!/usr/bin/env python3
import sys

from admissions.application.use_cases.retry_transfers import RetryPendingTransfersUseCase
from admissions.config.logger import logger
from admissions.infrastructure.db.repositories.application_repository import ApplicationRepository
from admissions.infrastructure.db.session import make_engine, make_session_factory
from admissions.infrastructure.transfer.student_portal_transfer import StudentPortalTransfer
from admissions.services.transfer_dispatcher import TransferDispatcher


def main():
    logger.info("=== retry_transfers start ===")
    Session = make_session_factory(make_engine())
    session = Session()
    dispatcher = TransferDispatcher(StudentPortalTransfer(Session))
    try:
        results = RetryPendingTransfersUseCase(ApplicationRepository(session), dispatcher).execute()
        for key, result in results.items():
            if result.success:
                print(f"✅ {key} -> {result.registration_number}")
            else:
                print(f"❌ {key}: {result.error}")
    except Exception as e:
        logger.exception("Retry of transfers failed")
        print("❌ Retry of transfers failed:", e, file=sys.stderr)
        sys.exit(1)
    finally:
        dispatcher.shutdown()
        session.close()
        logger.info("=== retry_transfers done ===")


if __name__ == "__main__":
    main()
