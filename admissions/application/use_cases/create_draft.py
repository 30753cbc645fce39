from __future__ import annotations

import uuid
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError

from admissions.config.logger import logger
from admissions.domain.models import AdmissionApplication, ApplicationStatus, utcnow
from admissions.infrastructure.db.repositories.application_repository import ApplicationRepository


class CreateDraftApplicationUseCase:
    """
    New applicant working copy. No application ID yet: IDs are issued on
    submission, not at account creation.
    """

    def __init__(self, repo: ApplicationRepository):
        self._repo = repo

    def execute(
            self,
            user_id: str,
            personal_info: Optional[Dict[str, Any]] = None,
            contact_info: Optional[Dict[str, Any]] = None,
            academic_background: Optional[Dict[str, Any]] = None,
            program_selection: Optional[Dict[str, Any]] = None,
            documents: Optional[Dict[str, Any]] = None,
            payment_status: str = "pending",
    ) -> AdmissionApplication:
        now = utcnow()
        app = AdmissionApplication(
            id=uuid.uuid4().hex,
            user_id=user_id,
            status=ApplicationStatus.DRAFT,
            payment_status=payment_status,
            personal_info=dict(personal_info or {}),
            contact_info=dict(contact_info or {}),
            academic_background=dict(academic_background or {}),
            program_selection=dict(program_selection or {}),
            documents=dict(documents or {}),
            created_at=now,
            updated_at=now,
        )
        try:
            self._repo.add(app)
            self._repo.commit()
        except SQLAlchemyError as db_err:
            logger.exception("Draft for user %s not saved, rolling back: %s", user_id, db_err)
            self._repo.rollback()
            raise
        logger.info("Draft %s created for user %s", app.id, user_id)
        return app
