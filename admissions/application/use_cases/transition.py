from __future__ import annotations

from typing import Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError

from admissions.application.use_cases.get_application import load_application
from admissions.config.logger import logger
from admissions.domain.errors import InvalidTransition
from admissions.domain.models import AdmissionApplication, ApplicationStatus
from admissions.infrastructure.db.repositories.application_repository import ApplicationRepository


def commit_transition(
        repo: ApplicationRepository,
        app: AdmissionApplication,
        expected: ApplicationStatus,
        fields: Iterable[str],
        application_id_was: Optional[str],
) -> None:
    """
    Commit app's new status only if the stored row is still `expected`.
    A concurrent request that already moved the row wins: this one is
    rolled back and gets InvalidTransition against the row's current status.
    """
    try:
        applied = repo.transition(app, expected, fields, application_id_was)
        if applied:
            repo.commit()
            return
        repo.rollback()
    except SQLAlchemyError as db_err:
        logger.exception("Update of %s failed, rolling back: %s", app.id, db_err)
        repo.rollback()
        raise

    current = load_application(repo, app.id)
    logger.warning("%s moved to %s by another request, %s not applied",
                   app.id, current.status.value, app.status.value)
    raise InvalidTransition(current.status.value, app.status.value)
