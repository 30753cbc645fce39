# admissions/infrastructure/db/queries/id_audit.py

from typing import List

import pandas as pd
from sqlalchemy import case, func
from sqlalchemy.orm import Session

from admissions.infrastructure.db.models import AdmissionApplicationModel


def status_summary(session: Session) -> pd.DataFrame:
    """
    One row per status:
        status | applications | with_application_id | provisional_ids | with_registration_number
    """
    m = AdmissionApplicationModel
    rows = (
        session.query(
            m.status,
            func.count().label("applications"),
            func.count(m.application_id).label("with_application_id"),
            func.sum(case((m.application_id_provisional.is_(True), 1), else_=0)).label("provisional_ids"),
            func.count(m.registration_number).label("with_registration_number"),
        )
        .group_by(m.status)
        .order_by(m.status)
        .all()
    )
    df = pd.DataFrame(
        rows,
        columns=["status", "applications", "with_application_id",
                 "provisional_ids", "with_registration_number"],
    )
    return df.fillna(0).astype({"provisional_ids": int})


def issued_sequences(session: Session, year_key: str) -> List[int]:
    """
    Sequence numbers of all sequential IDs issued under year_key,
    e.g. 'UCAES20260007' -> 7. Provisional IDs are skipped.
    """
    m = AdmissionApplicationModel
    ids = (
        session.query(m.application_id)
        .filter(m.application_id.like(f"{year_key}%"))
        .filter(m.application_id_provisional.is_(False))
        .all()
    )
    out: List[int] = []
    for (value,) in ids:
        tail = value[len(year_key):]
        if tail.isdigit():
            out.append(int(tail))
    return sorted(out)


def provisional_ids(session: Session) -> List[str]:
    m = AdmissionApplicationModel
    rows = (
        session.query(m.application_id)
        .filter(m.application_id_provisional.is_(True))
        .order_by(m.created_at.asc())
        .all()
    )
    return [r[0] for r in rows]
