# repositories/application_repository.py
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from admissions.domain.lifecycle import STAFF_VISIBLE, check_invariants
from admissions.domain.models import AdmissionApplication, ApplicationStatus, utcnow
from admissions.infrastructure.db.models import AdmissionApplicationModel


class ApplicationRepository:
    def __init__(self, session: Session):
        self._session = session

    # ——— MAPPERS ——————————————————————————————————————————————
    @staticmethod
    def _to_domain(m: AdmissionApplicationModel) -> AdmissionApplication:
        return AdmissionApplication(
            id=m.id,
            user_id=m.user_id,
            status=ApplicationStatus(m.status),
            application_id=m.application_id,
            application_id_provisional=m.application_id_provisional,
            registration_number=m.registration_number,
            payment_status=m.payment_status,
            personal_info=dict(m.personal_info or {}),
            contact_info=dict(m.contact_info or {}),
            academic_background=dict(m.academic_background or {}),
            program_selection=dict(m.program_selection or {}),
            documents=dict(m.documents or {}),
            review_notes=m.review_notes,
            last_reviewed_by=m.last_reviewed_by,
            last_reviewed_at=m.last_reviewed_at,
            director_approved_program=m.director_approved_program,
            director_approved_level=m.director_approved_level,
            transferred_to_portal=m.transferred_to_portal,
            transferred_at=m.transferred_at,
            transfer_error=m.transfer_error,
            created_at=m.created_at,
            updated_at=m.updated_at,
            submitted_at=m.submitted_at,
        )

    @staticmethod
    def _to_model(a: AdmissionApplication) -> AdmissionApplicationModel:
        now = utcnow()
        return AdmissionApplicationModel(
            id=a.id,
            user_id=a.user_id,
            status=a.status.value,
            application_id=a.application_id,
            application_id_provisional=a.application_id_provisional,
            registration_number=a.registration_number,
            payment_status=a.payment_status,
            personal_info=a.personal_info,
            contact_info=a.contact_info,
            academic_background=a.academic_background,
            program_selection=a.program_selection,
            documents=a.documents,
            review_notes=a.review_notes,
            last_reviewed_by=a.last_reviewed_by,
            last_reviewed_at=a.last_reviewed_at,
            director_approved_program=a.director_approved_program,
            director_approved_level=a.director_approved_level,
            transferred_to_portal=a.transferred_to_portal,
            transferred_at=a.transferred_at,
            transfer_error=a.transfer_error,
            created_at=a.created_at or now,
            updated_at=a.updated_at or now,
            submitted_at=a.submitted_at,
        )

    # ——— CRUD ——————————————————————————————————————————————

    def add(self, application: AdmissionApplication) -> None:
        self._session.add(self._to_model(application))

    @staticmethod
    def _values(application: AdmissionApplication, fields: Iterable[str]) -> Dict[str, Any]:
        check_invariants(application)
        application.updated_at = utcnow()
        values: Dict[str, Any] = {name: getattr(application, name) for name in fields}
        values["updated_at"] = application.updated_at
        return values

    def _write(self, application: AdmissionApplication, values: Dict[str, Any], *guards) -> bool:
        m = AdmissionApplicationModel
        stmt = update(m).where(m.id == application.id, *guards).values(**values)
        return self._session.execute(stmt).rowcount == 1

    def transition(
            self,
            application: AdmissionApplication,
            expected: ApplicationStatus,
            fields: Iterable[str],
            application_id_was: Optional[str],
    ) -> bool:
        """
        Write application.status plus `fields`, but only if the row is still
        in `expected` status and still carries `application_id_was`.
        False means another request got there first; nothing was written.
        """
        m = AdmissionApplicationModel
        values = self._values(application, fields)
        values["status"] = application.status.value
        same_id = (
            m.application_id.is_(None) if application_id_was is None
            else m.application_id == application_id_was
        )
        return self._write(application, values, m.status == expected.value, same_id)

    def update_fields(self, application: AdmissionApplication, fields: Iterable[str]) -> bool:
        """Write only `fields`; status and IDs are left as they are in the row."""
        return self._write(application, self._values(application, fields))

    def record_transfer_outcome(self, application: AdmissionApplication) -> bool:
        """
        Transfer columns of an accepted application that has no registration
        number yet. False if the row was registered (or un-accepted) meanwhile.
        """
        m = AdmissionApplicationModel
        values = self._values(application, (
            "registration_number", "transferred_to_portal", "transferred_at", "transfer_error",
        ))
        return self._write(
            application, values,
            m.status == ApplicationStatus.ACCEPTED.value,
            m.registration_number.is_(None),
        )

    def assign_application_id(self, application: AdmissionApplication) -> bool:
        """Set the ID of a non-draft row that has none; never overwrites one."""
        m = AdmissionApplicationModel
        values = self._values(application, ("application_id", "application_id_provisional"))
        return self._write(
            application, values,
            m.status != ApplicationStatus.DRAFT.value,
            m.application_id.is_(None),
        )

    def get_by_key(self, key: str) -> AdmissionApplication | None:
        m = self._session.get(AdmissionApplicationModel, key)
        return self._to_domain(m) if m else None

    def get_by_application_id(self, application_id: str) -> AdmissionApplication | None:
        m = (
            self._session.query(AdmissionApplicationModel)
            .filter_by(application_id=application_id)
            .one_or_none()
        )
        return self._to_domain(m) if m else None

    def find(self, key: str) -> AdmissionApplication | None:
        """
        Look up by application_id, then by record key.
        The second step serves legacy rows without application_id and
        can go once those are backfilled.
        """
        return self.get_by_application_id(key) or self.get_by_key(key)

    def list_for_staff(
            self,
            status: Optional[str] = None,
            payment_status: Optional[str] = None,
            program: Optional[str] = None,
            search: Optional[str] = None,
    ) -> List[AdmissionApplication]:
        """
        Staff-facing listing, newest first. Drafts are excluded in SQL,
        whatever the filters ask for.
        """
        visible = [s.value for s in STAFF_VISIBLE]
        q = (
            self._session.query(AdmissionApplicationModel)
            .filter(AdmissionApplicationModel.status.in_(visible))
        )
        if status:
            q = q.filter(AdmissionApplicationModel.status == status)
        if payment_status:
            q = q.filter(AdmissionApplicationModel.payment_status == payment_status)
        q = q.order_by(AdmissionApplicationModel.created_at.desc(), AdmissionApplicationModel.id)

        apps = [self._to_domain(m) for m in q.all()]

        # JSON sections are filtered in Python; their layout varies between records
        if program:
            apps = [a for a in apps if program in (
                a.program_selection.get("program"),
                a.program_selection.get("firstChoice"),
                a.director_approved_program,
            )]
        if search:
            needle = search.strip().lower()
            apps = [a for a in apps if needle in " ".join([
                a.application_id or "",
                a.full_name,
                a.email,
            ]).lower()]
        return apps

    def get_missing_application_ids(self) -> List[AdmissionApplication]:
        """Non-draft rows without an application_id (legacy records)."""
        models = (
            self._session.query(AdmissionApplicationModel)
            .filter(
                AdmissionApplicationModel.status != ApplicationStatus.DRAFT.value,
                AdmissionApplicationModel.application_id.is_(None),
            )
            .order_by(AdmissionApplicationModel.created_at.asc())
            .all()
        )
        return [self._to_domain(m) for m in models]

    def get_all_non_draft(self) -> List[AdmissionApplication]:
        models = (
            self._session.query(AdmissionApplicationModel)
            .filter(AdmissionApplicationModel.status != ApplicationStatus.DRAFT.value)
            .order_by(AdmissionApplicationModel.created_at.asc())
            .all()
        )
        return [self._to_domain(m) for m in models]

    def get_pending_transfers(self) -> List[AdmissionApplication]:
        """Accepted applications that never got a registration number."""
        models = (
            self._session.query(AdmissionApplicationModel)
            .filter(
                AdmissionApplicationModel.status == ApplicationStatus.ACCEPTED.value,
                AdmissionApplicationModel.registration_number.is_(None),
            )
            .order_by(AdmissionApplicationModel.created_at.asc())
            .all()
        )
        return [self._to_domain(m) for m in models]

    def commit(self) -> None:
        self._session.commit()

    def rollback(self) -> None:
        self._session.rollback()
