# repositories/student_repository.py
from sqlalchemy.orm import Session

from admissions.domain.models import StudentRegistration
from admissions.infrastructure.db.models import StudentRegistrationModel


class StudentRegistrationRepository:
    def __init__(self, session: Session):
        self._session = session

    @staticmethod
    def _to_model(s: StudentRegistration) -> StudentRegistrationModel:
        return StudentRegistrationModel(
            id=s.id,
            registration_number=s.registration_number,
            application_id=s.application_id,
            surname=s.surname,
            other_names=s.other_names,
            email=s.email,
            programme=s.programme,
            entry_level=s.entry_level,
            current_level=s.current_level,
            schedule_type=s.schedule_type,
            entry_academic_year=s.entry_academic_year,
            status=s.status,
            registered_at=s.registered_at,
        )

    @staticmethod
    def _to_domain(m: StudentRegistrationModel) -> StudentRegistration:
        return StudentRegistration(
            id=m.id,
            registration_number=m.registration_number,
            application_id=m.application_id,
            surname=m.surname,
            other_names=m.other_names,
            email=m.email,
            programme=m.programme,
            entry_level=m.entry_level,
            current_level=m.current_level,
            schedule_type=m.schedule_type,
            entry_academic_year=m.entry_academic_year,
            status=m.status,
            registered_at=m.registered_at,
        )

    def add(self, student: StudentRegistration) -> None:
        self._session.add(self._to_model(student))

    def get_by_email(self, email: str) -> StudentRegistration | None:
        m = (
            self._session.query(StudentRegistrationModel)
            .filter_by(email=email.strip().lower())
            .one_or_none()
        )
        return self._to_domain(m) if m else None

    def get_by_registration_number(self, registration_number: str) -> StudentRegistration | None:
        m = (
            self._session.query(StudentRegistrationModel)
            .filter_by(registration_number=registration_number)
            .one_or_none()
        )
        return self._to_domain(m) if m else None

    def commit(self) -> None:
        self._session.commit()

    def rollback(self) -> None:
        self._session.rollback()
