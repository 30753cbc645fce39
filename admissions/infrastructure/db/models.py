from sqlalchemy import JSON, Boolean, Column, Date, DateTime, Integer, String, Text
from sqlalchemy.orm import declarative_base

from admissions.domain.models import utcnow

Base = declarative_base()


class ApplicationCounterModel(Base):
    __tablename__ = 'application_counters'
    year_key = Column(String, primary_key=True)  # 'UCAES2026'
    year = Column(String, nullable=False)
    last_number = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    last_updated = Column(DateTime, nullable=False, default=utcnow)


class AdmissionApplicationModel(Base):
    __tablename__ = 'admission_applications'
    id = Column(String, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    # NULL only for drafts and legacy rows that predate sequential IDs
    application_id = Column(String, unique=True, nullable=True)
    application_id_provisional = Column(Boolean, default=False, nullable=False)
    status = Column(String, nullable=False, default='draft', index=True)
    payment_status = Column(String, nullable=False, default='pending')
    registration_number = Column(String, nullable=True)

    personal_info = Column(JSON, nullable=False, default=dict)
    contact_info = Column(JSON, nullable=False, default=dict)
    academic_background = Column(JSON, nullable=False, default=dict)
    program_selection = Column(JSON, nullable=False, default=dict)
    documents = Column(JSON, nullable=False, default=dict)

    review_notes = Column(Text, nullable=True)
    last_reviewed_by = Column(String, nullable=True)
    last_reviewed_at = Column(DateTime, nullable=True)
    director_approved_program = Column(String, nullable=True)
    director_approved_level = Column(String, nullable=True)

    transferred_to_portal = Column(Boolean, default=False, nullable=False)
    transferred_at = Column(DateTime, nullable=True)
    transfer_error = Column(Text, nullable=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow)
    submitted_at = Column(DateTime, nullable=True)


# ────────── Academic year configuration ──────────────────────────────────
class AcademicYearModel(Base):
    __tablename__ = 'academic_years'
    id = Column(String, primary_key=True)
    year = Column(String, nullable=True)
    display_name = Column(String, nullable=True)
    admission_status = Column(String, nullable=False, default='pending')
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    is_active = Column(Boolean, default=False, nullable=False)


class SystemConfigModel(Base):
    """
    Centralized pointer: key='academicPeriod' -> current academic year.
    """
    __tablename__ = 'system_config'
    key = Column(String, primary_key=True)
    current_academic_year_id = Column(String, nullable=True)
    current_academic_year = Column(String, nullable=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow)


class AcademicSettingsModel(Base):
    """
    Legacy settings: key='current-year' -> current_year.
    """
    __tablename__ = 'academic_settings'
    key = Column(String, primary_key=True)
    current_year = Column(String, nullable=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow)


# ────────── Student portal ───────────────────────────────────────────────
class StudentRegistrationModel(Base):
    __tablename__ = 'student_registrations'
    id = Column(String, primary_key=True)
    registration_number = Column(String, unique=True, nullable=False)
    application_id = Column(String, nullable=False, index=True)
    surname = Column(String, nullable=False)
    other_names = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False)
    programme = Column(String, nullable=False)
    entry_level = Column(String, nullable=False)
    current_level = Column(String, nullable=False)
    schedule_type = Column(String, nullable=False)
    entry_academic_year = Column(String, nullable=False)
    status = Column(String, nullable=False, default='approved')
    registered_at = Column(DateTime, nullable=False, default=utcnow)
