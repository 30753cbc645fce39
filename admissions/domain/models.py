import datetime
from datetime import timezone
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class ApplicationStatus(str, Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


@dataclass(frozen=True)
class AllocatedId:
    """
    Result of an allocation. sequential=False marks a provisional
    timestamp-based ID that has to be reconciled later.
    """
    value: str
    sequential: bool = True


@dataclass
class AdmissionApplication:
    """
    Admission application. Section dicts (personal_info, contact_info, ...)
    are opaque applicant data; the lifecycle only cares about status, IDs
    and review fields.
    """
    id: str  # internal record key
    user_id: str
    status: ApplicationStatus = ApplicationStatus.DRAFT
    application_id: Optional[str] = None
    application_id_provisional: bool = False
    registration_number: Optional[str] = None
    payment_status: str = "pending"

    personal_info: Dict[str, Any] = field(default_factory=dict)
    contact_info: Dict[str, Any] = field(default_factory=dict)
    academic_background: Dict[str, Any] = field(default_factory=dict)
    program_selection: Dict[str, Any] = field(default_factory=dict)
    documents: Dict[str, Any] = field(default_factory=dict)

    review_notes: Optional[str] = None
    last_reviewed_by: Optional[str] = None
    last_reviewed_at: Optional[datetime.datetime] = None
    director_approved_program: Optional[str] = None
    director_approved_level: Optional[str] = None

    transferred_to_portal: bool = False
    transferred_at: Optional[datetime.datetime] = None
    transfer_error: Optional[str] = None

    created_at: Optional[datetime.datetime] = None
    updated_at: Optional[datetime.datetime] = None
    submitted_at: Optional[datetime.datetime] = None

    @property
    def full_name(self) -> str:
        first = self.personal_info.get("firstName", "")
        last = self.personal_info.get("lastName", "")
        return f"{first} {last}".strip()

    @property
    def email(self) -> str:
        return (self.contact_info.get("email") or "").strip().lower()


@dataclass
class AcademicYear:
    """
    Academic year document: year='2025', display_name='2025/2026 Academic Year'.
    """
    id: str
    year: Optional[str]
    display_name: Optional[str]
    admission_status: str = "pending"  # open | closed | pending
    start_date: Optional[datetime.date] = None
    end_date: Optional[datetime.date] = None
    is_active: bool = False


@dataclass
class AcademicPeriod:
    """
    Centralized pointer to the current academic year.
    """
    current_academic_year_id: Optional[str]
    current_academic_year: Optional[str]  # display name, e.g. '2025/2026'


@dataclass
class StudentRegistration:
    """
    Student portal record created from an accepted application.
    """
    id: str
    registration_number: str
    application_id: str
    surname: str
    other_names: str
    email: str
    programme: str
    entry_level: str
    current_level: str
    schedule_type: str
    entry_academic_year: str
    status: str = "approved"
    registered_at: Optional[datetime.datetime] = None


@dataclass(frozen=True)
class TransferResult:
    success: bool
    registration_number: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, registration_number: str, error: Optional[str] = None) -> "TransferResult":
        return cls(success=True, registration_number=registration_number, error=error)

    @classmethod
    def fail(cls, error: str) -> "TransferResult":
        return cls(success=False, error=error)


@dataclass(frozen=True)
class TransitionResult:
    """
    Outcome of a status change. transfer is set only for acceptances;
    a failed transfer does not make the transition itself unsuccessful.
    """
    application_id: Optional[str]
    status: ApplicationStatus
    transfer: Optional[TransferResult] = None

    @property
    def partial_failure(self) -> bool:
        return self.transfer is not None and not self.transfer.success


def utcnow() -> datetime.datetime:
    """Naive UTC timestamp, the way the database stores them."""
    return datetime.datetime.now(timezone.utc).replace(tzinfo=None)
