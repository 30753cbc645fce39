from __future__ import annotations

from typing import Callable, Dict, FrozenSet, List

from admissions.domain.errors import IncompleteApplication, InvalidTransition
from admissions.domain.models import AdmissionApplication, ApplicationStatus

S = ApplicationStatus

# forward-only state machine; accepted / rejected are terminal
TRANSITIONS: Dict[ApplicationStatus, FrozenSet[ApplicationStatus]] = {
    S.DRAFT: frozenset({S.SUBMITTED}),
    S.SUBMITTED: frozenset({S.UNDER_REVIEW}),
    S.UNDER_REVIEW: frozenset({S.ACCEPTED, S.REJECTED}),
    S.ACCEPTED: frozenset(),
    S.REJECTED: frozenset(),
}

TERMINAL = frozenset(s for s, targets in TRANSITIONS.items() if not targets)

# statuses a staff member is ever allowed to see
STAFF_VISIBLE = frozenset(s for s in ApplicationStatus if s is not S.DRAFT)


def can_transition(current: ApplicationStatus, target: ApplicationStatus) -> bool:
    return target in TRANSITIONS[current]


def ensure_transition(current: ApplicationStatus, target: ApplicationStatus) -> None:
    if not can_transition(current, target):
        raise InvalidTransition(current.value, target.value)


CompletenessCheck = Callable[[AdmissionApplication], List[str]]


def default_completeness_check(app: AdmissionApplication) -> List[str]:
    """
    Names of the sections still missing before the applicant may submit:
    personal / contact / program data, uploaded documents and a paid fee.
    """
    missing: List[str] = []
    if not app.personal_info:
        missing.append("personal_info")
    if not app.contact_info:
        missing.append("contact_info")
    if not app.program_selection:
        missing.append("program_selection")
    if not app.documents:
        missing.append("documents")
    if app.payment_status != "paid":
        missing.append("payment")
    return missing


def ensure_complete(app: AdmissionApplication, check: CompletenessCheck = default_completeness_check) -> None:
    missing = check(app)
    if missing:
        raise IncompleteApplication(missing)


def check_invariants(app: AdmissionApplication) -> None:
    """Registration numbers exist only on accepted applications."""
    if app.registration_number and app.status is not S.ACCEPTED:
        raise ValueError(
            f"application {app.id} carries registration number while {app.status.value}"
        )
