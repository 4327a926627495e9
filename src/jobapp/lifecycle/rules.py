"""Client-side projection of the application lifecycle.

The server owns every transition. These predicates only decide which actions
the client offers and which requests it refuses to send.
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Optional, Tuple

from ..models.application import Application, ApplicationStatus, ShiftDetails

S = ApplicationStatus

PIPELINE = (
    S.PENDING,
    S.REVIEWED,
    S.SHORTLISTED,
    S.ACCEPTED,
    S.CONTRACT_SENT,
    S.CONTRACT_ACKNOWLEDGED,
    S.ACTIVE,
    S.COMPLETED,
)
ABSORBING_STATUSES = frozenset({S.REJECTED, S.WITHDRAWN})
TERMINAL_STATUSES = ABSORBING_STATUSES | {S.COMPLETED}
WITHDRAWABLE_STATUSES = frozenset({S.PENDING, S.REVIEWED})
CLOCK_IN_STATUSES = frozenset({S.CONTRACT_ACKNOWLEDGED, S.ACTIVE})
EMPLOYER_REVIEW_TARGETS = frozenset({S.REVIEWED, S.SHORTLISTED, S.ACCEPTED, S.REJECTED})

DEFAULT_EARLY_CLOCK_IN = timedelta(minutes=30)


class ContractPhase(str, Enum):
    NONE = "none"
    AWAITING_SIGNATURE = "awaiting_signature"
    AWAITING_VERIFICATION = "awaiting_verification"
    ACKNOWLEDGED = "acknowledged"


def is_terminal(status: ApplicationStatus) -> bool:
    return S(status) in TERMINAL_STATUSES


def is_valid_transition(current: ApplicationStatus, target: ApplicationStatus) -> bool:
    """Whether the server could move an application from ``current`` to ``target``."""
    current, target = S(current), S(target)
    if current in TERMINAL_STATUSES:
        return False
    if target is S.REJECTED:
        return True
    if target is S.WITHDRAWN:
        return current in WITHDRAWABLE_STATUSES
    return PIPELINE.index(target) > PIPELINE.index(current)


def can_withdraw(application: Application) -> bool:
    return application.status in WITHDRAWABLE_STATUSES


def contract_phase(application: Application) -> ContractPhase:
    """Sub-phase of the contract step, derived from the signature fields."""
    status = application.status
    if status is S.CONTRACT_SENT:
        if application.seeker_signed_at is None:
            return ContractPhase.AWAITING_SIGNATURE
        if application.employer_verified_at is None:
            return ContractPhase.AWAITING_VERIFICATION
        return ContractPhase.ACKNOWLEDGED
    if status in (S.CONTRACT_ACKNOWLEDGED, S.ACTIVE, S.COMPLETED):
        return ContractPhase.ACKNOWLEDGED
    return ContractPhase.NONE


def can_sign(application: Application) -> bool:
    return contract_phase(application) is ContractPhase.AWAITING_SIGNATURE


def can_verify(application: Application) -> bool:
    return contract_phase(application) is ContractPhase.AWAITING_VERIFICATION


def normalize_name(name: Optional[str]) -> str:
    return " ".join((name or "").split()).casefold()


def signature_matches(signature: str, expected_name: str) -> bool:
    """Case-insensitive comparison; surrounding and repeated whitespace is ignored."""
    expected = normalize_name(expected_name)
    return bool(expected) and normalize_name(signature) == expected


def shift_window(
    shift: ShiftDetails, now: datetime, early: timedelta = DEFAULT_EARLY_CLOCK_IN
) -> Tuple[datetime, datetime]:
    """Return (earliest clock-in, shift end) on the shift's date, or today when undated."""
    day = shift.date or now.date()
    start = datetime.combine(day, shift.start_time, tzinfo=now.tzinfo)
    end = datetime.combine(day, shift.end_time, tzinfo=now.tzinfo)
    return start - early, end


def is_within_shift_window(
    shift: Optional[ShiftDetails], now: datetime, early: timedelta = DEFAULT_EARLY_CLOCK_IN
) -> bool:
    if shift is None:
        return True
    if shift.date is not None and shift.date != now.date():
        return False
    window_start, window_end = shift_window(shift, now, early)
    return window_start <= now <= window_end


def clock_in_block_reason(
    application: Application, now: datetime, early: timedelta = DEFAULT_EARLY_CLOCK_IN
) -> Optional[str]:
    """Explain why clock-in is not allowed right now, or None when it is."""
    if application.status not in CLOCK_IN_STATUSES:
        return "You can only clock in once the contract has been acknowledged."

    shift = application.shift_details
    if is_within_shift_window(shift, now, early):
        return None

    if shift.date is not None and shift.date != now.date():
        return f"This shift is scheduled for {shift.date.isoformat()}, not today."

    window_start, window_end = shift_window(shift, now, early)
    if now < window_start:
        return (
            f"Clock-in opens at {window_start.strftime('%H:%M')}, "
            f"{int(early.total_seconds() // 60)} minutes before your shift starts."
        )
    return f"This shift ended at {window_end.strftime('%H:%M')}."


def can_clock_in(
    application: Application, now: datetime, early: timedelta = DEFAULT_EARLY_CLOCK_IN
) -> bool:
    return clock_in_block_reason(application, now, early) is None
