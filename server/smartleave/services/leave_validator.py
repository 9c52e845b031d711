"""
Admission rules for new leave requests.

Pure functions only: no session, no I/O. The lifecycle service loads the
owner's existing requests and balance and passes them in.
"""
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional
from uuid import UUID
import enum

from smartleave.models.leave_request import LeaveStatus


class RejectionReason(str, enum.Enum):
    INVALID_RANGE = "InvalidRange"
    OVERLAP = "Overlap"
    INSUFFICIENT_BALANCE = "InsufficientBalance"


@dataclass(frozen=True)
class LeaveCandidate:
    user_id: UUID
    leave_type_id: UUID
    start_date: date
    end_date: date


@dataclass(frozen=True)
class Verdict:
    admitted: bool
    reason: Optional[RejectionReason] = None
    message: str = "Valid"

    @classmethod
    def admit(cls) -> "Verdict":
        return cls(admitted=True)

    @classmethod
    def reject(cls, reason: RejectionReason, message: str) -> "Verdict":
        return cls(admitted=False, reason=reason, message=message)


def requested_days(start_date: date, end_date: date) -> int:
    """Inclusive day count: a single-day request is 1 day."""
    return (end_date - start_date).days + 1


def ranges_overlap(start_a: date, end_a: date, start_b: date, end_b: date) -> bool:
    """Inclusive ranges share at least one calendar day."""
    return start_a <= end_b and end_a >= start_b


def insufficient_balance(days: int, balance: int) -> Verdict:
    return Verdict.reject(
        RejectionReason.INSUFFICIENT_BALANCE,
        f"Insufficient leave balance. Requested: {days}, Available: {balance}",
    )


def validate_leave_request(candidate: LeaveCandidate, existing: Iterable, balance: int) -> Verdict:
    """Decide whether ``candidate`` may be created.

    ``existing`` holds the owner's requests in any status; Rejected and
    Cancelled ones never block. Checks run in order: date range, overlap,
    balance. A span equal to the remaining balance is admitted.
    """
    if candidate.start_date > candidate.end_date:
        return Verdict.reject(RejectionReason.INVALID_RANGE, "Start date cannot be after end date.")

    for other in existing:
        if not LeaveStatus(other.status).blocks_dates:
            continue
        if ranges_overlap(candidate.start_date, candidate.end_date, other.start_date, other.end_date):
            return Verdict.reject(
                RejectionReason.OVERLAP,
                "You already have a leave request during this period.",
            )

    days = requested_days(candidate.start_date, candidate.end_date)
    if days > balance:
        return insufficient_balance(days, balance)

    return Verdict.admit()
