"""
Tests for the pure leave admission rules.
"""
import pytest
from dataclasses import dataclass
from datetime import date
from uuid import uuid4

from smartleave.models.leave_request import LeaveStatus
from smartleave.services.leave_validator import (
    LeaveCandidate,
    RejectionReason,
    ranges_overlap,
    requested_days,
    validate_leave_request,
)

OWNER = uuid4()
LEAVE_TYPE = uuid4()


@dataclass
class ExistingRequest:
    start_date: date
    end_date: date
    status: LeaveStatus


def candidate(start: date, end: date) -> LeaveCandidate:
    return LeaveCandidate(user_id=OWNER, leave_type_id=LEAVE_TYPE, start_date=start, end_date=end)


def test_requested_days_is_inclusive():
    assert requested_days(date(2027, 1, 1), date(2027, 1, 1)) == 1
    assert requested_days(date(2027, 1, 1), date(2027, 1, 5)) == 5
    assert requested_days(date(2027, 2, 27), date(2027, 3, 2)) == 4


@pytest.mark.parametrize(
    "a, b, c, d, expected",
    [
        (date(2027, 1, 1), date(2027, 1, 5), date(2027, 1, 5), date(2027, 1, 7), True),   # shared end day
        (date(2027, 1, 4), date(2027, 1, 6), date(2027, 1, 1), date(2027, 1, 5), True),
        (date(2027, 1, 1), date(2027, 1, 10), date(2027, 1, 3), date(2027, 1, 4), True),  # containment
        (date(2027, 1, 1), date(2027, 1, 5), date(2027, 1, 6), date(2027, 1, 8), False),  # adjacent
        (date(2027, 1, 6), date(2027, 1, 8), date(2027, 1, 1), date(2027, 1, 5), False),
    ],
)
def test_ranges_overlap(a, b, c, d, expected):
    assert ranges_overlap(a, b, c, d) is expected


def test_invalid_range_rejected_regardless_of_balance_and_history():
    existing = [ExistingRequest(date(2027, 1, 1), date(2027, 1, 31), LeaveStatus.APPROVED)]
    for balance in (0, 5, 1000):
        verdict = validate_leave_request(candidate(date(2027, 1, 5), date(2027, 1, 4)), existing, balance)
        assert not verdict.admitted
        assert verdict.reason == RejectionReason.INVALID_RANGE


@pytest.mark.parametrize("status", [LeaveStatus.PENDING, LeaveStatus.APPROVED])
def test_pending_and_approved_requests_block_overlap(status):
    existing = [ExistingRequest(date(2027, 1, 1), date(2027, 1, 5), status)]
    verdict = validate_leave_request(candidate(date(2027, 1, 4), date(2027, 1, 6)), existing, 10)
    assert verdict.reason == RejectionReason.OVERLAP
    assert verdict.message == "You already have a leave request during this period."


@pytest.mark.parametrize("status", [LeaveStatus.REJECTED, LeaveStatus.CANCELLED])
def test_rejected_and_cancelled_requests_do_not_block(status):
    existing = [ExistingRequest(date(2027, 1, 1), date(2027, 1, 5), status)]
    verdict = validate_leave_request(candidate(date(2027, 1, 1), date(2027, 1, 5)), existing, 10)
    assert verdict.admitted
    assert verdict.reason is None


def test_status_given_as_plain_string_is_understood():
    existing = [ExistingRequest(date(2027, 1, 1), date(2027, 1, 5), "pending")]
    verdict = validate_leave_request(candidate(date(2027, 1, 2), date(2027, 1, 2)), existing, 10)
    assert verdict.reason == RejectionReason.OVERLAP


def test_balance_boundary_is_inclusive():
    assert validate_leave_request(candidate(date(2027, 1, 1), date(2027, 1, 10)), [], 10).admitted

    verdict = validate_leave_request(candidate(date(2027, 1, 1), date(2027, 1, 11)), [], 10)
    assert verdict.reason == RejectionReason.INSUFFICIENT_BALANCE
    assert verdict.message == "Insufficient leave balance. Requested: 11, Available: 10"


def test_single_day_request_with_one_day_balance():
    assert validate_leave_request(candidate(date(2027, 1, 1), date(2027, 1, 1)), [], 1).admitted
    assert not validate_leave_request(candidate(date(2027, 1, 1), date(2027, 1, 1)), [], 0).admitted


def test_overlap_checked_before_balance():
    existing = [ExistingRequest(date(2027, 1, 1), date(2027, 1, 5), LeaveStatus.PENDING)]
    verdict = validate_leave_request(candidate(date(2027, 1, 1), date(2027, 3, 1)), existing, 1)
    assert verdict.reason == RejectionReason.OVERLAP


def test_pending_requests_are_not_deducted_from_balance():
    # Balance 10 with a 5-day pending request: an 11-day request fails, a 10-day one passes
    existing = [ExistingRequest(date(2027, 1, 1), date(2027, 1, 5), LeaveStatus.PENDING)]
    verdict = validate_leave_request(candidate(date(2027, 1, 10), date(2027, 1, 20)), existing, 10)
    assert verdict.reason == RejectionReason.INSUFFICIENT_BALANCE
    assert validate_leave_request(candidate(date(2027, 1, 10), date(2027, 1, 19)), existing, 10).admitted
