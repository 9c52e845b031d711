"""
Exception taxonomy for the leave engine.

Validation outcomes are normally returned as ``Verdict`` values. The
exceptions below cover everything that is not an expected business outcome
of validation: missing records, forbidden actors, illegal state transitions
and storage failures.
"""
from typing import Optional
from uuid import UUID


class LeaveEngineError(Exception):
    """Base class for all engine errors."""

    code: str = "LeaveEngineError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class LeaveValidationError(LeaveEngineError):
    """A rejected verdict surfaced outside the create path (approval re-check)."""

    def __init__(self, verdict):
        super().__init__(verdict.message)
        self.verdict = verdict
        self.code = verdict.reason.value


class NotFoundError(LeaveEngineError):
    code = "NotFound"

    def __init__(self, entity_name: str, entity_id: UUID):
        super().__init__(f"{entity_name} with ID {entity_id} not found")
        self.entity_name = entity_name
        self.entity_id = entity_id


class InvalidTransitionError(LeaveEngineError):
    code = "InvalidTransition"

    def __init__(self, request_id: UUID, current_status, action: str):
        status_value = getattr(current_status, "value", current_status)
        super().__init__(
            f"Cannot {action} leave request {request_id}: it is already {status_value}. "
            f"Only pending requests can be updated."
        )
        self.request_id = request_id
        self.current_status = current_status
        self.action = action


class InvalidRequestError(LeaveEngineError):
    """Malformed input that never reached the engine (bad ids, unparseable bodies)."""

    code = "InvalidRequest"


class ForbiddenError(LeaveEngineError):
    code = "Forbidden"


class StorageError(LeaveEngineError):
    """Storage call failed. ``retryable`` tells the caller whether backing off and retrying makes sense."""

    code = "StorageError"

    def __init__(self, message: str, retryable: bool = True):
        super().__init__(message)
        self.retryable = retryable


class ConsistencyError(LeaveEngineError):
    """Status and balance writes diverged. Always logged for operator reconciliation."""

    code = "ConsistencyError"

    def __init__(self, message: str, request_id: Optional[UUID] = None, user_id: Optional[UUID] = None):
        super().__init__(message)
        self.request_id = request_id
        self.user_id = user_id
