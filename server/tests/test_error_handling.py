import json

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from uuid import uuid4

from smartleave.core.database import is_retryable_db_error, storage_errors
from smartleave.core.error_handling import engine_error_response
from smartleave.core.exceptions import (
    ConsistencyError,
    ForbiddenError,
    InvalidRequestError,
    InvalidTransitionError,
    LeaveValidationError,
    NotFoundError,
    StorageError,
)
from smartleave.models.leave_request import LeaveStatus
from smartleave.services.leave_validator import insufficient_balance


class LockTimeout(Exception):
    pgcode = "55P03"


@pytest.mark.parametrize(
    "exc, expected_status, expected_code",
    [
        (NotFoundError("Leave request", uuid4()), 404, "NotFound"),
        (ForbiddenError("Only the owner can cancel a leave request"), 403, "Forbidden"),
        (InvalidRequestError("Invalid leave request id: 'abc'. Must be a valid UUID."), 400, "InvalidRequest"),
        (InvalidTransitionError(uuid4(), LeaveStatus.APPROVED, "approve"), 409, "InvalidTransition"),
        (LeaveValidationError(insufficient_balance(5, 2)), 400, "InsufficientBalance"),
        (ConsistencyError("Balance debit failed after status change"), 500, "ConsistencyError"),
        (StorageError("Storage failure during approve", retryable=False), 500, "StorageError"),
    ],
)
def test_engine_error_status_mapping(exc, expected_status, expected_code):
    response = engine_error_response(exc)
    assert response.status_code == expected_status
    assert json.loads(response.body)["code"] == expected_code
    assert "retry-after" not in response.headers


def test_retryable_storage_error_sets_retry_after():
    response = engine_error_response(StorageError("Storage timed out during approve"))
    assert response.status_code == 503
    assert response.headers["retry-after"] == "2"


def test_invalid_transition_message_names_current_status():
    request_id = uuid4()
    exc = InvalidTransitionError(request_id, LeaveStatus.REJECTED, "approve")
    assert str(request_id) in exc.message
    assert "already rejected" in exc.message


@pytest.mark.parametrize(
    "exc, retryable",
    [
        (OperationalError("SELECT 1", {}, Exception("connection refused")), True),
        (DBAPIError("UPDATE profiles", {}, LockTimeout("lock timeout")), True),
        (DBAPIError("UPDATE profiles", {}, Exception("dropped"), connection_invalidated=True), True),
        (IntegrityError("INSERT INTO leave_requests", {}, Exception("fk violation")), False),
        (DBAPIError("SELECT 1", {}, Exception("syntax")), False),
    ],
)
def test_is_retryable_db_error(exc, retryable):
    assert is_retryable_db_error(exc) is retryable


@pytest.mark.asyncio
async def test_storage_errors_translates_timeouts():
    with pytest.raises(StorageError) as exc_info:
        async with storage_errors("list_leave_types"):
            raise TimeoutError()
    assert exc_info.value.retryable is True


@pytest.mark.asyncio
async def test_storage_errors_leaves_engine_errors_alone():
    with pytest.raises(NotFoundError):
        async with storage_errors("get_profile"):
            raise NotFoundError("Profile", uuid4())


@pytest.mark.asyncio
async def test_health_endpoints(client: AsyncClient):
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["database"]["status"] == "connected"

    response = await client.get("/api/v1/health/live")
    assert response.status_code == 200
    assert response.json()["status"] == "alive"
