import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError
from uuid import uuid4

from smartleave.core import dependencies
from smartleave.models.leave_type import LeaveType
from smartleave.models.profile import Profile


def leave_payload(leave_type: LeaveType, start: str, end: str, **extra) -> dict:
    return {"leave_type_id": str(leave_type.id), "start_date": start, "end_date": end, **extra}


async def create_request(client: AsyncClient, headers: dict, payload: dict):
    return await client.post("/api/v1/leave/requests", json=payload, headers=headers)


@pytest.mark.asyncio
async def test_create_leave_request(client: AsyncClient, employee: Profile, leave_type: LeaveType, auth_headers):
    response = await create_request(
        client,
        auth_headers(employee),
        leave_payload(leave_type, "2027-01-01", "2027-01-05", reason="Holiday", attachment_url="medicals/note.pdf"),
    )
    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "pending"
    assert data["user_id"] == str(employee.id)
    assert data["requested_days"] == 5
    assert data["attachment_url"] == "medicals/note.pdf"


@pytest.mark.asyncio
async def test_create_validation_errors_return_400_with_reason(
    client: AsyncClient, employee: Profile, leave_type: LeaveType, auth_headers
):
    headers = auth_headers(employee)
    assert (await create_request(client, headers, leave_payload(leave_type, "2027-01-01", "2027-01-05"))).status_code == 201

    response = await create_request(client, headers, leave_payload(leave_type, "2027-01-04", "2027-01-06"))
    assert response.status_code == 400
    assert response.json()["code"] == "Overlap"

    response = await create_request(client, headers, leave_payload(leave_type, "2027-01-10", "2027-01-20"))
    assert response.status_code == 400
    assert response.json() == {
        "detail": "Insufficient leave balance. Requested: 11, Available: 10",
        "code": "InsufficientBalance",
    }

    response = await create_request(client, headers, leave_payload(leave_type, "2027-02-02", "2027-02-01"))
    assert response.status_code == 400
    assert response.json()["code"] == "InvalidRange"


@pytest.mark.asyncio
async def test_create_with_unknown_leave_type_is_404(client: AsyncClient, employee: Profile, auth_headers):
    response = await client.post(
        "/api/v1/leave/requests",
        json={"leave_type_id": str(uuid4()), "start_date": "2027-01-01", "end_date": "2027-01-01"},
        headers=auth_headers(employee),
    )
    assert response.status_code == 404
    assert response.json()["code"] == "NotFound"


@pytest.mark.asyncio
async def test_malformed_body_is_422(client: AsyncClient, employee: Profile, auth_headers):
    response = await client.post(
        "/api/v1/leave/requests",
        json={"leave_type_id": "not-a-uuid", "start_date": "2027-01-01"},
        headers=auth_headers(employee),
    )
    assert response.status_code == 422
    assert response.json()["detail"] == "Validation error"
    assert response.json()["code"] == "InvalidRequest"


@pytest.mark.asyncio
async def test_requires_bearer_token(client: AsyncClient):
    response = await client.get("/api/v1/leave/requests/my")
    assert response.status_code in (401, 403)

    response = await client.get("/api/v1/leave/requests/my", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_approve_flow_and_double_approve(
    client: AsyncClient, employee: Profile, manager: Profile, leave_type: LeaveType, auth_headers
):
    created = await create_request(client, auth_headers(employee), leave_payload(leave_type, "2027-01-01", "2027-01-05"))
    request_id = created.json()["id"]

    response = await client.post(
        f"/api/v1/leave/admin/requests/{request_id}/approve",
        json={"review_comment": "Approved"},
        headers=auth_headers(manager),
    )
    assert response.status_code == 200
    assert response.json()["status"] == "approved"
    assert response.json()["reviewed_by"] == str(manager.id)

    profile = await client.get("/api/v1/profiles/me", headers=auth_headers(employee))
    assert profile.json()["leave_balance"] == 5

    response = await client.post(
        f"/api/v1/leave/admin/requests/{request_id}/approve",
        headers=auth_headers(manager),
    )
    assert response.status_code == 409
    assert response.json()["code"] == "InvalidTransition"

    profile = await client.get("/api/v1/profiles/me", headers=auth_headers(employee))
    assert profile.json()["leave_balance"] == 5


@pytest.mark.asyncio
async def test_reject_flow(client: AsyncClient, employee: Profile, manager: Profile, leave_type: LeaveType, auth_headers):
    created = await create_request(client, auth_headers(employee), leave_payload(leave_type, "2027-01-01", "2027-01-02"))
    request_id = created.json()["id"]

    response = await client.post(f"/api/v1/leave/admin/requests/{request_id}/reject", headers=auth_headers(manager))
    assert response.status_code == 200
    assert response.json()["status"] == "rejected"

    profile = await client.get("/api/v1/profiles/me", headers=auth_headers(employee))
    assert profile.json()["leave_balance"] == 10


@pytest.mark.asyncio
async def test_manager_endpoints_require_manager(
    client: AsyncClient, employee: Profile, leave_type: LeaveType, auth_headers
):
    created = await create_request(client, auth_headers(employee), leave_payload(leave_type, "2027-01-01", "2027-01-02"))
    request_id = created.json()["id"]

    response = await client.post(f"/api/v1/leave/admin/requests/{request_id}/approve", headers=auth_headers(employee))
    assert response.status_code == 403
    response = await client.get("/api/v1/leave/admin/requests/pending", headers=auth_headers(employee))
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_approve_unknown_and_malformed_ids(client: AsyncClient, manager: Profile, auth_headers):
    response = await client.post(f"/api/v1/leave/admin/requests/{uuid4()}/approve", headers=auth_headers(manager))
    assert response.status_code == 404
    assert response.json()["code"] == "NotFound"

    response = await client.post("/api/v1/leave/admin/requests/not-a-uuid/approve", headers=auth_headers(manager))
    assert response.status_code == 400
    assert response.json()["code"] == "InvalidRequest"


@pytest.mark.asyncio
async def test_cancel_by_owner_and_by_stranger(
    client: AsyncClient, employee: Profile, other_employee: Profile, leave_type: LeaveType, auth_headers
):
    payload = leave_payload(leave_type, "2027-01-01", "2027-01-05")
    created = await create_request(client, auth_headers(employee), payload)
    request_id = created.json()["id"]

    response = await client.post(f"/api/v1/leave/requests/{request_id}/cancel", headers=auth_headers(other_employee))
    assert response.status_code == 403
    assert response.json()["code"] == "Forbidden"

    response = await client.post(f"/api/v1/leave/requests/{request_id}/cancel", headers=auth_headers(employee))
    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"

    response = await client.post(f"/api/v1/leave/requests/{request_id}/cancel", headers=auth_headers(employee))
    assert response.status_code == 409

    # Same window is free again
    assert (await create_request(client, auth_headers(employee), payload)).status_code == 201


@pytest.mark.asyncio
async def test_view_single_request_visibility(
    client: AsyncClient, employee: Profile, other_employee: Profile, manager: Profile, leave_type: LeaveType, auth_headers
):
    created = await create_request(client, auth_headers(employee), leave_payload(leave_type, "2027-01-01", "2027-01-01"))
    request_id = created.json()["id"]

    assert (await client.get(f"/api/v1/leave/requests/{request_id}", headers=auth_headers(employee))).status_code == 200
    assert (await client.get(f"/api/v1/leave/requests/{request_id}", headers=auth_headers(manager))).status_code == 200
    assert (await client.get(f"/api/v1/leave/requests/{request_id}", headers=auth_headers(other_employee))).status_code == 403


@pytest.mark.asyncio
async def test_listing_endpoints(
    client: AsyncClient, employee: Profile, other_employee: Profile, manager: Profile, leave_type: LeaveType, auth_headers
):
    await create_request(client, auth_headers(employee), leave_payload(leave_type, "2027-01-01", "2027-01-02"))
    await create_request(client, auth_headers(other_employee), leave_payload(leave_type, "2027-01-01", "2027-01-02"))

    mine = await client.get("/api/v1/leave/requests/my", headers=auth_headers(employee))
    assert mine.status_code == 200
    assert mine.json()["total"] == 1

    pending = await client.get("/api/v1/leave/admin/requests/pending", headers=auth_headers(manager))
    assert pending.json()["total"] == 2

    filtered = await client.get(
        "/api/v1/leave/admin/requests/pending",
        params={"user_id": str(other_employee.id)},
        headers=auth_headers(manager),
    )
    assert filtered.json()["total"] == 1
    assert filtered.json()["requests"][0]["user_id"] == str(other_employee.id)

    count = await client.get("/api/v1/leave/admin/requests/pending/count", headers=auth_headers(manager))
    assert count.json() == {"pending": 2}

    approved = await client.get(
        "/api/v1/leave/admin/requests", params={"status": "approved"}, headers=auth_headers(manager)
    )
    assert approved.json()["total"] == 0

    types = await client.get("/api/v1/leave/types", headers=auth_headers(employee))
    assert [t["name"] for t in types.json()] == ["Annual Leave"]


@pytest.mark.asyncio
async def test_profile_visibility(
    client: AsyncClient, employee: Profile, other_employee: Profile, manager: Profile, auth_headers
):
    response = await client.get(f"/api/v1/profiles/{employee.id}", headers=auth_headers(manager))
    assert response.status_code == 200
    assert response.json()["leave_balance"] == 10

    response = await client.get(f"/api/v1/profiles/{employee.id}", headers=auth_headers(other_employee))
    assert response.status_code == 403

    response = await client.get(f"/api/v1/profiles/{uuid4()}", headers=auth_headers(manager))
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_storage_outage_during_authentication_is_retryable(
    client: AsyncClient, employee: Profile, auth_headers, monkeypatch
):
    headers = auth_headers(employee)

    async def unreachable(db, user_id, for_update=False):
        raise OperationalError("SELECT profiles", {}, Exception("connection refused"))

    monkeypatch.setattr(dependencies, "get_profile", unreachable)

    response = await client.get("/api/v1/leave/requests/my", headers=headers)
    assert response.status_code == 503
    assert response.headers["retry-after"] == "2"
    assert response.json()["code"] == "StorageError"
