# tests/test_api.py

from __future__ import annotations

from uuid import uuid4

import httpx
import pytest
import pytest_asyncio

from rewards.api import deps
from rewards.config import settings
from rewards.database import get_db
from rewards.main import app
from rewards.models.user import User, UserStatus
from rewards.utils.auth import create_access_token

from .fakes import make_task, make_user

API = settings.API_V1_PREFIX


def _auth(user_id) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': user_id})}"}


@pytest_asyncio.fixture()
async def client(session_factory, progression, task_runs, wallet, catalog, users):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[deps.get_progression_service] = lambda: progression
    app.dependency_overrides[deps.get_task_run_service] = lambda: task_runs
    app.dependency_overrides[deps.get_wallet_service] = lambda: wallet
    app.dependency_overrides[deps.get_catalog_service] = lambda: catalog
    app.dependency_overrides[deps.get_user_service] = lambda: users

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def member(db):
    return (await make_user(db, points_balance=0)).id


@pytest_asyncio.fixture()
async def admin(db):
    return (await make_user(db, is_admin=True)).id


@pytest.mark.asyncio
async def test_health(client) -> None:
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_rejects_bad_token(client) -> None:
    response = await client.get(f"{API}/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401

    response = await client.get(f"{API}/me", headers=_auth(uuid4()))
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_inactive_user_is_forbidden(client, db) -> None:
    user_id = (await make_user(db, status=UserStatus.INACTIVE)).id

    response = await client.get(f"{API}/me", headers=_auth(user_id))

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_admin_routes_require_admin(client, member) -> None:
    for method, path in [
        ("get", "/admin/requests"),
        ("get", "/admin/users"),
        ("get", "/admin/settings"),
        ("get", "/admin/tasks"),
        ("post", f"/admin/requests/{uuid4()}/approve"),
    ]:
        response = await client.request(method.upper(), f"{API}{path}", headers=_auth(member))
        assert response.status_code == 403, path


@pytest.mark.asyncio
async def test_me_reports_settings_and_summary(client, db, member) -> None:
    await make_task(db, 1)
    await make_task(db, 2)

    response = await client.get(f"{API}/me", headers=_auth(member))

    assert response.status_code == 200
    body = response.json()
    assert body["app_name"] == settings.APP_NAME
    assert body["user"]["id"] == str(member)
    assert body["user"]["points_balance"] == 0
    assert body["settings"]["usd_to_points"] == settings.DEFAULT_USD_TO_POINTS
    assert body["tasks"] == {"total": 2, "done": 0}


@pytest.mark.asyncio
async def test_task_flow(client, db, member, clock) -> None:
    await make_task(db, 1, reward_points=10, wait_seconds=5)
    await make_task(db, 2, reward_points=20, wait_seconds=5)
    headers = _auth(member)

    response = await client.get(f"{API}/tasks", headers=headers)
    assert [row["status"] for row in response.json()["rows"]] == ["available", "locked"]

    response = await client.post(f"{API}/tasks/start", headers=headers)
    assert response.status_code == 200
    started = response.json()
    assert started["wait_seconds"] == 5

    response = await client.post(f"{API}/tasks/start", headers=headers)
    assert response.status_code == 409

    response = await client.post(f"{API}/tasks/finish", json={"run_token": started["run_token"]}, headers=headers)
    assert response.status_code == 409

    clock.advance(5)
    response = await client.post(f"{API}/tasks/finish", json={"run_token": started["run_token"]}, headers=headers)
    assert response.status_code == 200
    assert response.json() == {"task_id": started["task_id"], "earned_points": 10, "points_balance": 10}

    response = await client.post(f"{API}/tasks/finish", json={"run_token": started["run_token"]}, headers=headers)
    assert response.status_code == 404

    response = await client.get(f"{API}/me", headers=headers)
    assert response.json()["tasks"] == {"total": 2, "done": 1}


@pytest.mark.asyncio
async def test_start_without_tasks(client, member) -> None:
    response = await client.post(f"{API}/tasks/start", headers=_auth(member))

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_wallet_request_and_approval(client, db, member, admin) -> None:
    response = await client.post(
        f"{API}/wallet/request", json={"type": "withdraw", "amount_usd": 5}, headers=_auth(member)
    )
    assert response.status_code == 400

    response = await client.post(
        f"{API}/wallet/request", json={"type": "gift", "amount_usd": 5}, headers=_auth(member)
    )
    assert response.status_code == 400

    response = await client.post(
        f"{API}/wallet/request", json={"type": "deposit", "amount_usd": "5,5"}, headers=_auth(member)
    )
    assert response.status_code == 200
    body = response.json()
    assert body["transaction"]["status"] == "pending"
    assert body["transaction"]["points_delta"] == 55
    assert set(body["manager"]) == {"title", "whatsapp", "telegram"}
    tx_id = body["transaction"]["id"]

    response = await client.get(f"{API}/wallet/my", headers=_auth(member))
    assert [row["id"] for row in response.json()["rows"]] == [tx_id]

    response = await client.get(f"{API}/admin/requests", headers=_auth(admin))
    rows = response.json()["rows"]
    assert [row["id"] for row in rows] == [tx_id]
    assert rows[0]["email"].endswith("@example.com")

    response = await client.post(f"{API}/admin/requests/{tx_id}/approve", headers=_auth(admin))
    assert response.status_code == 200
    assert response.json()["status"] == "approved"
    assert response.json()["processed_by"] == str(admin)

    response = await client.post(f"{API}/admin/requests/{tx_id}/reject", headers=_auth(admin))
    assert response.status_code == 409

    response = await client.post(f"{API}/admin/requests/{uuid4()}/approve", headers=_auth(admin))
    assert response.status_code == 404

    user = await db.get(User, member, populate_existing=True)
    assert user.points_balance == 55


@pytest.mark.asyncio
async def test_admin_settings(client, admin) -> None:
    response = await client.post(
        f"{API}/admin/settings",
        json={"usd_to_points": "12.7", "min_deposit_usd": 1, "min_withdraw_usd": "2,5", "telegram": "@desk"},
        headers=_auth(admin),
    )
    assert response.status_code == 200
    body = response.json()
    assert body["usd_to_points"] == 12
    assert body["min_withdraw_usd"] == 2.5
    assert body["manager_telegram"] == "@desk"

    response = await client.post(
        f"{API}/admin/settings",
        json={"usd_to_points": 0, "min_deposit_usd": 1, "min_withdraw_usd": 1},
        headers=_auth(admin),
    )
    assert response.status_code == 400

    response = await client.get(f"{API}/admin/settings", headers=_auth(admin))
    assert response.json()["usd_to_points"] == 12


@pytest.mark.asyncio
async def test_admin_task_catalog(client, admin, member) -> None:
    response = await client.post(
        f"{API}/admin/tasks/create", json={"title": "Follow", "reward_points": 5, "wait_seconds": 3},
        headers=_auth(admin),
    )
    assert response.status_code == 200
    task = response.json()
    assert task["order_index"] == 1

    response = await client.post(
        f"{API}/admin/tasks/create", json={"title": "Broken", "wait_seconds": 0}, headers=_auth(admin)
    )
    assert response.status_code == 400

    response = await client.post(
        f"{API}/admin/tasks/{task['id']}/update", json={"is_active": False}, headers=_auth(admin)
    )
    assert response.status_code == 200
    assert response.json()["is_active"] is False

    response = await client.post(f"{API}/admin/tasks/999/update", json={"title": "X"}, headers=_auth(admin))
    assert response.status_code == 404

    response = await client.get(f"{API}/admin/tasks", headers=_auth(admin))
    assert [t["title"] for t in response.json()] == ["Follow"]

    response = await client.get(f"{API}/tasks", headers=_auth(member))
    assert response.json()["rows"] == []


@pytest.mark.asyncio
async def test_admin_user_management(client, db, admin) -> None:
    await make_task(db, 1)

    response = await client.post(
        f"{API}/admin/users", json={"full_name": "Amina", "phone": "+212611111111"}, headers=_auth(admin)
    )
    assert response.status_code == 200
    created = response.json()
    assert created["points_balance"] == 0

    response = await client.post(f"{API}/admin/users", json={"phone": "+212611111111"}, headers=_auth(admin))
    assert response.status_code == 400

    response = await client.get(f"{API}/admin/users", headers=_auth(admin))
    assert [u["id"] for u in response.json()] == [created["id"]]

    response = await client.post(
        f"{API}/admin/users/{created['id']}/points", json={"points": "99.9"}, headers=_auth(admin)
    )
    assert response.status_code == 200
    assert response.json()["points_balance"] == 99

    response = await client.post(f"{API}/admin/users/{created['id']}/reset-tasks", headers=_auth(admin))
    assert response.json() == {"ok": True}

    response = await client.post(f"{API}/admin/users/{admin}/reset-tasks", headers=_auth(admin))
    assert response.status_code == 404

    response = await client.post(f"{API}/admin/users/{admin}/points", json={"points": 5}, headers=_auth(admin))
    assert response.status_code == 404
