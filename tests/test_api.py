"""
HTTP API tests.

Runs the FastAPI app in-process over httpx's ASGI transport, with the
database, event emitter and stats cache dependencies pointed at test doubles.
"""

import uuid

import httpx
import pytest

from taskflow.core.database import get_db
from taskflow.core.dependencies import get_events, get_stats_cache
from taskflow.main import app

BASE_URL = "http://testserver/api/v1"


@pytest.fixture
async def client(session_factory, people, emitter):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_events] = lambda: emitter
    app.dependency_overrides[get_stats_cache] = lambda: None

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url=BASE_URL) as client:
        yield client

    app.dependency_overrides.clear()


def as_(identity) -> dict[str, str]:
    return {"X-Identity-Id": str(identity.id)}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

async def create_task(client: httpx.AsyncClient, identity, **body) -> dict:
    body.setdefault("title", "API task")
    resp = await client.post("/tasks", json=body, headers=as_(identity))
    assert resp.status_code == 201, f"Create task failed: {resp.text}"
    return resp.json()


async def scope_titles(client: httpx.AsyncClient, identity, scope: str, **params) -> list[str]:
    resp = await client.get(f"/scopes/{scope}/tasks", params=params, headers=as_(identity))
    assert resp.status_code == 200, f"List {scope} failed: {resp.text}"
    return [task["title"] for task in resp.json()["tasks"]]


# ---------------------------------------------------------------------------
# Identity header
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_missing_identity_header(client):
    resp = await client.get("/scopes/mine/tasks")
    assert resp.status_code == 401
    assert resp.json()["detail"]["code"] == "MISSING_IDENTITY"


@pytest.mark.asyncio
async def test_unknown_identity_header(client):
    resp = await client.get("/scopes/mine/tasks", headers={"X-Identity-Id": str(uuid.uuid4())})
    assert resp.status_code == 401
    assert resp.json()["detail"]["code"] == "IDENTITY_NOT_FOUND"


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("http://testserver/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


# ---------------------------------------------------------------------------
# Review scenario end to end
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_review_round_trip(client, people):
    task = await create_task(client, people.alice, title="Launch email", status="YTS")
    assert "Launch email" in await scope_titles(client, people.alice, "mine")

    resp = await client.post(
        f"/tasks/{task['id']}/review",
        json={"reviewer_id": str(people.bob.id)},
        headers=as_(people.alice),
    )
    assert resp.status_code == 200, resp.text
    assert resp.json()["review_status"] == "REVIEW_REQUESTED"
    assert resp.json()["status"] == "ON_HOLD"
    assert await scope_titles(client, people.bob, "review_requests") == ["Launch email"]

    resp = await client.post(
        f"/tasks/{task['id']}/review/accept", json={"accept": True}, headers=as_(people.bob)
    )
    assert resp.json()["review_status"] == "UNDER_REVIEW"
    assert await scope_titles(client, people.bob, "review_requests") == []
    assert await scope_titles(client, people.bob, "review") == ["Launch email"]

    resp = await client.post(
        f"/tasks/{task['id']}/review/respond",
        json={"decision": "APPROVED", "comment": "Ship it"},
        headers=as_(people.bob),
    )
    body = resp.json()
    assert body["review_status"] == "APPROVED"
    assert body["reviewer_id"] is None
    assert body["reviewed_by_id"] == str(people.bob.id)
    assert body["review_comment"] == "Ship it"
    assert await scope_titles(client, people.bob, "review") == []


@pytest.mark.asyncio
async def test_review_errors_use_detail_envelope(client, people):
    task = await create_task(client, people.alice)
    await client.post(
        f"/tasks/{task['id']}/review", json={"reviewer_id": str(people.bob.id)}, headers=as_(people.alice)
    )

    resp = await client.post(
        f"/tasks/{task['id']}/review/accept", json={"accept": True}, headers=as_(people.carol)
    )
    assert resp.status_code == 403
    assert resp.json()["detail"]["code"] == "NOT_REVIEWER"

    resp = await client.post(
        f"/tasks/{task['id']}/review/respond", json={"decision": "REJECTED"}, headers=as_(people.bob)
    )
    assert resp.status_code == 409
    assert resp.json()["detail"]["code"] == "INVALID_TRANSITION"

    resp = await client.post(f"/tasks/{task['id']}/review/cancel", headers=as_(people.bob))
    assert resp.status_code == 403
    assert resp.json()["detail"]["code"] == "FORBIDDEN"

    resp = await client.post(f"/tasks/{task['id']}/review/cancel", headers=as_(people.alice))
    assert resp.status_code == 200
    assert resp.json()["review_status"] is None


@pytest.mark.asyncio
async def test_self_review_is_unprocessable(client, people):
    task = await create_task(client, people.alice)

    resp = await client.post(
        f"/tasks/{task['id']}/review", json={"reviewer_id": str(people.alice.id)}, headers=as_(people.alice)
    )

    assert resp.status_code == 422
    assert resp.json()["detail"]["code"] == "VALIDATION_ERROR"


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_task_crud(client, people):
    task = await create_task(client, people.alice, title="Brochure", priority="HIGH")

    resp = await client.patch(f"/tasks/{task['id']}", json={"tags": "print"}, headers=as_(people.alice))
    assert resp.status_code == 200
    assert resp.json()["tags"] == "print"
    assert resp.json()["priority"] == "HIGH"

    resp = await client.patch(
        f"/tasks/{task['id']}/status", json={"status": "ON_HOLD"}, headers=as_(people.alice)
    )
    assert resp.json()["status"] == "ON_HOLD"

    resp = await client.post(f"/tasks/{task['id']}/complete", headers=as_(people.alice))
    assert resp.json()["status"] == "COMPLETED"

    resp = await client.delete(f"/tasks/{task['id']}", headers=as_(people.alice))
    assert resp.status_code == 204

    resp = await client.get(f"/tasks/{task['id']}", headers=as_(people.alice))
    assert resp.status_code == 404
    assert resp.json()["detail"]["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_forbidden_update_is_rolled_back(client, people):
    task = await create_task(client, people.alice, title="Mine only")

    resp = await client.patch(f"/tasks/{task['id']}", json={"title": "Taken"}, headers=as_(people.dave))
    assert resp.status_code == 403

    resp = await client.get(f"/tasks/{task['id']}", headers=as_(people.dave))
    assert resp.json()["title"] == "Mine only"
    assert resp.json()["version"] == task["version"]


@pytest.mark.asyncio
async def test_activity_endpoint(client, people):
    task = await create_task(client, people.alice)

    resp = await client.get(f"/tasks/{task['id']}/activity", headers=as_(people.alice))

    assert resp.status_code == 200
    assert resp.json() == {"activities": [], "total": 0}


# ---------------------------------------------------------------------------
# Scopes
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_scope_listing_params(client, people):
    for title in ("beta", "Alpha", "gamma"):
        await create_task(client, people.alice, title=title)

    assert await scope_titles(client, people.alice, "mine", sort="alphabetical") == ["Alpha", "beta", "gamma"]

    resp = await client.get(
        "/scopes/mine/tasks", params={"skip": 1, "limit": 1, "sort": "alphabetical"}, headers=as_(people.alice)
    )
    body = resp.json()
    assert [t["title"] for t in body["tasks"]] == ["beta"]
    assert body["total"] == 3
    assert body["skip"] == 1
    assert body["limit"] == 1


@pytest.mark.asyncio
async def test_scope_listing_validation(client, people):
    resp = await client.get("/scopes/nowhere/tasks", headers=as_(people.alice))
    assert resp.status_code == 422

    resp = await client.get("/scopes/mine/tasks", params={"limit": 0}, headers=as_(people.alice))
    assert resp.status_code == 422

    resp = await client.get("/scopes/mine/tasks", params={"status": "DONE"}, headers=as_(people.alice))
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_other_department_forbidden_for_regular_users(client, people):
    resp = await client.get("/scopes/other_department/tasks", headers=as_(people.alice))
    assert resp.status_code == 403

    resp = await client.get("/scopes/other_department/stats", headers=as_(people.root))
    assert resp.status_code == 200
    assert resp.json()["total_tasks"] == 0


@pytest.mark.asyncio
async def test_scope_stats(client, people):
    await create_task(client, people.alice, title="One", status="YTS")
    await create_task(client, people.bob, title="Two", status="COMPLETED")

    resp = await client.get("/scopes/team/stats", headers=as_(people.alice))

    assert resp.json()["total_tasks"] == 2
    assert resp.json()["yts"] == 1
    assert resp.json()["completed"] == 1

    resp = await client.get("/scopes/team/stats", params={"status": "!COMPLETED"}, headers=as_(people.alice))
    assert resp.json()["total_tasks"] == 1
