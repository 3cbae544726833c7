"""Realtime channel tests.

These use Starlette's synchronous TestClient, which runs the app on its own
event loop, so they get a dedicated engine instead of the async db fixtures.
"""

import asyncio
import os
import tempfile

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import AsyncAdaptedQueuePool
from starlette.websockets import WebSocketDisconnect

from app.database import get_db
from app.main import app
from app.models.base import Base


async def _create_tables(url: str) -> None:
    engine = create_async_engine(url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()


@pytest.fixture
def ws_engine():
    db_fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(db_fd)
    url = f"sqlite+aiosqlite:///{db_path}"
    asyncio.run(_create_tables(url))
    # Same pool class the app gets by default, so checkouts can be counted
    yield create_async_engine(url, poolclass=AsyncAdaptedQueuePool)
    os.unlink(db_path)


@pytest.fixture
def ws_client(ws_engine):
    session_factory = async_sessionmaker(ws_engine, expire_on_commit=False)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    # One portal for the whole test so requests and sockets share a loop
    with TestClient(app) as tc:
        yield tc
        tc.portal.call(ws_engine.dispose)
    app.dependency_overrides.clear()


def register_and_login(tc: TestClient, email: str, username: str, password: str = "secret123") -> str:
    tc.post("/auth/register", json={"email": email, "username": username, "password": password})
    return tc.post("/auth/login", json={"email": email, "password": password}).json()["access_token"]


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def two_player_draft(tc: TestClient) -> tuple[dict, str, str]:
    t1 = register_and_login(tc, "p1@example.com", "p1")
    t2 = register_and_login(tc, "p2@example.com", "p2")
    draft = tc.post("/drafts", json={}, headers=auth_headers(t1)).json()
    draft = tc.post(f"/drafts/{draft['id']}/join", headers=auth_headers(t2)).json()
    return draft, t1, t2


class TestDraftSocket:
    def test_first_message_is_current_state(self, ws_client: TestClient):
        draft, t1, _ = two_player_draft(ws_client)
        with ws_client.websocket_connect(f"/drafts/{draft['id']}/ws?token={t1}") as ws:
            state = ws.receive_json()
        assert state["id"] == draft["id"]
        assert state["version"] == draft["version"]
        assert state["phase"] == "preban"

    def test_committed_actions_are_pushed(self, ws_client: TestClient):
        draft, t1, t2 = two_player_draft(ws_client)
        with ws_client.websocket_connect(f"/drafts/{draft['id']}/ws?token={t2}") as ws:
            ws.receive_json()
            resp = ws_client.post(
                f"/drafts/{draft['id']}/ban", json={"character_id": "A"}, headers=auth_headers(t1)
            )
            assert resp.status_code == 200
            pushed = ws.receive_json()
        assert pushed["prebans"] == ["A"]
        assert pushed["turn"] == "player2"
        assert pushed["version"] == resp.json()["version"]

    def test_spectator_can_watch(self, ws_client: TestClient):
        draft, _, _ = two_player_draft(ws_client)
        t3 = register_and_login(ws_client, "p3@example.com", "p3")
        with ws_client.websocket_connect(f"/drafts/{draft['id']}/ws?token={t3}") as ws:
            assert ws.receive_json()["id"] == draft["id"]

    def test_rejected_action_is_not_pushed(self, ws_client: TestClient):
        draft, t1, t2 = two_player_draft(ws_client)
        with ws_client.websocket_connect(f"/drafts/{draft['id']}/ws?token={t1}") as ws:
            ws.receive_json()
            bad = ws_client.post(
                f"/drafts/{draft['id']}/ban", json={"character_id": "A"}, headers=auth_headers(t2)
            )
            assert bad.status_code == 400
            ws_client.post(
                f"/drafts/{draft['id']}/ban", json={"character_id": "A"}, headers=auth_headers(t1)
            )
            # Next message is the accepted ban, not anything from the rejection
            assert ws.receive_json()["version"] == draft["version"] + 1

    def test_bad_token_is_refused(self, ws_client: TestClient):
        draft, _, _ = two_player_draft(ws_client)
        with pytest.raises(WebSocketDisconnect):
            with ws_client.websocket_connect(f"/drafts/{draft['id']}/ws?token=garbage") as ws:
                ws.receive_json()

    def test_missing_draft_is_refused(self, ws_client: TestClient):
        t1 = register_and_login(ws_client, "p1@example.com", "p1")
        with pytest.raises(WebSocketDisconnect):
            with ws_client.websocket_connect(f"/drafts/nope/ws?token={t1}") as ws:
                ws.receive_json()

    def test_idle_socket_holds_no_connection(self, ws_client: TestClient, ws_engine):
        draft, t1, t2 = two_player_draft(ws_client)
        pool = ws_engine.sync_engine.pool
        with ws_client.websocket_connect(f"/drafts/{draft['id']}/ws?token={t1}") as ws1, \
                ws_client.websocket_connect(f"/drafts/{draft['id']}/ws?token={t2}") as ws2:
            ws1.receive_json()
            ws2.receive_json()
            assert pool.checkedout() == 0

            # Pushes still arrive after the connection went back to the pool
            ws_client.post(
                f"/drafts/{draft['id']}/ban", json={"character_id": "A"}, headers=auth_headers(t1)
            )
            assert ws1.receive_json()["prebans"] == ["A"]
            assert ws2.receive_json()["prebans"] == ["A"]
            assert pool.checkedout() == 0
