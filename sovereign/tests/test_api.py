"""
Tests for API layer.

Tests:
- API service methods
- Choice submission and its error codes
- Session lifecycle via API
- HTTP endpoints through the FastAPI test client
"""

import asyncio
import json
import logging
import time

import pytest

from ..api.schemas import (
    CreateSessionRequest,
    ErrorCode,
    ErrorResponse,
    PolicyName,
    SessionStatus,
    SubmitChoiceRequest,
)
from ..api.service import APIService

GRANARY_DECKS = {
    "decks": {
        "Progression": [
            {
                "id": "granary",
                "title": "Granary",
                "choices": [
                    {
                        "label": "Build",
                        "effects": [
                            {"resourceType": "Food", "amount": -100},
                            {"capitalType": "Population", "amount": 10},
                        ],
                        "conditions": [
                            {"type": "Resource", "resourceType": "Food", "minAmount": 100},
                        ],
                    },
                    {"label": "Skip", "effects": [{"resourceType": "Money", "amount": 1}]},
                ],
            }
        ]
    }
}


@pytest.fixture
def cards_file(tmp_path):
    path = tmp_path / "granary.json"
    path.write_text(json.dumps(GRANARY_DECKS), encoding="utf-8")
    return str(path)


async def _wait_for_card(service, session_id, timeout=1.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        response = service.get_pending_card(session_id)
        if response.pending:
            return response
        await asyncio.sleep(0.005)
    raise AssertionError("no card became pending")


def _card_request(**overrides) -> CreateSessionRequest:
    values = dict(tick_interval_ms=60_000, turns_per_card=1)
    values.update(overrides)
    return CreateSessionRequest(**values)


class TestAPIService:
    """Tests for APIService."""

    def test_create_session(self):
        """Creating a session starts its turn loop."""
        async def scenario():
            service = APIService()
            response = await service.create_session(CreateSessionRequest(tick_interval_ms=60_000))
            await asyncio.sleep(0.01)
            state = service.get_game_state(response.session_id)
            await service.shutdown()
            return response, state

        response, state = asyncio.run(scenario())

        assert response.session_id
        assert response.status == SessionStatus.RUNNING
        assert response.policy == PolicyName.EXTERNAL
        assert state.turn_number == 1
        assert {r.kind: r.amount for r in state.resources} == {"Money": 10, "Food": 8, "Power": 6}
        assert [c.name for c in state.capitals] == ["Government", "Population", "Military"]

    def test_initial_resources_and_policy(self):
        async def scenario():
            service = APIService()
            response = await service.create_session(CreateSessionRequest(
                tick_interval_ms=60_000,
                initial_resources={"Money": 50},
                policy=PolicyName.GREEDY,
            ))
            state = service.get_game_state(response.session_id)
            await service.shutdown()
            return response, state

        response, state = asyncio.run(scenario())
        assert response.policy == PolicyName.GREEDY
        assert {r.kind: r.amount for r in state.resources}["Money"] >= 50

    def test_get_nonexistent_session(self):
        """Unknown sessions give SESSION_NOT_FOUND everywhere."""
        service = APIService()

        for response in (
            service.get_session("nonexistent-id"),
            service.get_game_state("nonexistent-id"),
            service.get_pending_card("nonexistent-id"),
            service.pause_session("nonexistent-id"),
            service.submit_choice("nonexistent-id", SubmitChoiceRequest(index=0)),
        ):
            assert isinstance(response, ErrorResponse)
            assert response.error_code == ErrorCode.SESSION_NOT_FOUND

    def test_end_session(self):
        async def scenario():
            service = APIService()
            created = await service.create_session(CreateSessionRequest(tick_interval_ms=60_000))
            await asyncio.sleep(0.01)
            ended = await service.end_session(created.session_id)
            again = await service.end_session(created.session_id)
            return service, ended, again

        service, ended, again = asyncio.run(scenario())
        assert ended.success and ended.final_turn == 1
        assert not again.success
        assert service.list_sessions() == []

    def test_pause_and_resume(self):
        async def scenario():
            service = APIService()
            created = await service.create_session(CreateSessionRequest(tick_interval_ms=60_000))
            paused = service.pause_session(created.session_id)
            resumed = service.resume_session(created.session_id)
            await service.shutdown()
            return paused, resumed

        paused, resumed = asyncio.run(scenario())
        assert paused.status == SessionStatus.PAUSED
        assert resumed.status == SessionStatus.RUNNING

    def test_get_decks(self):
        service = APIService()
        decks = service.get_decks()

        assert decks.source == "builtin"
        assert [d.name for d in decks.decks] == ["Progression", "ResourceSupport", "Harm", "BigEvent"]
        assert decks.total_cards == sum(d.card_count for d in decks.decks)


class TestChoiceSubmission:
    """Tests for resolving cards through the service."""

    def test_pending_card_lists_availability(self, cards_file):
        async def scenario():
            service = APIService(cards_path=cards_file)
            created = await service.create_session(_card_request())
            pending = await _wait_for_card(service, created.session_id)
            status = service.get_session(created.session_id).status
            await service.shutdown()
            return pending, status

        pending, status = asyncio.run(scenario())
        assert status == SessionStatus.WAITING_CHOICE
        assert pending.card.card_id == "granary"
        assert [(c.label, c.available) for c in pending.card.choices] == [
            ("Build", False), ("Skip", True),
        ]
        assert pending.card.choices[0].conditions

    def test_submit_errors_and_success(self, cards_file):
        async def scenario():
            service = APIService(cards_path=cards_file)
            created = await service.create_session(_card_request())
            sid = created.session_id
            await _wait_for_card(service, sid)

            responses = {
                "empty": service.submit_choice(sid, SubmitChoiceRequest()),
                "range": service.submit_choice(sid, SubmitChoiceRequest(index=7)),
                "label": service.submit_choice(sid, SubmitChoiceRequest(label="Burn it")),
                "locked": service.submit_choice(sid, SubmitChoiceRequest(index=0)),
                "ok": service.submit_choice(sid, SubmitChoiceRequest(label="Skip")),
                "again": service.submit_choice(sid, SubmitChoiceRequest(label="Skip")),
            }
            await service.shutdown()
            return responses

        responses = asyncio.run(scenario())

        assert responses["empty"].error_code == ErrorCode.VALIDATION_ERROR
        assert responses["range"].error_code == ErrorCode.INVALID_CHOICE
        assert responses["label"].error_code == ErrorCode.INVALID_CHOICE
        assert responses["locked"].error_code == ErrorCode.CHOICE_LOCKED
        assert responses["locked"].details == {"card_id": "granary", "choice_label": "Build"}

        ok = responses["ok"]
        assert ok.success and ok.choice_label == "Skip"
        assert {r.kind: r.amount for r in ok.state.resources}["Money"] == 11
        assert responses["again"].error_code == ErrorCode.NO_PENDING_CARD

    def test_resume_keeps_card_pending(self, cards_file):
        """A card waiting for a choice cannot be resumed past."""
        async def scenario():
            service = APIService(cards_path=cards_file)
            created = await service.create_session(_card_request())
            await _wait_for_card(service, created.session_id)
            response = service.resume_session(created.session_id)
            await service.shutdown()
            return response

        assert asyncio.run(scenario()).status == SessionStatus.WAITING_CHOICE

    def test_subscribe_receives_events(self, cards_file):
        async def scenario():
            service = APIService(cards_path=cards_file)
            created = await service.create_session(_card_request(tick_interval_ms=0, max_turns=3))
            received = []
            unsubscribe = service.subscribe(created.session_id, received.append)
            await _wait_for_card(service, created.session_id)
            service.submit_choice(created.session_id, SubmitChoiceRequest(label="Skip"))
            await asyncio.sleep(0.01)
            unsubscribe()
            await service.shutdown()
            return received

        kinds = [e.kind for e in asyncio.run(scenario())]
        assert "card_drawn" in kinds
        assert "choice_applied" in kinds
        assert APIService().subscribe("missing", print) is None


class TestHTTPEndpoints:
    """Tests for the FastAPI routes."""

    @pytest.fixture
    def client(self, cards_file):
        from fastapi.testclient import TestClient
        from ..api.app import create_app

        with TestClient(create_app(APIService(cards_path=cards_file))) as client:
            yield client

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["service"] == "sovereign-engine"

    def test_decks(self, client):
        data = client.get("/api/v1/decks").json()
        assert data["total_cards"] == 1
        assert data["decks"][0]["card_ids"] == ["granary"]

    def test_unknown_session_is_404(self, client):
        response = client.get("/api/v1/sessions/missing/state")
        assert response.status_code == 404
        assert response.json()["error_code"] == "SESSION_NOT_FOUND"

    def test_invalid_request_is_422(self, client):
        response = client.post("/api/v1/sessions", json={"turns_per_card": 0})
        assert response.status_code == 422

    def test_card_flow(self, client):
        """Create, wait for the card, get refused, choose, end."""
        created = client.post(
            "/api/v1/sessions", json={"tick_interval_ms": 60000, "turns_per_card": 1}
        )
        assert created.status_code == 200
        sid = created.json()["session_id"]

        for _ in range(200):
            card = client.get(f"/api/v1/sessions/{sid}/card").json()
            if card["pending"]:
                break
            time.sleep(0.005)
        assert card["card"]["card_id"] == "granary"

        locked = client.post(f"/api/v1/sessions/{sid}/choice", json={"index": 0})
        assert locked.status_code == 409
        assert locked.json()["error_code"] == "CHOICE_LOCKED"

        invalid = client.post(f"/api/v1/sessions/{sid}/choice", json={"label": "Burn it"})
        assert invalid.status_code == 400

        chosen = client.post(f"/api/v1/sessions/{sid}/choice", json={"label": "Skip"})
        assert chosen.status_code == 200
        assert chosen.json()["choice_label"] == "Skip"

        assert sid in client.get("/api/v1/sessions").json()["sessions"]
        ended = client.delete(f"/api/v1/sessions/{sid}").json()
        assert ended["success"] is True
        assert client.get(f"/api/v1/sessions/{sid}").status_code == 404

    def test_websocket_sends_state_and_pong(self, client):
        sid = client.post("/api/v1/sessions", json={"tick_interval_ms": 60000}).json()["session_id"]

        with client.websocket_connect(f"/api/v1/sessions/{sid}/ws") as websocket:
            first = websocket.receive_json()
            assert first["type"] == "state_update"
            assert first["payload"]["session_id"] == sid

            websocket.send_text(json.dumps({"type": "ping"}))
            # Turn events may arrive before the pong
            seen = []
            while not seen or seen[-1]["type"] != "pong":
                seen.append(websocket.receive_json())
            assert all(m["type"] in {"turn_started", "turn_ended", "pong"} for m in seen)

    def test_websocket_unknown_session(self, client):
        with client.websocket_connect("/api/v1/sessions/missing/ws") as websocket:
            message = websocket.receive_json()
            assert message["type"] == "error"
            assert message["payload"]["error_code"] == "SESSION_NOT_FOUND"


class TestWebSocketBuffer:
    """Tests for the per-connection event buffer."""

    def test_full_buffer_drops_new_events(self, caplog):
        from ..api.app import queue_event

        queue = asyncio.Queue(maxsize=2)
        with caplog.at_level(logging.WARNING, logger="sovereign.api.app"):
            results = [
                queue_event(queue, {"kind": "turn_ended", "turn": turn}, "s1")
                for turn in (1, 2, 3)
            ]

        assert results == [True, True, False]
        assert [queue.get_nowait()["turn"] for _ in range(queue.qsize())] == [1, 2]
        assert any("dropped turn_ended" in r.getMessage() for r in caplog.records)
