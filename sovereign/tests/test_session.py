"""
Tests for game sessions and the session manager.

Tests:
- Sessions are created, tracked and ended
- max_turns ends an autoplay session after the last allowed turn
- Events are recorded in order and pushed to listeners
- A failing turn loop marks the session FAILED
"""

import asyncio
import json
import logging

import pytest

from ..bots import FirstAvailablePolicy
from ..config import GameConfig
from ..games.civilization import setup_civilization_game
from ..session import Session, SessionManager, SessionStatus


def _autoplay_config(**overrides) -> GameConfig:
    values = dict(tick_interval_ms=0, turns_per_card=3, random_seed=3, max_turns=4)
    values.update(overrides)
    return GameConfig(**values)


class TestSessionManager:
    """Tests for creating and ending sessions."""

    def test_create_and_get(self):
        manager = SessionManager()
        session = manager.create_session()

        assert manager.get_session(session.session_id) is session
        assert manager.get_session("missing") is None
        assert session.status == SessionStatus.CREATED
        assert manager.list_active_sessions() == [session.session_id]
        assert session.world.catalog.card_count > 0

    def test_session_ids_are_unique(self):
        manager = SessionManager()
        ids = {manager.create_session().session_id for _ in range(5)}
        assert len(ids) == 5

    def test_end_session(self):
        async def scenario():
            manager = SessionManager()
            session = manager.create_session(GameConfig(tick_interval_ms=10_000))
            session.start()
            await asyncio.sleep(0)

            assert await manager.end_session(session.session_id) is True
            assert await manager.end_session(session.session_id) is False
            return manager, session

        manager, session = asyncio.run(scenario())
        assert session.status == SessionStatus.STOPPED
        assert manager.list_sessions() == []

    def test_end_all(self):
        async def scenario():
            manager = SessionManager()
            for _ in range(3):
                manager.create_session(GameConfig(tick_interval_ms=10_000)).start()
            await manager.end_all()
            return manager

        assert asyncio.run(scenario()).list_sessions() == []

    def test_invalid_config_rejected(self):
        manager = SessionManager()
        with pytest.raises(ValueError):
            manager.create_session(GameConfig(turns_per_card=0))
        assert manager.list_sessions() == []

    def test_cards_path_is_loaded(self, tmp_path):
        path = tmp_path / "cards.json"
        path.write_text(json.dumps({"decks": {"Harm": [{"id": "flood", "title": "Flood"}]}}))

        session = SessionManager().create_session(GameConfig(cards_path=str(path)))

        assert session.world.catalog.deck_names == ("Harm",)
        assert session.world.catalog.get_by_id("Harm", "flood") is not None

    def test_unreadable_cards_path_gives_empty_catalog(self, tmp_path, caplog):
        with caplog.at_level(logging.ERROR, logger="sovereign.session.manager"):
            session = SessionManager().create_session(
                GameConfig(cards_path=str(tmp_path / "missing"))
            )
        assert session.world.catalog.is_empty
        assert caplog.records


class TestAutoplay:
    """Tests for sessions driven by a policy."""

    def test_max_turns(self):
        """Four turns are played; the card drawn at turn 3 is resolved."""
        async def scenario():
            session = SessionManager().create_session(
                _autoplay_config(), policy=FirstAvailablePolicy()
            )
            session.start()
            await asyncio.wait_for(session.wait(), timeout=2)
            return session

        session = asyncio.run(scenario())
        kinds = [e.kind for e in session.events]

        assert session.status == SessionStatus.STOPPED
        assert session.current_turn == 4
        assert session.snapshot()["turn"] == 4
        assert kinds.count("turn_ended") == 4
        assert kinds.count("turn_started") == 4
        assert kinds.count("card_drawn") == 1
        assert kinds.count("choice_applied") == 1
        assert session.orchestrator.history[0].turn == 3

    def test_event_order_around_card(self):
        """The card drawn after turn 3 is resolved before turn 4 starts."""
        async def scenario():
            session = SessionManager().create_session(
                _autoplay_config(), policy=FirstAvailablePolicy()
            )
            session.start()
            await session.wait()
            return [(e.kind, e.turn) for e in session.events]

        events = asyncio.run(scenario())
        start = events.index(("card_drawn", 3))
        assert events[start - 1] == ("turn_ended", 3)
        assert events[start + 1] == ("choice_applied", 3)
        assert events[start + 2] == ("turn_started", 4)

    def test_events_are_sequenced(self):
        async def scenario():
            session = SessionManager().create_session(
                _autoplay_config(), policy=FirstAvailablePolicy()
            )
            session.start()
            await session.wait()
            return list(session.events)

        events = asyncio.run(scenario())
        assert [e.sequence for e in events] == list(range(1, len(events) + 1))
        ended = [e for e in events if e.kind == "turn_ended"]
        assert set(ended[0].payload["resources"]) == {"Money", "Food", "Power"}
        assert events[0].to_dict()["kind"] == "turn_started"


class TestListeners:
    """Tests for session listeners."""

    def test_listener_receives_events_until_removed(self):
        async def scenario():
            session = SessionManager().create_session(_autoplay_config(max_turns=2))
            received = []
            remove = session.add_listener(received.append)
            session.scheduler.on_turn_ended.subscribe(lambda turn: turn == 1 and remove())
            session.start()
            await session.wait()
            return session, received

        session, received = asyncio.run(scenario())
        assert [e.kind for e in received] == ["turn_started", "turn_ended"]
        assert len(session.events) == 4

    def test_failing_listener_is_isolated(self, caplog):
        async def scenario():
            session = SessionManager().create_session(_autoplay_config(max_turns=2))

            def broken(event):
                raise RuntimeError("listener broke")

            session.add_listener(broken)
            session.start()
            await session.wait()
            return session

        with caplog.at_level(logging.ERROR, logger="sovereign.session.manager"):
            session = asyncio.run(scenario())

        assert session.status == SessionStatus.STOPPED
        assert session.current_turn >= 2
        assert any("listener failed" in r.getMessage() for r in caplog.records)

    def test_history_is_bounded(self):
        async def scenario():
            config = _autoplay_config(max_turns=10, turns_per_card=100)
            session = Session("bounded", config, setup_civilization_game(config), history_size=5)
            session.start()
            await session.wait()
            return session

        session = asyncio.run(scenario())
        assert len(session.events) == 5
        assert session.events[-1].kind == "turn_ended"
        assert session.events[-1].turn == 10


class TestSessionState:
    """Tests for status transitions and snapshots."""

    def test_loop_failure_marks_session_failed(self, caplog):
        async def scenario():
            session = SessionManager().create_session(GameConfig(tick_interval_ms=0))

            def explode(turn):
                raise RuntimeError("boom")

            session.scheduler.on_turn_ended.subscribe(explode)
            task = session.start()
            await asyncio.wait([task], timeout=1)
            return session

        with caplog.at_level(logging.ERROR, logger="sovereign.session.manager"):
            session = asyncio.run(scenario())

        assert session.status == SessionStatus.FAILED
        assert session.error == "boom"
        assert not session.is_active()

    def test_snapshot(self):
        async def scenario():
            session = SessionManager().create_session(GameConfig(tick_interval_ms=10_000))
            session.start()
            await asyncio.sleep(0.01)
            session.pause()
            snapshot = session.snapshot()
            await session.stop()
            return snapshot

        snapshot = asyncio.run(scenario())
        assert snapshot["status"] == "running"
        assert snapshot["scheduler_state"] == "paused"
        assert snapshot["turn"] == 1
        assert snapshot["resources"] == {"Money": 10, "Food": 8, "Power": 6}
        assert set(snapshot["capitals"]) == {"Government", "Population", "Military"}
        assert snapshot["has_pending_card"] is False

    def test_external_choice(self):
        """Without a policy the session waits for submit_choice_index."""
        async def scenario():
            session = SessionManager().create_session(
                GameConfig(tick_interval_ms=0, turns_per_card=1, random_seed=1)
            )
            session.start()
            for _ in range(100):
                if session.orchestrator.has_pending_choice():
                    break
                await asyncio.sleep(0.005)

            pending = session.orchestrator.pending
            index = list(pending.card.choices).index(pending.available_choices[0])
            assert session.submit_choice_index(index) is True
            await session.stop()
            return session

        session = asyncio.run(scenario())
        assert [e.kind for e in session.events].count("choice_applied") == 1
