"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to session calls
2. Manages sessions
3. Maps engine errors to error codes
4. Formats responses for the front end

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
Methods that start or stop sessions are coroutines and must run on the
event loop that drives the sessions.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable
import logging

from .schemas import (
    # Requests
    CreateSessionRequest,
    SubmitChoiceRequest,
    # Responses
    SessionResponse,
    GameStateResponse,
    PendingCardResponse,
    ChoiceResponse,
    DecksResponse,
    EndSessionResponse,
    ErrorResponse,
    # Shared
    ResourceInfo,
    CapitalInfo,
    CardInfo,
    ChoiceInfo,
    DeckInfo,
    EventInfo,
    # Enums
    ErrorCode,
    PolicyName,
    SessionStatus,
)
from ..bots import create_policy
from ..card_schema.catalog import CardCatalog
from ..card_schema.effect_dsl import describe_condition, describe_effect
from ..config import GameConfig
from ..errors import ChoiceLockedError
from ..loader import LoadResult, build_catalog
from ..session import Session, SessionEvent, SessionManager, SessionStatus as CoreStatus

logger = logging.getLogger(__name__)

RECENT_EVENTS = 20


def _not_found(session_id: str) -> ErrorResponse:
    return ErrorResponse(
        error=f"Session {session_id} not found",
        error_code=ErrorCode.SESSION_NOT_FOUND,
        details={"session_id": session_id},
    )


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        # Create and start a session (inside a running event loop)
        session_response = await service.create_session(CreateSessionRequest())

        # Resolve the pending card
        card = service.get_pending_card(session_response.session_id)
        service.submit_choice(session_response.session_id, SubmitChoiceRequest(index=0))
    """
    session_manager: SessionManager = field(default_factory=SessionManager)
    cards_path: str | None = None

    # Loaded once, shared by every session (catalogs are read-only)
    _load_result: LoadResult | None = field(default=None, init=False)

    @property
    def catalog(self) -> CardCatalog:
        return self._load().catalog

    def _load(self) -> LoadResult:
        if self._load_result is None:
            self._load_result = build_catalog(self.cards_path)
            for error in self._load_result.errors:
                logger.error("Card loading: %s", error)
        return self._load_result

    async def create_session(self, request: CreateSessionRequest) -> SessionResponse:
        """
        Create a new game session and start its turn loop.

        Raises ValueError if the configuration is invalid.
        """
        config = GameConfig(
            tick_interval_ms=request.tick_interval_ms,
            turns_per_card=request.turns_per_card,
            initial_health=request.initial_health,
            random_seed=request.random_seed,
            max_turns=request.max_turns,
        )
        if request.initial_resources is not None:
            config.initial_resources.update(request.initial_resources)

        policy = None
        if request.policy != PolicyName.EXTERNAL:
            policy = create_policy(request.policy.value, seed=request.random_seed)

        session = self.session_manager.create_session(config, catalog=self.catalog, policy=policy)
        session.start()
        return self._session_to_response(session)

    def get_session(self, session_id: str) -> SessionResponse | ErrorResponse:
        """
        Get session status.
        """
        session = self.session_manager.get_session(session_id)
        if not session:
            return _not_found(session_id)
        return self._session_to_response(session)

    def get_game_state(self, session_id: str) -> GameStateResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return _not_found(session_id)
        return self._build_game_state(session)

    def get_pending_card(self, session_id: str) -> PendingCardResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return _not_found(session_id)
        card = self._pending_card_info(session)
        return PendingCardResponse(session_id=session_id, pending=card is not None, card=card)

    def submit_choice(
        self,
        session_id: str,
        request: SubmitChoiceRequest,
    ) -> ChoiceResponse | ErrorResponse:
        """
        Resolve the pending card by choice index or label.

        Locked choices are refused and the card stays pending.
        """
        session = self.session_manager.get_session(session_id)
        if not session:
            return _not_found(session_id)

        if request.index is None and request.label is None:
            return ErrorResponse(
                error="Provide a choice index or label",
                error_code=ErrorCode.VALIDATION_ERROR,
            )

        pending = session.orchestrator.pending
        if pending is None or not session.orchestrator.has_pending_choice():
            return ErrorResponse(
                error="No card is waiting for a choice",
                error_code=ErrorCode.NO_PENDING_CARD,
            )

        card = pending.card
        if request.index is not None:
            if request.index >= len(card.choices):
                return ErrorResponse(
                    error=f"Choice index {request.index} out of range for card {card.id}",
                    error_code=ErrorCode.INVALID_CHOICE,
                )
            choice = card.choices[request.index]
        else:
            choice = card.get_choice(request.label)
            if choice is None:
                return ErrorResponse(
                    error=f"Card {card.id} has no choice '{request.label}'",
                    error_code=ErrorCode.INVALID_CHOICE,
                )

        try:
            accepted = session.submit_choice(choice)
        except ChoiceLockedError as e:
            return ErrorResponse(
                error=str(e),
                error_code=ErrorCode.CHOICE_LOCKED,
                details={"card_id": e.card_id, "choice_label": e.choice_label},
            )

        if not accepted:
            return ErrorResponse(
                error="No card is waiting for a choice",
                error_code=ErrorCode.NO_PENDING_CARD,
            )

        return ChoiceResponse(
            session_id=session_id,
            success=True,
            card_id=pending.card.id,
            choice_label=choice.label,
            state=self._build_game_state(session),
        )

    def pause_session(self, session_id: str) -> SessionResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return _not_found(session_id)
        session.pause()
        return self._session_to_response(session)

    def resume_session(self, session_id: str) -> SessionResponse | ErrorResponse:
        """Resume a paused session. A card still waiting keeps it paused."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return _not_found(session_id)
        if not session.orchestrator.has_pending_choice():
            session.resume()
        return self._session_to_response(session)

    async def end_session(self, session_id: str) -> EndSessionResponse:
        """End a game session and release resources."""
        session = self.session_manager.get_session(session_id)
        final_turn = session.current_turn if session else 0
        success = await self.session_manager.end_session(session_id)
        return EndSessionResponse(success=success, session_id=session_id, final_turn=final_turn)

    def list_sessions(self) -> list[str]:
        return self.session_manager.list_active_sessions()

    def get_decks(self) -> DecksResponse:
        result = self._load()
        decks = [
            DeckInfo(name=name, card_count=len(cards), card_ids=[c.id for c in cards])
            for name, cards in result.catalog.get_all_decks().items()
        ]
        return DecksResponse(
            decks=decks,
            total_cards=result.catalog.card_count,
            source=str(self.cards_path) if self.cards_path else "builtin",
            warnings=result.warnings,
        )

    def subscribe(
        self,
        session_id: str,
        listener: Callable[[SessionEvent], None],
    ) -> Callable[[], None] | None:
        """Register a session event listener. None if the session is unknown."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return None
        return session.add_listener(listener)

    async def shutdown(self) -> None:
        await self.session_manager.end_all()

    # =========================================================================
    # Conversion helpers
    # =========================================================================

    def _session_to_response(self, session: Session) -> SessionResponse:
        policy = PolicyName.EXTERNAL
        if session.policy is not None:
            policy = {
                "RandomPolicy": PolicyName.RANDOM,
                "FirstAvailablePolicy": PolicyName.FIRST,
                "GreedyPolicy": PolicyName.GREEDY,
            }.get(session.policy.get_name(), PolicyName.EXTERNAL)

        return SessionResponse(
            session_id=session.session_id,
            status=self._session_status(session),
            turn_number=session.current_turn,
            turns_per_card=session.config.turns_per_card,
            tick_interval_ms=session.config.tick_interval_ms,
            policy=policy,
            created_at=session.created_at,
            error=session.error,
        )

    def _session_status(self, session: Session) -> SessionStatus:
        if session.status == CoreStatus.FAILED:
            return SessionStatus.FAILED
        if session.status == CoreStatus.STOPPED:
            return SessionStatus.STOPPED
        if session.status == CoreStatus.CREATED:
            return SessionStatus.CREATED
        if session.orchestrator.has_pending_choice():
            return SessionStatus.WAITING_CHOICE
        if session.scheduler.is_paused:
            return SessionStatus.PAUSED
        return SessionStatus.RUNNING

    def _build_game_state(self, session: Session) -> GameStateResponse:
        ledger = session.world.ledger
        registry = session.world.registry
        events = list(session.events)[-RECENT_EVENTS:]

        return GameStateResponse(
            session_id=session.session_id,
            status=self._session_status(session),
            turn_number=session.current_turn,
            resources=[
                ResourceInfo(kind=r.kind.value, amount=r.amount)
                for r in ledger.get_all()
            ],
            capitals=[
                CapitalInfo(
                    name=c.name,
                    resource=c.resource_kind.value,
                    health=c.health,
                    production_rate=c.production_rate,
                    production=c.produce(),
                )
                for c in registry.get_all()
            ],
            pending_card=self._pending_card_info(session),
            recent_events=[EventInfo(**e.to_dict()) for e in events],
        )

    def _pending_card_info(self, session: Session) -> CardInfo | None:
        orchestrator = session.orchestrator
        pending = orchestrator.pending
        if pending is None or not orchestrator.has_pending_choice():
            return None

        # Availability is recomputed so the flags match what submit would accept
        choices = [
            ChoiceInfo(
                index=i,
                label=choice.label,
                available=session.card_manager.is_available(choice),
                effects=[describe_effect(e) for e in choice.effects],
                conditions=[describe_condition(c) for c in choice.conditions],
            )
            for i, choice in enumerate(pending.card.choices)
        ]
        return CardInfo(
            card_id=pending.card.id,
            title=pending.card.title,
            description=pending.card.description,
            deck=pending.deck,
            choices=choices,
        )
