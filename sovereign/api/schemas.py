"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between the front end and the engine.
All responses include explicit types for OpenAPI schema generation.

Error Codes:
- SESSION_NOT_FOUND: Session does not exist or has ended
- NO_PENDING_CARD: A choice was submitted while no card is waiting
- CHOICE_LOCKED: The choice's conditions no longer hold
- INVALID_CHOICE: The choice index or label is not on the pending card
- VALIDATION_ERROR: Request or card definitions are invalid
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class SessionStatus(str, Enum):
    """Session status values."""
    CREATED = "created"
    RUNNING = "running"
    PAUSED = "paused"
    WAITING_CHOICE = "waiting_choice"
    STOPPED = "stopped"
    FAILED = "failed"


class PolicyName(str, Enum):
    """Built-in decision makers. EXTERNAL waits for POST /choice."""
    EXTERNAL = "external"
    RANDOM = "random"
    FIRST = "first"
    GREEDY = "greedy"


class ErrorCode(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    NO_PENDING_CARD = "NO_PENDING_CARD"
    CHOICE_LOCKED = "CHOICE_LOCKED"
    INVALID_CHOICE = "INVALID_CHOICE"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class ResourceInfo(BaseModel):
    """A resource counter."""
    kind: str = Field(description="Money, Food or Power")
    amount: int = Field(ge=0)


class CapitalInfo(BaseModel):
    """A capital for display."""
    name: str
    resource: str = Field(description="Resource the capital produces")
    health: float = Field(ge=0.0, le=100.0)
    production_rate: float
    production: int = Field(description="Output at the current health")


class ChoiceInfo(BaseModel):
    """A choice on a card, with its availability."""
    index: int = Field(description="Position on the card, usable with POST /choice")
    label: str
    available: bool = Field(description="False if a condition is not met (disable in UI)")
    effects: list[str] = Field(default_factory=list)
    conditions: list[str] = Field(default_factory=list)


class CardInfo(BaseModel):
    """A drawn card."""
    card_id: str
    title: str
    description: str = ""
    deck: str
    choices: list[ChoiceInfo] = Field(default_factory=list)


class EventInfo(BaseModel):
    """An entry of the session's event history."""
    sequence: int
    kind: str = Field(description="turn_started, turn_ended, card_drawn, choice_applied")
    turn: int
    payload: dict[str, Any] = Field(default_factory=dict)
    timestamp: float


# =============================================================================
# Request Models
# =============================================================================

class CreateSessionRequest(BaseModel):
    """Request to create and start a new game session."""
    tick_interval_ms: int = Field(1000, ge=0, description="Wall-clock wait between turns")
    turns_per_card: int = Field(3, ge=1, description="Turns between card draws")
    initial_resources: Optional[dict[str, int]] = Field(
        None, description="Starting amount per resource kind"
    )
    initial_health: float = Field(100.0, ge=0.0, le=100.0)
    random_seed: Optional[int] = Field(None, description="Seed for reproducible draws")
    max_turns: Optional[int] = Field(None, ge=1, description="Stop after this many turns")
    policy: PolicyName = Field(PolicyName.EXTERNAL, description="Who picks choices")


class SubmitChoiceRequest(BaseModel):
    """Pick a choice on the pending card, by index or by label."""
    index: Optional[int] = Field(None, ge=0, description="Position among the card's choices")
    label: Optional[str] = Field(None, description="Choice label")


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class SessionResponse(BaseModel):
    """Response containing session information."""
    session_id: str
    status: SessionStatus
    turn_number: int = 0
    turns_per_card: int = 3
    tick_interval_ms: int = 1000
    policy: PolicyName = PolicyName.EXTERNAL
    created_at: float = 0.0
    error: Optional[str] = None
    api_version: str = "v1"


class GameStateResponse(BaseModel):
    """Live state for display."""
    session_id: str
    status: SessionStatus
    turn_number: int
    resources: list[ResourceInfo] = Field(default_factory=list)
    capitals: list[CapitalInfo] = Field(default_factory=list)
    pending_card: Optional[CardInfo] = None
    recent_events: list[EventInfo] = Field(default_factory=list)
    api_version: str = "v1"


class PendingCardResponse(BaseModel):
    """The card waiting for a choice, if any."""
    session_id: str
    pending: bool
    card: Optional[CardInfo] = None
    api_version: str = "v1"


class ChoiceResponse(BaseModel):
    """Response after submitting a choice."""
    session_id: str
    success: bool
    card_id: str
    choice_label: str
    state: Optional[GameStateResponse] = None
    api_version: str = "v1"


class DeckInfo(BaseModel):
    """A deck in the catalog."""
    name: str
    card_count: int
    card_ids: list[str] = Field(default_factory=list)


class DecksResponse(BaseModel):
    """Catalog overview."""
    decks: list[DeckInfo] = Field(default_factory=list)
    total_cards: int = 0
    source: str = Field("builtin", description="builtin or the configured cards path")
    warnings: list[str] = Field(default_factory=list)
    api_version: str = "v1"


class SessionListResponse(BaseModel):
    """Response listing active sessions."""
    sessions: list[str]
    count: int


class EndSessionResponse(BaseModel):
    """Response after ending a session."""
    success: bool
    session_id: str
    final_turn: int = 0


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
