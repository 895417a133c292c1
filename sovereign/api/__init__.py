"""
API Module - Front end interface.

Exposes running sessions via REST and WebSocket.
The front end:
1. Creates a game session
2. Polls state or listens on the WebSocket
3. Shows the pending card when the turn loop pauses
4. Submits a choice to resume

All state is session-scoped. No persistent user accounts required.
"""

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
    ErrorResponse,
    # Shared
    ResourceInfo,
    CapitalInfo,
    CardInfo,
    ChoiceInfo,
    # Enums
    ErrorCode,
    PolicyName,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "CreateSessionRequest",
    "SubmitChoiceRequest",
    # Responses
    "SessionResponse",
    "GameStateResponse",
    "PendingCardResponse",
    "ChoiceResponse",
    "DecksResponse",
    "ErrorResponse",
    # Shared
    "ResourceInfo",
    "CapitalInfo",
    "CardInfo",
    "ChoiceInfo",
    # Enums
    "ErrorCode",
    "PolicyName",
    # Service
    "APIService",
    "create_app",
]
