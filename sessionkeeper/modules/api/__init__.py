"""
API Module - Black Box Interface

Purpose: HTTP request and response models
Interface: Pydantic models used by the FastAPI routes
Hidden: Serialization details

The API module only orchestrates - it contains no session logic.
All logic is delegated to the session module.
"""

from .models import (
    HealthResponse,
    SessionDataUpdate,
    SessionResponse,
    SessionStatus,
    SweeperStatus,
)

__all__ = [
    "HealthResponse",
    "SessionDataUpdate",
    "SessionResponse",
    "SessionStatus",
    "SweeperStatus",
]
