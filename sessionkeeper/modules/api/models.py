"""
Sessionkeeper shared data models.

These models define the structure of data returned by the HTTP surface.
The correlation token itself never appears in a response body; it only
travels in the cookie.
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, Field, field_validator

from sessionkeeper.modules.session import Session

MAX_DATA_KEYS = 100


class SessionStatus(str, Enum):
    """How the request's session was resolved."""

    NEW = "new"
    RESUMED = "resumed"


class SweeperStatus(str, Enum):
    """State of the background sweep task."""

    RUNNING = "running"
    STOPPED = "stopped"


# Request Models (API Input)


class SessionDataUpdate(BaseModel):
    """Request to change the application payload of the current session."""

    data: Dict[str, Any] = Field(..., description="Keys to store on the session")
    replace: bool = Field(
        default=False, description="Replace the whole payload instead of merging"
    )

    @field_validator("data")
    @classmethod
    def validate_data(cls, v):
        """Bound the number of keys a client can store."""
        if len(v) > MAX_DATA_KEYS:
            raise ValueError(f"At most {MAX_DATA_KEYS} keys allowed, got {len(v)}")
        return v


# Response Models (API Output)


class SessionResponse(BaseModel):
    """Current session state."""

    status: SessionStatus
    is_new: bool
    created_at: datetime
    last_accessed: datetime
    expires_at: datetime
    data: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_session(
        cls, session: Session, is_new: bool, lifespan: timedelta
    ) -> "SessionResponse":
        return cls(
            status=SessionStatus.NEW if is_new else SessionStatus.RESUMED,
            is_new=is_new,
            created_at=session.created_at,
            last_accessed=session.last_accessed,
            expires_at=session.expires_at(lifespan),
            data=dict(session.data),
        )


class HealthResponse(BaseModel):
    """Service health."""

    status: str = "healthy"
    active_sessions: int
    sweeper: SweeperStatus
