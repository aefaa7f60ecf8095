"""
Session Module - Black Box Interface

Purpose: Manage client session lifecycle
Interface: start_session(), end_session(), peek_session(), cleanup_expired()
Hidden: Session storage, locking, expiry bookkeeping

SessionSweeper runs cleanup_expired() periodically in the background.
"""

from .session import DEFAULT_LIFESPAN, Session, SessionRegistry, SessionStart, utc_now
from .sweeper import DEFAULT_SWEEP_INTERVAL, SessionSweeper

__all__ = [
    "Session",
    "SessionRegistry",
    "SessionStart",
    "SessionSweeper",
    "DEFAULT_LIFESPAN",
    "DEFAULT_SWEEP_INTERVAL",
    "utc_now",
]
