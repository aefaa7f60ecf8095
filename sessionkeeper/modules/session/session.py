import logging
import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any, Callable, Dict, NamedTuple, Optional

from sessionkeeper.modules.ids import DEFAULT_TOKEN_BYTES, MIN_TOKEN_BYTES, IdGenerationError, new_id

logger = logging.getLogger(__name__)

DEFAULT_LIFESPAN = timedelta(hours=2)


def utc_now() -> datetime:
    """Default registry clock."""
    return datetime.now(UTC)


def _short(token: Optional[str]) -> str:
    """Loggable token prefix."""
    return f"{token[:8]}..." if token else "<none>"


@dataclass
class Session:
    """Server-side state for one client."""

    session_id: str
    created_at: datetime
    last_accessed: datetime
    data: Dict[str, Any] = field(default_factory=dict)

    def touch(self, now: datetime) -> None:
        self.last_accessed = now

    def expires_at(self, lifespan: timedelta) -> datetime:
        return self.last_accessed + lifespan

    def is_expired(self, now: datetime, lifespan: timedelta) -> bool:
        return now > self.last_accessed + lifespan


class SessionStart(NamedTuple):
    """Result of SessionRegistry.start_session."""

    session: Session
    token: Optional[str]  # token to send back to the client, None if unchanged
    is_new: bool


class SessionRegistry:
    """
    Concurrency-safe registry of live sessions.

    A single lock guards the id -> Session mapping. Every read and write
    goes through it; identifier generation happens outside of it.

    Usage:
        registry = SessionRegistry(lifespan=timedelta(minutes=30))

        result = registry.start_session(cookie_value)
        if result.token:
            set_cookie(result.token)

        registry.end_session(cookie_value)
    """

    def __init__(
        self,
        lifespan: timedelta = DEFAULT_LIFESPAN,
        token_bytes: int = DEFAULT_TOKEN_BYTES,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize session registry.

        Args:
            lifespan: Inactivity period after which a session is expired
            token_bytes: Random bytes per session identifier
            clock: Returns the current timezone-aware time
        """
        if lifespan <= timedelta(0):
            raise ValueError(f"lifespan must be positive, got {lifespan}")
        if token_bytes < MIN_TOKEN_BYTES:
            raise ValueError(f"token_bytes must be at least {MIN_TOKEN_BYTES}, got {token_bytes}")

        self._lifespan = lifespan
        self._token_bytes = token_bytes
        self._clock = clock
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()

    @property
    def lifespan(self) -> timedelta:
        return self._lifespan

    @property
    def token_bytes(self) -> int:
        return self._token_bytes

    @property
    def active_count(self) -> int:
        """Number of sessions currently held (for metrics)."""
        with self._lock:
            return len(self._sessions)

    def __len__(self) -> int:
        return self.active_count

    def start_session(self, token: Optional[str] = None) -> SessionStart:
        """
        Resolve the client's token to a session, creating one if needed.

        Args:
            token: Correlation token presented by the client, if any

        Returns:
            SessionStart. For a token still held by the registry the
            session is refreshed and token is None. Any other token
            (empty, unknown, swept) produces a fresh session and token.

        Raises:
            IdGenerationError: If a new identifier cannot be generated
        """
        if token:
            with self._lock:
                session = self._sessions.get(token)
                # Only cleanup_expired() evicts; a held entry is still live
                if session is not None:
                    session.touch(self._clock())
                    return SessionStart(session=session, token=None, is_new=False)

        return self._create_session()

    def end_session(self, token: Optional[str]) -> None:
        """
        End a session early.

        Unknown or empty tokens are ignored.
        """
        if not token:
            return

        with self._lock:
            removed = self._sessions.pop(token, None)

        if removed is not None:
            logger.debug(f"Ended session {_short(token)}")

    def peek_session(self, token: Optional[str]) -> Optional[Session]:
        """Look up a live session without refreshing it."""
        if not token:
            return None

        with self._lock:
            session = self._sessions.get(token)
            if session is None or session.is_expired(self._clock(), self._lifespan):
                return None
            return session

    def cleanup_expired(self) -> int:
        """
        Remove every session whose inactivity deadline has passed.

        Should be called periodically (see SessionSweeper).

        Returns:
            Number of sessions removed
        """
        with self._lock:
            now = self._clock()
            expired = [
                session_id
                for session_id, session in self._sessions.items()
                if session.is_expired(now, self._lifespan)
            ]
            for session_id in expired:
                del self._sessions[session_id]
            remaining = len(self._sessions)

        if expired:
            logger.info(f"Swept {len(expired)} expired sessions ({remaining} active)")
        else:
            logger.debug(f"Sweep found no expired sessions ({remaining} active)")

        return len(expired)

    def _create_session(self) -> SessionStart:
        while True:
            try:
                session_id = new_id(self._token_bytes)
            except IdGenerationError:
                logger.critical("Cannot generate session identifiers, refusing to issue sessions")
                raise

            with self._lock:
                if session_id in self._sessions:
                    continue
                now = self._clock()
                session = Session(session_id=session_id, created_at=now, last_accessed=now)
                self._sessions[session_id] = session

            logger.debug(f"Created session {_short(session_id)}")
            return SessionStart(session=session, token=session_id, is_new=True)
