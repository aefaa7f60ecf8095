"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Dict, List, Optional, Protocol

from sessionkeeper.modules.ids import DEFAULT_TOKEN_BYTES, MIN_TOKEN_BYTES

SAME_SITE_VALUES = ("lax", "strict", "none")


@dataclass
class SessionConfig:
    """Session registry configuration."""
    lifespan: timedelta = timedelta(hours=2)
    sweep_interval: timedelta = timedelta(minutes=10)
    token_bytes: int = DEFAULT_TOKEN_BYTES

    def __post_init__(self) -> None:
        if self.lifespan <= timedelta(0):
            raise ValueError(f"Session lifespan must be positive, got {self.lifespan}")
        if self.sweep_interval <= timedelta(0):
            raise ValueError(f"Sweep interval must be positive, got {self.sweep_interval}")
        if self.token_bytes < MIN_TOKEN_BYTES:
            raise ValueError(
                f"Token byte length must be at least {MIN_TOKEN_BYTES}, got {self.token_bytes}"
            )


@dataclass
class CookieConfig:
    """Correlation cookie configuration."""
    name: str = "sessionid"
    path: str = "/"
    http_only: bool = True
    secure: bool = False
    same_site: Optional[str] = "lax"

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Cookie name must not be empty")
        if self.same_site is not None and self.same_site not in SAME_SITE_VALUES:
            raise ValueError(
                f"Cookie SameSite must be one of {', '.join(SAME_SITE_VALUES)}, got {self.same_site!r}"
            )


@dataclass
class APIConfig:
    """API configuration."""
    port: int = 8080
    host: str = "0.0.0.0"
    debug: bool = False
    log_level: str = "INFO"
    skip_paths: Dict[str, List[str]] = field(
        default_factory=lambda: {"/health": ["GET"], "/metrics": ["GET"]}
    )
    end_paths: Dict[str, List[str]] = field(
        default_factory=lambda: {"/session": ["DELETE"]}
    )


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_session_config(self) -> SessionConfig:
        """Get session registry configuration."""
        ...

    def get_cookie_config(self) -> CookieConfig:
        """Get cookie configuration."""
        ...

    def get_api_config(self) -> APIConfig:
        """Get API configuration."""
        ...


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


def _env_seconds(name: str, default: str) -> timedelta:
    raw = os.getenv(name, default)
    try:
        return timedelta(seconds=float(raw))
    except ValueError:
        raise ValueError(f"{name} must be a number of seconds, got {raw!r}") from None


def _env_int(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def get_session_config(self) -> SessionConfig:
        """Get session registry configuration from environment variables."""
        return SessionConfig(
            lifespan=_env_seconds("SESSION_LIFESPAN_SECONDS", "7200"),
            sweep_interval=_env_seconds("SESSION_SWEEP_INTERVAL_SECONDS", "600"),
            token_bytes=_env_int("SESSION_TOKEN_BYTES", str(DEFAULT_TOKEN_BYTES)),
        )

    def get_cookie_config(self) -> CookieConfig:
        """Get cookie configuration from environment variables."""
        same_site = os.getenv("SESSION_COOKIE_SAMESITE", "lax").lower() or None
        return CookieConfig(
            name=os.getenv("SESSION_COOKIE_NAME", "sessionid"),
            path=os.getenv("SESSION_COOKIE_PATH", "/"),
            http_only=_env_bool("SESSION_COOKIE_HTTPONLY", "true"),
            secure=_env_bool("SESSION_COOKIE_SECURE", "false"),
            same_site=same_site,
        )

    def get_api_config(self) -> APIConfig:
        """Get API configuration from environment variables."""
        return APIConfig(
            port=_env_int("API_PORT", "8080"),
            host=os.getenv("API_HOST", "0.0.0.0"),
            debug=_env_bool("API_DEBUG", "false"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


class StaticConfigProvider:
    """Provider returning fixed configuration objects (tests, embedding)."""

    def __init__(
        self,
        session: Optional[SessionConfig] = None,
        cookie: Optional[CookieConfig] = None,
        api: Optional[APIConfig] = None,
    ):
        self.session = session or SessionConfig()
        self.cookie = cookie or CookieConfig()
        self.api = api or APIConfig()

    def get_session_config(self) -> SessionConfig:
        return self.session

    def get_cookie_config(self) -> CookieConfig:
        return self.cookie

    def get_api_config(self) -> APIConfig:
        return self.api
