"""Configuration objects and providers."""

from .provider import (
    APIConfig,
    ConfigProvider,
    CookieConfig,
    EnvConfigProvider,
    SessionConfig,
    StaticConfigProvider,
)

__all__ = [
    "APIConfig",
    "ConfigProvider",
    "CookieConfig",
    "EnvConfigProvider",
    "SessionConfig",
    "StaticConfigProvider",
]
