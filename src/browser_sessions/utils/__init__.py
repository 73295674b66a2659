"""Utilities module for browser-sessions."""

from .config import BROWSER_TYPES, ConfigLoader, SessionConfig
from .exceptions import (
    BrowserSessionError,
    ConfigurationError,
    InitializationError,
    PermanentError,
)

__all__ = [
    "BROWSER_TYPES",
    "BrowserSessionError",
    "ConfigLoader",
    "ConfigurationError",
    "InitializationError",
    "PermanentError",
    "SessionConfig",
]
