"""browser-sessions - shared Playwright browser with per-worker contexts for e2e tests."""

from browser_sessions.core import EngineConnection, SessionRegistry, WorkerSession
from browser_sessions.utils import ConfigLoader, SessionConfig

__version__ = "0.1.0"

__all__ = [
    "ConfigLoader",
    "EngineConnection",
    "SessionConfig",
    "SessionRegistry",
    "WorkerSession",
    "__version__",
]
