"""Core module for browser-sessions.

Exports the shared engine connection and the per-worker session registry.
"""

from browser_sessions.core.engine import EngineConnection
from browser_sessions.core.registry import (
    DEFAULT_WORKER_ID,
    SessionRegistry,
    WorkerSession,
    worker_id_from_env,
)

__all__ = [
    "DEFAULT_WORKER_ID",
    "EngineConnection",
    "SessionRegistry",
    "WorkerSession",
    "worker_id_from_env",
]
