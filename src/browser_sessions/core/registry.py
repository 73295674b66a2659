"""Per-worker browser contexts and pages on top of a shared engine.

Each worker (an execution unit running one test at a time) gets its own
BrowserContext and Page. Sessions are keyed by worker id, so one worker can
never read or close another worker's session. Only the shared engine needs a
lock; the per-worker entries are partitioned by their key.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from itertools import count
from pathlib import Path
from typing import Any

from playwright.async_api import Browser, BrowserContext, Page
from playwright_stealth import Stealth

from browser_sessions.core.engine import EngineConnection
from browser_sessions.utils.config import SessionConfig

logger = logging.getLogger(__name__)

DEFAULT_WORKER_ID = "main"


def worker_id_from_env() -> str:
    """Identity of the current pytest-xdist worker, or ``main`` without xdist."""
    return os.environ.get("PYTEST_XDIST_WORKER", DEFAULT_WORKER_ID)


@dataclass
class WorkerSession:
    """The context and page owned by one worker for one test."""

    worker_id: str
    context: BrowserContext
    page: Page
    created_at: datetime = field(default_factory=datetime.now)
    trace_path: Path | None = None


class SessionRegistry:
    """Hands out isolated contexts and pages per worker.

    Attributes:
        engine: The shared Playwright connection and browser.

    Example:
        >>> registry = SessionRegistry(EngineConnection(SessionConfig()))
        >>> await registry.initialize()
        >>> page = await registry.create_page("gw0")
        >>> await registry.close_context("gw0")
        >>> await registry.close()
    """

    def __init__(
        self,
        engine: EngineConnection | None = None,
        config: SessionConfig | None = None,
    ) -> None:
        """Initialize the registry.

        Args:
            engine: Engine connection to share. A new one is built from
                ``config`` when omitted.
            config: Configuration for a new engine. Ignored if ``engine`` is
                given.
        """
        self.engine = engine or EngineConnection(config)
        self._sessions: dict[str, WorkerSession] = {}
        self._trace_counter = count(1)

    @property
    def config(self) -> SessionConfig:
        """Configuration of the underlying engine."""
        return self.engine.config

    @property
    def active_workers(self) -> list[str]:
        """Worker ids that currently have an open session."""
        return sorted(self._sessions)

    async def initialize(self) -> None:
        """Initialize the shared engine. Idempotent."""
        await self.engine.initialize()

    async def get_browser(self) -> Browser:
        """Get the shared browser, initializing the engine if needed."""
        return await self.engine.get_browser()

    async def create_page(self, worker_id: str, **context_options: Any) -> Page:
        """Create a fresh context and page for a worker.

        If the worker still has an open session, it is closed first so the
        previous context does not leak.

        Args:
            worker_id: Identity of the calling worker.
            **context_options: ``Browser.new_context`` overrides for this
                session, e.g. ``viewport`` or ``user_agent``.

        Returns:
            The new page.

        Raises:
            InitializationError: If the engine has to be started and fails.
        """
        if worker_id in self._sessions:
            logger.warning(
                f"Worker {worker_id} already has an open context; closing it "
                "before creating a new page"
            )
            await self.close_context(worker_id)

        context = await self.engine.new_context(**context_options)
        try:
            if self.config.stealth:
                await Stealth().apply_stealth_async(context)
            trace_path = await self._start_tracing(worker_id, context)
            page = await context.new_page()
        except BaseException:
            await context.close()
            raise

        self._sessions[worker_id] = WorkerSession(
            worker_id=worker_id,
            context=context,
            page=page,
            trace_path=trace_path,
        )
        logger.info(f"Opened browser context for worker {worker_id}")
        return page

    def get_session(self, worker_id: str) -> WorkerSession | None:
        """Get the worker's open session, if any."""
        return self._sessions.get(worker_id)

    def get_browser_context(self, worker_id: str) -> BrowserContext | None:
        """Get the worker's current context, or None."""
        session = self._sessions.get(worker_id)
        return session.context if session else None

    def get_page(self, worker_id: str) -> Page | None:
        """Get the worker's current page, or None."""
        session = self._sessions.get(worker_id)
        return session.page if session else None

    async def close_context(self, worker_id: str) -> None:
        """Close the worker's context and page and forget them.

        A no-op when the worker has no open session, so teardown code can call
        it unconditionally. Engine errors are logged, not raised; the session
        is removed either way.

        Args:
            worker_id: Identity of the calling worker.
        """
        session = self._sessions.pop(worker_id, None)
        if session is None:
            return

        try:
            if session.trace_path is not None:
                try:
                    await session.context.tracing.stop(path=session.trace_path)
                    logger.info(f"Saved trace to {session.trace_path}")
                except Exception as e:
                    logger.warning(f"Error saving trace for worker {worker_id}: {e}")
        finally:
            try:
                await session.context.close()
            except Exception as e:
                logger.warning(f"Error closing context for worker {worker_id}: {e}")
            logger.info(f"Closed browser context for worker {worker_id}")

    async def close(self) -> None:
        """Close every open session, then the shared engine. Idempotent."""
        for worker_id in list(self._sessions):
            await self.close_context(worker_id)
        await self.engine.close()

    async def _start_tracing(
        self, worker_id: str, context: BrowserContext
    ) -> Path | None:
        """Start tracing on the context when a trace directory is configured.

        Returns:
            Where the trace will be written on close, or None if tracing is off.
        """
        trace_dir = self.config.trace_dir
        if trace_dir is None:
            return None
        trace_dir.mkdir(parents=True, exist_ok=True)
        await context.tracing.start(screenshots=True, snapshots=True)
        return trace_dir / f"{worker_id}-{next(self._trace_counter)}.zip"

    async def __aenter__(self) -> SessionRegistry:
        """Async context manager entry."""
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
