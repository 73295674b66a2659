"""Shared Playwright connection and browser for a test run.

One EngineConnection owns one Playwright instance and one launched browser.
Both are created lazily on the first ``initialize()`` and released together by
``close()``. Concurrent ``initialize()`` calls from different workers share an
``asyncio.Lock`` so the run never ends up with two browsers.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from playwright.async_api import (
    Browser,
    BrowserContext,
    Playwright,
    async_playwright,
)

from browser_sessions.utils.config import SessionConfig
from browser_sessions.utils.exceptions import InitializationError

logger = logging.getLogger(__name__)


class EngineConnection:
    """Lazily created, reusable Playwright connection and browser.

    Attributes:
        config: Launch and context configuration.

    Example:
        >>> engine = EngineConnection(SessionConfig(headless=True))
        >>> await engine.initialize()
        >>> browser = await engine.get_browser()
        >>> await engine.close()
    """

    def __init__(self, config: SessionConfig | None = None) -> None:
        """Initialize the connection without starting anything.

        Args:
            config: Launch configuration. Defaults to ``SessionConfig()``.
        """
        self.config = config or SessionConfig()
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._lock = asyncio.Lock()

    @property
    def is_initialized(self) -> bool:
        """Check if both the Playwright connection and the browser are live."""
        return (
            self._playwright is not None
            and self._browser is not None
            and self._browser.is_connected()
        )

    async def initialize(self) -> None:
        """Start Playwright and launch the browser if they are not running.

        Safe to call any number of times, including concurrently.

        Raises:
            InitializationError: If Playwright cannot start or the browser
                cannot be launched.
        """
        if self.is_initialized:
            return

        async with self._lock:
            if self._playwright is None:
                try:
                    self._playwright = await async_playwright().start()
                except Exception as e:
                    raise InitializationError(self.config.browser_type, str(e)) from e
                logger.info("Playwright started")

            if self._browser is not None and not self._browser.is_connected():
                logger.warning("Browser disconnected, launching a new one")
                self._browser = None

            if self._browser is None:
                try:
                    launcher = getattr(self._playwright, self.config.browser_type)
                    self._browser = await launcher.launch(
                        **self.config.launch_options()
                    )
                except Exception as e:
                    await self._stop_playwright()
                    raise InitializationError(self.config.browser_type, str(e)) from e
                logger.info(
                    f"Launched {self.config.browser_type} "
                    f"(headless={self.config.headless})"
                )

    async def get_browser(self) -> Browser:
        """Get the shared browser, initializing the connection if needed.

        Returns:
            The launched Playwright browser.

        Raises:
            InitializationError: If lazy initialization fails.
        """
        if not self.is_initialized:
            await self.initialize()
        assert self._browser is not None
        return self._browser

    async def new_context(self, **options: Any) -> BrowserContext:
        """Create an out-of-band context on the shared browser.

        The caller owns the returned context and must close it.

        Args:
            **options: ``Browser.new_context`` keyword arguments, merged over
                the configured context defaults.

        Returns:
            A new isolated browser context.
        """
        browser = await self.get_browser()
        context_options = {**self.config.context_options(), **options}
        logger.debug(f"Creating browser context with {context_options}")
        return await browser.new_context(**context_options)

    @asynccontextmanager
    async def managed_context(self, **options: Any) -> AsyncIterator[BrowserContext]:
        """Yield an out-of-band context that is closed on exit."""
        context = await self.new_context(**options)
        try:
            yield context
        finally:
            await context.close()

    async def close(self) -> None:
        """Close the browser and stop Playwright.

        Safe to call when nothing is open. Errors reported by the engine while
        closing are logged and the references are cleared anyway, so a later
        ``initialize()`` starts from scratch.
        """
        async with self._lock:
            if self._browser is not None:
                try:
                    await self._browser.close()
                except Exception as e:
                    logger.warning(f"Error closing browser: {e}")
                self._browser = None
                logger.info("Browser closed")

            await self._stop_playwright()

    async def _stop_playwright(self) -> None:
        """Stop Playwright if it is running. Caller holds the lock."""
        if self._playwright is None:
            return
        try:
            await self._playwright.stop()
        except Exception as e:
            logger.warning(f"Error stopping Playwright: {e}")
        self._playwright = None
        logger.info("Playwright stopped")

    async def __aenter__(self) -> EngineConnection:
        """Async context manager entry."""
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
