"""Shared pytest fixtures for browser-sessions tests.

Unit tests never launch a real browser: ``patched_playwright`` replaces
``async_playwright`` in the engine module with mocks that hand out a fresh
context and page on every call, so identity checks between workers are
meaningful.
"""

from collections.abc import Iterator
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from browser_sessions.core.engine import EngineConnection
from browser_sessions.core.registry import SessionRegistry
from browser_sessions.utils.config import SessionConfig


def make_page() -> MagicMock:
    """Mock Playwright page with the async methods the tests touch."""
    page = MagicMock(name="page")
    page.goto = AsyncMock()
    page.title = AsyncMock(return_value="Swag Labs")
    page.close = AsyncMock()
    return page


def make_context() -> MagicMock:
    """Mock Playwright context that creates a new mock page per call."""
    context = MagicMock(name="context")
    context.new_page = AsyncMock(side_effect=lambda: make_page())
    context.close = AsyncMock()
    context.tracing.start = AsyncMock()
    context.tracing.stop = AsyncMock()
    return context


@pytest.fixture
def mock_browser() -> MagicMock:
    """Mock Playwright browser that creates a new mock context per call."""
    browser = MagicMock(name="browser")
    browser.new_context = AsyncMock(side_effect=lambda **kwargs: make_context())
    browser.is_connected = MagicMock(return_value=True)
    browser.close = AsyncMock()
    browser.version = "131.0.6778.33"
    return browser


@pytest.fixture
def mock_playwright(mock_browser: MagicMock) -> MagicMock:
    """Mock Playwright instance whose browser types launch ``mock_browser``."""
    pw = MagicMock(name="playwright")
    for browser_type in ("chromium", "firefox", "webkit"):
        getattr(pw, browser_type).launch = AsyncMock(return_value=mock_browser)
    pw.stop = AsyncMock()
    return pw


@pytest.fixture
def patched_playwright(mock_playwright: MagicMock) -> Iterator[MagicMock]:
    """Patch ``async_playwright`` so ``start()`` returns ``mock_playwright``.

    Yields:
        The patched ``async_playwright`` factory, for counting starts.
    """
    with patch("browser_sessions.core.engine.async_playwright") as mock_async_pw:
        mock_async_pw.return_value.start = AsyncMock(return_value=mock_playwright)
        yield mock_async_pw


@pytest.fixture
def sample_config() -> SessionConfig:
    """Headless chromium configuration without tracing or stealth."""
    return SessionConfig(
        browser_type="chromium",
        headless=True,
        base_url="http://localhost:8000",
        viewport=(800, 600),
    )


@pytest.fixture
def engine(sample_config: SessionConfig) -> EngineConnection:
    """Engine connection that has not been initialized yet."""
    return EngineConnection(sample_config)


@pytest.fixture
def registry(engine: EngineConnection) -> SessionRegistry:
    """Session registry over the uninitialized ``engine``."""
    return SessionRegistry(engine)


@pytest.fixture
def trace_dir(tmp_path: Path) -> Path:
    """Directory for trace archives (not created up front)."""
    return tmp_path / "traces"
