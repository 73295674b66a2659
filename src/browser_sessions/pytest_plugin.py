"""pytest fixtures that drive the session registry for e2e tests.

The run-scoped ``session_registry`` initializes the shared browser once and
closes it after the last test. The test-scoped ``page`` and ``browser_context``
fixtures open a fresh context for the current worker and close it in teardown,
even when the test fails.

Tests marked ``e2e`` are skipped unless pytest runs with ``--run-e2e``.
Async e2e tests must share the session event loop, e.g.
``pytestmark = pytest.mark.asyncio(loop_scope="session")``.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from playwright.async_api import Browser, BrowserContext, Page

from browser_sessions.core.registry import SessionRegistry, worker_id_from_env
from browser_sessions.utils.config import ConfigLoader, SessionConfig


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("browser-sessions")
    group.addoption(
        "--run-e2e",
        action="store_true",
        default=False,
        help="Run tests marked e2e against a real browser",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers", "e2e: end-to-end test that launches a real browser"
    )


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    if config.getoption("--run-e2e"):
        return
    skip_e2e = pytest.mark.skip(reason="e2e tests need --run-e2e")
    for item in items:
        if "e2e" in item.keywords:
            item.add_marker(skip_e2e)


@pytest.fixture(scope="session")
def session_config() -> SessionConfig:
    """Configuration loaded from the environment for the whole run."""
    return ConfigLoader.load()


@pytest.fixture(scope="session")
def browser_worker_id() -> str:
    """Identity of this test process, used to key its browser session."""
    return worker_id_from_env()


@pytest_asyncio.fixture(scope="session", loop_scope="session")
async def session_registry(
    session_config: SessionConfig,
) -> AsyncIterator[SessionRegistry]:
    """Registry with the shared browser launched for the run."""
    registry = SessionRegistry(config=session_config)
    await registry.initialize()
    yield registry
    await registry.close()


@pytest_asyncio.fixture(loop_scope="session")
async def browser(session_registry: SessionRegistry) -> Browser:
    """The shared browser, for tests that open their own contexts."""
    return await session_registry.get_browser()


@pytest_asyncio.fixture(loop_scope="session")
async def page(
    session_registry: SessionRegistry, browser_worker_id: str
) -> AsyncIterator[Page]:
    """A fresh page in a fresh context, closed after the test."""
    new_page = await session_registry.create_page(browser_worker_id)
    try:
        yield new_page
    finally:
        await session_registry.close_context(browser_worker_id)


@pytest.fixture
def browser_context(
    page: Page, session_registry: SessionRegistry, browser_worker_id: str
) -> BrowserContext:
    """The context that owns the ``page`` fixture."""
    context = session_registry.get_browser_context(browser_worker_id)
    assert context is not None
    return context
