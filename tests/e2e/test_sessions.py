"""End-to-end checks of session isolation on a real browser.

These use ``about:blank`` and cookies set directly on the context, so apart
from the out-of-band context test they need no network access.
"""

import asyncio

import pytest
from playwright.async_api import BrowserContext, expect

from browser_sessions.core.registry import SessionRegistry

pytestmark = [pytest.mark.e2e, pytest.mark.asyncio(loop_scope="session")]

COOKIE_URL = "https://www.saucedemo.com"


async def test_cookies_do_not_leak_between_workers(
    session_registry: SessionRegistry,
) -> None:
    await session_registry.create_page("unit-a")
    context_a = session_registry.get_browser_context("unit-a")
    await context_a.add_cookies(
        [{"name": "session-username", "value": "standard_user", "url": COOKIE_URL}]
    )
    assert await context_a.cookies(COOKIE_URL)
    await session_registry.close_context("unit-a")

    await session_registry.create_page("unit-b")
    try:
        context_b = session_registry.get_browser_context("unit-b")
        assert await context_b.cookies(COOKIE_URL) == []
    finally:
        await session_registry.close_context("unit-b")

    assert session_registry.get_page("unit-a") is None
    assert session_registry.get_page("unit-b") is None


async def test_concurrent_workers_are_isolated(
    session_registry: SessionRegistry,
) -> None:
    workers = ["gw-x", "gw-y"]
    pages = await asyncio.gather(*(session_registry.create_page(w) for w in workers))
    try:
        assert pages[0] is not pages[1]
        context_x = session_registry.get_browser_context("gw-x")
        await context_x.add_cookies(
            [{"name": "only-x", "value": "1", "url": COOKIE_URL}]
        )

        await session_registry.close_context("gw-x")

        assert pages[0].is_closed()
        assert not pages[1].is_closed()
        context_y = session_registry.get_browser_context("gw-y")
        assert await context_y.cookies(COOKIE_URL) == []
    finally:
        for worker in workers:
            await session_registry.close_context(worker)


async def test_page_fixture_context_is_registered(
    page, browser_context: BrowserContext
) -> None:
    assert page in browser_context.pages
    await page.goto("about:blank")
    await expect(page).to_have_url("about:blank")


async def test_out_of_band_context(session_registry: SessionRegistry) -> None:
    async with session_registry.engine.managed_context() as incognito:
        incognito_page = await incognito.new_page()
        await incognito_page.goto("/")
        await expect(incognito_page).to_have_title("Swag Labs")


async def test_device_emulation(session_registry: SessionRegistry) -> None:
    page = await session_registry.create_page(
        "mobile",
        viewport={"width": 375, "height": 667},
        device_scale_factor=2,
        is_mobile=True,
        has_touch=True,
    )
    try:
        assert page.viewport_size == {"width": 375, "height": 667}
        await page.goto("/")
        await expect(page).to_have_title("Swag Labs")
    finally:
        await session_registry.close_context("mobile")
