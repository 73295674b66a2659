"""Main CLI application entry point."""

import asyncio
import dataclasses
import logging

import typer
from playwright.async_api import Error as PlaywrightError
from rich.console import Console
from rich.markup import escape

from browser_sessions import __version__
from browser_sessions.core.registry import SessionRegistry
from browser_sessions.utils.config import BROWSER_TYPES, ConfigLoader, SessionConfig
from browser_sessions.utils.exceptions import BrowserSessionError, ConfigurationError

console = Console()

app = typer.Typer(
    name="browser-sessions",
    help="Shared Playwright browser with per-worker contexts for e2e tests.",
    no_args_is_help=True,
)

CLI_WORKER_ID = "cli"


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"browser-sessions v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help="Show debug logging from the session manager",
    ),
) -> None:
    """browser-sessions - check and inspect the e2e browser setup."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


async def _run_check(config: SessionConfig, url: str | None) -> tuple[str, str]:
    """Launch the browser, open one page and tear everything down.

    Returns:
        The browser version and the page title.
    """
    async with SessionRegistry(config=config) as registry:
        browser = await registry.get_browser()
        page = await registry.create_page(CLI_WORKER_ID)
        try:
            if url:
                await page.goto(url)
            title = await page.title()
        finally:
            await registry.close_context(CLI_WORKER_ID)
        return browser.version, title


@app.command()
def check(
    url: str | None = typer.Option(
        None,
        "--url",
        "-u",
        help="Navigate to this URL (relative URLs use the configured base URL)",
    ),
    browser_type: str | None = typer.Option(
        None,
        "--browser",
        "-b",
        help=f"Browser to launch: {', '.join(BROWSER_TYPES)}",
    ),
    headed: bool = typer.Option(
        False,
        "--headed",
        help="Show the browser window",
    ),
) -> None:
    """Verify the configured browser can be launched and a page opened."""
    try:
        config = ConfigLoader.load()
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(code=4)

    if browser_type:
        if browser_type not in BROWSER_TYPES:
            console.print(f"[red]Error:[/red] Unknown browser '{browser_type}'")
            raise typer.Exit(code=4)
        config.browser_type = browser_type
    if headed:
        config.headless = False

    try:
        version, title = asyncio.run(_run_check(config, url))
    except (BrowserSessionError, PlaywrightError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]OK[/green] {config.browser_type} {version}")
    if url:
        console.print(f"Page title: {title}")


@app.command("config")
def show_config() -> None:
    """Show the effective configuration."""
    try:
        config = ConfigLoader.load()
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(code=4)

    for name, value in dataclasses.asdict(config).items():
        console.print(f"{name} = {value}")


if __name__ == "__main__":
    app()
