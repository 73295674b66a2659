"""Configuration management for browser-sessions."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from browser_sessions.utils.exceptions import ConfigurationError

BROWSER_TYPES = ("chromium", "firefox", "webkit")

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class SessionConfig:
    """Browser launch and context configuration."""

    browser_type: str = "chromium"
    headless: bool = True
    channel: str | None = None
    slow_mo: int = 0  # ms
    launch_timeout: int = 30000  # ms
    base_url: str | None = "https://www.saucedemo.com"
    viewport: tuple[int, int] | None = (1280, 720)
    locale: str | None = None
    stealth: bool = False
    trace_dir: Path | None = None

    def __post_init__(self) -> None:
        """Reject browser types Playwright does not provide.

        Raises:
            ConfigurationError: If ``browser_type`` is unknown.
        """
        if self.browser_type not in BROWSER_TYPES:
            raise ConfigurationError(
                f"Invalid browser type '{self.browser_type}' "
                f"(expected one of {', '.join(BROWSER_TYPES)})"
            )

    def launch_options(self) -> dict[str, Any]:
        """Build keyword arguments for ``BrowserType.launch``."""
        options: dict[str, Any] = {
            "headless": self.headless,
            "timeout": self.launch_timeout,
        }
        if self.channel:
            options["channel"] = self.channel
        if self.slow_mo:
            options["slow_mo"] = self.slow_mo
        return options

    def context_options(self) -> dict[str, Any]:
        """Build default keyword arguments for ``Browser.new_context``."""
        options: dict[str, Any] = {}
        if self.base_url:
            options["base_url"] = self.base_url
        if self.viewport:
            width, height = self.viewport
            options["viewport"] = {"width": width, "height": height}
        if self.locale:
            options["locale"] = self.locale
        return options

    @property
    def tracing(self) -> bool:
        """Whether each worker context records a Playwright trace."""
        return self.trace_dir is not None


class ConfigLoader:
    """Loads configuration from environment variables."""

    @staticmethod
    def load() -> SessionConfig:
        """Load configuration from environment.

        Raises:
            ConfigurationError: If a configured value is invalid.
        """
        load_dotenv()  # Load .env file if present

        browser_type = os.environ.get("BROWSER_SESSIONS_BROWSER", "chromium").lower()
        if browser_type not in BROWSER_TYPES:
            raise ConfigurationError(
                f"Invalid value for BROWSER_SESSIONS_BROWSER: '{browser_type}' "
                f"(expected one of {', '.join(BROWSER_TYPES)})"
            )

        trace_dir = os.environ.get("BROWSER_SESSIONS_TRACE_DIR")

        return SessionConfig(
            browser_type=browser_type,
            headless=ConfigLoader._get_bool_env("BROWSER_SESSIONS_HEADLESS", True),
            channel=os.environ.get("BROWSER_SESSIONS_CHANNEL") or None,
            slow_mo=ConfigLoader._get_int_env("BROWSER_SESSIONS_SLOW_MO", 0),
            launch_timeout=ConfigLoader._get_int_env(
                "BROWSER_SESSIONS_LAUNCH_TIMEOUT", 30000
            ),
            base_url=os.environ.get(
                "BROWSER_SESSIONS_BASE_URL", "https://www.saucedemo.com"
            )
            or None,
            viewport=ConfigLoader._get_viewport_env(
                "BROWSER_SESSIONS_VIEWPORT", (1280, 720)
            ),
            locale=os.environ.get("BROWSER_SESSIONS_LOCALE") or None,
            stealth=ConfigLoader._get_bool_env("BROWSER_SESSIONS_STEALTH", False),
            trace_dir=Path(trace_dir) if trace_dir else None,
        )

    @staticmethod
    def _get_int_env(name: str, default: int) -> int:
        """Get an integer environment variable.

        Args:
            name: The environment variable name.
            default: The default value if not set.

        Returns:
            The integer value.

        Raises:
            ConfigurationError: If the value is not a valid integer.
        """
        value = os.environ.get(name)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid value for {name}: '{value}' is not a valid integer"
            ) from e

    @staticmethod
    def _get_bool_env(name: str, default: bool) -> bool:
        """Get a boolean environment variable (1/0, true/false, yes/no, on/off)."""
        value = os.environ.get(name)
        if value is None:
            return default
        normalized = value.strip().lower()
        if normalized in _TRUE_VALUES:
            return True
        if normalized in _FALSE_VALUES:
            return False
        raise ConfigurationError(
            f"Invalid value for {name}: '{value}' is not a valid boolean"
        )

    @staticmethod
    def _get_viewport_env(
        name: str, default: tuple[int, int] | None
    ) -> tuple[int, int] | None:
        """Get a ``WIDTHxHEIGHT`` viewport, or None when set to ``none``."""
        value = os.environ.get(name)
        if value is None:
            return default
        if value.strip().lower() == "none":
            return None
        try:
            width, height = (int(part) for part in value.lower().split("x"))
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid value for {name}: '{value}' is not WIDTHxHEIGHT"
            ) from e
        return width, height
