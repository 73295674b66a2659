"""Exception hierarchy for browser-sessions."""


class BrowserSessionError(Exception):
    """Base exception for all browser-sessions errors."""


class PermanentError(BrowserSessionError):
    """Non-retry-able errors that require configuration or environment changes."""


class ConfigurationError(PermanentError):
    """Invalid or missing configuration."""


class InitializationError(PermanentError):
    """Playwright could not be started or the browser could not be launched.

    Raised by the engine connection when the automation engine is unreachable
    or the browser executable is missing. There is no retry at this layer.
    """

    def __init__(self, browser_type: str, reason: str) -> None:
        """Initialize InitializationError.

        Args:
            browser_type: The Playwright browser type that failed to launch.
            reason: Description of the underlying engine failure.
        """
        self.browser_type = browser_type
        super().__init__(f"Failed to launch {browser_type}: {reason}")
