# dealscout/browser/provider.py

"""Common interface over the shared and the isolated browser models."""

from typing import Protocol

from dealscout.browser.manager import BrowserManager
from dealscout.browser.worker import IsolatedBrowserWorker
from dealscout.config.settings import Settings


class BrowserProvider(Protocol):
    """Anything that can turn a URL into rendered markup."""

    async def render(
        self,
        url: str,
        wait_selector: str | None = None,
        platform: str = "",
    ) -> str: ...

    async def shutdown(self) -> None: ...


BROWSER_MODES: tuple[str, ...] = ("shared", "isolated")


def resolve_browser_mode(mode: str | None = None) -> str:
    """Normalise *mode*, falling back to ``BROWSER_MODE``.

    Raises :class:`ValueError` for anything but ``shared`` or ``isolated``.
    """
    selected = (mode or Settings.BROWSER_MODE).strip().lower()
    if selected not in BROWSER_MODES:
        raise ValueError(
            f"Unknown browser mode '{selected}' "
            "(expected 'shared' or 'isolated')"
        )
    return selected


def create_browser_provider(mode: str | None = None) -> BrowserProvider:
    """Build the browser model selected by *mode* or ``BROWSER_MODE``."""
    if resolve_browser_mode(mode) == "isolated":
        return IsolatedBrowserWorker()
    return BrowserManager()
