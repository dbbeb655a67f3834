# dealscout/fetch/strategy.py

"""Pick the static or the rendered fetch path for a platform."""

import logging

from dealscout.browser.manager import BrowserManager
from dealscout.browser.provider import BrowserProvider, create_browser_provider
from dealscout.fetch.static_fetcher import StaticFetcher
from dealscout.scrapers.registry import PlatformConfig

logger = logging.getLogger("dealscout.fetch")


class FetchStrategy:
    """Route each fetch by the platform's static ``requires_js`` flag.

    Script-dependent platforms are rendered by the injected
    :class:`BrowserProvider`; every other platform goes through the
    :class:`StaticFetcher`. The browser provider is only created when
    a rendered fetch is first needed; with ``signal_handlers`` set, a
    shared :class:`BrowserManager` also installs its SIGINT/SIGTERM
    cleanup at that point.
    """

    def __init__(
        self,
        static: StaticFetcher | None = None,
        browser: BrowserProvider | None = None,
        browser_mode: str | None = None,
        signal_handlers: bool = False,
    ) -> None:
        self.static = static or StaticFetcher()
        self._browser = browser
        self._browser_mode = browser_mode
        self._signal_handlers = signal_handlers

    @property
    def browser(self) -> BrowserProvider:
        """The browser provider, created on first use."""
        if self._browser is None:
            provider = create_browser_provider(self._browser_mode)
            if self._signal_handlers and isinstance(provider, BrowserManager):
                provider.install_signal_handlers()
            self._browser = provider
        return self._browser

    async def fetch(self, config: PlatformConfig, url: str) -> str:
        """Return raw page markup for *url* using the platform's path."""
        if config.requires_js:
            logger.info("[%s] Rendering with headless browser", config.name)
            return await self.browser.render(
                url,
                wait_selector=config.primary_selector,
                platform=config.name,
            )
        logger.info("[%s] Fetching static HTML", config.name)
        return await self.static.fetch(url, referer=config.origin + "/")

    async def close(self) -> None:
        """Release the HTTP session and the browser, if one was created."""
        await self.static.close()
        if self._browser is not None:
            await self._browser.shutdown()
