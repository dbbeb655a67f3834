# dealscout/browser/manager.py

"""Shared headless-browser lifecycle for rendered fetches."""

import asyncio
import logging
import os
import signal
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from playwright.async_api import (
    Browser,
    Page,
    Playwright,
    async_playwright,
)
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from dealscout.browser.interception import block_heavy_resources
from dealscout.config.settings import Settings
from dealscout.errors import RenderError

logger = logging.getLogger("dealscout.browser")


class BrowserManager:
    """Owns one lazily launched Chromium reused by every rendered fetch.

    Only this class launches or closes the browser. Each fetch gets
    its own context and page via :meth:`page`, which always closes
    them again, whatever happens inside the ``async with`` block.
    """

    def __init__(
        self,
        headless: bool = True,
        navigation_timeout: float | None = None,
        selector_timeout: float | None = None,
        settle_delay: float | None = None,
    ) -> None:
        self.settings = Settings()
        self.headless = headless
        self.navigation_timeout = (
            navigation_timeout or self.settings.NAVIGATION_TIMEOUT
        )
        self.selector_timeout = (
            selector_timeout or self.settings.SELECTOR_TIMEOUT
        )
        self.settle_delay = (
            settle_delay
            if settle_delay is not None
            else self.settings.SETTLE_DELAY
        )
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        """True while a launched browser is still connected."""
        return self._live_browser() is not None

    def _on_disconnected(self, browser: Browser) -> None:
        if browser is self._browser:
            logger.warning("Headless browser disconnected, will relaunch")
            self._browser = None

    async def _discard_browser(self) -> None:
        """Drop a dead browser and its Playwright driver before relaunch."""
        browser, self._browser = self._browser, None
        pw, self._playwright = self._playwright, None
        if browser is not None:
            try:
                await browser.close()
            except PlaywrightError as exc:
                logger.debug("Closing dead browser failed: %s", exc)
        if pw is not None:
            try:
                await pw.stop()
            except PlaywrightError as exc:
                logger.debug("Stopping Playwright failed: %s", exc)

    def _live_browser(self) -> Browser | None:
        browser = self._browser
        if browser is not None and browser.is_connected():
            return browser
        return None

    async def _ensure_browser(self) -> Browser:
        live = self._live_browser()
        if live is not None:
            return live

        async with self._lock:
            live = self._live_browser()
            if live is not None:
                return live

            if self._browser is not None or self._playwright is not None:
                await self._discard_browser()

            try:
                self._playwright = await async_playwright().start()
                browser = await self._playwright.chromium.launch(
                    headless=self.headless,
                    args=list(self.settings.BROWSER_ARGS),
                )
            except PlaywrightError as exc:
                await self._discard_browser()
                raise RenderError(f"Browser launch failed: {exc}") from exc
            browser.on("disconnected", self._on_disconnected)
            self._browser = browser
            logger.info("Headless browser launched")
            return browser

    @asynccontextmanager
    async def page(self) -> AsyncIterator[Page]:
        """Open a fresh intercepted page, closing it on every exit path."""
        browser = await self._ensure_browser()
        try:
            context = await browser.new_context(
                user_agent=self.settings.USER_AGENT,
                viewport={"width": 1366, "height": 900},
            )
        except PlaywrightError as exc:
            if not browser.is_connected():
                self._on_disconnected(browser)
            raise RenderError(
                f"Could not open browser context: {exc}"
            ) from exc

        page: Page | None = None
        try:
            try:
                await context.route("**/*", block_heavy_resources)
                page = await context.new_page()
            except PlaywrightError as exc:
                raise RenderError(f"Could not open page: {exc}") from exc
            page.set_default_navigation_timeout(
                self.navigation_timeout * 1000
            )
            page.set_default_timeout(self.selector_timeout * 1000)
            yield page
        finally:
            if page is not None:
                try:
                    await page.close()
                except PlaywrightError as exc:
                    logger.debug("Page close failed: %s", exc)
            try:
                await context.close()
            except PlaywrightError as exc:
                logger.debug("Context close failed: %s", exc)

    async def render(
        self,
        url: str,
        wait_selector: str | None = None,
        platform: str = "",
    ) -> str:
        """Navigate to *url* and return the rendered document markup.

        A failed navigation raises :class:`RenderError`. Waiting for
        network idle and for *wait_selector* is best effort; the markup
        available at that point is returned either way.
        """
        async with self.page() as page:
            try:
                await page.goto(
                    url,
                    wait_until="domcontentloaded",
                    timeout=self.navigation_timeout * 1000,
                )
            except PlaywrightError as exc:
                raise RenderError(
                    f"Navigation to {url} failed: {exc}"
                ) from exc

            try:
                await page.wait_for_load_state(
                    "networkidle", timeout=self.selector_timeout * 1000
                )
            except PlaywrightTimeoutError:
                logger.debug("[%s] Network never went idle", platform)

            if wait_selector:
                try:
                    await page.wait_for_selector(
                        wait_selector,
                        timeout=self.selector_timeout * 1000,
                    )
                except PlaywrightTimeoutError:
                    logger.warning(
                        "[%s] Selector not found, using page content anyway",
                        platform,
                    )

            if self.settle_delay:
                await asyncio.sleep(self.settle_delay)

            try:
                return await page.content()
            except PlaywrightError as exc:
                raise RenderError(
                    f"Could not read rendered markup for {url}: {exc}"
                ) from exc

    async def shutdown(self) -> None:
        """Close the shared browser and stop Playwright (idempotent)."""
        browser, self._browser = self._browser, None
        pw, self._playwright = self._playwright, None
        if browser is not None:
            try:
                await browser.close()
                logger.info("Headless browser closed")
            except PlaywrightError as exc:
                logger.error("Error closing browser: %s", exc, exc_info=True)
        if pw is not None:
            await pw.stop()

    async def _shutdown_and_exit(self, signum: int) -> None:
        logger.warning(
            "Received %s, closing browser", signal.Signals(signum).name
        )
        try:
            await asyncio.wait_for(
                self.shutdown(),
                timeout=self.settings.SHUTDOWN_GRACE_PERIOD,
            )
        except Exception as exc:
            logger.error("Forced exit, browser cleanup did not finish: %s", exc)
            logging.shutdown()
            os._exit(1)
        logging.shutdown()
        os._exit(128 + signum)

    def install_signal_handlers(
        self, loop: asyncio.AbstractEventLoop | None = None
    ) -> None:
        """Close the browser on SIGINT/SIGTERM before the process exits."""
        loop = loop or asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(
                    sig,
                    lambda s=sig: loop.create_task(
                        self._shutdown_and_exit(s)
                    ),
                )
            except NotImplementedError:
                # Windows event loops do not support signal handlers
                logger.debug("Signal handlers unavailable on this platform")
                return
