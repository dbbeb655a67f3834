# dealscout/fetch/static_fetcher.py

"""Plain HTTP fetch path for platforms that render server-side."""

import asyncio
import logging

from curl_cffi.requests import AsyncSession

from dealscout.config.settings import Settings
from dealscout.errors import BlockedPageError, FetchError
from dealscout.utils.retry import linear_backoff, retry_async

logger = logging.getLogger("dealscout.fetch.static")


class StaticFetcher:
    """GET search pages with browser-impersonating TLS and retries.

    A failed request is retried up to ``max_retries`` times with linear
    backoff, so ``max_retries + 1`` attempts in total, before giving up
    with :class:`FetchError`.
    """

    # Cloudflare challenge page markers (checked before keyword scan)
    _CF_CHALLENGE_MARKERS: list[str] = [
        "challenges.cloudflare.com",
        "cdn-cgi/challenge-platform",
        "just a moment",
        "cf-turnstile",
        "cf_chl_opt",
    ]

    def __init__(
        self,
        timeout: float | None = None,
        max_retries: int | None = None,
        retry_delay: float | None = None,
    ) -> None:
        self.settings = Settings()
        self.timeout = timeout or self.settings.REQUEST_TIMEOUT
        self.max_retries = (
            max_retries
            if max_retries is not None
            else self.settings.MAX_RETRIES
        )
        self.retry_delay = (
            retry_delay
            if retry_delay is not None
            else self.settings.RETRY_BASE_DELAY
        )
        self._session: AsyncSession | None = None

    def _get_session(self) -> AsyncSession:
        if self._session is None:
            self._session = AsyncSession(
                impersonate=self.settings.IMPERSONATE_BROWSER
            )
        return self._session

    def _build_headers(self, referer: str | None) -> dict[str, str]:
        headers = dict(self.settings.DEFAULT_HEADERS)
        if referer:
            headers["Referer"] = referer
        return headers

    def validate_markup(self, text: str) -> bool:
        """Return False for Cloudflare challenge and CAPTCHA pages."""
        lower = text.lower()
        for marker in self._CF_CHALLENGE_MARKERS:
            if marker in lower:
                logger.warning(
                    "Cloudflare challenge detected (marker: '%s')",
                    marker,
                )
                return False

        # Skip the keyword scan on content-rich pages to avoid
        # false positives from footer links mentioning "captcha"
        has_body_content = "<body" in lower and len(text) > 5000
        if not has_body_content:
            for keyword in self.settings.CAPTCHA_KEYWORDS:
                if keyword in lower:
                    logger.warning(
                        "CAPTCHA keyword '%s' detected", keyword
                    )
                    return False
        return True

    async def _get_once(self, url: str, headers: dict[str, str]) -> str:
        resp = await self._get_session().get(
            url,
            headers=headers,
            timeout=self.timeout,
        )
        if resp.status_code != 200:
            raise FetchError(f"HTTP {resp.status_code} from {url}")
        text: str = resp.text
        if not self.validate_markup(text):
            raise BlockedPageError(f"Challenge page served by {url}")
        return text

    async def fetch(self, url: str, referer: str | None = None) -> str:
        """Return the response body for *url* or raise :class:`FetchError`."""
        headers = self._build_headers(referer)
        attempts = self.max_retries + 1
        try:
            return await retry_async(
                lambda: self._get_once(url, headers),
                max_attempts=attempts,
                backoff=linear_backoff(self.retry_delay),
                label=f"GET {url}",
            )
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.error("Static fetch of %s failed: %s", url, exc)
            raise FetchError(
                f"Static fetch failed after {attempts} attempts: {exc}"
            ) from exc

    async def close(self) -> None:
        """Release the underlying HTTP session."""
        if self._session is not None:
            await self._session.close()
            self._session = None
