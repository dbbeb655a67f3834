# dealscout/errors.py

"""Exception types raised inside the scraping pipeline.

None of these cross the Platform Scraper boundary: it converts them
into an error annotation on an empty :class:`PlatformResult`.
"""


class ScraperError(Exception):
    """Base class for every scraping failure."""


class FetchError(ScraperError):
    """A static HTTP fetch failed after exhausting its retry budget."""


class BlockedPageError(FetchError):
    """The response was a bot-challenge or CAPTCHA page."""


class RenderError(ScraperError):
    """A headless-browser render failed (navigation, crash, worker)."""


class UnsupportedPlatformError(ScraperError):
    """The requested platform has no registry entry."""

    def __init__(self, platform: str) -> None:
        super().__init__(f"Platform {platform} not supported")
        self.platform = platform
