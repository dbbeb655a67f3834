# dealscout/scrapers/platform_scraper.py

"""Scrape one platform for one query: cache, fetch, extract, cache."""

import asyncio
import logging
import time

from dealscout.config.settings import Settings
from dealscout.errors import UnsupportedPlatformError
from dealscout.fetch.strategy import FetchStrategy
from dealscout.models.listing import ProductListing
from dealscout.models.platform_result import PlatformResult
from dealscout.scrapers.extraction import extract_listings
from dealscout.scrapers.registry import get_platform
from dealscout.storage.query_cache import QueryCache


class PlatformScraper:
    """The unit of retry and failure isolation for a single platform.

    :meth:`scrape` never raises for a platform failure; the error is
    carried on the returned :class:`PlatformResult` instead. Only
    cancellation propagates.
    """

    def __init__(
        self,
        fetcher: FetchStrategy | None = None,
        cache: QueryCache | None = None,
        cache_ttl: float | None = None,
    ) -> None:
        self.settings = Settings()
        self.fetcher = fetcher or FetchStrategy()
        self.cache = cache if cache is not None else QueryCache()
        self.cache_ttl = cache_ttl or self.settings.SEARCH_CACHE_TTL

    async def scrape(
        self,
        platform: str,
        query: str,
        max_results: int | None = None,
    ) -> PlatformResult:
        """Return the listings found for *query* on *platform*."""
        platform_id = platform.strip().lower()
        logger = logging.getLogger(f"dealscout.{platform_id or 'unknown'}")
        limit = max_results or self.settings.DEFAULT_MAX_RESULTS
        start = time.monotonic()

        try:
            config = get_platform(platform_id)
            if config is None:
                raise UnsupportedPlatformError(platform)

            cached = self.cache.get_listings(query, config.name)
            if cached is not None:
                return PlatformResult(
                    platform=config.name,
                    products=cached[:limit],
                    search_time=0.0,
                    cached=True,
                )

            logger.info("[%s] Scraping for: %s", config.name, query)
            url = config.build_search_url(query)
            markup = await self.fetcher.fetch(config, url)
            listings = extract_listings(markup, config, limit)

            if listings:
                self.cache.store_listings(
                    query, config.name, listings, self.cache_ttl
                )

            elapsed = time.monotonic() - start
            logger.info(
                "[%s] Scraped %d products in %.2fs",
                config.name,
                len(listings),
                elapsed,
            )
            return PlatformResult(
                platform=config.name,
                products=listings,
                search_time=elapsed,
            )
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.error(
                "[%s] Scraping error: %s",
                platform_id,
                exc,
                exc_info=True,
            )
            return PlatformResult(
                platform=platform_id,
                products=[],
                search_time=time.monotonic() - start,
                error=str(exc) or type(exc).__name__,
            )

    async def scrape_listings(
        self,
        platform: str,
        query: str,
        max_results: int | None = None,
    ) -> list[ProductListing]:
        """Like :meth:`scrape` but returns just the listings."""
        result = await self.scrape(platform, query, max_results)
        return result.products
