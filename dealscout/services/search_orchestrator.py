# dealscout/services/search_orchestrator.py

"""Fans a query out to every platform scraper and gathers the results."""

import asyncio
import logging
import time

from dealscout.config.settings import Settings
from dealscout.fetch.strategy import FetchStrategy
from dealscout.models.listing import ProductListing
from dealscout.models.platform_result import PlatformResult, SearchResponse
from dealscout.ranking.deal_ranker import DealRanker
from dealscout.scrapers.platform_scraper import PlatformScraper
from dealscout.scrapers.registry import supported_platforms
from dealscout.storage.query_cache import QueryCache

logger = logging.getLogger("dealscout.orchestrator")


def _dedupe_platforms(platforms: list[str]) -> list[str]:
    """Lowercase, strip and de-duplicate ids, keeping first-seen order."""
    seen: dict[str, None] = {}
    for platform in platforms:
        key = platform.strip().lower()
        if key:
            seen.setdefault(key, None)
    return list(seen)


class SearchOrchestrator:
    """Coordinates concurrent platform scrapes and best-deal selection."""

    def __init__(
        self,
        scraper: PlatformScraper | None = None,
        ranker: DealRanker | None = None,
        fetcher: FetchStrategy | None = None,
        cache: QueryCache | None = None,
    ) -> None:
        self.settings = Settings()
        self.scraper = scraper or PlatformScraper(
            fetcher=fetcher, cache=cache
        )
        self.ranker = ranker or DealRanker()

    @staticmethod
    def supported_platforms() -> list[str]:
        """Every platform id the registry knows about."""
        return supported_platforms()

    # ── Private helpers ──────────────────────────────────

    async def _run_one(
        self,
        platform: str,
        query: str,
        max_results: int,
        timeout: float | None,
    ) -> PlatformResult:
        coro = self.scraper.scrape(platform, query, max_results)
        if timeout is None:
            return await coro
        return await asyncio.wait_for(coro, timeout=timeout)

    async def _gather(
        self,
        query: str,
        platforms: list[str],
        max_results: int,
        timeout: float | None = None,
    ) -> dict[str, PlatformResult]:
        """Launch all scrapes at once and map every platform to a result."""
        started = time.monotonic()
        outcomes = await asyncio.gather(
            *(
                self._run_one(p, query, max_results, timeout)
                for p in platforms
            ),
            return_exceptions=True,
        )

        results: dict[str, PlatformResult] = {}
        for platform, outcome in zip(platforms, outcomes):
            if isinstance(outcome, PlatformResult):
                results[platform] = outcome
                continue
            if (
                isinstance(outcome, asyncio.TimeoutError)
                and timeout is not None
            ):
                message = f"Timed out after {timeout:.0f}s"
            else:
                message = str(outcome) or type(outcome).__name__
            logger.error(
                "Scraper error for '%s' on %s: %s",
                query,
                platform,
                message,
                exc_info=outcome,
            )
            results[platform] = PlatformResult(
                platform=platform,
                products=[],
                search_time=time.monotonic() - started,
                error=message,
            )

        logger.info(
            "Gathered %d platforms for '%s' in %.2fs (%d failed)",
            len(results),
            query,
            time.monotonic() - started,
            sum(1 for r in results.values() if r.error is not None),
        )
        return results

    # ── Public API ───────────────────────────────────────

    async def scrape_all(
        self,
        query: str,
        platforms: list[str] | None = None,
        max_results: int | None = None,
    ) -> dict[str, PlatformResult]:
        """Scrape every requested platform concurrently.

        Defaults to the whole registry. The returned mapping has one
        entry per requested platform, failed or not, and this call
        never raises because a platform failed.
        """
        targets = _dedupe_platforms(
            platforms if platforms else self.supported_platforms()
        )
        limit = max_results or self.settings.DEFAULT_MAX_RESULTS
        logger.info(
            "Scraping %d platforms for '%s' (max %d each)",
            len(targets),
            query,
            limit,
        )
        return await self._gather(query, targets, limit)

    async def quick_scrape(self, query: str) -> dict[str, PlatformResult]:
        """Latency-bounded scrape of a small curated platform subset.

        Each platform is capped to ``QUICK_MAX_RESULTS`` listings and
        ``QUICK_TIMEOUT`` seconds, for callers such as voice front
        ends that cannot wait on the full platform set.
        """
        return await self._gather(
            query,
            _dedupe_platforms(self.settings.QUICK_PLATFORMS),
            self.settings.QUICK_MAX_RESULTS,
            timeout=self.settings.QUICK_TIMEOUT,
        )

    async def search(
        self,
        query: str,
        platforms: list[str] | None = None,
        max_results: int | None = None,
        max_price: float | None = None,
        min_rating: float | None = None,
        quick: bool = False,
    ) -> SearchResponse:
        """Scrape, apply price/rating filters and pick the best deal.

        ``quick=True`` runs :meth:`quick_scrape`, whose platform subset
        and per-platform cap are fixed by settings, so combining it with
        *platforms* or *max_results* raises :class:`ValueError`.
        """
        if quick and (platforms or max_results is not None):
            raise ValueError(
                "quick search uses a fixed platform set and result cap; "
                "platforms and max_results cannot be given"
            )
        if quick:
            by_platform = await self.quick_scrape(query)
        else:
            by_platform = await self.scrape_all(
                query, platforms, max_results
            )

        listings: list[ProductListing] = [
            item
            for result in by_platform.values()
            for item in result.products
        ]
        if max_price is not None:
            listings = [p for p in listings if p.price <= max_price]
        if min_rating is not None:
            listings = [
                p for p in listings if (p.rating or 0.0) >= min_rating
            ]

        return SearchResponse(
            query=query,
            results=list(by_platform.values()),
            filtered_products=listings,
            best_deal=self.ranker.find_best_deal(listings),
        )

    async def close(self) -> None:
        """Release HTTP sessions and any browser the scrapes started."""
        await self.scraper.fetcher.close()
