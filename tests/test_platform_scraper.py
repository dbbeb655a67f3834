# tests/test_platform_scraper.py

"""Tests for the single-platform scraper with a stubbed fetch strategy."""

import asyncio
import unittest
from pathlib import Path

from dealscout.errors import FetchError
from dealscout.scrapers.platform_scraper import PlatformScraper
from dealscout.scrapers.registry import PlatformConfig
from dealscout.storage.query_cache import QueryCache

FIXTURES_DIR = Path(__file__).parent / "fixtures"


class StubFetcher:
    """Fetch strategy double that counts calls and replays canned pages."""

    def __init__(
        self,
        pages: dict[str, str] | None = None,
        errors: dict[str, BaseException] | None = None,
    ) -> None:
        self.pages = pages or {}
        self.errors = errors or {}
        self.calls: list[tuple[str, str]] = []

    async def fetch(self, config: PlatformConfig, url: str) -> str:
        self.calls.append((config.name, url))
        if config.name in self.errors:
            raise self.errors[config.name]
        return self.pages.get(config.name, "<html></html>")

    async def close(self) -> None:
        pass


def _jumia_page() -> str:
    with open(FIXTURES_DIR / "jumia_search.html", encoding="utf-8") as f:
        return f.read()


class TestPlatformScraper(unittest.IsolatedAsyncioTestCase):
    """PlatformScraper cache, isolation and result shaping."""

    def setUp(self) -> None:
        self.fetcher = StubFetcher(pages={"jumia": _jumia_page()})
        self.cache = QueryCache()
        self.scraper = PlatformScraper(fetcher=self.fetcher, cache=self.cache)

    async def test_scrape_returns_listings(self) -> None:
        result = await self.scraper.scrape("jumia", "phone")
        self.assertEqual(result.platform, "jumia")
        self.assertIsNone(result.error)
        self.assertEqual(result.count, 3)
        self.assertFalse(result.cached)
        self.assertEqual(
            self.fetcher.calls,
            [("jumia", "https://www.jumia.com.ng/catalog/?q=phone")],
        )

    async def test_second_scrape_is_cache_hit(self) -> None:
        """A repeat search within the TTL performs no fetch."""
        first = await self.scraper.scrape("jumia", "Phone")
        second = await self.scraper.scrape("jumia", "phone")

        self.assertEqual(len(self.fetcher.calls), 1)
        self.assertTrue(second.cached)
        self.assertEqual(second.search_time, 0.0)
        self.assertEqual(second.products, first.products)

    async def test_cache_hit_respects_max_results(self) -> None:
        await self.scraper.scrape("jumia", "phone")
        result = await self.scraper.scrape("jumia", "phone", max_results=1)
        self.assertEqual(result.count, 1)

    async def test_empty_result_is_not_cached(self) -> None:
        await self.scraper.scrape("konga", "phone")
        await self.scraper.scrape("konga", "phone")
        self.assertEqual(len(self.fetcher.calls), 2)

    async def test_fetch_failure_becomes_error_result(self) -> None:
        self.fetcher.errors["konga"] = FetchError("HTTP 503")
        result = await self.scraper.scrape("konga", "phone")
        self.assertEqual(result.platform, "konga")
        self.assertEqual(result.products, [])
        self.assertEqual(result.error, "HTTP 503")

    async def test_unsupported_platform(self) -> None:
        result = await self.scraper.scrape("flipkart", "phone")
        self.assertEqual(result.error, "Platform flipkart not supported")
        self.assertEqual(result.products, [])
        self.assertEqual(self.fetcher.calls, [])

    async def test_cancellation_propagates(self) -> None:
        self.fetcher.errors["jumia"] = asyncio.CancelledError()
        with self.assertRaises(asyncio.CancelledError):
            await self.scraper.scrape("jumia", "phone")

    async def test_scrape_listings_returns_products(self) -> None:
        listings = await self.scraper.scrape_listings("jumia", "phone", 2)
        self.assertEqual(len(listings), 2)


if __name__ == "__main__":
    unittest.main()
