# tests/test_extraction.py

"""Tests for rule-driven listing extraction against HTML fixtures."""

import unittest
from pathlib import Path

from bs4 import BeautifulSoup

from dealscout.models.listing import Availability
from dealscout.scrapers.extraction import (
    extract_listing,
    extract_listings,
    normalize_url,
    parse_availability,
    parse_price,
    select_containers,
)
from dealscout.scrapers.registry import PLATFORMS

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def _load_fixture(fixture_name: str) -> str:
    """Read an HTML fixture file as text."""
    with open(FIXTURES_DIR / fixture_name, encoding="utf-8") as f:
        return f.read()


def _first_container(markup: str):
    soup = BeautifulSoup(markup, "lxml")
    return soup.select_one("article")


class TestParsePrice(unittest.TestCase):
    """parse_price() normalisation."""

    def test_naira_with_thousands_separator(self) -> None:
        self.assertEqual(parse_price("₦ 12,500"), 12500.0)

    def test_fraction_dropped_by_default(self) -> None:
        self.assertEqual(parse_price("$1,299.99"), 1299.0)

    def test_fraction_kept_when_requested(self) -> None:
        self.assertEqual(parse_price("$1,299.99", keep_fraction=True), 1299.99)

    def test_first_number_wins_in_range(self) -> None:
        self.assertEqual(parse_price("₦ 4,000 - ₦ 6,000"), 4000.0)

    def test_unparseable_text_returns_zero(self) -> None:
        for text in (None, "", "Call for price", "N/A"):
            with self.subTest(text=text):
                self.assertEqual(parse_price(text), 0.0)


class TestNormalizeUrl(unittest.TestCase):
    """normalize_url() resolution against a platform origin."""

    def test_relative_path(self) -> None:
        self.assertEqual(
            normalize_url("/item/1", "https://www.jumia.com.ng"),
            "https://www.jumia.com.ng/item/1",
        )

    def test_absolute_url_unchanged(self) -> None:
        url = "https://shop.example.com/p/1"
        self.assertEqual(normalize_url(url, "https://www.jumia.com.ng"), url)

    def test_protocol_relative(self) -> None:
        self.assertEqual(
            normalize_url("//cdn.example.com/a.jpg", "https://x.com"),
            "https://cdn.example.com/a.jpg",
        )

    def test_empty_href_is_none(self) -> None:
        for href in (None, "", "   "):
            with self.subTest(href=href):
                self.assertIsNone(normalize_url(href, "https://x.com"))


class TestParseAvailability(unittest.TestCase):
    """Stock-badge text mapping."""

    def test_badges(self) -> None:
        cases = {
            None: Availability.IN_STOCK,
            "In stock": Availability.IN_STOCK,
            "Out of Stock": Availability.OUT_OF_STOCK,
            "SOLD OUT": Availability.OUT_OF_STOCK,
            "Currently unavailable": Availability.OUT_OF_STOCK,
            "Pre-order now": Availability.PREORDER,
        }
        for text, expected in cases.items():
            with self.subTest(text=text):
                self.assertIs(parse_availability(text), expected)


class TestExtractListing(unittest.TestCase):
    """Single-container extraction with required and optional fields."""

    jumia = PLATFORMS["jumia"]

    def test_container_missing_optional_fields(self) -> None:
        """Only name and price are required; the rest degrade to defaults."""
        container = _first_container(
            '<article class="prd"><h3 class="name">Phone</h3>'
            '<div class="prc">₦ 1,000</div></article>'
        )
        listing = extract_listing(container, self.jumia)
        self.assertIsNotNone(listing)
        self.assertEqual(listing.name, "Phone")
        self.assertEqual(listing.price, 1000.0)
        self.assertEqual(listing.currency, "NGN")
        self.assertEqual(listing.seller, "Jumia")
        self.assertIsNone(listing.rating)
        self.assertEqual(listing.review_count, 0)
        self.assertIsNone(listing.shipping)
        self.assertIsNone(listing.url)
        self.assertIsNone(listing.image_url)
        self.assertIs(listing.availability, Availability.IN_STOCK)

    def test_malformed_containers_rejected(self) -> None:
        """Containers lacking a name or a positive price yield nothing."""
        cases = {
            "no name": '<article class="prd"><div class="prc">₦ 5</div></article>',
            "no price": '<article class="prd"><h3 class="name">A</h3></article>',
            "zero price": (
                '<article class="prd"><h3 class="name">A</h3>'
                '<div class="prc">₦ 0</div></article>'
            ),
            "text price": (
                '<article class="prd"><h3 class="name">A</h3>'
                '<div class="prc">Call us</div></article>'
            ),
            "blank name": (
                '<article class="prd"><h3 class="name">  </h3>'
                '<div class="prc">₦ 5</div></article>'
            ),
        }
        for label, markup in cases.items():
            with self.subTest(case=label):
                self.assertIsNone(
                    extract_listing(_first_container(markup), self.jumia)
                )

    def test_percentage_rating_is_scaled(self) -> None:
        """eBay feedback percentages map onto the 0-5 rating scale."""
        soup = BeautifulSoup(
            '<li class="s-item"><div class="s-item__title">Lens</div>'
            '<span class="s-item__price">$40.50</span>'
            '<span class="s-item__seller-info-text">camshop (1,204) 98.6%</span>'
            '<span class="s-item__shipping">Free shipping</span></li>',
            "lxml",
        )
        listing = extract_listing(soup.select_one(".s-item"), PLATFORMS["ebay"])
        self.assertIsNotNone(listing)
        self.assertEqual(listing.price, 40.5)
        self.assertAlmostEqual(listing.rating, 4.93)
        self.assertEqual(listing.shipping, 0.0)

    def test_shipping_cost_parsed_with_fraction(self) -> None:
        soup = BeautifulSoup(
            '<li class="s-item"><div class="s-item__title">Lens</div>'
            '<span class="s-item__price">$40</span>'
            '<span class="s-item__shipping">+$7.25 shipping</span></li>',
            "lxml",
        )
        listing = extract_listing(soup.select_one(".s-item"), PLATFORMS["ebay"])
        self.assertEqual(listing.shipping, 7.25)

    def test_out_of_stock_badge(self) -> None:
        soup = BeautifulSoup(
            '<li class="product-item"><a class="product-item-link" '
            'href="/tv.html">Smart TV</a><span class="price">₦ 99,000</span>'
            '<div class="stock">Out of stock</div></li>',
            "lxml",
        )
        listing = extract_listing(
            soup.select_one(".product-item"), PLATFORMS["slot"]
        )
        self.assertIs(listing.availability, Availability.OUT_OF_STOCK)
        self.assertEqual(listing.url, "https://slot.ng/tv.html")


class TestExtractListings(unittest.TestCase):
    """Whole-page extraction from saved search fixtures."""

    def test_jumia_fixture_skips_malformed(self) -> None:
        """Three good containers parse; the three malformed ones are skipped."""
        listings = extract_listings(
            _load_fixture("jumia_search.html"), PLATFORMS["jumia"], 10
        )
        self.assertEqual(
            [p.name for p in listings],
            [
                "Tecno Spark 20 128GB Gray",
                "Infinix Hot 40i 256GB",
                "Itel A70 64GB",
            ],
        )
        self.assertEqual(
            [p.price for p in listings], [152500.0, 139990.0, 78000.0]
        )
        self.assertTrue(all(p.platform == "jumia" for p in listings))

    def test_jumia_fixture_field_values(self) -> None:
        first, second, third = extract_listings(
            _load_fixture("jumia_search.html"), PLATFORMS["jumia"], 10
        )
        self.assertEqual(first.rating, 4.5)
        self.assertEqual(first.review_count, 23)
        self.assertEqual(
            first.url,
            "https://www.jumia.com.ng/tecno-spark-20-128gb-gray-281937.html",
        )
        self.assertEqual(
            first.image_url, "https://ng.jumia.is/unsafe/tecno-spark-20.jpg"
        )
        self.assertEqual(
            second.url,
            "https://www.jumia.com.ng/infinix-hot-40i-256gb-991122.html",
        )
        self.assertEqual(
            second.image_url, "https://ng.jumia.is/unsafe/infinix-hot-40i.jpg"
        )
        self.assertEqual(third.seller, "Itel Official Store")
        self.assertIsNone(third.image_url)
        self.assertIsNone(third.rating)

    def test_max_results_cap(self) -> None:
        listings = extract_listings(
            _load_fixture("jumia_search.html"), PLATFORMS["jumia"], 2
        )
        self.assertEqual(len(listings), 2)

    def test_fallback_container_selector(self) -> None:
        """Konga cards match the second container selector."""
        listings = extract_listings(
            _load_fixture("konga_search.html"), PLATFORMS["konga"], 10
        )
        self.assertEqual(len(listings), 2)
        self.assertEqual(listings[0].seller, "Konga Retail")
        self.assertEqual(listings[1].seller, "Konga")
        self.assertEqual(listings[1].price, 389500.0)
        self.assertEqual(
            listings[0].url,
            "https://www.konga.com/product/hp-15-laptop-core-i5-6114312",
        )

    def test_amazon_fixture_keeps_cents(self) -> None:
        listings = extract_listings(
            _load_fixture("amazon_search.html"), PLATFORMS["amazon"], 10
        )
        self.assertEqual(len(listings), 2)
        self.assertEqual(listings[0].price, 19.99)
        self.assertEqual(listings[1].price, 1049.5)
        self.assertEqual(listings[0].rating, 4.4)
        self.assertEqual(listings[0].review_count, 12874)
        self.assertEqual(listings[0].currency, "USD")
        self.assertEqual(
            listings[0].url,
            "https://www.amazon.com/Soundcore-Wireless-Earbuds/dp/B0C1AAAAAA",
        )

    def test_no_containers_returns_empty(self) -> None:
        self.assertEqual(
            extract_listings(
                "<html><body><p>No results</p></body></html>",
                PLATFORMS["jumia"],
                10,
            ),
            [],
        )

    def test_select_containers_first_match_wins(self) -> None:
        soup = BeautifulSoup(
            '<div class="a">1</div><div class="b">2</div><div class="b">3</div>',
            "lxml",
        )
        self.assertEqual(len(select_containers(soup, (".missing", ".b", ".a"))), 2)
        self.assertEqual(select_containers(soup, (".missing",)), [])


if __name__ == "__main__":
    unittest.main()
