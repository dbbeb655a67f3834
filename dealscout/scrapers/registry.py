# dealscout/scrapers/registry.py

"""Static platform registry: search URLs, currencies and extraction rules.

Adding a platform means adding one :class:`PlatformConfig` entry to
``PLATFORMS``; the generic extraction code and the orchestrator pick
it up without further changes.
"""

from dataclasses import dataclass
from urllib.parse import quote_plus


@dataclass(frozen=True)
class FieldRule:
    """How to read one field out of a listing container.

    ``selectors`` are tried in order and the first non-empty value
    wins. With ``attr`` set the attribute is read instead of the
    element text. ``pattern`` keeps the first regex group (or whole
    match) of the raw value, and ``scale`` multiplies numeric values.
    """

    selectors: tuple[str, ...]
    attr: str | None = None
    pattern: str | None = None
    scale: float = 1.0


@dataclass(frozen=True)
class ExtractionRule:
    """Named field rules for one platform's listing containers."""

    name: FieldRule
    price: FieldRule
    link: FieldRule
    image: FieldRule = FieldRule(("img",), attr="src")
    rating: FieldRule | None = None
    seller: FieldRule | None = None
    review_count: FieldRule | None = None
    shipping: FieldRule | None = None
    availability: FieldRule | None = None


@dataclass(frozen=True)
class PlatformConfig:
    """Registry entry describing a supported retail platform."""

    name: str
    label: str
    origin: str
    search_url: str
    currency: str
    container_selectors: tuple[str, ...]
    rules: ExtractionRule
    requires_js: bool = False
    keep_fraction: bool = False
    default_seller: str = ""

    @property
    def seller_fallback(self) -> str:
        """Seller name used when the page does not expose one."""
        return self.default_seller or self.label

    @property
    def primary_selector(self) -> str:
        """Selector list the browser waits on before capturing markup."""
        return ", ".join(self.container_selectors)

    def build_search_url(self, query: str) -> str:
        """Return the search URL for *query* (URL-encoded)."""
        return self.search_url.format(query=quote_plus(query))


_RATING_NUMBER = r"(\d+(?:\.\d+)?)"
_COUNT_NUMBER = r"(\d[\d,]*)"


PLATFORMS: dict[str, PlatformConfig] = {
    "amazon": PlatformConfig(
        name="amazon",
        label="Amazon",
        origin="https://www.amazon.com",
        search_url="https://www.amazon.com/s?k={query}",
        currency="USD",
        container_selectors=(
            '[data-component-type="s-search-result"]',
        ),
        keep_fraction=True,
        rules=ExtractionRule(
            name=FieldRule(("h2 a span", "h2 span", "h2")),
            price=FieldRule((".a-price .a-offscreen", ".a-price-whole")),
            link=FieldRule(("h2 a", "a.a-link-normal"), attr="href"),
            image=FieldRule(("img.s-image", "img"), attr="src"),
            rating=FieldRule(
                (".a-icon-star-small span", ".a-icon-alt"),
                pattern=_RATING_NUMBER,
            ),
            review_count=FieldRule(
                (".a-size-base.s-underline-text",),
                pattern=_COUNT_NUMBER,
            ),
        ),
    ),
    "jumia": PlatformConfig(
        name="jumia",
        label="Jumia",
        origin="https://www.jumia.com.ng",
        search_url="https://www.jumia.com.ng/catalog/?q={query}",
        currency="NGN",
        container_selectors=("article.prd", ".prd"),
        rules=ExtractionRule(
            name=FieldRule((".prd-name", ".info .name", "h3.name", ".name")),
            price=FieldRule((".prd-price .prc", ".price .prc", ".prc")),
            link=FieldRule(("a.core", "a"), attr="href"),
            image=FieldRule(("img",), attr="data-src"),
            rating=FieldRule((".stars._s",), pattern=_RATING_NUMBER),
            review_count=FieldRule((".rev",), pattern=_COUNT_NUMBER),
            seller=FieldRule((".seller-name",)),
        ),
    ),
    "konga": PlatformConfig(
        name="konga",
        label="Konga",
        origin="https://www.konga.com",
        search_url="https://www.konga.com/search?search={query}",
        currency="NGN",
        container_selectors=(
            '[data-testid="product-card"]',
            ".product-card",
            ".product-item",
            ".productItem",
        ),
        rules=ExtractionRule(
            name=FieldRule(
                (
                    ".product-title",
                    ".productTitle",
                    ".product-name",
                    '[class*="name"]',
                    "h3",
                )
            ),
            price=FieldRule(
                (".product-price", ".productPrice", '[class*="price"]', ".amount")
            ),
            link=FieldRule(("a",), attr="href"),
            seller=FieldRule(('[class*="seller"]',)),
        ),
    ),
    "ebay": PlatformConfig(
        name="ebay",
        label="eBay",
        origin="https://www.ebay.com",
        search_url="https://www.ebay.com/sch/i.html?_nkw={query}",
        currency="USD",
        container_selectors=(".s-item",),
        keep_fraction=True,
        rules=ExtractionRule(
            name=FieldRule((".s-item__title",)),
            price=FieldRule((".s-item__price",)),
            link=FieldRule(("a.s-item__link",), attr="href"),
            image=FieldRule((".s-item__image img", "img"), attr="src"),
            # Feedback is published as a percentage
            rating=FieldRule(
                (".s-item__reviews-count", ".s-item__seller-info-text"),
                pattern=r"(\d+(?:\.\d+)?)%",
                scale=0.05,
            ),
            seller=FieldRule((".s-item__seller", ".s-item__seller-info")),
            shipping=FieldRule(
                (".s-item__shipping", ".s-item__logisticsCost")
            ),
        ),
    ),
    "aliexpress": PlatformConfig(
        name="aliexpress",
        label="AliExpress",
        origin="https://www.aliexpress.com",
        search_url="https://www.aliexpress.com/wholesale?SearchText={query}",
        currency="USD",
        requires_js=True,
        keep_fraction=True,
        container_selectors=(
            ".search-item-card-wrapper-gallery",
            ".organic-item",
            ".search-item-card",
        ),
        rules=ExtractionRule(
            name=FieldRule(("a.organic-item-offer", '[class*="title"]', "h3")),
            price=FieldRule(
                (".organic-price", ".search-card-e-price-main", '[class*="price"]')
            ),
            link=FieldRule(("a",), attr="href"),
            rating=FieldRule(
                (".organic-recommend", ".search-card-e-starRating__rate"),
                pattern=_RATING_NUMBER,
            ),
            seller=FieldRule(('[class*="seller"]', '[class*="store"]')),
        ),
    ),
    "walmart": PlatformConfig(
        name="walmart",
        label="Walmart",
        origin="https://www.walmart.com",
        search_url="https://www.walmart.com/search/?query={query}",
        currency="USD",
        requires_js=True,
        container_selectors=("[data-item-id]",),
        rules=ExtractionRule(
            name=FieldRule(('[data-testid="productTitle"]', '[data-automation-id="product-title"]')),
            price=FieldRule(
                ('[data-testid="listPrice"]', '[data-automation-id="product-price"]', ".pricing")
            ),
            link=FieldRule(('a[href*="/ip/"]',), attr="href"),
        ),
    ),
    "bestbuy": PlatformConfig(
        name="bestbuy",
        label="Best Buy",
        origin="https://www.bestbuy.com",
        search_url="https://www.bestbuy.com/site/searchpage.jsp?st={query}",
        currency="USD",
        requires_js=True,
        container_selectors=(".sku-item",),
        rules=ExtractionRule(
            name=FieldRule((".sku-title", '[class*="title"]')),
            price=FieldRule(
                ('[data-testid*="price"] [aria-hidden="true"]', '[data-testid*="price"]')
            ),
            link=FieldRule(('a[href*="/site/"]', 'a[href*="/product/"]'), attr="href"),
            rating=FieldRule(('[aria-label*="rating"]',), attr="aria-label", pattern=_RATING_NUMBER),
            review_count=FieldRule((".c-reviews",), pattern=_COUNT_NUMBER),
            availability=FieldRule((".fulfillment-add-to-cart-button button",)),
        ),
    ),
    "etsy": PlatformConfig(
        name="etsy",
        label="Etsy",
        origin="https://www.etsy.com",
        search_url="https://www.etsy.com/search?q={query}",
        currency="USD",
        requires_js=True,
        keep_fraction=True,
        container_selectors=(".v2-listing-card",),
        rules=ExtractionRule(
            name=FieldRule(('a[data-etsy-link*="title"]',), attr="title"),
            price=FieldRule((".currency-value", ".lc-price")),
            link=FieldRule(('a[href*="/listing/"]',), attr="href"),
            rating=FieldRule((".star-rating", '[class*="rating"]'), pattern=_RATING_NUMBER),
            review_count=FieldRule(('[class*="review"]',), pattern=_COUNT_NUMBER),
            seller=FieldRule(('[class*="shop"]',)),
        ),
    ),
    "target": PlatformConfig(
        name="target",
        label="Target",
        origin="https://www.target.com",
        search_url="https://www.target.com/s?searchTerm={query}",
        currency="USD",
        requires_js=True,
        keep_fraction=True,
        container_selectors=('[data-test="@web/ProductCard"]',),
        rules=ExtractionRule(
            name=FieldRule(('[data-test="product-title"]',)),
            price=FieldRule(('[data-test="current-price"]', '[data-test*="price"]')),
            link=FieldRule(('a[href*="/p/"]',), attr="href"),
            rating=FieldRule(('[data-test*="rating"]',), pattern=_RATING_NUMBER),
        ),
    ),
    "jiji": PlatformConfig(
        name="jiji",
        label="Jiji",
        origin="https://jiji.ng",
        search_url="https://jiji.ng/search?query={query}",
        currency="NGN",
        requires_js=True,
        container_selectors=(
            ".b-list-advert-base",
            '[data-testid="advert-card"]',
        ),
        rules=ExtractionRule(
            name=FieldRule((".b-advert-title-inner", '[class*="title"]')),
            price=FieldRule((".qa-advert-price", '[class*="price"]')),
            link=FieldRule(("a",), attr="href"),
        ),
    ),
    "slot": PlatformConfig(
        name="slot",
        label="Slot",
        origin="https://slot.ng",
        search_url="https://slot.ng/catalogsearch/result/?q={query}",
        currency="NGN",
        container_selectors=(".product-item",),
        rules=ExtractionRule(
            name=FieldRule((".product-item-link", ".product-name")),
            price=FieldRule((".special-price .price", ".price")),
            link=FieldRule((".product-item-link", "a"), attr="href"),
            availability=FieldRule((".stock",)),
        ),
    ),
}


def get_platform(name: str) -> PlatformConfig | None:
    """Look up a registry entry by identifier (case-insensitive)."""
    return PLATFORMS.get(name.strip().lower())


def supported_platforms() -> list[str]:
    """Return every registered platform identifier."""
    return list(PLATFORMS)
