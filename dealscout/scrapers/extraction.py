# dealscout/scrapers/extraction.py

"""Generic rule-driven extraction of listings from search-result markup."""

import logging
import re
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from dealscout.models.listing import Availability, ProductListing
from dealscout.scrapers.registry import FieldRule, PlatformConfig

logger = logging.getLogger("dealscout.extraction")

_NUMBER_RE = re.compile(r"\d+(?:\.\d+)?")
_PRICE_RE = re.compile(r"\d[\d,]*(?:\.\d+)?")


def parse_price(text: str | None, keep_fraction: bool = False) -> float:
    """Extract a numeric price from text like ``'₦ 12,500'`` or ``'$1,299.99'``.

    Currency symbols and words are stripped and thousands separators
    dropped. The fractional part is discarded unless *keep_fraction*
    is set, because several storefronts render it in a separate
    element or with an ambiguous separator. Returns ``0.0`` when no
    number can be found.
    """
    if not text:
        return 0.0
    match = _PRICE_RE.search(text)
    if not match:
        return 0.0
    token = match.group(0).replace(",", "")
    if not keep_fraction:
        token = token.split(".")[0]
    try:
        return float(token)
    except ValueError:
        return 0.0


def normalize_url(href: str | None, origin: str) -> str | None:
    """Turn an extracted href into an absolute URL on *origin*."""
    if not href:
        return None
    href = href.strip()
    if not href:
        return None
    if href.startswith(("http://", "https://")):
        return href
    if href.startswith("//"):
        return f"https:{href}"
    return urljoin(origin.rstrip("/") + "/", href)


def select_containers(
    soup: BeautifulSoup | Tag,
    selectors: tuple[str, ...],
) -> list[Tag]:
    """Return the matches of the first selector that finds anything."""
    for selector in selectors:
        found = soup.select(selector)
        if found:
            logger.debug(
                "Selector '%s' matched %d containers",
                selector,
                len(found),
            )
            return list(found)
    return []


def read_field(container: Tag, rule: FieldRule | None) -> str | None:
    """Read the raw string value described by *rule*, or ``None``."""
    if rule is None:
        return None
    for selector in rule.selectors:
        el = container.select_one(selector)
        if el is None:
            continue
        if rule.attr:
            raw = el.get(rule.attr)
            if isinstance(raw, list):
                raw = " ".join(raw)
            value = str(raw).strip() if raw else ""
        else:
            value = el.get_text(" ", strip=True)
        if not value:
            continue
        if rule.pattern:
            match = re.search(rule.pattern, value)
            if not match:
                continue
            value = match.group(1) if match.groups() else match.group(0)
        return value
    return None


def read_number(container: Tag, rule: FieldRule | None) -> float | None:
    """Read a numeric field, applying the rule's scale."""
    raw = read_field(container, rule)
    if raw is None or rule is None:
        return None
    match = _NUMBER_RE.search(raw.replace(",", ""))
    if not match:
        return None
    return float(match.group(0)) * rule.scale


def _parse_rating(container: Tag, rule: FieldRule | None) -> float | None:
    rating = read_number(container, rule)
    if rating is None:
        return None
    return round(min(5.0, max(0.0, rating)), 2)


def _parse_shipping(container: Tag, rule: FieldRule | None) -> float | None:
    raw = read_field(container, rule)
    if raw is None:
        return None
    if "free" in raw.lower():
        return 0.0
    cost = parse_price(raw, keep_fraction=True)
    return cost if cost > 0 else None


def parse_availability(text: str | None) -> Availability:
    """Map stock-badge text onto an :class:`Availability` value."""
    if not text:
        return Availability.IN_STOCK
    lowered = text.lower()
    if any(
        marker in lowered
        for marker in ("out of stock", "sold out", "unavailable")
    ):
        return Availability.OUT_OF_STOCK
    if "pre-order" in lowered or "preorder" in lowered:
        return Availability.PREORDER
    return Availability.IN_STOCK


def extract_listing(
    container: Tag,
    config: PlatformConfig,
) -> ProductListing | None:
    """Extract one listing from a container, or ``None`` if unusable.

    Only name and price are required. Every optional field degrades
    to ``None`` (or its default) when its selectors find nothing.
    """
    rules = config.rules
    name = read_field(container, rules.name)
    if not name:
        return None
    price = parse_price(
        read_field(container, rules.price), config.keep_fraction
    )
    if price <= 0:
        return None

    review_count = read_number(container, rules.review_count)
    listing = ProductListing(
        name=name,
        price=price,
        currency=config.currency,
        seller=read_field(container, rules.seller) or config.seller_fallback,
        platform=config.name,
        rating=_parse_rating(container, rules.rating),
        review_count=int(review_count) if review_count else 0,
        availability=parse_availability(
            read_field(container, rules.availability)
        ),
        shipping=_parse_shipping(container, rules.shipping),
        url=normalize_url(read_field(container, rules.link), config.origin),
        image_url=normalize_url(
            read_field(container, rules.image), config.origin
        ),
    )
    return listing if listing.is_valid else None


def extract_listings(
    markup: str,
    config: PlatformConfig,
    max_results: int,
) -> list[ProductListing]:
    """Parse a search page and extract up to *max_results* valid listings."""
    soup = BeautifulSoup(markup, "lxml")
    containers = select_containers(soup, config.container_selectors)
    if not containers:
        logger.warning(
            "[%s] No listing containers matched %s",
            config.name,
            config.container_selectors,
        )
        return []

    listings: list[ProductListing] = []
    skipped = 0
    for container in containers:
        if len(listings) >= max_results:
            break
        try:
            listing = extract_listing(container, config)
        except Exception as exc:
            logger.debug(
                "[%s] Container extraction failed: %s",
                config.name,
                exc,
                exc_info=True,
            )
            listing = None
        if listing is None:
            skipped += 1
            continue
        listings.append(listing)

    if skipped:
        logger.info(
            "[%s] Skipped %d containers without name or price",
            config.name,
            skipped,
        )
    return listings
