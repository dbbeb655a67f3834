# dealscout/models/platform_result.py

"""Per-platform and whole-search result containers."""

from dataclasses import dataclass, field
from typing import Any

from dealscout.models.listing import ProductListing


@dataclass
class PlatformResult:
    """Outcome of scraping one platform for one query.

    ``error`` is only set when the attempt failed, in which case
    ``products`` is empty. ``search_time`` is 0 for cache hits.
    """

    platform: str
    products: list[ProductListing] = field(
        default_factory=lambda: list[ProductListing]()
    )
    search_time: float = 0.0
    error: str | None = None
    cached: bool = False

    @property
    def count(self) -> int:
        """Number of listings found."""
        return len(self.products)

    @property
    def ok(self) -> bool:
        """True when the platform attempt did not fail."""
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        """Shape returned to the API layer for one platform."""
        payload: dict[str, Any] = {
            "products": [p.to_dict() for p in self.products],
            "count": self.count,
            "searchTime": self.search_time,
        }
        if self.error is not None:
            payload["error"] = self.error
        return payload


@dataclass
class SearchResponse:
    """Container for a completed search with its selected best deal."""

    query: str
    results: list[PlatformResult] = field(
        default_factory=lambda: list[PlatformResult]()
    )
    filtered_products: list[ProductListing] = field(
        default_factory=lambda: list[ProductListing]()
    )
    best_deal: ProductListing | None = None

    @property
    def total_products(self) -> int:
        """Listings left after the price and rating filters."""
        return len(self.filtered_products)

    @property
    def errors(self) -> list[str]:
        """``platform: message`` for every failed platform."""
        return [
            f"{r.platform}: {r.error}"
            for r in self.results
            if r.error is not None
        ]

    def to_dict(self) -> dict[str, Any]:
        """Serialise the response for JSON output."""
        return {
            "query": self.query,
            "results": [
                {"platform": r.platform, **r.to_dict()}
                for r in self.results
            ],
            "bestDeal": (
                self.best_deal.to_dict() if self.best_deal else None
            ),
            "totalProducts": self.total_products,
        }
