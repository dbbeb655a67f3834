# dealscout/ranking/stats.py

"""Side-effect-free helpers for sorting and summarising listing sets."""

from dataclasses import dataclass

from dealscout.models.listing import Availability, ProductListing

SORT_CRITERIA: tuple[str, ...] = ("price", "rating", "total_cost")


@dataclass(frozen=True)
class SummaryStats:
    """Aggregate figures over a listing set."""

    count: int = 0
    avg_price: float = 0.0
    min_price: float = 0.0
    max_price: float = 0.0
    avg_rating: float = 0.0
    in_stock: int = 0


def calculate_total_cost(listing: ProductListing) -> float:
    """Price plus shipping (unknown shipping counts as 0)."""
    return listing.price + (listing.shipping or 0.0)


def sort_by(
    listings: list[ProductListing], criteria: str
) -> list[ProductListing]:
    """Return a sorted copy: cheapest first, or best rated first."""
    if criteria == "price":
        return sorted(listings, key=lambda item: item.price)
    if criteria == "rating":
        return sorted(listings, key=lambda item: -(item.rating or 0.0))
    if criteria == "total_cost":
        return sorted(listings, key=calculate_total_cost)
    raise ValueError(
        f"Unknown sort criteria '{criteria}' "
        f"(expected one of {', '.join(SORT_CRITERIA)})"
    )


def summary_stats(listings: list[ProductListing]) -> SummaryStats:
    """Count, price range/average, average known rating, in-stock count."""
    if not listings:
        return SummaryStats()

    prices = [item.price for item in listings]
    ratings = [item.rating for item in listings if item.rating]
    return SummaryStats(
        count=len(listings),
        avg_price=sum(prices) / len(prices),
        min_price=min(prices),
        max_price=max(prices),
        avg_rating=sum(ratings) / len(ratings) if ratings else 0.0,
        in_stock=sum(
            1
            for item in listings
            if item.availability is Availability.IN_STOCK
        ),
    )


def compare_products(first: ProductListing, second: ProductListing) -> str:
    """One or two sentences explaining which offer is cheaper overall."""
    total_first = calculate_total_cost(first)
    total_second = calculate_total_cost(second)
    if total_first <= total_second:
        cheaper, pricier = first, second
    else:
        cheaper, pricier = second, first
    savings = abs(total_first - total_second)

    explanation = (
        f"{cheaper.seller} is {cheaper.currency} {savings:.2f} "
        f"cheaper than {pricier.seller}."
    )
    if cheaper.rating and pricier.rating:
        gap = pricier.rating - cheaper.rating
        if gap > 0.5:
            explanation += (
                f" However, {pricier.seller} has a {gap:.1f} point "
                "higher rating."
            )
    return explanation
