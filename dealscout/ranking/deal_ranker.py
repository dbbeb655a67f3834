# dealscout/ranking/deal_ranker.py

"""Best-deal selection: availability filter, scam filter, weighted score."""

import logging
import math
import statistics
from dataclasses import dataclass, field

from dealscout.config.settings import Settings
from dealscout.models.listing import Availability, ProductListing
from dealscout.ranking.stats import calculate_total_cost

logger = logging.getLogger("dealscout.ranking")


@dataclass(frozen=True)
class ScoringWeights:
    """Relative weight of each [0, 100] sub-score in the total."""

    price: float = 0.5
    trust: float = 0.3
    shipping: float = 0.15
    availability: float = 0.05


@dataclass(frozen=True)
class ScamHeuristics:
    """Tunable thresholds for the scam filter."""

    flag_cutoff: int = Settings.SCAM_FLAG_CUTOFF
    price_stddev_threshold: float = Settings.SCAM_PRICE_STDDEV
    low_rating_threshold: float = Settings.SCAM_LOW_RATING
    min_reviews_for_perfect: int = Settings.SCAM_MIN_REVIEWS_FOR_PERFECT
    suspicious_sellers: tuple[str, ...] = tuple(
        Settings.SUSPICIOUS_SELLER_KEYWORDS
    )


@dataclass(frozen=True)
class ScoredListing:
    """A listing with its total score and the sub-scores behind it."""

    listing: ProductListing
    score: float
    price_score: float
    trust_score: float
    shipping_score: float
    availability_score: float


_AVAILABILITY_SCORES: dict[Availability, float] = {
    Availability.IN_STOCK: 100.0,
    Availability.PREORDER: 50.0,
    Availability.OUT_OF_STOCK: 0.0,
}


@dataclass
class DealRanker:
    """Scores listings and picks the best deal.

    Pipeline: keep in-stock listings, drop listings raising at least
    ``heuristics.flag_cutoff`` scam flags, score the rest and sort by
    score. Equal scores are broken by lower total cost, then lower
    price, then input order.
    """

    weights: ScoringWeights = field(default_factory=ScoringWeights)
    heuristics: ScamHeuristics = field(default_factory=ScamHeuristics)

    # ── Filters ──────────────────────────────────────────

    @staticmethod
    def filter_available(
        listings: list[ProductListing],
    ) -> list[ProductListing]:
        """Keep only in-stock listings."""
        return [
            item
            for item in listings
            if item.availability is Availability.IN_STOCK
        ]

    def has_suspicious_seller(self, seller: str) -> bool:
        """True when the seller name contains a blacklisted keyword."""
        lowered = seller.lower()
        return any(kw in lowered for kw in self.heuristics.suspicious_sellers)

    def scam_flags(
        self,
        listing: ProductListing,
        mean_price: float,
        stddev: float,
    ) -> list[str]:
        """Name every scam heuristic *listing* trips against the set stats."""
        h = self.heuristics
        flags: list[str] = []
        if (
            mean_price > 0
            and listing.price < mean_price - h.price_stddev_threshold * stddev
        ):
            flags.append("price_too_low")
        if (
            listing.rating is None or listing.rating < h.low_rating_threshold
        ) and listing.price > mean_price:
            flags.append("low_rating_high_price")
        if (
            listing.rating == 5
            and listing.review_count < h.min_reviews_for_perfect
        ):
            flags.append("unearned_perfect_rating")
        if self.has_suspicious_seller(listing.seller):
            flags.append("suspicious_seller")
        return flags

    def detect_scams(
        self, listings: list[ProductListing]
    ) -> list[ProductListing]:
        """Return the listings that stay under the scam flag cutoff."""
        if not listings:
            return []

        prices = [item.price for item in listings]
        mean_price = statistics.fmean(prices)
        stddev = statistics.pstdev(prices, mu=mean_price)

        legitimate: list[ProductListing] = []
        for item in listings:
            flags = self.scam_flags(item, mean_price, stddev)
            if len(flags) >= self.heuristics.flag_cutoff:
                logger.info(
                    "Excluded suspicious listing '%s' from %s (%s)",
                    item.name,
                    item.seller,
                    ", ".join(flags),
                )
                continue
            legitimate.append(item)
        return legitimate

    # ── Sub-scores ───────────────────────────────────────

    @staticmethod
    def price_score(
        listing: ProductListing, comparison: list[ProductListing]
    ) -> float:
        """Lowest price in the set scores 100, highest scores 0."""
        if not comparison:
            return 50.0
        prices = [item.price for item in comparison]
        low, high = min(prices), max(prices)
        if low == high:
            return 100.0
        return (high - listing.price) / (high - low) * 100

    @staticmethod
    def trust_score(listing: ProductListing) -> float:
        """Up to 70 points for rating plus up to 30 for review volume."""
        rating = listing.rating or 0.0
        rating_points = (rating / 5) * 70
        review_points = min(30.0, math.log10(listing.review_count + 1) * 10)
        return rating_points + review_points

    @staticmethod
    def shipping_score(
        listing: ProductListing, comparison: list[ProductListing]
    ) -> float:
        """Free shipping scores 100; paid shipping is ranked within the set."""
        if listing.shipping == 0:
            return 100.0
        if listing.shipping is None or not comparison:
            return 50.0
        costs = [
            item.shipping
            for item in comparison
            if item.shipping is not None and item.shipping > 0
        ]
        if not costs:
            return 100.0
        low, high = min(costs), max(costs)
        if low == high:
            return 50.0
        return (high - listing.shipping) / (high - low) * 100

    @staticmethod
    def availability_score(listing: ProductListing) -> float:
        """in_stock 100, preorder 50, out_of_stock 0."""
        return _AVAILABILITY_SCORES.get(listing.availability, 0.0)

    def score(
        self,
        listing: ProductListing,
        comparison: list[ProductListing],
    ) -> ScoredListing:
        """Weighted total of the four sub-scores for *listing*."""
        w = self.weights
        price = self.price_score(listing, comparison)
        trust = self.trust_score(listing)
        shipping = self.shipping_score(listing, comparison)
        availability = self.availability_score(listing)
        total = (
            price * w.price
            + trust * w.trust
            + shipping * w.shipping
            + availability * w.availability
        )
        return ScoredListing(
            listing=listing,
            score=total,
            price_score=price,
            trust_score=trust,
            shipping_score=shipping,
            availability_score=availability,
        )

    # ── Ranking ──────────────────────────────────────────

    def rank(self, listings: list[ProductListing]) -> list[ScoredListing]:
        """Score *listings* against each other, best first."""
        scored = [self.score(item, listings) for item in listings]
        order = sorted(
            range(len(scored)),
            key=lambda i: (
                -scored[i].score,
                calculate_total_cost(scored[i].listing),
                scored[i].listing.price,
                i,
            ),
        )
        return [scored[i] for i in order]

    def find_best_deal(
        self, listings: list[ProductListing]
    ) -> ProductListing | None:
        """Pick the best listing, or ``None`` when nothing is in stock.

        If the scam filter rejects every available listing, the first
        available one is returned rather than nothing.
        """
        available = self.filter_available(listings)
        if not available:
            return None

        legitimate = self.detect_scams(available)
        if not legitimate:
            logger.warning(
                "All %d available listings flagged as suspicious, "
                "falling back to the first one",
                len(available),
            )
            return available[0]

        best = self.rank(legitimate)[0]
        logger.debug(
            "Best deal '%s' on %s scored %.2f",
            best.listing.name,
            best.listing.platform,
            best.score,
        )
        return best.listing


_DEFAULT_RANKER = DealRanker()


def find_best_deal(listings: list[ProductListing]) -> ProductListing | None:
    """Best deal under the default weights and heuristics."""
    return _DEFAULT_RANKER.find_best_deal(listings)
