# dealscout/models/listing.py

"""Normalised product listing shared by every pipeline stage."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class Availability(str, Enum):
    """Stock state of a listing."""

    IN_STOCK = "in_stock"
    OUT_OF_STOCK = "out_of_stock"
    PREORDER = "preorder"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ProductListing:
    """One offer for one product on one platform at one point in time.

    Instances are immutable; use :func:`dataclasses.replace` to derive
    an updated copy. ``extracted_at`` is stamped on creation.
    """

    name: str
    price: float
    currency: str
    seller: str
    platform: str
    rating: float | None = None
    review_count: int = 0
    availability: Availability = Availability.IN_STOCK
    shipping: float | None = None
    url: str | None = None
    image_url: str | None = None
    extracted_at: datetime = field(default_factory=_utc_now)

    @property
    def is_valid(self) -> bool:
        """True when the listing has a name and a positive price."""
        return bool(self.name.strip()) and self.price > 0

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a JSON-safe dict using the wire field names."""
        return {
            "name": self.name,
            "price": self.price,
            "currency": self.currency,
            "seller": self.seller,
            "rating": self.rating,
            "reviewCount": self.review_count,
            "availability": self.availability.value,
            "shipping": self.shipping,
            "url": self.url,
            "platform": self.platform,
            "imageUrl": self.image_url,
            "extractedAt": self.extracted_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProductListing":
        """Rehydrate a listing produced by :meth:`to_dict`."""
        rating = data.get("rating")
        shipping = data.get("shipping")
        extracted_raw = data.get("extractedAt")
        extracted_at = (
            datetime.fromisoformat(extracted_raw)
            if extracted_raw
            else _utc_now()
        )
        return cls(
            name=str(data["name"]),
            price=float(data["price"]),
            currency=str(data.get("currency", "")),
            seller=str(data.get("seller", "")),
            platform=str(data.get("platform", "")),
            rating=float(rating) if rating is not None else None,
            review_count=int(data.get("reviewCount") or 0),
            availability=Availability(
                data.get("availability", Availability.IN_STOCK.value)
            ),
            shipping=float(shipping) if shipping is not None else None,
            url=data.get("url"),
            image_url=data.get("imageUrl"),
            extracted_at=extracted_at,
        )
