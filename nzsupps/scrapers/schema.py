"""Normalized data structures produced by every retailer extractor."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class Currency(str, Enum):
    """Accepted currencies."""

    NZD = "NZD"
    AUD = "AUD"
    USD = "USD"


class Category(str, Enum):
    """Product categories the runners scrape."""

    PROTEIN = "protein"
    CREATINE = "creatine"


class Retailer(str, Enum):
    """The closed set of supported retailers.

    The value is the display name stored with each product; ``key`` is the
    short CLI/runner identifier.
    """

    NZPROTEIN = "NZProtein"
    XPLOSIV = "Xplosiv"
    SPRINTFIT = "SprintFit"
    NOWHEY = "NoWhey"
    CHEMIST_WAREHOUSE = "Chemist Warehouse"

    @property
    def key(self) -> str:
        return self.value.lower().replace(" ", "")

    @classmethod
    def from_key(cls, key: str) -> "Retailer":
        """Resolve a runner key such as "chemistwarehouse" to a Retailer.

        Raises:
            ValueError: If the key names no retailer
        """
        wanted = (key or "").strip().lower()
        for retailer in cls:
            if retailer.key == wanted:
                return retailer
        raise ValueError(f"Unknown retailer key: {key!r}")


# Default run order for category batches
RETAILER_ORDER: Tuple[Retailer, ...] = (
    Retailer.NZPROTEIN,
    Retailer.XPLOSIV,
    Retailer.SPRINTFIT,
    Retailer.NOWHEY,
    Retailer.CHEMIST_WAREHOUSE,
)


@dataclass(frozen=True)
class Money:
    """A price in minor currency units."""

    amount_cents: int
    currency: Currency = Currency.NZD

    def to_dict(self) -> Dict[str, Any]:
        return {"amountCents": self.amount_cents, "currency": self.currency.value}


def utc_now_iso() -> str:
    """Current instant as an ISO-8601 UTC string."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _parse_iso(value: str) -> datetime:
    # fromisoformat() only accepts a trailing "Z" from Python 3.11
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


@dataclass(frozen=True)
class Product:
    """Normalized product record returned by all extractors.

    ``flavours`` is None when variant lookup does not apply (creatine,
    retailers without a variant control) and an empty tuple when a lookup
    ran but found nothing. ``weight_grams`` is None when the title carries
    no parseable weight.
    """

    id: str  # brand:name:weight, lowercased, whitespace -> "_"
    brand: str
    name: str
    price: Money
    in_stock: bool
    url: str
    retailer: Retailer
    scraped_at: str = field(default_factory=utc_now_iso)
    weight_grams: Optional[int] = None
    flavours: Optional[Tuple[str, ...]] = None

    def __post_init__(self):
        """Validate data after initialization."""
        if not self.id:
            raise ValueError("id is required")
        if not self.brand:
            raise ValueError("brand is required")
        if not self.name:
            raise ValueError("name is required")
        if not self.url or not self.url.startswith("http"):
            raise ValueError(f"url must be absolute: {self.url!r}")
        if self.price is None or self.price.amount_cents <= 0:
            raise ValueError("price.amount_cents must be positive")
        if self.weight_grams is not None and self.weight_grams <= 0:
            raise ValueError("weight_grams must be positive when present")
        try:
            _parse_iso(self.scraped_at)
        except (TypeError, ValueError):
            raise ValueError(f"scraped_at is not an ISO-8601 instant: {self.scraped_at!r}")

    def to_dict(self) -> Dict[str, Any]:
        """Serialise to the JSON shape stored alongside each snapshot row."""
        payload: Dict[str, Any] = {
            "id": self.id,
            "brand": self.brand,
            "name": self.name,
            "price": self.price.to_dict(),
            "inStock": self.in_stock,
            "url": self.url,
            "scrapedAt": self.scraped_at,
            "retailer": self.retailer.value,
        }
        if self.weight_grams is not None:
            payload["weight_grams"] = self.weight_grams
        if self.flavours is not None:
            payload["flavours"] = list(self.flavours)
        return payload


@dataclass
class ScrapeResult:
    """Products scraped in one extractor run plus non-fatal error messages."""

    products: List[Product] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @classmethod
    def failed(cls, message: str) -> "ScrapeResult":
        return cls(products=[], errors=[message])
