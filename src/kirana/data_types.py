"""
Data structures for the voice command pipeline.

This module defines the contracts between pipeline stages using dataclasses
for type safety, validation, and better IDE support.
"""
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


UNIT_CODES = ("kg", "g", "litre", "ml", "piece", "pack")

# Fixed intent taxonomy, in the order the router documents them
INTENTS = (
    "billing.add",
    "billing.remove",
    "billing.clear",
    "billing.total",
    "billing.complete",
    "payment.upi",
    "payment.cash",
    "inventory.add",
    "inventory.update",
    "inventory.check",
    "inventory.low_stock",
    "stock.location",
    "report.today",
    "report.week",
    "report.product",
    "report.profit",
    "confirm",
    "cancel",
    "help",
    "greeting",
    "general.addmore",
    "fallback",
)

# Older intent names some upstream NLU agents still emit
LEGACY_INTENTS = (
    "stock.check",
    "general.confirm",
    "general.cancel",
    "general.help",
    "general.greeting",
)

FALLBACK_INTENT = "fallback"


class IntentSource(Enum):
    """Which classifier produced an intent."""
    SCORED = "scored"
    LEGACY = "legacy"
    CLOUD = "cloud"
    NONE = "none"


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _check_confidence(value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"Confidence must be between 0 and 1, got {value}")


@dataclass(frozen=True)
class ProductDefinition:
    """
    One catalog product.

    Attributes:
        name_en: Canonical English name, unique across the catalog
        name_ml: Malayalam display name
        aliases: Alternate spellings used only for matching
        unit: Natural selling unit (one of UNIT_CODES)
        price: Selling price
        cost_price: Purchase price
        gst_rate: GST percentage
        category, min_stock, shelf_location: informational
    """
    name_en: str
    name_ml: str
    aliases: Tuple[str, ...] = ()
    unit: str = "piece"
    price: Decimal = Decimal("0")
    cost_price: Decimal = Decimal("0")
    gst_rate: int = 0
    category: str = ""
    min_stock: int = 0
    shelf_location: str = ""

    def __post_init__(self):
        """Validate product attributes."""
        if not isinstance(self.name_en, str) or not self.name_en.strip():
            raise ValueError("Product name_en must be a non-empty string")
        if not isinstance(self.name_ml, str) or not self.name_ml.strip():
            raise ValueError(f"Product {self.name_en!r} has no name_ml")
        if self.unit not in UNIT_CODES:
            raise ValueError(f"Product {self.name_en!r} has unknown unit {self.unit!r}")
        if self.price < 0 or self.cost_price < 0:
            raise ValueError(f"Product {self.name_en!r} has a negative price")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProductDefinition":
        """
        Create a ProductDefinition from a dictionary (as loaded from YAML).

        Raises:
            ValueError: If a required field is missing or invalid
        """
        missing = [key for key in ("name_en", "name_ml", "unit") if not data.get(key)]
        if missing:
            raise ValueError(f"Product record missing {missing}: {data}")

        return cls(
            name_en=str(data["name_en"]).strip(),
            name_ml=str(data["name_ml"]).strip(),
            aliases=tuple(str(a) for a in data.get("aliases") or ()),
            unit=str(data["unit"]),
            price=_to_decimal(data.get("price", 0)),
            cost_price=_to_decimal(data.get("cost_price", 0)),
            gst_rate=int(data.get("gst_rate", 0)),
            category=str(data.get("category", "")),
            min_stock=int(data.get("min_stock", 0)),
            shelf_location=str(data.get("shelf_location", "")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name_en": self.name_en,
            "name_ml": self.name_ml,
            "aliases": list(self.aliases),
            "unit": self.unit,
            "price": float(self.price),
            "cost_price": float(self.cost_price),
            "gst_rate": self.gst_rate,
            "category": self.category,
            "min_stock": self.min_stock,
            "shelf_location": self.shelf_location,
        }


@dataclass(frozen=True)
class ProductMatch:
    """Result of looking a product up in free text."""
    name_en: str
    name_ml: str
    confidence: float
    alias: str
    method: str  # "exact" or "fuzzy"

    def __post_init__(self):
        _check_confidence(self.confidence)


@dataclass
class ParsedItem:
    """
    One item recognised in a segment of an utterance.

    Attributes:
        raw_text: The segment the item was parsed from
        product_name: Canonical English product name
        product_ml: Malayalam display name
        quantity: Non-negative amount (fractions allowed)
        unit: One of UNIT_CODES
        confidence: Product match confidence (0.0 to 1.0)
        unit_price: Catalog selling price, when known
    """
    raw_text: str
    product_name: str
    product_ml: str
    quantity: float
    unit: str
    confidence: float
    unit_price: Optional[Decimal] = None

    def __post_init__(self):
        """Validate item attributes."""
        if self.quantity < 0:
            raise ValueError(f"Quantity must be non-negative, got {self.quantity}")
        if self.unit not in UNIT_CODES:
            raise ValueError(f"Unknown unit {self.unit!r}")
        _check_confidence(self.confidence)

    @property
    def amount(self) -> Optional[Decimal]:
        """Line amount (quantity x unit price), rounded to paise."""
        if self.unit_price is None:
            return None
        value = _to_decimal(self.quantity) * self.unit_price
        return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    def to_dict(self) -> Dict[str, Any]:
        amount = self.amount
        return {
            "raw_text": self.raw_text,
            "product_name": self.product_name,
            "product_ml": self.product_ml,
            "quantity": self.quantity,
            "unit": self.unit,
            "confidence": round(self.confidence, 4),
            "unit_price": float(self.unit_price) if self.unit_price is not None else None,
            "amount": float(amount) if amount is not None else None,
        }


@dataclass
class ClassifiedIntent:
    """
    Intent decision for one utterance.

    The entity bag is sparse: keys are only present when something was
    found. Known keys are product, product_ml, quantity, unit, price,
    amount, total and items.
    """
    intent: str
    confidence: float
    entities: Dict[str, Any] = field(default_factory=dict)
    source: IntentSource = IntentSource.SCORED
    raw_text: str = ""
    fulfillment_text: str = ""

    def __post_init__(self):
        """Validate classification attributes."""
        if not isinstance(self.intent, str) or not self.intent:
            raise TypeError(f"Intent must be a non-empty str, got {self.intent!r}")
        _check_confidence(self.confidence)

    @property
    def product(self) -> Optional[str]:
        return self.entities.get("product")

    @property
    def is_fallback(self) -> bool:
        return self.intent == FALLBACK_INTENT

    def to_dict(self) -> Dict[str, Any]:
        return {
            "intent": self.intent,
            "confidence": round(self.confidence, 4),
            "entities": dict(self.entities),
            "source": self.source.value,
            "fulfillment_text": self.fulfillment_text,
        }


@dataclass
class RouterAction:
    """What the UI should do in response to an utterance."""
    mode: str
    operation: str
    voice_response: str
    entities: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode,
            "operation": self.operation,
            "voice_response": self.voice_response,
            "entities": dict(self.entities),
        }


@dataclass
class CommandResult:
    """
    Complete output of the pipeline for one utterance.

    Attributes:
        text: Utterance as received
        transcript: Utterance after transcript rewrites
        intent: Final classification
        items: Items parsed for item-bearing intents (may be empty)
        action: Routed UI action
        valid: False when the intent lacks an entity it requires
        timings: Per-stage durations in milliseconds
    """
    text: str
    transcript: str
    intent: ClassifiedIntent
    items: List[ParsedItem] = field(default_factory=list)
    action: Optional[RouterAction] = None
    valid: bool = True
    timings: Dict[str, float] = field(default_factory=dict)

    @property
    def total(self) -> Optional[Decimal]:
        amounts = [item.amount for item in self.items]
        if not amounts or any(a is None for a in amounts):
            return None
        return sum(amounts, Decimal("0"))

    def to_dict(self) -> Dict[str, Any]:
        total = self.total
        return {
            "text": self.text,
            "transcript": self.transcript,
            "intent": self.intent.to_dict(),
            "items": [item.to_dict() for item in self.items],
            "total": float(total) if total is not None else None,
            "action": self.action.to_dict() if self.action else None,
            "valid": self.valid,
            "timings": dict(self.timings),
        }
