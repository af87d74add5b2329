"""
Intent → UI action routing.

route_intent() is pure and total: every intent, known or not, yields a
RouterAction with a speakable Malayalam reply. Nothing here changes
application state; the caller applies the action.
"""
import logging
from typing import Any, Dict, Mapping, Optional

from ..data_types import ClassifiedIntent, RouterAction
from .phrases import PhraseBook, format_number, get_phrase_book

logger = logging.getLogger(__name__)

INTENT_TO_OPERATION: Dict[str, str] = {
    "billing.add": "add_to_cart",
    "billing.remove": "remove_from_cart",
    "billing.clear": "clear_cart",
    "billing.total": "show_total",
    "billing.complete": "show_total",
    "payment.upi": "show_qr",
    "payment.cash": "complete_payment",
    "stock.check": "check_stock",
    "inventory.check": "check_stock",
    "stock.location": "find_location",
    "inventory.add": "add_stock",
    "inventory.update": "update_price",
    "inventory.low_stock": "check_low_stock",
    "report.today": "report_today",
    "report.week": "report_week",
    "report.product": "report_product",
    "report.profit": "report_profit",
    "confirm": "confirm",
    "general.confirm": "confirm",
    "cancel": "cancel",
    "general.cancel": "cancel",
    "help": "help",
    "general.help": "help",
    "greeting": "greet",
    "general.greeting": "greet",
    "general.addmore": "add_to_cart",
}

OPERATION_TO_MODE: Dict[str, str] = {
    "add_to_cart": "billing",
    "remove_from_cart": "billing",
    "clear_cart": "billing",
    "show_total": "billing",
    "show_qr": "payment",
    "complete_payment": "payment",
    "check_stock": "stock",
    "find_location": "stock",
    "add_stock": "inventory",
    "update_price": "inventory",
    "check_low_stock": "inventory",
    "report_today": "reports",
    "report_week": "reports",
    "report_product": "reports",
    "report_profit": "reports",
}

NO_OPERATION = "none"
IDLE_MODE = "idle"


def operation_for(intent: str) -> str:
    return INTENT_TO_OPERATION.get(intent, NO_OPERATION)


def mode_for(operation: str) -> str:
    return OPERATION_TO_MODE.get(operation, IDLE_MODE)


def _as_number(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class IntentRouter:
    """
    Maps classified intents to UI actions and voice replies.

    Args:
        phrases: Phrase library; defaults to the bundled phrases.yaml
    """

    def __init__(self, phrases: Optional[PhraseBook] = None):
        self.phrases = phrases or get_phrase_book()

    def route(self, classified: ClassifiedIntent) -> RouterAction:
        operation = operation_for(classified.intent)
        mode = mode_for(operation)
        entities = dict(classified.entities)
        voice_response = self.phrases.render(
            operation, self._phrase_data(entities), intent=classified.intent)

        logger.debug(
            f"Routed {classified.intent} → {operation}",
            extra={"stage": "routing", "intent": classified.intent, "operation": operation},
        )
        return RouterAction(
            mode=mode,
            operation=operation,
            voice_response=voice_response,
            entities=entities,
        )

    def _phrase_data(self, entities: Mapping[str, Any]) -> Dict[str, Any]:
        """Template fields for an entity bag; missing entities get neutral defaults."""
        quantity = _as_number(entities.get("quantity"))
        total = _as_number(entities.get("total"))
        price = _as_number(entities.get("price"))

        data: Dict[str, Any] = {
            "product": entities.get("product_ml") or entities.get("product") or "",
            "quantity": self.phrases.to_malayalam_number(1 if quantity is None else quantity),
            "unit": self.phrases.to_malayalam_unit(entities.get("unit") or "piece"),
            "total": format_number(total or 0),
            "known_total": format_number(total) if total is not None else "",
            "price": format_number(price) if price is not None else "",
            "location": entities.get("location") or "",
            "items": "",
        }
        items = entities.get("items")
        if isinstance(items, (list, tuple)) and len(items) > 1:
            data["items"] = ", ".join(str(i) for i in items)
        return data


_default_router: Optional[IntentRouter] = None


def get_router() -> IntentRouter:
    global _default_router
    if _default_router is None:
        _default_router = IntentRouter()
    return _default_router


def route_intent(classified: ClassifiedIntent) -> RouterAction:
    """Module-level shortcut for get_router().route(classified)."""
    return get_router().route(classified)


# ============================================================================
# Conversation helpers
# ============================================================================

def is_billing_add(classified: ClassifiedIntent) -> bool:
    return classified.intent == "billing.add"


def is_confirm(classified: ClassifiedIntent) -> bool:
    return classified.intent in ("confirm", "general.confirm")


def is_cancel(classified: ClassifiedIntent) -> bool:
    return classified.intent in ("cancel", "general.cancel")


def is_add_more(classified: ClassifiedIntent) -> bool:
    """A "yes" after "anything else?" counts as wanting to add more."""
    return classified.intent in ("confirm", "general.confirm", "general.addmore")
