"""
Adapter for intent results produced by an upstream cloud NLU agent.

The network call happens elsewhere; this module only converts the returned
payload into a ClassifiedIntent. Two shapes are accepted:

    {"intent": ..., "confidence": ..., "entities": {...}, "fulfillmentText": ...}

    {"queryResult": {"intent": {"displayName": ...},
                     "intentDetectionConfidence": ...,
                     "parameters": {...},
                     "fulfillmentText": ...}}
"""
import logging
from typing import Any, Dict, Mapping, Optional

from ..data_types import FALLBACK_INTENT, INTENTS, LEGACY_INTENTS, ClassifiedIntent, IntentSource

logger = logging.getLogger(__name__)

# Agent display names that differ from the taxonomy
CLOUD_INTENT_NAMES: Dict[str, str] = {
    "billing.add_item": "billing.add",
    "add_to_bill": "billing.add",
    "remove_from_bill": "billing.remove",
    "clear_bill": "billing.clear",
    "get_total": "billing.total",
    "add_stock": "inventory.add",
    "check_stock": "inventory.check",
    "show_qr": "payment.upi",
    "Default Welcome Intent": "general.greeting",
    "Default Fallback Intent": FALLBACK_INTENT,
}

# Parameter names agents use for each entity, in lookup order
PARAMETER_NAMES: Dict[str, tuple] = {
    "product": ("product", "product-name", "item", "item-name", "productname"),
    "quantity": ("quantity", "number", "amount", "count", "qty"),
    "unit": ("unit", "unit-name", "unitname", "measure"),
    "price": ("price",),
}

NUMERIC_ENTITIES = frozenset({"quantity", "price"})


def map_intent_name(name: Optional[str]) -> str:
    """
    Taxonomy intent for an agent intent name.

    Unknown names become ``fallback``.
    """
    if not name:
        return FALLBACK_INTENT
    name = str(name).strip()
    if name in CLOUD_INTENT_NAMES:
        return CLOUD_INTENT_NAMES[name]
    if name in INTENTS or name in LEGACY_INTENTS:
        return name
    logger.debug(f"Unmapped cloud intent {name!r}", extra={"stage": "cloud_adapter"})
    return FALLBACK_INTENT


def _parse_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def _first_present(params: Mapping[str, Any], names) -> Any:
    for name in names:
        value = params.get(name)
        # Agents send "" for unfilled parameters
        if value not in (None, "", [], {}):
            return value
    return None


def _extract_entities(params: Mapping[str, Any]) -> Dict[str, Any]:
    entities: Dict[str, Any] = {}
    for entity, names in PARAMETER_NAMES.items():
        value = _first_present(params, names)
        if value is None:
            continue
        if isinstance(value, list):
            value = value[0]
        if entity in NUMERIC_ENTITIES:
            value = _parse_float(value)
            if value is None:
                continue
        else:
            value = str(value)
        entities[entity] = value
    return entities


def from_cloud_response(payload: Mapping[str, Any]) -> ClassifiedIntent:
    """
    Convert a cloud NLU payload into a ClassifiedIntent.

    Malformed payloads do not raise; they produce a ``fallback`` result with
    confidence 0.

    Example:
        >>> r = from_cloud_response({"queryResult": {
        ...     "intent": {"displayName": "add_to_bill"},
        ...     "intentDetectionConfidence": 0.91,
        ...     "parameters": {"item": "rice", "number": "2"}}})
        >>> r.intent, r.entities["quantity"]
        ('billing.add', 2.0)
    """
    if not isinstance(payload, Mapping):
        return ClassifiedIntent(FALLBACK_INTENT, 0.0, source=IntentSource.CLOUD)

    query = payload.get("queryResult")
    if isinstance(query, Mapping):
        intent_field = query.get("intent")
        name = intent_field.get("displayName") if isinstance(intent_field, Mapping) else intent_field
        confidence = query.get("intentDetectionConfidence")
        params = query.get("parameters")
        fulfillment = query.get("fulfillmentText")
        raw_text = query.get("queryText", "")
    else:
        name = payload.get("intent")
        confidence = payload.get("confidence")
        params = payload.get("entities")
        fulfillment = payload.get("fulfillmentText")
        raw_text = payload.get("text", "")

    value = _parse_float(confidence)
    confidence = 0.0 if value is None else min(max(value, 0.0), 1.0)

    return ClassifiedIntent(
        intent=map_intent_name(name),
        confidence=confidence,
        entities=_extract_entities(params) if isinstance(params, Mapping) else {},
        source=IntentSource.CLOUD,
        raw_text=str(raw_text or ""),
        fulfillment_text=str(fulfillment or ""),
    )
