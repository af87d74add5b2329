"""
Two-tier intent classification.

Strategies run in order until one is confident enough:

    (pattern + keyword scoring, INTENT_ACCEPT_THRESHOLD)
    (legacy first-match table,  0.0)

Results are merged by confidence; a product found by either tier is kept.
Entity extraction (quantity, unit, product, price) runs on every utterance
regardless of the intent.
"""
import logging
import re
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..catalog import ProductCatalog, get_catalog
from ..config import KiranaConfig, config
from ..data_types import FALLBACK_INTENT, ClassifiedIntent, IntentSource
from ..extraction.fuzzy_matcher import ProductMatcher
from ..extraction.lexicon import Lexicon, get_lexicon
from ..extraction.normalization import normalize
from ..extraction.quantity import find_quantity, find_unit
from .rules import IntentRules, LegacyRule, get_intent_rules

logger = logging.getLogger(__name__)

PATTERN_SCORE = 0.5
KEYWORD_SCORE = 0.3

# Intents that cannot be acted on without a product
PRODUCT_REQUIRED_INTENTS = frozenset({"billing.add", "billing.remove"})

_PRICE = re.compile(r"(?:വില|price)\s*(?:is\s*)?(\d+(?:\.\d+)?)", re.IGNORECASE)
_NUMERIC_TOKEN = re.compile(r"(\d+(?:\.\d+)?)([a-z]*)")

Strategy = Callable[[str], Optional[ClassifiedIntent]]


def extract_price(text: str) -> Optional[float]:
    """Price named after "വില" or "price", e.g. "അരി വില 60" → 60.0."""
    match = _PRICE.search(text or "")
    return float(match.group(1)) if match else None


def merge_results(current: ClassifiedIntent, candidate: ClassifiedIntent) -> ClassifiedIntent:
    """
    Keep the more confident of two results.

    Ties keep ``current``. If the kept result has no product but the other
    one does, the product entities are copied over.
    """
    winner, other = (candidate, current) if candidate.confidence > current.confidence \
        else (current, candidate)

    if "product" not in winner.entities and "product" in other.entities:
        entities = dict(winner.entities)
        for key in ("product", "product_ml"):
            if key in other.entities:
                entities[key] = other.entities[key]
        winner = replace(winner, entities=entities)
    return winner


class ProductPresenceBoost:
    """
    Treat a recognised product as evidence of a billing action.

    When the utterance names a catalog product and the best intent is
    billing.add or fallback, the result becomes billing.add with at least
    ``floor`` confidence. Other intents are left alone.
    """

    BOOSTABLE = frozenset({"billing.add", FALLBACK_INTENT})

    def __init__(self, enabled: bool = True, floor: float = 0.8):
        self.enabled = enabled
        self.floor = floor

    def apply(self, result: ClassifiedIntent) -> ClassifiedIntent:
        if not self.enabled or "product" not in result.entities:
            return result
        if result.intent not in self.BOOSTABLE:
            return result

        boosted = replace(
            result,
            intent="billing.add",
            confidence=max(result.confidence, self.floor),
            source=IntentSource.SCORED if result.source == IntentSource.NONE else result.source,
        )
        logger.debug(
            f"Product boost: {result.intent} → billing.add",
            extra={"stage": "product_boost", "confidence": boosted.confidence},
        )
        return boosted


class IntentClassifier:
    """
    Stateless utterance classifier.

    Args:
        catalog: Product catalog; defaults to the process-wide catalog
        lexicon: Vocabulary; defaults to the bundled lexicon
        rules: Matcher tables; defaults to the bundled intent_rules.yaml
        matcher: Product matcher; built over ``catalog`` when omitted
        cfg: Thresholds and toggles; defaults to the global config
    """

    def __init__(
        self,
        catalog: Optional[ProductCatalog] = None,
        lexicon: Optional[Lexicon] = None,
        rules: Optional[IntentRules] = None,
        matcher: Optional[ProductMatcher] = None,
        cfg: Optional[KiranaConfig] = None,
    ):
        self.config = cfg or config
        self.catalog = catalog or get_catalog()
        self.lexicon = lexicon or get_lexicon()
        self.rules = rules or get_intent_rules()
        self.matcher = matcher or ProductMatcher(self.catalog, lexicon=self.lexicon)
        # Intent words are never read as misspelled products
        self.entity_ignore_words = self.rules.vocabulary_words
        self.boost = ProductPresenceBoost(
            enabled=self.config.ENABLE_PRODUCT_BOOST,
            floor=self.config.PRODUCT_BOOST_FLOOR,
        )

        # Ranked strategies: stop at the first result that clears its bar
        self.strategies: List[Tuple[Strategy, float]] = [
            (self.score_intent, self.config.INTENT_ACCEPT_THRESHOLD),
            (self.match_legacy, 0.0),
        ]

    # -----------------------------------------------------
    # Public API
    # -----------------------------------------------------

    def classify(self, text: str) -> ClassifiedIntent:
        """
        Classify one utterance.

        Never raises for unrecognised input: the result is ``fallback`` with
        confidence 0.
        """
        if not text or not text.strip():
            return ClassifiedIntent(FALLBACK_INTENT, 0.0, source=IntentSource.NONE,
                                    raw_text=text or "")

        result: Optional[ClassifiedIntent] = None
        for strategy, min_confidence in self.strategies:
            candidate = strategy(text)
            if candidate is None:
                continue
            result = candidate if result is None else merge_results(result, candidate)
            if not result.is_fallback and result.confidence >= min_confidence:
                break

        if result is None:
            result = ClassifiedIntent(FALLBACK_INTENT, 0.0, source=IntentSource.NONE,
                                      raw_text=text)

        logger.debug(
            f"Classified as {result.intent}",
            extra={"stage": "classification", "intent": result.intent,
                   "confidence": round(result.confidence, 3), "source": result.source.value},
        )
        return result

    def extract_entities(self, text: str) -> Dict[str, Any]:
        """Sparse entity bag: only what was found is present."""
        entities: Dict[str, Any] = {}

        quantity = find_quantity(text, self.lexicon)
        if quantity is not None:
            entities["quantity"] = quantity

        unit = find_unit(text, self.lexicon)
        if unit is not None:
            entities["unit"] = unit

        match = self.matcher.find_product(text, self.entity_ignore_words)
        if match is not None:
            entities["product"] = match.name_en
            entities["product_ml"] = match.name_ml

        price = extract_price(text)
        if price is not None:
            entities["price"] = price

        return entities

    # -----------------------------------------------------
    # Strategy A: pattern + keyword scoring
    # -----------------------------------------------------

    def score_intent(self, text: str) -> ClassifiedIntent:
        stripped = text.strip()
        normalized = normalize(text)

        best_intent = FALLBACK_INTENT
        best_confidence = 0.0
        for rule in self.rules.scoring_rules:
            score = 0.0
            if any(p.search(stripped) for p in rule.patterns):
                score += PATTERN_SCORE
            score += KEYWORD_SCORE * sum(1 for k in rule.keywords if k in normalized)
            if score <= 0:
                continue

            confidence = min(score * rule.multiplier, self.config.MAX_CONFIDENCE)
            # Strict: equal scores keep the earlier rule
            if confidence > best_confidence:
                best_intent, best_confidence = rule.intent, confidence

        result = ClassifiedIntent(
            intent=best_intent,
            confidence=best_confidence,
            entities=self.extract_entities(text),
            source=IntentSource.SCORED if best_intent != FALLBACK_INTENT else IntentSource.NONE,
            raw_text=text,
        )
        return self.boost.apply(result)

    # -----------------------------------------------------
    # Strategy B: legacy first-match table
    # -----------------------------------------------------

    def match_legacy(self, text: str) -> Optional[ClassifiedIntent]:
        stripped = text.strip()
        for rule in self.rules.legacy_rules:
            if any(p.search(stripped) for p in rule.patterns):
                return ClassifiedIntent(
                    intent=rule.intent,
                    confidence=self.config.LEGACY_BASE_CONFIDENCE,
                    entities=self._legacy_entities(rule, text),
                    source=IntentSource.LEGACY,
                    raw_text=text,
                )
        return None

    def _legacy_entities(self, rule: LegacyRule, text: str) -> Dict[str, Any]:
        entities: Dict[str, Any] = {}
        if "quantity" in rule.entities:
            quantity = find_quantity(text, self.lexicon)
            if quantity is not None:
                entities["quantity"] = quantity
        if "unit" in rule.entities:
            unit = find_unit(text, self.lexicon)
            if unit is not None:
                entities["unit"] = unit
        if "price" in rule.entities:
            price = extract_price(text)
            if price is not None:
                entities["price"] = price
        if "product" in rule.entities:
            product = self.catalog.lookup(self._residual_phrase(text))
            if product is not None:
                entities["product"] = product.name_en
                entities["product_ml"] = product.name_ml
        return entities

    def _residual_phrase(self, text: str) -> str:
        """Utterance minus numbers, units and command words."""
        kept = []
        for token in normalize(text).split():
            numeric = _NUMERIC_TOKEN.fullmatch(token)
            if numeric and (not numeric.group(2) or numeric.group(2) in self.lexicon.unit_words):
                continue
            if (token in self.lexicon.number_words or token in self.lexicon.unit_words
                    or token in self.rules.filler_words):
                continue
            kept.append(token)
        return " ".join(kept)


def validate_intent(intent: str, entities: Dict[str, Any]) -> bool:
    """
    Check that an intent carries the entities it needs.

    billing.add and billing.remove require a product; everything else is
    always valid.
    """
    if intent in PRODUCT_REQUIRED_INTENTS:
        return bool(entities.get("product"))
    return True


_default_classifier: Optional[IntentClassifier] = None


def get_classifier() -> IntentClassifier:
    """Shared classifier over the bundled catalog, lexicon and rules."""
    global _default_classifier
    if _default_classifier is None:
        _default_classifier = IntentClassifier()
    return _default_classifier


def detect_intent(text: str) -> ClassifiedIntent:
    """Module-level shortcut for get_classifier().classify(text)."""
    return get_classifier().classify(text)
