"""
Stage 2: Intent classification

- rules.py: Matcher tables loaded from intent_rules.yaml
- classifier.py: Ranked scoring/legacy strategies and the product boost
- cloud.py: Adapter for upstream cloud NLU results
"""
from .classifier import (
    IntentClassifier,
    ProductPresenceBoost,
    detect_intent,
    extract_price,
    get_classifier,
    merge_results,
    validate_intent,
)
from .cloud import from_cloud_response, map_intent_name
from .rules import IntentRules, LegacyRule, ScoringRule, get_intent_rules, load_rules_file

__all__ = [
    "IntentClassifier",
    "ProductPresenceBoost",
    "detect_intent",
    "extract_price",
    "get_classifier",
    "merge_results",
    "validate_intent",
    "from_cloud_response",
    "map_intent_name",
    "IntentRules",
    "LegacyRule",
    "ScoringRule",
    "get_intent_rules",
    "load_rules_file",
]
