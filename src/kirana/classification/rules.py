"""
Intent matcher tables.

Loads config/data/intent_rules.yaml into immutable rule objects. Patterns
are compiled once at load time.
"""
import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, FrozenSet, Optional, Pattern, Tuple

import yaml

from ..config import DATA_DIR
from ..data_types import INTENTS

logger = logging.getLogger(__name__)

RULES_FILE = "intent_rules.yaml"

LEGACY_ENTITY_KINDS = frozenset({"quantity", "unit", "product", "price"})


def _compile_all(patterns, intent: str) -> Tuple[Pattern, ...]:
    compiled = []
    for pattern in patterns or ():
        try:
            compiled.append(re.compile(str(pattern), re.IGNORECASE))
        except re.error as e:
            raise ValueError(f"Bad pattern for {intent!r}: {pattern!r} ({e})") from e
    return tuple(compiled)


def _check_intent(intent: str) -> None:
    if intent not in INTENTS:
        raise ValueError(f"Unknown intent {intent!r} in intent rules")


@dataclass(frozen=True)
class ScoringRule:
    """
    Pattern + keyword matcher for one intent.

    Attributes:
        intent: Taxonomy intent this rule votes for
        patterns: Any hit adds 0.5 (once)
        keywords: Each keyword found adds 0.3
        multiplier: Applied to the raw score
    """
    intent: str
    patterns: Tuple[Pattern, ...]
    keywords: Tuple[str, ...]
    multiplier: float

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScoringRule":
        intent = str(data["intent"])
        _check_intent(intent)
        return cls(
            intent=intent,
            patterns=_compile_all(data.get("patterns"), intent),
            # Keywords are compared against normalized (lowercased) text
            keywords=tuple(dict.fromkeys(str(k).lower() for k in data.get("keywords") or ())),
            multiplier=float(data.get("multiplier", 1.0)),
        )


@dataclass(frozen=True)
class LegacyRule:
    """
    First-match rule of the legacy table.

    Attributes:
        intent: Taxonomy intent reported on a hit
        priority: Higher priorities are tried first
        patterns: Any hit selects this rule
        entities: Entity kinds extracted on a hit
    """
    intent: str
    priority: int
    patterns: Tuple[Pattern, ...]
    entities: FrozenSet[str]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LegacyRule":
        intent = str(data["intent"])
        _check_intent(intent)
        entities = frozenset(str(e) for e in data.get("entities") or ())
        unknown = entities - LEGACY_ENTITY_KINDS
        if unknown:
            raise ValueError(f"Unknown entity kinds {sorted(unknown)} for {intent!r}")
        return cls(
            intent=intent,
            priority=int(data.get("priority", 0)),
            patterns=_compile_all(data.get("patterns"), intent),
            entities=entities,
        )


@dataclass(frozen=True)
class IntentRules:
    """Both matcher tables plus the legacy filler vocabulary."""
    scoring_rules: Tuple[ScoringRule, ...]
    legacy_rules: Tuple[LegacyRule, ...]
    filler_words: FrozenSet[str]

    @property
    def vocabulary_words(self) -> FrozenSet[str]:
        """Filler words plus every word of every scoring keyword."""
        words = set(self.filler_words)
        for rule in self.scoring_rules:
            for keyword in rule.keywords:
                words.update(keyword.split())
        return frozenset(words)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IntentRules":
        scoring = tuple(ScoringRule.from_dict(r) for r in data.get("scoring_rules") or ())
        legacy = [LegacyRule.from_dict(r) for r in data.get("legacy_rules") or ()]
        # sorted() is stable: file order survives within a priority
        legacy.sort(key=lambda rule: rule.priority, reverse=True)
        return cls(
            scoring_rules=scoring,
            legacy_rules=tuple(legacy),
            filler_words=frozenset(
                str(w).lower() for w in data.get("legacy_filler_words") or ()),
        )


def load_rules_file(path: Path) -> IntentRules:
    with path.open(encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    rules = IntentRules.from_dict(raw)
    logger.debug(
        "Loaded intent rules",
        extra={"path": str(path), "scoring_rules": len(rules.scoring_rules),
               "legacy_rules": len(rules.legacy_rules)},
    )
    return rules


@lru_cache(maxsize=1)
def get_intent_rules(path: Optional[str] = None) -> IntentRules:
    """Intent rules from ``path`` or the bundled intent_rules.yaml (cached)."""
    return load_rules_file(Path(path) if path else DATA_DIR / RULES_FILE)
