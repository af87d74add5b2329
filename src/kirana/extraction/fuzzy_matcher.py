"""
Catalog product lookup in free text.

Two stages:
1. Exact containment: the longest alias contained in the normalized text
   wins, with a fixed high confidence. Latin-script aliases only count
   between non-letters; Malayalam aliases match anywhere.
2. Fuzzy recovery: each word of 3+ characters is compared with every alias
   of 3+ characters by Dice bigram similarity; the best pair is accepted
   only if it clears the threshold. Numerals and the lexicon's own number
   and unit words are never candidates ("നാല്" is four, not "പാല്").

Matches:
- "10 kg അരി" → Rice (alias "അരി")
- "ചുവന്ന അരി" → Red Rice, not Rice
- "panchasara" → Sugar (fuzzy, close to "panchara")

Does NOT match:
- "xyz" → nothing clears the threshold
"""
import logging
import re
from collections import Counter
from typing import AbstractSet, FrozenSet, List, Optional, Pattern, Tuple

from rapidfuzz import process

from ..catalog import ProductCatalog, get_catalog
from ..config import config
from ..data_types import ProductMatch
from .lexicon import Lexicon, get_lexicon
from .normalization import normalize

logger = logging.getLogger(__name__)

MIN_FUZZY_LENGTH = 3

_LATIN_ALIAS = re.compile(r"^[a-z0-9 &'\-]+$")


def _latin_boundary(alias: str) -> Pattern:
    return re.compile(r"(?<![a-z])" + re.escape(alias) + r"(?![a-z])")


def _bigrams(text: str) -> Counter:
    return Counter(text[i:i + 2] for i in range(len(text) - 1))


def dice_coefficient(a: str, b: str) -> float:
    """
    Sørensen-Dice similarity over character bigrams, in [0, 1].

    Strings shorter than two characters have no bigrams and only match
    themselves.
    """
    if len(a) < 2 or len(b) < 2:
        return 1.0 if a == b else 0.0
    bigrams_a = _bigrams(a)
    bigrams_b = _bigrams(b)
    overlap = sum((bigrams_a & bigrams_b).values())
    return 2.0 * overlap / (sum(bigrams_a.values()) + sum(bigrams_b.values()))


def dice_scorer(query: str, choice: str, **kwargs) -> float:
    """dice_coefficient with the signature rapidfuzz.process expects."""
    return dice_coefficient(query, choice)


class ProductMatcher:
    """
    Finds the catalog product mentioned in a piece of text.

    Args:
        catalog: Product catalog; defaults to the process-wide catalog
        threshold: Dice score a fuzzy match must strictly exceed
        exact_confidence: Confidence reported for alias containment
        lexicon: Vocabulary whose number and unit words are never fuzzy
            candidates; defaults to the bundled lexicon
    """

    def __init__(
        self,
        catalog: Optional[ProductCatalog] = None,
        threshold: Optional[float] = None,
        exact_confidence: Optional[float] = None,
        lexicon: Optional[Lexicon] = None,
    ):
        self.catalog = catalog or get_catalog()
        self.threshold = config.FUZZY_THRESHOLD if threshold is None else threshold
        self.exact_confidence = (
            config.EXACT_MATCH_CONFIDENCE if exact_confidence is None else exact_confidence)
        self.ignore_words: FrozenSet[str] = (lexicon or get_lexicon()).vocabulary_words

        # Latin aliases must not touch other letters ("rice" inside "price");
        # Malayalam aliases stay plain substrings so suffixed forms still match.
        self._containment: List[Tuple[str, Optional[Pattern]]] = [
            (alias, _latin_boundary(alias) if _LATIN_ALIAS.match(alias) else None)
            for alias in self.catalog.alias_keys
        ]

        # Precompute fuzzy candidates once (short aliases are too noisy)
        self._fuzzy_aliases: List[str] = [
            alias for alias in self.catalog.alias_index if len(alias) >= MIN_FUZZY_LENGTH
        ]

    # -----------------------------------------------------
    # Public API
    # -----------------------------------------------------

    def find_product(self, text: str,
                     ignore_words: AbstractSet[str] = frozenset()) -> Optional[ProductMatch]:
        """
        Product mentioned in ``text``, or None.

        Args:
            text: Segment or utterance
            ignore_words: Extra words that are never fuzzy candidates, such
                as intent keywords ("price" is not a misspelled "rice")

        Returns:
            ProductMatch with the canonical and Malayalam names, the alias
            that matched, and a confidence in [0, 1].
        """
        normalized = normalize(text)
        if not normalized:
            return None

        match = self._find_contained(normalized)
        if match is None:
            match = self._find_fuzzy(normalized, ignore_words)

        if match is not None:
            logger.debug(
                f"Matched {match.name_en!r} via {match.method}",
                extra={"stage": "product_match", "alias": match.alias,
                       "confidence": round(match.confidence, 3)},
            )
        return match

    def is_candidate_word(self, word: str, ignore_words: AbstractSet[str] = frozenset()) -> bool:
        """True when ``word`` may be fuzzy-matched against the aliases."""
        if len(word) < MIN_FUZZY_LENGTH or word.isdigit():
            return False
        return word not in self.ignore_words and word not in ignore_words

    # -----------------------------------------------------
    # Stages
    # -----------------------------------------------------

    def _find_contained(self, normalized: str) -> Optional[ProductMatch]:
        for alias, pattern in self._containment:
            found = pattern.search(normalized) if pattern is not None else alias in normalized
            if found:
                return self._build_match(alias, self.exact_confidence, "exact")
        return None

    def _find_fuzzy(self, normalized: str,
                    ignore_words: AbstractSet[str] = frozenset()) -> Optional[ProductMatch]:
        if not self._fuzzy_aliases:
            return None

        best: Optional[Tuple[str, float]] = None
        for word in normalized.split():
            if not self.is_candidate_word(word, ignore_words):
                continue
            # extractOne keeps the first of equally scored choices
            result = process.extractOne(
                word,
                self._fuzzy_aliases,
                scorer=dice_scorer,
                score_cutoff=self.threshold,
            )
            if result is None:
                continue
            alias, score, _ = result
            if score > self.threshold and (best is None or score > best[1]):
                best = (alias, score)

        if best is None:
            return None
        return self._build_match(best[0], min(best[1], 1.0), "fuzzy")

    def _build_match(self, alias: str, confidence: float, method: str) -> ProductMatch:
        name_en = self.catalog.alias_index[alias]
        return ProductMatch(
            name_en=name_en,
            name_ml=self.catalog.get_malayalam_name(name_en),
            confidence=confidence,
            alias=alias,
            method=method,
        )


_default_matcher: Optional[ProductMatcher] = None


def get_product_matcher() -> ProductMatcher:
    """Shared matcher over the process-wide catalog."""
    global _default_matcher
    if _default_matcher is None:
        _default_matcher = ProductMatcher()
    return _default_matcher


def find_product(text: str) -> Optional[ProductMatch]:
    """Module-level shortcut for get_product_matcher().find_product(text)."""
    return get_product_matcher().find_product(text)
