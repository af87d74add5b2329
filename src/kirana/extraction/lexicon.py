"""
Closed vocabularies for quantity, unit and separator handling.

Loaded once from config/data/lexicon.yaml. A Lexicon is read-only after
construction: lookups never mutate it, so one instance is shared by every
caller in the process.
"""
import logging
import re
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Pattern, Sequence, Tuple

import yaml

from ..config import DATA_DIR
from ..data_types import UNIT_CODES

logger = logging.getLogger(__name__)

LEXICON_FILE = "lexicon.yaml"

_LATIN_KEY = re.compile(r"^[a-z0-9 ]+$")
_MALAYALAM_CHAR = re.compile("[\u0D00-\u0D7F]")


def _longest_first(keys: Iterable[str]) -> Tuple[str, ...]:
    # sorted() is stable, so equal-length keys keep file order
    return tuple(sorted(keys, key=len, reverse=True))


def _word_pattern(key: str) -> Pattern:
    """Whole-word match on whitespace-delimited text."""
    return re.compile(r"(?:^|\s)" + re.escape(key) + r"(?=\s|$)")


def _unit_pattern(key: str) -> Pattern:
    # Latin unit keys must not touch other letters ("l" inside "salt").
    # Digits may touch them ("10kg").
    if _LATIN_KEY.match(key):
        return re.compile(r"(?<![a-z])" + re.escape(key) + r"(?![a-z])")
    return re.compile(re.escape(key))


class Lexicon:
    """
    Number words, unit words, item separators and transcript rewrites.

    Args:
        number_words: word -> value
        unit_words: word -> unit code
        separators: regex fragments that separate items
        rewrites: (pattern, replacement) pairs applied to raw transcripts
        default_unit: unit reported when no unit word is present
        default_quantity: quantity reported when no number is present
    """

    def __init__(
        self,
        number_words: Mapping[str, float],
        unit_words: Mapping[str, str],
        separators: Sequence[str] = (),
        rewrites: Sequence[Tuple[str, str]] = (),
        default_unit: str = "piece",
        default_quantity: float = 1.0,
    ):
        bad_units = sorted({u for u in unit_words.values() if u not in UNIT_CODES})
        if bad_units:
            raise ValueError(f"Unknown unit codes in lexicon: {bad_units}")
        if default_unit not in UNIT_CODES:
            raise ValueError(f"Unknown default unit {default_unit!r}")

        self.number_words: Mapping[str, float] = MappingProxyType(
            {k.lower(): float(v) for k, v in number_words.items()})
        self.unit_words: Mapping[str, str] = MappingProxyType(
            {k.lower(): v for k, v in unit_words.items()})
        self.default_unit = default_unit
        self.default_quantity = float(default_quantity)

        self._number_matchers = tuple(
            (key, _word_pattern(key)) for key in _longest_first(self.number_words))
        self._unit_matchers = tuple(
            (key, _unit_pattern(key)) for key in _longest_first(self.unit_words))

        self.separator_pattern: Optional[Pattern] = (
            re.compile("|".join(separators), re.IGNORECASE) if separators else None)
        self._rewrites = tuple(
            (re.compile(pattern, re.IGNORECASE), replacement)
            for pattern, replacement in rewrites)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def find_number_word(self, normalized_text: str) -> Optional[float]:
        """Value of the longest number word present as a whole word, if any."""
        for key, pattern in self._number_matchers:
            if pattern.search(normalized_text):
                return self.number_words[key]
        return None

    def find_unit_word(self, normalized_text: str) -> Optional[str]:
        """Unit code of the longest unit word present, if any."""
        for key, pattern in self._unit_matchers:
            if pattern.search(normalized_text):
                return self.unit_words[key]
        return None

    def rewrite_transcript(self, text: str) -> str:
        for pattern, replacement in self._rewrites:
            text = pattern.sub(replacement, text)
        return text

    # ------------------------------------------------------------------
    # Regex building blocks for the segmenter
    # ------------------------------------------------------------------

    @property
    def unit_alternation(self) -> str:
        """All unit words, longest first, as one regex alternation."""
        return "|".join(re.escape(key) for key, _ in self._unit_matchers)

    @property
    def vocabulary_words(self) -> FrozenSet[str]:
        """Every single word of the number and unit vocabularies."""
        words = set()
        for key in list(self.number_words) + list(self.unit_words):
            words.update(key.split())
        return frozenset(words)

    @property
    def malayalam_number_alternation(self) -> str:
        """Malayalam-script number words, longest first, as one alternation."""
        keys = [key for key, _ in self._number_matchers if _MALAYALAM_CHAR.search(key)]
        return "|".join(re.escape(key) for key in keys)

    @classmethod
    def from_dict(cls, data: Dict) -> "Lexicon":
        """Build a Lexicon from the lexicon.yaml layout."""
        number_words: Dict[str, float] = {}
        for value, words in (data.get("number_words") or {}).items():
            for word in words or ():
                number_words[str(word)] = float(value)

        unit_words: Dict[str, str] = {}
        for unit, words in (data.get("unit_words") or {}).items():
            for word in words or ():
                unit_words[str(word)] = str(unit)

        rewrites: List[Tuple[str, str]] = [
            (str(entry["pattern"]), str(entry["replacement"]))
            for entry in data.get("transcript_rewrites") or ()
        ]

        return cls(
            number_words=number_words,
            unit_words=unit_words,
            separators=[str(s) for s in data.get("item_separators") or ()],
            rewrites=rewrites,
            default_unit=str(data.get("default_unit", "piece")),
            default_quantity=float(data.get("default_quantity", 1)),
        )


def load_lexicon_file(path: Path) -> Lexicon:
    with path.open(encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    lexicon = Lexicon.from_dict(raw)
    logger.debug(
        "Loaded lexicon",
        extra={"path": str(path), "number_words": len(lexicon.number_words),
               "unit_words": len(lexicon.unit_words)},
    )
    return lexicon


@lru_cache(maxsize=1)
def get_lexicon() -> Lexicon:
    """Process-wide lexicon loaded from the bundled lexicon.yaml."""
    return load_lexicon_file(DATA_DIR / LEXICON_FILE)
