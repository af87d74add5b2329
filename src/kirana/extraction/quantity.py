"""
Quantity and unit extraction.

Explicit numerals always win over number words: "2 അര കിലോ അരി" is two,
not a half. Number words only count as whole words, which keeps "അര"
(half) from firing inside "അരി" (rice).
"""
import re
from typing import Optional

from .lexicon import Lexicon, get_lexicon
from .normalization import normalize

# Checked on the raw text: normalize() would split "2.5" at the dot
_DIGITS = re.compile(r"(\d+(?:\.\d+)?)")


def find_quantity(text: str, lexicon: Optional[Lexicon] = None) -> Optional[float]:
    """Explicit quantity in ``text``, or None when there is none."""
    if not text:
        return None
    match = _DIGITS.search(text)
    if match:
        return float(match.group(1))
    lexicon = lexicon or get_lexicon()
    return lexicon.find_number_word(normalize(text))


def extract_quantity(text: str, lexicon: Optional[Lexicon] = None) -> float:
    """
    Quantity mentioned in ``text``, defaulting to 1.

    Examples:
        >>> extract_quantity("10 kg അരി")
        10.0
        >>> extract_quantity("അര കിലോ പഞ്ചസാര")
        0.5
        >>> extract_quantity("സോപ്പ്")
        1.0
    """
    lexicon = lexicon or get_lexicon()
    quantity = find_quantity(text, lexicon)
    return lexicon.default_quantity if quantity is None else quantity


def find_unit(text: str, lexicon: Optional[Lexicon] = None) -> Optional[str]:
    """Unit code named in ``text``, or None when no unit word is present."""
    if not text:
        return None
    lexicon = lexicon or get_lexicon()
    return lexicon.find_unit_word(normalize(text))


def extract_unit(text: str, default: Optional[str] = None,
                 lexicon: Optional[Lexicon] = None) -> str:
    """
    Unit code named in ``text``.

    Args:
        text: Segment or utterance
        default: Unit to report when none is named; callers that know the
            product pass its natural unit here. Falls back to the lexicon
            default ("piece").
        lexicon: Vocabulary to use instead of the bundled one
    """
    lexicon = lexicon or get_lexicon()
    unit = find_unit(text, lexicon)
    if unit is not None:
        return unit
    return default or lexicon.default_unit
