"""
Text normalization for spoken grocery commands.

normalize() is the single canonical form every matcher compares against:
lowercase, sentence punctuation folded to spaces, whitespace collapsed.
It never touches Malayalam combining marks, so a word keeps its exact
code points.
"""
import re
from typing import Optional

from .lexicon import Lexicon, get_lexicon

_PUNCTUATION = re.compile(r"[.,!?;:]")
_WHITESPACE = re.compile(r"\s+")


def normalize(text: str) -> str:
    """
    Canonical matching form of ``text``.

    Idempotent: normalize(normalize(x)) == normalize(x).

    Examples:
        >>> normalize("  10 KG അരി,  2 kg പഞ്ചസാര! ")
        '10 kg അരി 2 kg പഞ്ചസാര'
    """
    if not text:
        return ""
    text = _PUNCTUATION.sub(" ", text.lower())
    return _WHITESPACE.sub(" ", text).strip()


def normalize_transcript(text: str, lexicon: Optional[Lexicon] = None) -> str:
    """
    Undo speech-to-text transliterations of English payment words.

    "യുപിഐ" becomes "UPI", "ക്യാഷ്" becomes "cash" and so on. The rest of
    the utterance is returned unchanged (no lowercasing, no punctuation
    folding), so item separators survive for the segmenter.
    """
    if not text:
        return ""
    lexicon = lexicon or get_lexicon()
    return lexicon.rewrite_transcript(text)
