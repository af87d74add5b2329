"""
Multi-item utterance segmentation.

"10 kg അരി, 2 kg പഞ്ചസാര, ഒരു സോപ്പ്" → three ParsedItems in spoken order.

Steps:
1. Implicit boundaries: a comma is inserted before a quantity that starts
   a new item without any separator ("10 kg അരി 10 kg ഗോതമ്പ്").
2. Explicit separators from the lexicon (comma, ഉം, പിന്നെ, and, also, കൂടി).
3. Each segment is matched against the catalog; segments without a
   product are dropped.
4. If nothing parsed, the whole utterance is tried as one segment.
"""
import logging
import re
from typing import List, Optional

from ..catalog import ProductCatalog, get_catalog
from ..data_types import ParsedItem
from .fuzzy_matcher import ProductMatcher
from .lexicon import Lexicon, get_lexicon
from .quantity import extract_quantity, extract_unit

logger = logging.getLogger(__name__)

MIN_SEGMENT_LENGTH = 2


class ItemSegmenter:
    """
    Splits an utterance into items and parses each one.

    Args:
        catalog: Product catalog; defaults to the process-wide catalog
        lexicon: Vocabulary; defaults to the bundled lexicon
        matcher: Product matcher; built over ``catalog`` when omitted
    """

    def __init__(
        self,
        catalog: Optional[ProductCatalog] = None,
        lexicon: Optional[Lexicon] = None,
        matcher: Optional[ProductMatcher] = None,
    ):
        self.catalog = catalog or get_catalog()
        self.lexicon = lexicon or get_lexicon()
        self.matcher = matcher or ProductMatcher(self.catalog, lexicon=self.lexicon)

        # The boundary char excludes digits so "2 അര കിലോ" stays one item
        # and excludes commas so an existing separator is not doubled.
        self._digit_boundary = re.compile(
            r"([^\s\d,])\s+(?=\d+(?:\.\d+)?\s*(?:"
            + self.lexicon.unit_alternation
            + r")(?![a-z]))",
            re.IGNORECASE,
        )
        number_words = self.lexicon.malayalam_number_alternation
        self._word_boundary = (
            re.compile(r"([^\s\d,])\s+(?=(?:" + number_words + r")\s)")
            if number_words else None
        )

    # -----------------------------------------------------
    # Public API
    # -----------------------------------------------------

    def insert_boundaries(self, text: str) -> str:
        """Insert a comma wherever a new quantity starts an unseparated item."""
        text = self._digit_boundary.sub(r"\1, ", text)
        if self._word_boundary is not None:
            text = self._word_boundary.sub(r"\1, ", text)
        return text

    def split(self, text: str) -> List[str]:
        """Candidate item segments, in spoken order."""
        prepared = self.insert_boundaries(text)
        pattern = self.lexicon.separator_pattern
        parts = pattern.split(prepared) if pattern is not None else [prepared]
        return [part.strip() for part in parts
                if part and len(part.strip()) >= MIN_SEGMENT_LENGTH]

    def parse(self, text: str) -> List[ParsedItem]:
        """
        Parse every recognisable item in ``text``.

        Returns:
            ParsedItems in left-to-right order; empty when no product is
            recognised anywhere in the utterance.
        """
        if not text or not text.strip():
            return []

        segments = self.split(text)
        items = [item for item in (self.parse_segment(seg) for seg in segments) if item]

        if not items:
            single = self.parse_segment(text.strip())
            if single is not None:
                items = [single]

        logger.debug(
            f"Parsed {len(items)} item(s)",
            extra={"stage": "segmentation", "segments_count": len(segments),
                   "items_count": len(items)},
        )
        return items

    def parse_segment(self, segment: str) -> Optional[ParsedItem]:
        """ParsedItem for one segment, or None when it names no product."""
        match = self.matcher.find_product(segment)
        if match is None:
            return None

        product = self.catalog.get_product(match.name_en)
        default_unit = product.unit if product else None
        return ParsedItem(
            raw_text=segment,
            product_name=match.name_en,
            product_ml=match.name_ml,
            quantity=extract_quantity(segment, self.lexicon),
            unit=extract_unit(segment, default=default_unit, lexicon=self.lexicon),
            confidence=match.confidence,
            unit_price=product.price if product else None,
        )

    def looks_like_multiple_items(self, text: str) -> bool:
        """True when ``text`` has an explicit separator or an implicit item boundary."""
        if not text:
            return False
        pattern = self.lexicon.separator_pattern
        if pattern is not None and pattern.search(text):
            return True
        return bool(self._digit_boundary.search(text))


_default_segmenter: Optional[ItemSegmenter] = None


def get_segmenter() -> ItemSegmenter:
    """Shared segmenter over the process-wide catalog and lexicon."""
    global _default_segmenter
    if _default_segmenter is None:
        _default_segmenter = ItemSegmenter()
    return _default_segmenter


def parse_multiple_items(text: str) -> List[ParsedItem]:
    """Module-level shortcut for get_segmenter().parse(text)."""
    return get_segmenter().parse(text)


def looks_like_multiple_items(text: str) -> bool:
    return get_segmenter().looks_like_multiple_items(text)
