"""
Stage 1: Text normalization and entity extraction

Modular structure:
- lexicon.py: Number words, unit words, separators, transcript rewrites
- normalization.py: Canonical matching form and transcript rewrites
- quantity.py: Quantity and unit extraction
- fuzzy_matcher.py: Catalog product lookup (exact containment, then Dice)
- segmenter.py: Multi-item utterance splitting

fuzzy_matcher and segmenter depend on kirana.catalog, which itself imports
normalization, so they are imported from their modules directly.
"""

# Vocabulary
from .lexicon import Lexicon, get_lexicon, load_lexicon_file

# Normalization utilities
from .normalization import normalize, normalize_transcript

# Quantity / unit extraction
from .quantity import extract_quantity, extract_unit, find_quantity, find_unit

__all__ = [
    "Lexicon",
    "get_lexicon",
    "load_lexicon_file",
    "normalize",
    "normalize_transcript",
    "extract_quantity",
    "extract_unit",
    "find_quantity",
    "find_unit",
]
