"""
Kirana - Voice Command Parser for Kerala grocery stores

Turns a Malayalam/English (Manglish) utterance into a structured intent, a
list of cart items and a UI action with a Malayalam voice reply.

This package provides:
- Type-safe data structures (data_types.py)
- Product catalog and alias index (catalog/)
- Normalization, quantity/unit extraction, fuzzy product matching and
  multi-item segmentation (extraction/)
- Two-tier intent classification and the cloud NLU adapter (classification/)
- Intent routing and the Malayalam phrase library (response/)
- Pipeline orchestration (pipeline.py) and a Flask API (api.py)
"""

# Export configuration
from kirana.config import config, KiranaConfig

# Export core types
from kirana.data_types import (
    # Enums
    IntentSource,

    # Data structures
    ProductDefinition,
    ProductMatch,
    ParsedItem,
    ClassifiedIntent,
    RouterAction,
    CommandResult,

    # Taxonomy
    INTENTS,
    UNIT_CODES,
)

# Export stage entry points
from kirana.catalog import CatalogError, DuplicateAliasError, ProductCatalog, get_catalog, load_catalog
from kirana.extraction import extract_quantity, extract_unit, normalize, normalize_transcript
from kirana.extraction.fuzzy_matcher import ProductMatcher, find_product
from kirana.extraction.segmenter import ItemSegmenter, looks_like_multiple_items, parse_multiple_items
from kirana.classification import IntentClassifier, detect_intent, from_cloud_response, validate_intent
from kirana.response import IntentRouter, route_intent
from kirana.pipeline import VoiceCommandPipeline

__version__ = "1.0.0"

__all__ = [
    # Configuration
    "config",
    "KiranaConfig",

    # Types
    "IntentSource",
    "ProductDefinition",
    "ProductMatch",
    "ParsedItem",
    "ClassifiedIntent",
    "RouterAction",
    "CommandResult",
    "INTENTS",
    "UNIT_CODES",

    # Catalog
    "CatalogError",
    "DuplicateAliasError",
    "ProductCatalog",
    "get_catalog",
    "load_catalog",

    # Stages
    "normalize",
    "normalize_transcript",
    "extract_quantity",
    "extract_unit",
    "ProductMatcher",
    "find_product",
    "ItemSegmenter",
    "parse_multiple_items",
    "looks_like_multiple_items",
    "IntentClassifier",
    "detect_intent",
    "validate_intent",
    "from_cloud_response",
    "IntentRouter",
    "route_intent",
    "VoiceCommandPipeline",
]
