"""
Shared fixtures.

The bundled catalog, lexicon and rule tables are loaded once per session;
they are read-only, so every test can share them.
"""
import pytest

from kirana.catalog import ProductCatalog, get_catalog
from kirana.classification.classifier import IntentClassifier
from kirana.config import KiranaConfig
from kirana.extraction.fuzzy_matcher import ProductMatcher
from kirana.extraction.lexicon import get_lexicon
from kirana.extraction.segmenter import ItemSegmenter
from kirana.pipeline import VoiceCommandPipeline
from kirana.response.router import IntentRouter


@pytest.fixture(scope="session")
def catalog():
    return get_catalog()


@pytest.fixture(scope="session")
def lexicon():
    return get_lexicon()


@pytest.fixture(scope="session")
def matcher(catalog):
    return ProductMatcher(catalog)


@pytest.fixture(scope="session")
def segmenter(catalog, lexicon, matcher):
    return ItemSegmenter(catalog=catalog, lexicon=lexicon, matcher=matcher)


@pytest.fixture(scope="session")
def classifier(catalog, lexicon, matcher):
    return IntentClassifier(catalog=catalog, lexicon=lexicon, matcher=matcher)


@pytest.fixture(scope="session")
def router():
    return IntentRouter()


@pytest.fixture(scope="session")
def pipeline(catalog, lexicon):
    return VoiceCommandPipeline(catalog=catalog, lexicon=lexicon)


@pytest.fixture
def fresh_config():
    """A private config instance tests may modify."""
    return KiranaConfig()


@pytest.fixture
def small_records():
    return [
        {
            "name_en": "Rice",
            "name_ml": "അരി",
            "aliases": ["ari", "rice"],
            "unit": "kg",
            "price": 55,
            "category": "grains",
            "shelf_location": "A1",
        },
        {
            "name_en": "Sugar",
            "name_ml": "പഞ്ചസാര",
            "aliases": ["panchara", "sugar"],
            "unit": "kg",
            "price": 45,
            "category": "grains",
        },
        {
            "name_en": "Soap",
            "name_ml": "സോപ്പ്",
            "aliases": ["soap"],
            "unit": "piece",
            "price": 35,
            "category": "personal-care",
        },
    ]


@pytest.fixture
def small_catalog(small_records):
    return ProductCatalog.from_records(small_records)
