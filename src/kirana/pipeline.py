"""
Kirana Voice Command Pipeline

Runs one utterance through every stage in order:
1. Transcript normalization (normalize_transcript)
2. Intent classification (cloud result when usable, else IntentClassifier)
3. Item segmentation for item-bearing intents (ItemSegmenter)
4. Validation (validate_intent)
5. Routing (IntentRouter)

Every stage is total: unrecognised input ends as a ``fallback`` intent with
the "please repeat" reply, never as an exception.
"""
import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from .catalog import ProductCatalog, get_catalog
from .classification.classifier import IntentClassifier, validate_intent
from .classification.cloud import from_cloud_response
from .config import KiranaConfig, config
from .data_types import FALLBACK_INTENT, ClassifiedIntent, CommandResult, IntentSource, ParsedItem
from .extraction.fuzzy_matcher import ProductMatcher
from .extraction.lexicon import Lexicon, get_lexicon
from .extraction.normalization import normalize_transcript
from .extraction.segmenter import ItemSegmenter
from .logging_config import log_function_call
from .perf import StageTimer
from .response.router import IntentRouter

logger = logging.getLogger(__name__)

# Intents whose utterances list products to put somewhere
ITEM_INTENTS = frozenset({"billing.add", "general.addmore", "inventory.add"})

CloudResult = Union[ClassifiedIntent, Mapping[str, Any]]


class VoiceCommandPipeline:
    """
    Orchestrates the parsing stages for one utterance at a time.

    Holds no per-utterance state, so a single instance can serve concurrent
    requests.

    Args:
        catalog: Product catalog; defaults to the process-wide catalog
        lexicon: Vocabulary; defaults to the bundled lexicon
        cfg: Thresholds and toggles; defaults to the global config
    """

    def __init__(
        self,
        catalog: Optional[ProductCatalog] = None,
        lexicon: Optional[Lexicon] = None,
        cfg: Optional[KiranaConfig] = None,
    ):
        self.config = cfg or config
        self.catalog = catalog or get_catalog()
        self.lexicon = lexicon or get_lexicon()

        matcher = ProductMatcher(
            self.catalog,
            threshold=self.config.FUZZY_THRESHOLD,
            exact_confidence=self.config.EXACT_MATCH_CONFIDENCE,
            lexicon=self.lexicon,
        )
        self.matcher = matcher
        self.classifier = IntentClassifier(
            catalog=self.catalog, lexicon=self.lexicon, matcher=matcher, cfg=self.config)
        self.segmenter = ItemSegmenter(catalog=self.catalog, lexicon=self.lexicon, matcher=matcher)
        self.router = IntentRouter()

    @log_function_call()
    def process(self, text: str, cloud_result: Optional[CloudResult] = None,
                request_id: Optional[str] = None) -> CommandResult:
        """
        Parse and route one utterance.

        Args:
            text: Finalized speech-to-text transcript or typed text
            cloud_result: Optional upstream NLU result (payload or
                ClassifiedIntent); used unless it is a fallback
            request_id: Optional request ID for logging

        Returns:
            CommandResult with the intent, parsed items and UI action
        """
        text = text or ""
        timings: Dict[str, float] = {}

        with StageTimer(timings, "normalization", request_id=request_id):
            transcript = normalize_transcript(text, self.lexicon) if text.strip() else ""

        with StageTimer(timings, "classification", request_id=request_id):
            classified = self._classify(transcript, cloud_result)

        items: List[ParsedItem] = []
        if classified.intent in ITEM_INTENTS:
            with StageTimer(timings, "segmentation", request_id=request_id):
                items = self.segmenter.parse(transcript)

        entities = self._enrich_entities(classified, items)
        classified = ClassifiedIntent(
            intent=classified.intent,
            confidence=classified.confidence,
            entities=entities,
            source=classified.source,
            raw_text=transcript,
            fulfillment_text=classified.fulfillment_text,
        )
        valid = validate_intent(classified.intent, entities)
        if not valid:
            logger.info(
                f"{classified.intent} is missing a product",
                extra={"request_id": request_id, "intent": classified.intent},
            )

        with StageTimer(timings, "routing", request_id=request_id):
            action = self.router.route(classified)

        return CommandResult(
            text=text,
            transcript=transcript,
            intent=classified,
            items=items,
            action=action,
            valid=valid,
            timings=timings,
        )

    def parse_items(self, text: str) -> List[ParsedItem]:
        """Items in ``text`` regardless of intent."""
        if not text or not text.strip():
            return []
        return self.segmenter.parse(normalize_transcript(text, self.lexicon))

    # -----------------------------------------------------
    # Stages
    # -----------------------------------------------------

    def _classify(self, transcript: str, cloud_result: Optional[CloudResult]) -> ClassifiedIntent:
        if not transcript.strip():
            return ClassifiedIntent(FALLBACK_INTENT, 0.0, source=IntentSource.NONE)

        if cloud_result is not None:
            cloud = (cloud_result if isinstance(cloud_result, ClassifiedIntent)
                     else from_cloud_response(cloud_result))
            if not cloud.is_fallback:
                return self._resolve_cloud_product(cloud)
            logger.debug("Cloud result is a fallback, classifying locally",
                         extra={"stage": "classification", "source": "cloud"})

        return self.classifier.classify(transcript)

    def _resolve_cloud_product(self, cloud: ClassifiedIntent) -> ClassifiedIntent:
        """Map a free-text cloud product parameter onto the catalog."""
        product = cloud.entities.get("product")
        if not product:
            return cloud
        match = self.matcher.find_product(str(product))
        if match is None:
            return cloud
        entities = dict(cloud.entities)
        entities["product"] = match.name_en
        entities["product_ml"] = match.name_ml
        return ClassifiedIntent(
            intent=cloud.intent,
            confidence=cloud.confidence,
            entities=entities,
            source=cloud.source,
            raw_text=cloud.raw_text,
            fulfillment_text=cloud.fulfillment_text,
        )

    def _enrich_entities(self, classified: ClassifiedIntent,
                         items: List[ParsedItem]) -> Dict[str, Any]:
        entities = dict(classified.entities)

        if items:
            first = items[0]
            entities["product"] = first.product_name
            entities["product_ml"] = first.product_ml
            entities["quantity"] = first.quantity
            entities["unit"] = first.unit
            entities["items"] = [item.product_ml for item in items]
            amounts = [item.amount for item in items]
            if all(a is not None for a in amounts):
                entities["total"] = float(sum(amounts))

        if classified.intent == "stock.location" and entities.get("product"):
            product = self.catalog.get_product(entities["product"])
            if product is not None and product.shelf_location:
                entities["location"] = product.shelf_location

        return entities
