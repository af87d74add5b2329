"""
Malayalam phrase library and template rendering.

Templates are loaded from config/data/phrases.yaml and use {{placeholder}}
substitution. An operation has several variants; the first whose
required_fields are all available is the one spoken.
"""
import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from ..config import DATA_DIR

logger = logging.getLogger(__name__)

PHRASES_FILE = "phrases.yaml"

_PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}")


def format_number(value: float) -> str:
    """480.0 → "480", 12.5 → "12.5"."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return f"{value:g}"


def render_template(template: str, data: Mapping[str, Any]) -> str:
    """
    Replace {{placeholders}} in ``template`` with values from ``data``.

    Raises:
        ValueError: If a placeholder has no value in data
    """
    placeholders = _PLACEHOLDER.findall(template)
    missing = [p for p in placeholders if p not in data]
    if missing:
        raise ValueError(
            f"Placeholders {missing} found in template but missing from data. "
            f"Data: {dict(data)}"
        )

    rendered = template
    for placeholder in placeholders:
        rendered = rendered.replace(f"{{{{{placeholder}}}}}", str(data[placeholder]))
    return rendered


@dataclass(frozen=True)
class PhraseVariant:
    template: str
    required_fields: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PhraseVariant":
        template = str(data["template"])
        required = tuple(str(f) for f in data.get("required_fields") or ())
        return cls(template=template, required_fields=required)

    def applies_to(self, data: Mapping[str, Any]) -> bool:
        return all(data.get(f) not in (None, "") for f in self.required_fields)


class PhraseBook:
    """
    Read-only phrase library.

    Args:
        operations: operation code -> ordered variants
        intents: intent -> ordered variants overriding the operation's
        numbers: quantity -> Malayalam word
        units: unit code -> Malayalam word
    """

    def __init__(
        self,
        operations: Mapping[str, Tuple[PhraseVariant, ...]],
        intents: Optional[Mapping[str, Tuple[PhraseVariant, ...]]] = None,
        numbers: Optional[Mapping[float, str]] = None,
        units: Optional[Mapping[str, str]] = None,
    ):
        if "none" not in operations:
            raise ValueError("Phrase library needs a 'none' operation")
        for code, variants in {**operations, **(intents or {})}.items():
            if not variants or variants[-1].required_fields:
                raise ValueError(f"Last phrase variant of {code!r} must require nothing")

        self.operations = dict(operations)
        self.intents = dict(intents or {})
        self.numbers = {float(k): v for k, v in (numbers or {}).items()}
        self.units = dict(units or {})

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PhraseBook":
        def variants(section) -> Dict[str, Tuple[PhraseVariant, ...]]:
            return {
                str(code): tuple(PhraseVariant.from_dict(v) for v in entries or ())
                for code, entries in (section or {}).items()
            }

        return cls(
            operations=variants(data.get("operations")),
            intents=variants(data.get("intents")),
            numbers=data.get("numbers"),
            units=data.get("units"),
        )

    def to_malayalam_number(self, value: float) -> str:
        """Malayalam word for 0.25, 0.5, 0.75 and 1-10; digits otherwise."""
        return self.numbers.get(float(value), format_number(value))

    def to_malayalam_unit(self, unit: str) -> str:
        return self.units.get(unit, unit)

    def render(self, operation: str, data: Mapping[str, Any], intent: Optional[str] = None) -> str:
        """
        Voice response for an operation.

        An intent-specific entry wins over the operation's. Unknown
        operations render the 'none' reply.
        """
        variants = self.intents.get(intent) if intent else None
        if not variants:
            variants = self.operations.get(operation) or self.operations["none"]
        # The last variant requires nothing, so one always applies
        variant = next(v for v in variants if v.applies_to(data))
        return render_template(variant.template, data)


def load_phrases_file(path: Path) -> PhraseBook:
    with path.open(encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    book = PhraseBook.from_dict(raw)
    logger.debug("Loaded phrase library",
                 extra={"path": str(path), "operations": len(book.operations)})
    return book


@lru_cache(maxsize=1)
def get_phrase_book() -> PhraseBook:
    """Process-wide phrase library from the bundled phrases.yaml."""
    return load_phrases_file(DATA_DIR / PHRASES_FILE)
