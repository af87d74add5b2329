"""
Stage 3: Routing and voice responses

- phrases.py: Malayalam phrase library ({{placeholder}} templates)
- router.py: Intent → operation → UI mode, plus the spoken reply
"""
from .phrases import (
    PhraseBook,
    PhraseVariant,
    format_number,
    get_phrase_book,
    load_phrases_file,
    render_template,
)
from .router import (
    INTENT_TO_OPERATION,
    OPERATION_TO_MODE,
    IntentRouter,
    get_router,
    is_add_more,
    is_billing_add,
    is_cancel,
    is_confirm,
    mode_for,
    operation_for,
    route_intent,
)

__all__ = [
    "PhraseBook",
    "PhraseVariant",
    "format_number",
    "get_phrase_book",
    "load_phrases_file",
    "render_template",
    "INTENT_TO_OPERATION",
    "OPERATION_TO_MODE",
    "IntentRouter",
    "get_router",
    "is_add_more",
    "is_billing_add",
    "is_cancel",
    "is_confirm",
    "mode_for",
    "operation_for",
    "route_intent",
]
