"""
Unit tests for kirana.response (router and phrase library).
"""
import pytest

from kirana.data_types import INTENTS, LEGACY_INTENTS, ClassifiedIntent
from kirana.response import (
    INTENT_TO_OPERATION,
    OPERATION_TO_MODE,
    PhraseBook,
    PhraseVariant,
    format_number,
    is_add_more,
    is_billing_add,
    is_cancel,
    is_confirm,
    render_template,
    route_intent,
)

PLEASE_REPEAT = "ക്ഷമിക്കണം, മനസ്സിലായില്ല. വീണ്ടും പറയൂ."
MODES = {"billing", "payment", "stock", "inventory", "reports", "idle"}


def _route(router, intent, **entities):
    return router.route(ClassifiedIntent(intent, 0.9, entities=entities))


class TestRoutingTable:
    """Tests that routing is total."""

    @pytest.mark.parametrize("intent", INTENTS + LEGACY_INTENTS + ("billing.refund",))
    def test_every_intent_routes(self, router, intent):
        action = _route(router, intent)
        assert action.voice_response
        assert action.mode in MODES
        assert "{{" not in action.voice_response

    def test_every_operation_has_phrases(self, router):
        for operation in set(INTENT_TO_OPERATION.values()):
            assert operation in router.phrases.operations

    def test_modes(self):
        assert OPERATION_TO_MODE["add_to_cart"] == "billing"
        assert OPERATION_TO_MODE["show_qr"] == "payment"
        assert OPERATION_TO_MODE["find_location"] == "stock"
        assert OPERATION_TO_MODE["add_stock"] == "inventory"
        assert OPERATION_TO_MODE["report_profit"] == "reports"
        assert "confirm" not in OPERATION_TO_MODE

    def test_unknown_intent(self, router):
        action = _route(router, "billing.refund")
        assert action.operation == "none"
        assert action.mode == "idle"
        assert action.voice_response == PLEASE_REPEAT

    def test_fallback(self, router):
        action = _route(router, "fallback")
        assert action.operation == "none"
        assert action.voice_response == PLEASE_REPEAT

    def test_legacy_names_share_operations(self, router):
        assert _route(router, "general.greeting").operation == "greet"
        assert _route(router, "greeting").operation == "greet"
        assert _route(router, "stock.check").operation == "check_stock"
        assert _route(router, "general.cancel").voice_response == "ശരി, ഒഴിവാക്കി"


class TestVoiceResponses:
    """Tests for rendered replies."""

    def test_add_single_product(self, router):
        action = _route(router, "billing.add", product="Rice", product_ml="അരി",
                        quantity=2.0, unit="kg")
        assert action.operation == "add_to_cart"
        assert action.mode == "billing"
        assert action.voice_response == "രണ്ട് കിലോ അരി ബില്ലിൽ ചേർത്തു"

    def test_fraction_words(self, router):
        action = _route(router, "billing.add", product_ml="പഞ്ചസാര", quantity=0.5, unit="kg")
        assert action.voice_response == "അര കിലോ പഞ്ചസാര ബില്ലിൽ ചേർത്തു"

    def test_large_quantity_spoken_as_digits(self, router):
        action = _route(router, "billing.add", product_ml="അരി", quantity=12, unit="kg")
        assert action.voice_response == "12 കിലോ അരി ബില്ലിൽ ചേർത്തു"

    def test_zero_quantity_not_spoken_as_one(self, router):
        action = _route(router, "billing.add", product_ml="അരി", quantity=0, unit="kg")
        assert action.voice_response == "0 കിലോ അരി ബില്ലിൽ ചേർത്തു"

    def test_zero_quantity_removal(self, router):
        action = _route(router, "billing.remove", product_ml="അരി", quantity=0.0)
        assert action.operation == "remove_from_cart"
        assert action.entities["quantity"] == 0.0
        assert action.voice_response == "അരി ബില്ലിൽ നിന്ന് മാറ്റി"

    def test_defaults_when_quantity_missing(self, router):
        action = _route(router, "billing.add", product="Rice")
        assert action.voice_response == "ഒന്ന് എണ്ണം Rice ബില്ലിൽ ചേർത്തു"

    def test_add_without_product(self, router):
        assert _route(router, "billing.add").voice_response == "ഉൽപ്പന്നം ബില്ലിൽ ചേർത്തു"

    def test_add_multiple_items(self, router):
        action = _route(router, "billing.add", product_ml="അരി",
                        items=["അരി", "പഞ്ചസാര", "സോപ്പ്"])
        assert action.voice_response == "അരി, പഞ്ചസാര, സോപ്പ് ബില്ലിൽ ചേർത്തു"

    def test_single_item_list_uses_product(self, router):
        action = _route(router, "billing.add", product_ml="അരി", quantity=1, unit="kg",
                        items=["അരി"])
        assert action.voice_response == "ഒന്ന് കിലോ അരി ബില്ലിൽ ചേർത്തു"

    def test_total(self, router):
        assert _route(router, "billing.total", total=480.0).voice_response == "ആകെ 480 രൂപ ആണ്"
        assert _route(router, "billing.total").voice_response == "ആകെ 0 രൂപ ആണ്"

    def test_complete_without_total(self, router):
        action = _route(router, "billing.complete")
        assert action.operation == "show_total"
        assert action.mode == "billing"
        assert action.voice_response == "GPay QR കാണിക്കട്ടെ? അതോ ക്യാഷ് ആണോ?"

    def test_complete_with_total(self, router):
        action = _route(router, "billing.complete", total=675.0)
        assert action.voice_response == "ആകെ 675 രൂപ. GPay QR കാണിക്കട്ടെ, അതോ ക്യാഷ് ആണോ?"

    def test_upi_total(self, router):
        action = _route(router, "payment.upi", total=120.5)
        assert action.mode == "payment"
        assert action.voice_response == "QR കോഡ് കാണിക്കുന്നു. 120.5 രൂപ GPay ചെയ്യൂ"

    def test_location(self, router):
        action = _route(router, "stock.location", product_ml="അരി", location="A1")
        assert action.voice_response == "അരി A1 ഷെൽഫിൽ ഉണ്ട്"
        without = _route(router, "stock.location", product_ml="അരി")
        assert without.voice_response == "അരി എവിടെ ഉണ്ടെന്ന് നോക്കുന്നു"

    def test_price_update(self, router):
        action = _route(router, "inventory.update", product_ml="അരി", price=60.0)
        assert action.operation == "update_price"
        assert action.voice_response == "അരി വില 60 രൂപ ആക്കി"

    def test_entities_passed_through(self, router):
        action = _route(router, "billing.remove", product="Rice", product_ml="അരി")
        assert action.entities == {"product": "Rice", "product_ml": "അരി"}
        assert action.voice_response == "അരി ബില്ലിൽ നിന്ന് മാറ്റി"

    def test_module_shortcut(self):
        assert route_intent(ClassifiedIntent("confirm", 0.9)).voice_response == "ശരി"


class TestConversationHelpers:
    def test_helpers(self):
        assert is_billing_add(ClassifiedIntent("billing.add", 0.8))
        assert is_confirm(ClassifiedIntent("general.confirm", 0.8))
        assert is_cancel(ClassifiedIntent("cancel", 0.8))
        assert not is_cancel(ClassifiedIntent("confirm", 0.8))

    def test_yes_means_add_more(self):
        assert is_add_more(ClassifiedIntent("confirm", 0.8))
        assert is_add_more(ClassifiedIntent("general.addmore", 0.8))
        assert not is_add_more(ClassifiedIntent("billing.total", 0.8))


class TestPhraseBook:
    """Tests for the phrase library and template rendering."""

    def test_render_template(self):
        assert render_template("{{product}} ചേർത്തു", {"product": "അരി"}) == "അരി ചേർത്തു"

    def test_render_template_missing_field(self):
        with pytest.raises(ValueError):
            render_template("{{product}} ചേർത്തു", {})

    @pytest.mark.parametrize("value,expected", [(480.0, "480"), (12.5, "12.5"), (0, "0")])
    def test_format_number(self, value, expected):
        assert format_number(value) == expected

    def test_numbers_and_units(self, router):
        assert router.phrases.to_malayalam_number(3) == "മൂന്ന്"
        assert router.phrases.to_malayalam_number(0.75) == "മുക്കാൽ"
        assert router.phrases.to_malayalam_number(11) == "11"
        assert router.phrases.to_malayalam_unit("litre") == "ലിറ്റർ"
        assert router.phrases.to_malayalam_unit("dozen") == "dozen"

    def test_requires_none_operation(self):
        with pytest.raises(ValueError):
            PhraseBook(operations={"confirm": (PhraseVariant("ശരി"),)})

    def test_last_variant_must_require_nothing(self):
        with pytest.raises(ValueError):
            PhraseBook(operations={
                "none": (PhraseVariant("?"),),
                "add_to_cart": (PhraseVariant("{{product}}", ("product",)),),
            })

    def test_intent_variants_override_operation(self):
        book = PhraseBook.from_dict({
            "operations": {"none": [{"template": "?"}], "show_total": [{"template": "total"}]},
            "intents": {"billing.complete": [{"template": "pay now"}]},
        })
        assert book.render("show_total", {}, intent="billing.complete") == "pay now"
        assert book.render("show_total", {}, intent="billing.total") == "total"
        assert book.render("unknown", {}) == "?"

    def test_empty_value_counts_as_missing(self):
        variant = PhraseVariant("{{location}}", ("location",))
        assert not variant.applies_to({"location": ""})
        assert variant.applies_to({"location": "A1"})
