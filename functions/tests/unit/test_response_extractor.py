"""Unit tests for response extraction."""

from services.response_extractor import extract_items, ExtractionSuccess, ExtractionFailure
from tests.fixtures.mock_estimate_data import (
    FAUCET_RESPONSE,
    FAUCET_FENCED_RESPONSE,
    FAUCET_PROSE_RESPONSE,
    LEGACY_SPANISH_RESPONSE,
)


class TestExtractItems:
    """Tests for extract_items."""

    def test_bare_json(self):
        result = extract_items(FAUCET_RESPONSE)

        assert isinstance(result, ExtractionSuccess)
        assert result.strategy == "direct"
        assert len(result.items) == 1
        assert result.items[0].cost_price == 80
        assert result.items[0].category == "Plumbing"

    def test_fenced_block_with_prose(self):
        result = extract_items(FAUCET_FENCED_RESPONSE)

        assert result.ok
        assert result.strategy == "fenced_block"

    def test_prose_wrapped_object(self):
        result = extract_items(FAUCET_PROSE_RESPONSE)

        assert result.ok
        assert result.strategy == "outer_braces"

    def test_all_strategies_agree(self):
        results = [
            extract_items(text)
            for text in (FAUCET_RESPONSE, FAUCET_FENCED_RESPONSE, FAUCET_PROSE_RESPONSE)
        ]

        assert results[0].items == results[1].items == results[2].items

    def test_fence_without_language_tag(self):
        result = extract_items("```\n" + FAUCET_RESPONSE + "\n```")

        assert result.ok
        assert result.items[0].description == "Replace kitchen faucet"

    def test_legacy_spanish_keys(self):
        result = extract_items(LEGACY_SPANISH_RESPONSE)

        assert result.ok
        item = result.items[0]
        assert item.category == "Fontanería"
        assert item.quantity == 1.0
        assert item.cost_price == 80.0
        assert item.tax_rate is None

    def test_empty_response(self):
        result = extract_items("   ")

        assert isinstance(result, ExtractionFailure)
        assert result.ok is False

    def test_none_response(self):
        assert extract_items(None).ok is False

    def test_malformed_json(self):
        result = extract_items('{"items": [{"description": "Tiling", "cost_price": 12,}')

        assert isinstance(result, ExtractionFailure)
        assert result.reason

    def test_object_without_items(self):
        assert extract_items('{"total": 116.16}').ok is False

    def test_bad_record_fails_whole_list(self):
        text = '{"items": [{"description": "Tiling", "cost_price": 12}, {"description": "No price"}]}'

        result = extract_items(text)

        assert isinstance(result, ExtractionFailure)
        assert "invalid item" in result.reason

    def test_non_object_record_fails(self):
        assert extract_items('{"items": ["just text"]}').ok is False

    def test_empty_item_list_is_valid(self):
        result = extract_items('{"items": []}')

        assert result.ok
        assert result.items == []

    def test_truncated_json_in_unclosed_fence(self):
        text = '```json\n{"items": [{"description": "Tiling", "cost_price": 12}'

        result = extract_items(text)

        assert isinstance(result, ExtractionFailure)
        assert result.reason == "no JSON object with an item list found"

    def test_prose_then_truncated_object(self):
        text = 'Here is the estimate: {"items": [{"description": "Tiling", "cost_price": 12}, {"descr'

        assert extract_items(text).ok is False

    def test_closed_fence_with_truncated_body(self):
        assert extract_items('Estimate:\n```json\n{"items": [\n```').ok is False


class TestNumericCoercion:
    """Tests for the numbers the model writes as text or non-finite values."""

    @staticmethod
    def _cost(value):
        return '{"items": [{"description": "Kitchen units", "cost_price": %s}]}' % value

    def test_infinite_cost_rejected(self):
        result = extract_items(self._cost("Infinity"))

        assert isinstance(result, ExtractionFailure)
        assert "invalid item" in result.reason

    def test_nan_quantity_rejected(self):
        text = '{"items": [{"description": "Tiling", "quantity": NaN, "cost_price": 12}]}'

        assert extract_items(text).ok is False

    def test_infinite_cost_as_text_rejected(self):
        assert extract_items(self._cost('"Infinity"')).ok is False

    def test_spanish_thousands_separator(self):
        result = extract_items(self._cost('"1.234,56"'))

        assert result.ok
        assert result.items[0].cost_price == 1234.56

    def test_english_thousands_separator(self):
        result = extract_items(self._cost('"1,234.56"'))

        assert result.ok
        assert result.items[0].cost_price == 1234.56

    def test_repeated_thousands_separator(self):
        assert extract_items(self._cost('"1.234.567"')).items[0].cost_price == 1234567.0

    def test_decimal_comma_and_currency(self):
        assert extract_items(self._cost('"12,5"')).items[0].cost_price == 12.5
        assert extract_items(self._cost('"80 EUR"')).items[0].cost_price == 80.0
        assert extract_items(self._cost('"80 €"')).items[0].cost_price == 80.0

    def test_exponent_not_truncated(self):
        assert extract_items(self._cost('"1e3"')).items[0].cost_price == 1000.0

    def test_trailing_text_rejected(self):
        assert extract_items(self._cost('"12.5 per m2"')).ok is False
