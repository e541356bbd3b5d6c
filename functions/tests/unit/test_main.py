"""Unit tests for the HTTP entry point helpers."""

import json

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from config.errors import GenerationError, ErrorCode, ValidationError
from tests.fixtures.mock_estimate_data import SAMPLE_LINE_ITEMS


@pytest.fixture(scope="module")
def main_module():
    with patch("firebase_admin.initialize_app"):
        import main
    return main


def _request(body, method="POST"):
    req = MagicMock()
    req.method = method
    req.get_json.return_value = body
    return req


def _body(response):
    return json.loads(response.get_data(as_text=True))


class TestHandle:
    """Tests for request handling and error envelopes."""

    def test_options_preflight(self, main_module):
        response = main_module._handle(_request({}, method="OPTIONS"), AsyncMock(), "test")

        assert response.status_code == 204
        assert response.headers["Access-Control-Allow-Origin"] == "*"

    def test_success_envelope(self, main_module):
        handler = AsyncMock(return_value={"total": 116.16})

        response = main_module._handle(_request({"a": 1}), handler, "test")

        assert response.status_code == 200
        assert _body(response) == {"success": True, "data": {"total": 116.16}}
        handler.assert_awaited_once_with({"a": 1})

    def test_validation_error_is_bad_request(self, main_module):
        response = main_module._handle(
            _request({"description": "  "}),
            main_module.generate_estimate_async,
            "estimate_generation"
        )

        body = _body(response)
        assert response.status_code == 400
        assert body["success"] is False
        assert body["error"]["errorCategory"] == "bad-request"
        assert body["error"]["code"] == ErrorCode.VALIDATION_ERROR

    @pytest.mark.parametrize("code,status,category", [
        (ErrorCode.LLM_TIMEOUT, 504, "timeout"),
        (ErrorCode.UPSTREAM_RATE_LIMITED, 502, "upstream-unavailable"),
        (ErrorCode.UNPARSABLE_RESPONSE, 502, "unparsable-response"),
        (ErrorCode.NO_USABLE_CONTENT, 502, "no-usable-content"),
    ])
    def test_generation_errors(self, main_module, code, status, category):
        handler = AsyncMock(side_effect=GenerationError(code=code, message="failed"))

        response = main_module._handle(_request({}), handler, "test")

        body = _body(response)
        assert response.status_code == status
        assert body["error"]["errorCategory"] == category
        assert body["error"]["userMessage"]

    def test_unexpected_error_is_internal(self, main_module):
        handler = AsyncMock(side_effect=KeyError("boom"))

        response = main_module._handle(_request({}), handler, "test")

        assert response.status_code == 500
        assert _body(response)["error"]["errorCategory"] == "internal"


class TestHandlers:
    """Tests for the async handlers that need no external service."""

    @pytest.mark.asyncio
    async def test_recalculate_reports_drift(self, main_module):
        result = await main_module.recalculate_estimate_async({
            "items": SAMPLE_LINE_ITEMS,
            "persistedTotal": 600.0,
        })

        assert result["subtotal"] == 636.0
        assert [g["rate"] for g in result["taxBreakdown"]] == [10, 21]
        assert result["totalTax"] == 74.16
        assert result["total"] == 710.16
        assert result["drift"]["hasDrift"] is True
        assert result["drift"]["difference"] == 110.16

    @pytest.mark.asyncio
    async def test_recalculate_without_persisted_total(self, main_module):
        result = await main_module.recalculate_estimate_async({"items": SAMPLE_LINE_ITEMS})

        assert "drift" not in result
        assert len(result["items"]) == 3

    @pytest.mark.asyncio
    async def test_update_invoice_status(self, main_module, invoice_store):
        from services.invoice_reconciler import InvoiceStatusReconciler

        invoice = invoice_store.add_invoice(total=1210.0)

        with patch.object(main_module, "InvoiceStatusReconciler",
                          return_value=InvoiceStatusReconciler(store=invoice_store)):
            result = await main_module.update_invoice_status_async({
                "invoiceId": invoice.id,
                "targetStatus": "paid",
            })

        assert result["status"] == "paid"
        assert result["ledgerAction"] == "created"
        assert result["previousStatus"] == "draft"

    @pytest.mark.asyncio
    async def test_recalculate_out_of_range_amounts(self, main_module):
        items = [dict(SAMPLE_LINE_ITEMS[0], quantity=1e200, costPrice=1e200)]

        with pytest.raises(ValidationError) as exc_info:
            await main_module.recalculate_estimate_async({"items": items})

        assert exc_info.value.field == "items"
        assert exc_info.value.http_status == 400
