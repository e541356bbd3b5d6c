"""Cloud Function entry points for ObraCost.

Provides HTTP endpoints for:
- Generating an estimate from a work description
- Modifying an estimate with a natural-language instruction
- Recalculating totals (and reporting drift) for an item snapshot
- Changing an invoice's status and projecting payments to the ledger
"""

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, Dict
from datetime import datetime, date

import structlog
from firebase_functions import https_fn, options
from firebase_admin import initialize_app

from config.settings import settings
from config.errors import ObraCostError, ErrorCode, ValidationError
from agents.generation_agent import EstimateGenerationAgent
from agents.modification_agent import EstimateModificationAgent
from services.invoice_reconciler import InvoiceStatusReconciler
from services.pricing_engine import reprice
from services.reference_prices import ReferencePriceMatcher
from services.totals_calculator import compute_totals, detect_drift
from validators.request_validator import (
    parse_generate_request,
    parse_modify_request,
    parse_recalculate_request,
    parse_status_transition,
)

# Initialize Firebase Admin SDK
try:
    initialize_app()
except ValueError:
    # Already initialized
    pass

structlog.configure(
    processors=[
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer() if settings.is_emulator_mode else structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        logging.getLevelName(settings.log_level.upper())
    ),
)

logger = structlog.get_logger()

# ============================================================================
# Helper Functions
# ============================================================================


def success_response(data: Dict[str, Any]) -> Dict[str, Any]:
    """Build success response."""
    return {"success": True, "data": data}


def error_response(error: ObraCostError) -> Dict[str, Any]:
    """Build error response with the user-facing category."""
    return {"success": False, "error": error.to_dict()}


def get_request_json(req: https_fn.Request) -> Dict[str, Any]:
    """Extract JSON from request body.

    Args:
        req: HTTP request object.

    Returns:
        Parsed JSON data.

    Raises:
        ValidationError: If JSON is invalid.
    """
    try:
        return req.get_json(force=True) or {}
    except Exception as e:
        raise ValidationError(
            message=f"Invalid JSON in request body: {str(e)}"
        )


CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
    "Access-Control-Max-Age": "3600"
}


def _cors_response() -> https_fn.Response:
    """Return CORS preflight response."""
    return https_fn.Response(
        "",
        status=204,
        headers=CORS_HEADERS
    )


def _json_default(o: Any):
    """JSON serializer for dates and Firestore timestamp types."""
    if isinstance(o, (datetime, date)):
        return o.isoformat()
    return str(o)


def _json_response(data: dict, status: int = 200) -> https_fn.Response:
    """Return JSON response with CORS headers."""
    return https_fn.Response(
        json.dumps(data, default=_json_default, ensure_ascii=False),
        status=status,
        mimetype="application/json",
        headers=CORS_HEADERS
    )


def _handle(
    req: https_fn.Request,
    handler: Callable[[Dict[str, Any]], Awaitable[Dict[str, Any]]],
    operation: str
) -> https_fn.Response:
    """Run one async handler and map its outcome to an HTTP response.

    ObraCostError maps to its own status and category; anything else is an
    internal error.
    """
    if req.method == "OPTIONS":
        return _cors_response()

    try:
        data = get_request_json(req)
        result = asyncio.run(handler(data))
        return _json_response(success_response(result))

    except ObraCostError as e:
        logger.error(
            f"{operation}_error",
            code=e.code,
            category=e.category,
            error=e.message
        )
        return _json_response(error_response(e), status=e.http_status)
    except Exception as e:
        logger.exception(f"{operation}_exception", error=str(e))
        internal = ObraCostError(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Unexpected error: {str(e)}"
        )
        return _json_response(error_response(internal), status=internal.http_status)


def _generation_config():
    config = settings.generation_config()
    if not config.api_key:
        raise ObraCostError(
            code=ErrorCode.INTERNAL_ERROR,
            message="Generation endpoint credentials are not configured"
        )
    return config


# ============================================================================
# Async handlers
# ============================================================================


async def generate_estimate_async(data: Dict[str, Any]) -> Dict[str, Any]:
    """Validate, generate and price a new estimate."""
    request = parse_generate_request(data, max_photos=settings.max_photos)

    agent = EstimateGenerationAgent(
        config=_generation_config(),
        matcher=ReferencePriceMatcher(limit=settings.reference_price_limit),
        default_tax_rate=settings.default_tax_rate
    )
    result = await agent.generate(request, default_margin=settings.default_margin_percent)
    return result.to_api_dict()


async def modify_estimate_async(data: Dict[str, Any]) -> Dict[str, Any]:
    """Validate and apply a modification instruction."""
    request = parse_modify_request(data)

    agent = EstimateModificationAgent(
        config=_generation_config(),
        default_tax_rate=settings.default_tax_rate
    )
    result = await agent.modify(request, default_margin=settings.default_margin_percent)
    return result.to_api_dict()


async def recalculate_estimate_async(data: Dict[str, Any]) -> Dict[str, Any]:
    """Recompute derived prices and totals; report drift against a persisted total."""
    request = parse_recalculate_request(data)

    try:
        items = reprice(request.items)
        totals = compute_totals(items)
    except ValueError as e:
        raise ValidationError(f"Item amounts are out of range: {e}", field="items") from e
    response: Dict[str, Any] = {
        "items": [item.to_api_dict() for item in items],
        **totals.model_dump(by_alias=True),
    }
    if request.persisted_total is not None:
        drift = detect_drift(items, request.persisted_total, totals=totals)
        response["drift"] = drift.model_dump(by_alias=True)
    return response


async def update_invoice_status_async(data: Dict[str, Any]) -> Dict[str, Any]:
    """Apply an invoice status transition."""
    request = parse_status_transition(data)
    result = await InvoiceStatusReconciler().transition(request)
    return result.model_dump(by_alias=True)


# ============================================================================
# Estimate Entry Points
# ============================================================================

GENERATION_ENDPOINT_CONFIG = {
    "timeout_sec": 120,
    "memory": options.MemoryOption.GB_1,
    "region": "europe-west1"
}

LIGHT_ENDPOINT_CONFIG = {
    "timeout_sec": 30,
    "memory": options.MemoryOption.MB_256,
    "region": "europe-west1"
}


@https_fn.on_request(**GENERATION_ENDPOINT_CONFIG)
def generate_estimate(req: https_fn.Request) -> https_fn.Response:
    """Generate an estimate from a work description.

    Request body:
    {
        "description": "Replace kitchen faucet",
        "workType": "Plumbing",
        "clientName": "Ana García",
        "projectContext": {"name": "Piso Calle Mayor", "address": "Calle Mayor 1"},
        "photos": [{"imageData": "<base64>", "mimeType": "image/jpeg", "zoneLabel": "Kitchen"}],
        "marginPercent": 20
    }

    Response:
    {
        "success": true,
        "data": {"items": [...], "subtotal": 96.0, "taxBreakdown": [...],
                 "totalTax": 20.16, "total": 116.16, "appliedGlobalMargin": 20}
    }
    """
    return _handle(req, generate_estimate_async, "estimate_generation")


@https_fn.on_request(**GENERATION_ENDPOINT_CONFIG)
def modify_estimate(req: https_fn.Request) -> https_fn.Response:
    """Modify an estimate with a natural-language instruction.

    Request body:
    {
        "currentItems": [{...LineItem...}],
        "instruction": "Remove the painting items",
        "currentGlobalMargin": 20
    }
    """
    return _handle(req, modify_estimate_async, "estimate_modification")


@https_fn.on_request(**LIGHT_ENDPOINT_CONFIG)
def recalculate_estimate(req: https_fn.Request) -> https_fn.Response:
    """Recalculate totals for an item snapshot.

    Request body:
    {
        "items": [{...LineItem...}],
        "persistedTotal": 116.16
    }
    """
    return _handle(req, recalculate_estimate_async, "estimate_recalculation")


# ============================================================================
# Invoice Entry Points
# ============================================================================


@https_fn.on_request(**LIGHT_ENDPOINT_CONFIG)
def update_invoice_status(req: https_fn.Request) -> https_fn.Response:
    """Change an invoice's status.

    Request body:
    {
        "invoiceId": "inv-123",
        "targetStatus": "paid",
        "paymentDate": "2026-03-01",
        "paymentMethod": "transfer",
        "paidAmount": 1210.0
    }
    """
    return _handle(req, update_invoice_status_async, "invoice_status")
