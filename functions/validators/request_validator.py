"""Request payload parsing and validation.

Deserializes endpoint JSON bodies into typed Pydantic request models.
Runs before any external call; every failure becomes a bad-request
ValidationError naming the offending field.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError
import structlog

from config.errors import ValidationError
from models.invoice import StatusTransitionRequest
from models.requests import GenerateEstimateRequest, ModifyEstimateRequest, RecalculateRequest

logger = structlog.get_logger(__name__)

DEFAULT_MAX_PHOTOS = 10

ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass
class ValidationResult:
    """Result of request payload validation."""
    is_valid: bool = True
    errors: List[str] = field(default_factory=list)
    fields: List[str] = field(default_factory=list)
    parsed: Optional[BaseModel] = None


def _field_path(loc) -> str:
    return ".".join(str(part) for part in loc)


def _clean_message(msg: str) -> str:
    return msg.replace("Value error, ", "", 1)


def validate_payload(model: Type[ModelT], data: Any) -> ValidationResult:
    """Validate a raw payload against a request model.

    Args:
        model: Pydantic request model.
        data: Raw JSON body.

    Returns:
        ValidationResult with is_valid, errors, and parsed object
    """
    if not isinstance(data, dict):
        return ValidationResult(is_valid=False, errors=["request body must be a JSON object"], fields=["body"])

    try:
        parsed = model.model_validate(data)
    except PydanticValidationError as e:
        errors = [f"{_field_path(err['loc'])}: {_clean_message(err['msg'])}" for err in e.errors()]
        fields = [_field_path(err["loc"]) for err in e.errors()]
        logger.warning("request_validation_failed", model=model.__name__, errors=errors)
        return ValidationResult(is_valid=False, errors=errors, fields=fields)

    return ValidationResult(is_valid=True, parsed=parsed)


def _parse(model: Type[ModelT], data: Any) -> ModelT:
    result = validate_payload(model, data)
    if not result.is_valid:
        raise ValidationError(
            message=result.errors[0],
            field=result.fields[0] if result.fields else None,
            details={"errors": result.errors}
        )
    return result.parsed


def parse_generate_request(
    data: Dict[str, Any],
    max_photos: int = DEFAULT_MAX_PHOTOS
) -> GenerateEstimateRequest:
    """Parse a generation request.

    Raises:
        ValidationError: If the payload is invalid or carries too many photos.
    """
    request = _parse(GenerateEstimateRequest, data)
    if len(request.photos) > max_photos:
        raise ValidationError(
            message=f"photos: at most {max_photos} photos are allowed",
            field="photos",
            details={"photos": len(request.photos), "max_photos": max_photos}
        )
    return request


def parse_modify_request(data: Dict[str, Any]) -> ModifyEstimateRequest:
    """Parse a modification request."""
    return _parse(ModifyEstimateRequest, data)


def parse_recalculate_request(data: Dict[str, Any]) -> RecalculateRequest:
    """Parse a totals recalculation request."""
    return _parse(RecalculateRequest, data)


def parse_status_transition(data: Dict[str, Any]) -> StatusTransitionRequest:
    """Parse an invoice status transition; unknown statuses are rejected."""
    return _parse(StatusTransitionRequest, data)
