"""Response extraction for ObraCost.

Recovers the structured item list from raw generation output. The model
is asked for bare JSON but does not always comply, so three cheap
strategies are tried in order:

1. parse the whole (trimmed) text;
2. parse the interior of the first fenced code block;
3. parse from the first '{' to the last '}'.

Extraction never raises: the result is either ExtractionSuccess or
ExtractionFailure.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import structlog
from pydantic import ValidationError as PydanticValidationError

from models.estimate import CostBasisItem

logger = structlog.get_logger()

ITEM_KEYS = ("items", "partidas")

_FENCE_RE = re.compile(r"```(?:[\w+-]*)[ \t]*\n?([\s\S]*?)```")


@dataclass
class ExtractionSuccess:
    """Items recovered from the response."""
    items: List[CostBasisItem]
    strategy: str

    ok = True


@dataclass
class ExtractionFailure:
    """No strategy produced a valid item list."""
    reason: str
    raw_excerpt: str = ""

    ok = False


ExtractionResult = Union[ExtractionSuccess, ExtractionFailure]


def _parse_object(text: Optional[str]) -> Optional[Dict[str, Any]]:
    """Parse text as a JSON object holding an item list, else None."""
    if not text:
        return None
    try:
        parsed = json.loads(text.strip())
    except (json.JSONDecodeError, TypeError, ValueError):
        return None
    if not isinstance(parsed, dict):
        return None
    if not any(isinstance(parsed.get(key), list) for key in ITEM_KEYS):
        return None
    return parsed


def _whole_text(text: str) -> Optional[str]:
    return text.strip()


def _fenced_block(text: str) -> Optional[str]:
    match = _FENCE_RE.search(text)
    return match.group(1) if match else None


def _outer_braces(text: str) -> Optional[str]:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return text[start:end + 1]


STRATEGIES: List[Tuple[str, Callable[[str], Optional[str]]]] = [
    ("direct", _whole_text),
    ("fenced_block", _fenced_block),
    ("outer_braces", _outer_braces),
]


def _item_list(payload: Dict[str, Any]) -> List[Any]:
    for key in ITEM_KEYS:
        if isinstance(payload.get(key), list):
            return payload[key]
    return []


def _coerce_items(records: List[Any]) -> List[CostBasisItem]:
    """Validate every record; one bad record rejects the whole list."""
    items = []
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            raise ValueError(f"item {index} is not an object")
        items.append(CostBasisItem.model_validate(record))
    return items


def extract_items(raw_text: Optional[str]) -> ExtractionResult:
    """Extract cost-basis items from raw generation output.

    Args:
        raw_text: Text returned by the generation endpoint.

    Returns:
        ExtractionSuccess with items and the strategy that worked, or
        ExtractionFailure with the reason.
    """
    if not raw_text or not raw_text.strip():
        return ExtractionFailure(reason="empty response")

    for name, locate in STRATEGIES:
        payload = _parse_object(locate(raw_text))
        if payload is None:
            continue

        try:
            items = _coerce_items(_item_list(payload))
        except (PydanticValidationError, ValueError) as e:
            logger.warning("response_items_invalid", strategy=name, error=str(e)[:300])
            return ExtractionFailure(reason=f"invalid item: {e}", raw_excerpt=raw_text[:500])

        logger.info("response_extracted", strategy=name, items=len(items))
        return ExtractionSuccess(items=items, strategy=name)

    logger.warning("response_unparsable", raw_excerpt=raw_text[:500])
    return ExtractionFailure(reason="no JSON object with an item list found", raw_excerpt=raw_text[:500])
