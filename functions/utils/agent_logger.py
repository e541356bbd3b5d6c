"""Estimate run logger for ObraCost.

Provides highly visible, formatted logging for generation and
modification runs with distinctive visual markers that stand out in
function log streams.
"""

import json
import structlog
from typing import Dict, Any
from datetime import datetime, timezone

logger = structlog.get_logger()

BANNER_WIDTH = 80
RUN_BANNER_CHAR = "═"
FAILURE_BANNER_CHAR = "!"


def _create_banner(char: str, text: str, width: int = BANNER_WIDTH) -> str:
    """Create a centered banner with given character."""
    text_with_spaces = f" {text} "
    padding = (width - len(text_with_spaces)) // 2
    return char * padding + text_with_spaces + char * (width - padding - len(text_with_spaces))


def _format_json(data: Dict[str, Any], indent: int = 2) -> str:
    """Format dictionary as pretty JSON string."""
    try:
        return json.dumps(data, indent=indent, default=str, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(data)


def truncate_large_values(data: Dict[str, Any], max_length: int = 500) -> Dict[str, Any]:
    """Truncate large string values (base64 photos, prompts) for display."""
    if not isinstance(data, dict):
        return data

    result = {}
    for key, value in data.items():
        if isinstance(value, str) and len(value) > max_length:
            result[key] = value[:max_length] + f"... [truncated {len(value) - max_length} chars]"
        elif isinstance(value, dict):
            result[key] = truncate_large_values(value, max_length)
        elif isinstance(value, list) and len(value) > 10:
            result[key] = value[:10] + [f"... and {len(value) - 10} more items"]
        else:
            result[key] = value
    return result


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def log_generation_start(operation: str, context: Dict[str, Any]) -> None:
    """Log the start of a generation or modification run."""
    print("\n")
    print(RUN_BANNER_CHAR * BANNER_WIDTH)
    print(_create_banner(RUN_BANNER_CHAR, f"OBRACOST {operation.upper()} STARTED"))
    print(RUN_BANNER_CHAR * BANNER_WIDTH)
    print(f"║ Timestamp : {_timestamp()}")
    print(_format_json(truncate_large_values(context, max_length=200)))
    print(RUN_BANNER_CHAR * BANNER_WIDTH)

    logger.info(
        "estimate_generation_started",
        operation=operation,
        **truncate_large_values(context, max_length=200)
    )


def log_generation_complete(
    operation: str,
    item_count: int,
    total: float,
    duration_ms: int,
    tokens_used: int
) -> None:
    """Log a successful run with its headline numbers."""
    print("\n")
    print(RUN_BANNER_CHAR * BANNER_WIDTH)
    print(_create_banner(RUN_BANNER_CHAR, f"✓ {operation.upper()} COMPLETED"))
    print(RUN_BANNER_CHAR * BANNER_WIDTH)
    print(f"║ Timestamp   : {_timestamp()}")
    print(f"║ Items       : {item_count}")
    print(f"║ Total       : {total:,.2f} €")
    print(f"║ Duration    : {duration_ms:,} ms ({duration_ms / 1000:.2f}s)")
    print(f"║ Tokens used : {tokens_used:,}")
    print(RUN_BANNER_CHAR * BANNER_WIDTH)

    logger.info(
        "estimate_generation_completed",
        operation=operation,
        item_count=item_count,
        total=total,
        duration_ms=duration_ms,
        tokens_used=tokens_used
    )


def log_generation_failed(operation: str, error_code: str, error: str) -> None:
    """Log a failed run."""
    print("\n")
    print(FAILURE_BANNER_CHAR * BANNER_WIDTH)
    print(_create_banner(FAILURE_BANNER_CHAR, f"✗ {operation.upper()} FAILED"))
    print(FAILURE_BANNER_CHAR * BANNER_WIDTH)
    print(f"║ Timestamp : {_timestamp()}")
    print(f"║ Code      : {error_code}")
    print(f"║ Error     : {error[:500]}")
    print(FAILURE_BANNER_CHAR * BANNER_WIDTH)

    logger.error(
        "estimate_generation_failed",
        operation=operation,
        error_code=error_code,
        error=error[:500]
    )
