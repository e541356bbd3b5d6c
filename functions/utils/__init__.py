"""Utility modules for ObraCost functions."""

from utils.agent_logger import (
    log_generation_start,
    log_generation_complete,
    log_generation_failed,
    truncate_large_values,
)

__all__ = [
    "log_generation_start",
    "log_generation_complete",
    "log_generation_failed",
    "truncate_large_values",
]
