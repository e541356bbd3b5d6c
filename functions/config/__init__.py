"""ObraCost configuration.

This package contains:
- settings: Environment variables and the explicit GenerationConfig
- secrets: Unified secret access (Firebase Secrets Manager)
- errors: Custom exceptions, error codes and user-facing categories
"""

from config.settings import settings, GenerationConfig
from config.errors import ObraCostError, ErrorCategory, ErrorCode
from config.secrets import get_secret, get_openai_api_key

__all__ = [
    "settings",
    "GenerationConfig",
    "ObraCostError",
    "ErrorCategory",
    "ErrorCode",
    "get_secret",
    "get_openai_api_key",
]
