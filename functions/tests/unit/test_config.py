"""Unit tests for settings, secrets and error mapping."""

import pytest

from config.errors import (
    ErrorCategory,
    ErrorCode,
    GenerationError,
    InvoiceNotFoundError,
    ObraCostError,
    ValidationError,
    RETRY_MESSAGE,
)
from config.secrets import clear_secret_cache, get_openai_api_key, get_secret
from config.settings import GenerationConfig, Settings


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self, monkeypatch):
        for name in ("LLM_MODEL", "LLM_TEMPERATURE", "LLM_MAX_TOKENS", "LLM_TIMEOUT_SECONDS",
                     "LLM_BASE_URL", "DEFAULT_MARGIN_PERCENT", "MAX_PHOTOS"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_openai_api_key="sk-test")

        assert settings.llm_model == "gpt-4o"
        assert settings.default_margin_percent == 20
        assert settings.max_photos == 10

        config = settings.generation_config()
        assert config == GenerationConfig(
            model="gpt-4o", api_key="sk-test", temperature=0.4, max_tokens=8192, timeout_seconds=60.0
        )

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("LLM_MODEL", "gpt-4o-mini")
        monkeypatch.setenv("LLM_TIMEOUT_SECONDS", "30")

        config = Settings(_openai_api_key="sk-test").generation_config()

        assert config.model == "gpt-4o-mini"
        assert config.timeout_seconds == 30.0

    def test_generation_config_is_immutable(self):
        config = GenerationConfig(model="gpt-4o", api_key="k")

        with pytest.raises(AttributeError):
            config.model = "other"


class TestSecrets:
    """Tests for secret access in emulator mode."""

    def test_secret_from_environment(self, monkeypatch):
        monkeypatch.setenv("FUNCTIONS_EMULATOR", "true")
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        clear_secret_cache()

        assert get_secret("OPENAI_API_KEY") == "sk-env"
        assert get_openai_api_key() == "sk-env"
        clear_secret_cache()

    def test_missing_secret(self, monkeypatch):
        monkeypatch.setenv("FUNCTIONS_EMULATOR", "true")
        monkeypatch.delenv("SOME_MISSING_SECRET", raising=False)

        assert get_secret("SOME_MISSING_SECRET") is None


class TestErrors:
    """Tests for error categories and envelopes."""

    def test_upstream_codes_share_retry_message(self):
        for code in (ErrorCode.ACCESS_DENIED, ErrorCode.UPSTREAM_OVERLOADED, ErrorCode.UNPARSABLE_RESPONSE):
            assert GenerationError(code=code, message="x").user_message == RETRY_MESSAGE

    def test_to_dict(self):
        error = GenerationError(code=ErrorCode.UPSTREAM_RATE_LIMITED, message="429", status_code=429)

        assert error.to_dict() == {
            "errorCategory": ErrorCategory.UPSTREAM_UNAVAILABLE,
            "userMessage": RETRY_MESSAGE,
            "code": ErrorCode.UPSTREAM_RATE_LIMITED,
            "details": {"status_code": 429},
        }

    def test_validation_error_message_is_shown(self):
        error = ValidationError("description is required", field="description")

        assert error.user_message == "description is required"
        assert error.details == {"field": "description"}
        assert error.http_status == 400

    def test_unknown_code_is_internal(self):
        assert ObraCostError(code="SOMETHING", message="x").http_status == 500

    def test_invoice_not_found(self):
        error = InvoiceNotFoundError("inv-9")

        assert error.http_status == 404
        assert error.category == ErrorCategory.BAD_REQUEST
        assert error.to_dict()["userMessage"] == "Invoice not found."
