"""ObraCost configuration settings.

Loads configuration from environment variables with sensible defaults.
Secrets are loaded via Firebase Secrets Manager (production) or environment variables (emulator).

Only the HTTP entry points read these settings. Pipeline components receive
an explicit GenerationConfig instead.
"""

import os
from typing import Optional
from dataclasses import dataclass, field
from dotenv import load_dotenv

# Load .env file for non-secret configuration (emulator hosts, model overrides, etc.)
# Secrets should come from Firebase Secrets Manager or environment variables
load_dotenv()


@dataclass(frozen=True)
class GenerationConfig:
    """Immutable configuration for one generation endpoint.

    Passed to LLMService and the agents at construction.
    """

    model: str
    api_key: Optional[str]
    base_url: Optional[str] = None
    temperature: float = 0.4
    max_tokens: int = 8192
    timeout_seconds: float = 60.0


@dataclass
class Settings:
    """Application settings loaded from environment variables.

    Note: Secrets (OPENAI_API_KEY) should be accessed via config.secrets module,
    not directly from this class. The openai_api_key property delegates to the
    secrets module.
    """

    # LLM Configuration (non-secrets)
    llm_model: str = field(default_factory=lambda: os.getenv("LLM_MODEL", "gpt-4o"))
    llm_temperature: float = field(default_factory=lambda: float(os.getenv("LLM_TEMPERATURE", "0.4")))
    llm_max_tokens: int = field(default_factory=lambda: int(os.getenv("LLM_MAX_TOKENS", "8192")))
    llm_timeout_seconds: float = field(default_factory=lambda: float(os.getenv("LLM_TIMEOUT_SECONDS", "60")))
    llm_base_url: Optional[str] = field(default_factory=lambda: os.getenv("LLM_BASE_URL") or None)

    # Pricing
    default_margin_percent: float = field(default_factory=lambda: float(os.getenv("DEFAULT_MARGIN_PERCENT", "20")))
    default_tax_rate: float = field(default_factory=lambda: float(os.getenv("DEFAULT_TAX_RATE", "21")))

    # Prompt grounding
    reference_price_limit: int = field(default_factory=lambda: int(os.getenv("REFERENCE_PRICE_LIMIT", "30")))
    max_photos: int = field(default_factory=lambda: int(os.getenv("MAX_PHOTOS", "10")))

    # Firebase Configuration
    use_firebase_emulators: bool = field(default_factory=lambda: os.getenv("USE_FIREBASE_EMULATORS", "false").lower() == "true")

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    # Internal: cached secret value (use openai_api_key property instead)
    _openai_api_key: Optional[str] = field(default=None, repr=False)

    @property
    def openai_api_key(self) -> Optional[str]:
        """Get OpenAI API key from Firebase Secrets Manager or environment."""
        if self._openai_api_key is None:
            from config.secrets import get_openai_api_key
            self._openai_api_key = get_openai_api_key()
        return self._openai_api_key

    def generation_config(self) -> GenerationConfig:
        """Build the explicit configuration handed to the pipeline."""
        return GenerationConfig(
            model=self.llm_model,
            api_key=self.openai_api_key,
            base_url=self.llm_base_url,
            temperature=self.llm_temperature,
            max_tokens=self.llm_max_tokens,
            timeout_seconds=self.llm_timeout_seconds,
        )

    @property
    def is_emulator_mode(self) -> bool:
        """Check if running in emulator mode."""
        return self.use_firebase_emulators


# Singleton settings instance
settings = Settings()
