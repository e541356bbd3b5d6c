"""Base Estimate Agent for ObraCost.

Shared chain for the agents that ask the model for cost-basis items:
single LLM call, item extraction, margin pricing and totals.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
import time
import structlog

from config.settings import GenerationConfig
from config.errors import ObraCostError, GenerationError, ErrorCode
from models.estimate import CostBasisItem, EstimateResult, LineItem, DEFAULT_TAX_RATE
from services.llm_service import LLMService
from services.pricing_engine import price_items
from services.response_extractor import extract_items
from services.totals_calculator import compute_totals
from utils.agent_logger import (
    log_generation_start,
    log_generation_complete,
    log_generation_failed,
)

logger = structlog.get_logger()


class BaseEstimateAgent(ABC):
    """Abstract base class for estimate agents.

    Provides:
    - LLM service built from an explicit GenerationConfig
    - Extraction, pricing and totals over the model output
    - Token and duration tracking
    - Start / complete / failed run logging

    Subclasses must implement:
    - build_prompt(request) - system prompt and user content for the call
    """

    def __init__(
        self,
        name: str,
        config: GenerationConfig,
        llm_service: Optional[LLMService] = None,
        default_tax_rate: float = DEFAULT_TAX_RATE
    ):
        """Initialize BaseEstimateAgent.

        Args:
            name: Agent name ("generation", "modification").
            config: Generation endpoint configuration.
            llm_service: Optional LLM service instance.
            default_tax_rate: Rate for items the model returns without one.
        """
        self.name = name
        self.config = config
        self.llm = llm_service or LLMService(config)
        self.default_tax_rate = default_tax_rate

        self._tokens_used = 0
        self._start_time: Optional[float] = None

    @property
    def tokens_used(self) -> int:
        """Get tokens used in current run."""
        return self._tokens_used

    @property
    def duration_ms(self) -> int:
        """Get duration of current run in milliseconds."""
        if self._start_time is None:
            return 0
        return int((time.time() - self._start_time) * 1000)

    @abstractmethod
    def build_prompt(self, request: Any) -> Dict[str, Any]:
        """Return {"system_prompt": str, "user_content": str | content parts}."""
        raise NotImplementedError("Subclasses must implement build_prompt()")

    def adjust_items(self, items: List[CostBasisItem], request: Any) -> List[CostBasisItem]:
        """Hook to post-process extracted items before pricing."""
        return items

    def price(self, items: List[CostBasisItem], request: Any, margin_percent: float) -> List[LineItem]:
        """Hook to price extracted items; every item gets margin_percent by default."""
        return price_items(items, margin_percent, self.default_tax_rate)

    async def run(
        self,
        request: Any,
        margin_percent: float,
        log_context: Optional[Dict[str, Any]] = None
    ) -> EstimateResult:
        """Run the full chain for one request.

        Args:
            request: Validated request model.
            margin_percent: Margin applied to every returned item.
            log_context: Extra fields for the start banner.

        Returns:
            Priced EstimateResult.

        Raises:
            GenerationError: On upstream failure, timeout, empty or
                unparsable output. No partial result is ever returned.
        """
        self._start_time = time.time()
        self._tokens_used = 0
        log_generation_start(self.name, {"margin_percent": margin_percent, **(log_context or {})})

        try:
            prompt = self.build_prompt(request)
            response = await self.llm.generate_with_system_prompt(
                system_prompt=prompt["system_prompt"],
                user_content=prompt["user_content"],
            )
            self._tokens_used = response.get("tokens_used", 0)

            extraction = extract_items(response["content"])
            if not extraction.ok:
                logger.warning(
                    "estimate_response_rejected",
                    agent=self.name,
                    reason=extraction.reason,
                    raw_excerpt=extraction.raw_excerpt[:200]
                )
                raise GenerationError(
                    code=ErrorCode.UNPARSABLE_RESPONSE,
                    message=f"Could not read items from the response: {extraction.reason}"
                )

            items = self.adjust_items(extraction.items, request)
            try:
                priced = self.price(items, request, margin_percent)
                totals = compute_totals(priced)
                result = EstimateResult.from_parts(priced, totals, margin_percent)
            except ValueError as e:
                raise GenerationError(
                    code=ErrorCode.UNPARSABLE_RESPONSE,
                    message=f"Item amounts out of range: {e}"
                ) from e

        except ObraCostError as e:
            log_generation_failed(self.name, e.code, e.message)
            raise

        log_generation_complete(
            self.name,
            item_count=len(result.items),
            total=result.total,
            duration_ms=self.duration_ms,
            tokens_used=self._tokens_used
        )
        return result
