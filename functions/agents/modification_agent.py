"""Estimate Modification Agent for ObraCost.

Applies a natural-language instruction to an existing estimate. The model
returns the complete replacement item set at cost; it is priced again with
the estimate's current global margin, except that items the instruction left
untouched keep their own margin.
"""

from dataclasses import replace
from typing import Any, Dict, List, Optional, Tuple
import structlog

from agents.base_agent import BaseEstimateAgent
from agents.prompts import MODIFICATION_SYSTEM_PROMPT, build_modification_user_message
from config.settings import GenerationConfig
from models.estimate import CostBasisItem, EstimateResult, LineItem, DEFAULT_TAX_RATE
from models.requests import ModifyEstimateRequest
from services.llm_service import LLMService
from services.pricing_engine import price_items, update_item

logger = structlog.get_logger()

MODIFICATION_TEMPERATURE = 0.5


def _item_key(category: str, description: str) -> Tuple[str, str]:
    return (category.strip().casefold(), description.strip().casefold())


class EstimateModificationAgent(BaseEstimateAgent):
    """Rewrites an estimate according to a user instruction."""

    def __init__(
        self,
        config: GenerationConfig,
        llm_service: Optional[LLMService] = None,
        default_tax_rate: float = DEFAULT_TAX_RATE
    ):
        super().__init__(
            name="modification",
            config=config,
            llm_service=llm_service or LLMService(replace(config, temperature=MODIFICATION_TEMPERATURE)),
            default_tax_rate=default_tax_rate
        )

    def build_prompt(self, request: ModifyEstimateRequest) -> Dict[str, Any]:
        return {
            "system_prompt": MODIFICATION_SYSTEM_PROMPT,
            "user_content": build_modification_user_message(
                request.current_items,
                request.instruction,
                request.current_global_margin
            ),
        }

    def adjust_items(
        self,
        items: List[CostBasisItem],
        request: ModifyEstimateRequest
    ) -> List[CostBasisItem]:
        """Keep the existing tax rate of returned items that omit one."""
        existing = {
            _item_key(item.category, item.description): item.tax_rate
            for item in request.current_items
        }

        adjusted = []
        preserved = 0
        for item in items:
            rate = existing.get(_item_key(item.category, item.description))
            if item.tax_rate is None and rate is not None:
                item = item.model_copy(update={"tax_rate": rate})
                preserved += 1
            adjusted.append(item)

        if preserved:
            logger.debug("modification_tax_rates_preserved", count=preserved)
        return adjusted

    def price(
        self,
        items: List[CostBasisItem],
        request: ModifyEstimateRequest,
        margin_percent: float
    ) -> List[LineItem]:
        """Price at the global margin; untouched items keep their own margin.

        An item is untouched when it matches an existing one by (category,
        description) with the same quantity and unit cost.
        """
        existing = {
            _item_key(item.category, item.description): item
            for item in request.current_items
        }

        priced = price_items(items, margin_percent, self.default_tax_rate)
        kept = 0
        for index, item in enumerate(list(priced)):
            current = existing.get(_item_key(item.category, item.description))
            if (
                current is not None
                and current.margin_percent != item.margin_percent
                and current.quantity == item.quantity
                and current.unit_cost_price == item.unit_cost_price
            ):
                priced = update_item(priced, index, "margin_percent", current.margin_percent)
                kept += 1

        if kept:
            logger.debug("modification_item_margins_kept", count=kept)
        return priced

    async def modify(
        self,
        request: ModifyEstimateRequest,
        default_margin: float
    ) -> EstimateResult:
        """Apply the instruction and reprice the full replacement set.

        Args:
            request: Validated modification request.
            default_margin: Margin used when the request carries none.

        Returns:
            Priced EstimateResult replacing the current items.
        """
        margin = (
            request.current_global_margin
            if request.current_global_margin is not None
            else default_margin
        )
        return await self.run(
            request,
            margin_percent=margin,
            log_context={
                "instruction": request.instruction,
                "current_items": len(request.current_items),
            }
        )
