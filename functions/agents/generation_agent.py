"""Estimate Generation Agent for ObraCost.

Turns a free-text work description (plus optional site photos) into a
priced estimate. Reference prices relevant to the description ground the
prompt; the model returns cost-basis items and the margin is applied by
the pricing engine.
"""

from typing import Any, Dict, List, Optional
import structlog

from agents.base_agent import BaseEstimateAgent
from agents.prompts import build_generation_system_prompt, build_generation_user_message
from config.settings import GenerationConfig
from models.estimate import EstimateResult, DEFAULT_TAX_RATE
from models.requests import GenerateEstimateRequest, Photo
from services.llm_service import LLMService
from services.reference_prices import ReferencePriceMatcher, format_reference_section

logger = structlog.get_logger()


def build_search_text(request: GenerateEstimateRequest) -> str:
    """Work type, description and project name used for reference lookup."""
    return request.search_text()


def group_photos_by_zone(photos: List[Photo]) -> Dict[str, List[Photo]]:
    """Group photos by zone label, zones in order of first appearance."""
    groups: Dict[str, List[Photo]] = {}
    for photo in photos:
        groups.setdefault(photo.zone_label, []).append(photo)
    return groups


def build_multimodal_content(text: str, photos: List[Photo]) -> List[Dict[str, Any]]:
    """Text prompt followed by one header and its images per zone."""
    content: List[Dict[str, Any]] = [{"type": "text", "text": text}]
    for zone, zone_photos in group_photos_by_zone(photos).items():
        content.append({
            "type": "text",
            "text": f"Photos of zone \"{zone}\" ({len(zone_photos)}):"
        })
        for photo in zone_photos:
            content.append({"type": "image_url", "image_url": {"url": photo.data_url}})
    return content


class EstimateGenerationAgent(BaseEstimateAgent):
    """Generates a new estimate from a work description."""

    def __init__(
        self,
        config: GenerationConfig,
        llm_service: Optional[LLMService] = None,
        matcher: Optional[ReferencePriceMatcher] = None,
        default_tax_rate: float = DEFAULT_TAX_RATE
    ):
        super().__init__(
            name="generation",
            config=config,
            llm_service=llm_service,
            default_tax_rate=default_tax_rate
        )
        self.matcher = matcher or ReferencePriceMatcher()

    def build_prompt(self, request: GenerateEstimateRequest) -> Dict[str, Any]:
        groups = self.matcher.match(build_search_text(request))
        system_prompt = build_generation_system_prompt(format_reference_section(groups))

        text = build_generation_user_message(request)
        if request.photos:
            user_content: Any = build_multimodal_content(text, request.photos)
        else:
            user_content = text

        logger.debug(
            "generation_prompt_built",
            reference_categories=list(groups.keys()),
            photos=len(request.photos)
        )
        return {"system_prompt": system_prompt, "user_content": user_content}

    async def generate(
        self,
        request: GenerateEstimateRequest,
        default_margin: float
    ) -> EstimateResult:
        """Generate and price an estimate.

        Args:
            request: Validated generation request.
            default_margin: Margin used when the request carries none.

        Returns:
            Priced EstimateResult.
        """
        margin = request.margin_percent if request.margin_percent is not None else default_margin
        return await self.run(
            request,
            margin_percent=margin,
            log_context={
                "work_type": request.work_type,
                "description": request.description,
                "photos": len(request.photos),
            }
        )
