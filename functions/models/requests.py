"""Request models for the estimating endpoints.

Validation here runs before any external call; a failure is reported to
the caller as a bad request.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from models.estimate import LineItem


ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/png", "image/webp", "image/heic", "image/heif")

MAX_MARGIN_PERCENT = 500.0


def _strip_optional(v: Optional[str]) -> Optional[str]:
    if isinstance(v, str):
        v = v.strip()
        return v or None
    return v


class Photo(BaseModel):
    """A site photograph sent as generation context."""

    image_data: str = Field(..., min_length=1, alias="imageData", description="Base64 image payload")
    mime_type: str = Field(default="image/jpeg", alias="mimeType")
    zone_label: str = Field(default="General", alias="zoneLabel", description="Area of the site shown")

    class Config:
        populate_by_name = True

    @field_validator("mime_type")
    @classmethod
    def validate_mime_type(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ALLOWED_IMAGE_TYPES:
            raise ValueError(f"Unsupported image type: {v}")
        return v

    @field_validator("zone_label", mode="before")
    @classmethod
    def default_zone(cls, v):
        return _strip_optional(v) or "General"

    @property
    def data_url(self) -> str:
        """Inline data URL accepted by multimodal chat models."""
        return f"data:{self.mime_type};base64,{self.image_data}"


class ProjectContext(BaseModel):
    """Project the estimate belongs to."""

    name: Optional[str] = None
    address: Optional[str] = None

    strip_fields = field_validator("name", "address", mode="before")(_strip_optional)


class GenerateEstimateRequest(BaseModel):
    """Request to generate a new estimate from a work description."""

    description: str = Field(..., description="Free-text description of the work")
    work_type: Optional[str] = Field(default=None, alias="workType")
    client_name: Optional[str] = Field(default=None, alias="clientName")
    project_context: Optional[ProjectContext] = Field(default=None, alias="projectContext")
    photos: List[Photo] = Field(default_factory=list)
    margin_percent: Optional[float] = Field(
        default=None,
        ge=0,
        le=MAX_MARGIN_PERCENT,
        alias="marginPercent",
        description="Margin to apply; defaults to the configured margin"
    )

    class Config:
        populate_by_name = True

    @field_validator("description", mode="before")
    @classmethod
    def require_description(cls, v):
        if not isinstance(v, str) or not v.strip():
            raise ValueError("description is required")
        return v.strip()

    strip_optional_fields = field_validator("work_type", "client_name", mode="before")(_strip_optional)

    def search_text(self) -> str:
        """Text used to look up reference prices."""
        parts = [self.work_type, self.description]
        if self.project_context is not None:
            parts.append(self.project_context.name)
        return " ".join(p for p in parts if p)


class ModifyEstimateRequest(BaseModel):
    """Request to modify an existing estimate with a natural-language instruction."""

    current_items: List[LineItem] = Field(..., alias="currentItems")
    instruction: str = Field(..., description="What to change")
    current_global_margin: Optional[float] = Field(
        default=None,
        ge=0,
        le=MAX_MARGIN_PERCENT,
        alias="currentGlobalMargin"
    )

    class Config:
        populate_by_name = True

    @field_validator("instruction", mode="before")
    @classmethod
    def require_instruction(cls, v):
        if not isinstance(v, str) or not v.strip():
            raise ValueError("instruction is required")
        return v.strip()

    @field_validator("current_items")
    @classmethod
    def require_items(cls, v: List[LineItem]) -> List[LineItem]:
        if not v:
            raise ValueError("there are no items to modify")
        return v


class RecalculateRequest(BaseModel):
    """Request to recompute totals for a snapshot of priced items."""

    items: List[LineItem] = Field(default_factory=list)
    persisted_total: Optional[float] = Field(default=None, allow_inf_nan=False, alias="persistedTotal")

    class Config:
        populate_by_name = True
