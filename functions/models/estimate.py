"""Estimate Pydantic models for ObraCost.

Line items, tax breakdown and the estimate aggregate returned by the
generation and modification endpoints.
"""

import re
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator


DEFAULT_TAX_RATE = 21.0

_NUMBER_RE = re.compile(r"(?:€)?(-?\d[\d.,]*)(?:€|eur|euros)?", re.IGNORECASE)
_PLAIN_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?")


def _normalize_separators(number: str) -> str:
    """Resolve thousands and decimal separators to a plain decimal string.

    With both marks present the last one is the decimal mark. A single mark
    repeated ("1.234.567") is a thousands separator.
    """
    if "." in number and "," in number:
        decimal_mark = "." if number.rfind(".") > number.rfind(",") else ","
        thousands = "," if decimal_mark == "." else "."
        return number.replace(thousands, "").replace(decimal_mark, ".")
    for mark in (".", ","):
        if number.count(mark) > 1:
            return number.replace(mark, "")
    return number.replace(",", ".")


def _coerce_number(value: Any) -> Any:
    """Coerce loosely formatted numbers ("12,5", "80 EUR", "1.234,56") into floats.

    Strings that are not a single amount are returned untouched so pydantic
    can parse or reject them.
    """
    if isinstance(value, str):
        match = _NUMBER_RE.fullmatch(value.replace(" ", "").replace("\u00a0", ""))
        if match is None:
            return value
        number = _normalize_separators(match.group(1))
        if not _PLAIN_NUMBER_RE.fullmatch(number):
            return value
        return float(number)
    return value


# =============================================================================
# COST-BASIS ITEM (generation output)
# =============================================================================


class CostBasisItem(BaseModel):
    """One line item as returned by the model, priced at cost only.

    Accepts the English keys the prompts ask for as well as the Spanish
    keys older prompts produced.
    """

    category: str = Field(
        default="General",
        validation_alias=AliasChoices("category", "categoria"),
        description="Trade / chapter the item belongs to"
    )
    description: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("description", "descripcion"),
        description="What the work consists of"
    )
    unit: str = Field(
        default="ud",
        validation_alias=AliasChoices("unit", "unidad"),
        description="Unit of measurement (m², ml, ud, pa, h)"
    )
    quantity: float = Field(
        default=1.0,
        ge=0,
        allow_inf_nan=False,
        validation_alias=AliasChoices("quantity", "cantidad"),
    )
    cost_price: float = Field(
        ...,
        ge=0,
        allow_inf_nan=False,
        validation_alias=AliasChoices(
            "cost_price", "costPrice", "unit_cost_price", "unitCostPrice",
            "precio_coste", "precio_unitario"
        ),
        description="Unit price before margin"
    )
    tax_rate: Optional[float] = Field(
        default=None,
        ge=0,
        allow_inf_nan=False,
        validation_alias=AliasChoices("tax_rate", "taxRate", "iva_porcentaje"),
    )

    @field_validator("category", "description", "unit", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip()
        return v

    @field_validator("category", "unit", mode="after")
    @classmethod
    def default_blank(cls, v: str, info) -> str:
        if v:
            return v
        return "General" if info.field_name == "category" else "ud"

    @field_validator("quantity", "cost_price", "tax_rate", mode="before")
    @classmethod
    def coerce_numbers(cls, v: Any) -> Any:
        return _coerce_number(v)


# =============================================================================
# PRICED LINE ITEM
# =============================================================================


class LineItem(BaseModel):
    """One priced row of an estimate.

    unit_sell_price and line_subtotal are derived from unit_cost_price,
    margin_percent and quantity by services.pricing_engine; never set them
    independently.
    """

    category: str = Field(default="General")
    description: str = Field(default="")
    unit: str = Field(default="ud")
    quantity: float = Field(default=1.0, ge=0, allow_inf_nan=False)
    unit_cost_price: float = Field(default=0.0, ge=0, allow_inf_nan=False, alias="costPrice")
    margin_percent: float = Field(default=0.0, ge=0, allow_inf_nan=False, alias="marginPercent")
    unit_sell_price: float = Field(default=0.0, ge=0, allow_inf_nan=False, alias="sellPrice")
    tax_rate: float = Field(default=DEFAULT_TAX_RATE, ge=0, allow_inf_nan=False, alias="taxRate")
    line_subtotal: float = Field(default=0.0, ge=0, allow_inf_nan=False, alias="lineSubtotal")
    order_index: int = Field(default=0, ge=0, alias="orderIndex")

    class Config:
        populate_by_name = True

    @field_validator("quantity", "unit_cost_price", "margin_percent", "unit_sell_price",
                     "tax_rate", "line_subtotal", mode="before")
    @classmethod
    def coerce_numbers(cls, v: Any) -> Any:
        return _coerce_number(v)

    @field_validator("tax_rate", mode="before")
    @classmethod
    def default_tax_rate(cls, v: Any) -> Any:
        return DEFAULT_TAX_RATE if v is None else v

    def to_api_dict(self) -> Dict[str, Any]:
        """Convert to camelCase dict for API responses."""
        return self.model_dump(by_alias=True)


# =============================================================================
# TOTALS
# =============================================================================


class TaxGroup(BaseModel):
    """Items sharing one tax rate: taxable base and tax amount."""

    rate: float = Field(..., ge=0, description="Tax rate in percent")
    base: float = Field(..., description="Taxable base for this rate")
    amount: float = Field(..., description="Tax amount for this rate")


class EstimateTotals(BaseModel):
    """Aggregated totals for a list of priced items."""

    subtotal: float = Field(..., description="Sum of taxable bases")
    tax_breakdown: List[TaxGroup] = Field(default_factory=list, alias="taxBreakdown")
    total_tax: float = Field(..., alias="totalTax")
    total: float = Field(..., description="subtotal + total_tax")

    class Config:
        populate_by_name = True


class DriftReport(BaseModel):
    """Comparison of a persisted total against a freshly recomputed one."""

    persisted_total: float = Field(..., alias="persistedTotal")
    recomputed_total: float = Field(..., alias="recomputedTotal")
    difference: float
    has_drift: bool = Field(..., alias="hasDrift")

    class Config:
        populate_by_name = True


# =============================================================================
# ESTIMATE AGGREGATE
# =============================================================================


class EstimateResult(BaseModel):
    """Fully priced estimate returned by generation and modification."""

    items: List[LineItem] = Field(default_factory=list)
    subtotal: float
    tax_breakdown: List[TaxGroup] = Field(default_factory=list, alias="taxBreakdown")
    total_tax: float = Field(..., alias="totalTax")
    total: float
    applied_global_margin: float = Field(..., alias="appliedGlobalMargin")

    class Config:
        populate_by_name = True

    @classmethod
    def from_parts(
        cls,
        items: List[LineItem],
        totals: EstimateTotals,
        margin_percent: float
    ) -> "EstimateResult":
        """Assemble the aggregate from priced items and their totals."""
        return cls(
            items=items,
            subtotal=totals.subtotal,
            tax_breakdown=totals.tax_breakdown,
            total_tax=totals.total_tax,
            total=totals.total,
            applied_global_margin=margin_percent,
        )

    def to_api_dict(self) -> Dict[str, Any]:
        """Convert to camelCase dict for API responses."""
        return self.model_dump(by_alias=True)
