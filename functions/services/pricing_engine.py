"""Pricing engine for ObraCost.

Turns cost-basis items into margin-priced line items. Rounding is applied
to the unit sell price and again to the line subtotal so that the displayed
unit price times quantity always reconciles with the displayed subtotal.

All functions are pure: they take an item snapshot and return a new one,
so an optimistic edit can be undone by recomputing from the last
confirmed snapshot.
"""

import math
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, List, Optional, Sequence

import structlog

from models.estimate import CostBasisItem, LineItem, DEFAULT_TAX_RATE

logger = structlog.get_logger()

_CENT = Decimal("0.01")

# Fields whose change requires recomputing the derived prices
PRICE_FIELDS = {"unit_cost_price", "margin_percent", "quantity"}
TEXT_FIELDS = {"category", "description", "unit"}


def round2(amount: float) -> float:
    """Round a monetary amount to cents, half away from zero.

    Works on the shortest decimal representation of the float so that
    values such as 1.005 round to 1.01.

    Raises:
        ValueError: If the amount is not finite or too large to hold in cents.
    """
    if not math.isfinite(amount):
        raise ValueError(f"Amount is not a finite number: {amount}")
    try:
        return float(Decimal(repr(float(amount))).quantize(_CENT, rounding=ROUND_HALF_UP))
    except InvalidOperation as e:
        raise ValueError(f"Amount out of range: {amount}") from e


def compute_sell_price(cost_price: float, margin_percent: float) -> float:
    """Sell price for a unit cost and margin percentage."""
    if margin_percent < 0:
        raise ValueError(f"Margin must be >= 0, got {margin_percent}")
    return round2(cost_price * (1 + margin_percent / 100))


def compute_line_subtotal(quantity: float, unit_sell_price: float) -> float:
    """Line subtotal for a quantity at a unit sell price."""
    return round2(quantity * unit_sell_price)


def _priced(item: LineItem, **changes: Any) -> LineItem:
    """Copy of item with changes applied and derived prices recomputed."""
    data = item.model_dump()
    data.update(changes)
    cost = round2(data["unit_cost_price"])
    sell = compute_sell_price(cost, data["margin_percent"])
    data.update(
        unit_cost_price=cost,
        unit_sell_price=sell,
        line_subtotal=compute_line_subtotal(data["quantity"], sell),
    )
    return LineItem(**data)


def price_item(
    item: CostBasisItem,
    margin_percent: float,
    order_index: int,
    default_tax_rate: float = DEFAULT_TAX_RATE
) -> LineItem:
    """Price one cost-basis item.

    Args:
        item: Item with a cost-basis price.
        margin_percent: Margin to apply.
        order_index: Position of the item in the estimate.
        default_tax_rate: Rate used when the item carries none.

    Returns:
        Priced LineItem.
    """
    cost = round2(item.cost_price)
    sell = compute_sell_price(cost, margin_percent)
    return LineItem(
        category=item.category,
        description=item.description,
        unit=item.unit,
        quantity=item.quantity,
        unit_cost_price=cost,
        margin_percent=margin_percent,
        unit_sell_price=sell,
        tax_rate=item.tax_rate if item.tax_rate is not None else default_tax_rate,
        line_subtotal=compute_line_subtotal(item.quantity, sell),
        order_index=order_index,
    )


def price_items(
    items: Sequence[CostBasisItem],
    margin_percent: float,
    default_tax_rate: float = DEFAULT_TAX_RATE
) -> List[LineItem]:
    """Price cost-basis items in input order; order_index is the 0-based position."""
    priced = [
        price_item(item, margin_percent, index, default_tax_rate)
        for index, item in enumerate(items)
    ]
    logger.debug("items_priced", count=len(priced), margin_percent=margin_percent)
    return priced


# =============================================================================
# EDIT OPERATIONS
# =============================================================================


def update_item(items: Sequence[LineItem], index: int, field: str, value: Any) -> List[LineItem]:
    """Change one field of one item, recomputing its derived prices.

    Args:
        items: Current item snapshot.
        index: Position of the item to change.
        field: unit_cost_price, margin_percent, quantity, tax_rate or a text field.
        value: New value.

    Returns:
        New item list.

    Raises:
        IndexError: If index is out of range.
        ValueError: If field cannot be edited.
    """
    if not 0 <= index < len(items):
        raise IndexError(f"No item at position {index}")

    current = items[index]
    if field in PRICE_FIELDS:
        updated = _priced(current, **{field: float(value)})
    elif field == "tax_rate":
        updated = current.model_copy(update={"tax_rate": float(value)})
    elif field in TEXT_FIELDS:
        updated = current.model_copy(update={field: str(value)})
    else:
        raise ValueError(f"Field cannot be edited: {field}")

    result = list(items)
    result[index] = updated
    return result


def add_item(
    items: Sequence[LineItem],
    margin_percent: float,
    default_tax_rate: float = DEFAULT_TAX_RATE
) -> List[LineItem]:
    """Append a blank item at the end of the estimate."""
    blank = LineItem(
        category="General",
        description="New item",
        unit="ud",
        quantity=1,
        unit_cost_price=0,
        margin_percent=margin_percent,
        unit_sell_price=0,
        tax_rate=default_tax_rate,
        line_subtotal=0,
        order_index=len(items),
    )
    return [*items, blank]


def remove_item(items: Sequence[LineItem], index: int) -> List[LineItem]:
    """Remove one item and re-number the rest."""
    if not 0 <= index < len(items):
        raise IndexError(f"No item at position {index}")
    remaining = [item for position, item in enumerate(items) if position != index]
    return reindex(remaining)


def reindex(items: Sequence[LineItem]) -> List[LineItem]:
    """Assign order_index from list position."""
    return [item.model_copy(update={"order_index": index}) for index, item in enumerate(items)]


def apply_global_margin(items: Sequence[LineItem], margin_percent: float) -> List[LineItem]:
    """Reprice every item with one margin."""
    return [_priced(item, margin_percent=margin_percent) for item in items]


def reprice(items: Sequence[LineItem], margin_percent: Optional[float] = None) -> List[LineItem]:
    """Recompute derived prices of a snapshot, optionally with a new margin."""
    if margin_percent is not None:
        return apply_global_margin(items, margin_percent)
    return [_priced(item) for item in items]
