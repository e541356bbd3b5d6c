"""Totals calculator for ObraCost.

Pure aggregation of priced items into subtotal, per-tax-rate breakdown
and grand total. Safe to call repeatedly for live previews and for
reconciling a persisted total against the current items.
"""

from collections import defaultdict
from decimal import Decimal
from typing import Dict, Optional, Sequence

import structlog

from models.estimate import DriftReport, EstimateTotals, LineItem, TaxGroup, DEFAULT_TAX_RATE
from services.pricing_engine import round2

logger = structlog.get_logger()

DRIFT_TOLERANCE = 0.005


def _cents(amount: float) -> Decimal:
    """Exact decimal value of an amount rounded to cents."""
    return Decimal(repr(round2(amount)))


def compute_totals(items: Sequence[LineItem]) -> EstimateTotals:
    """Aggregate priced items grouped by tax rate.

    Per rate: base = round2(sum of round2(quantity * unit_sell_price)),
    tax = round2(base * rate / 100). Breakdown is sorted by ascending rate.

    Args:
        items: Priced line items (any order).

    Returns:
        EstimateTotals with subtotal, breakdown, total tax and total.
    """
    bases: Dict[float, Decimal] = defaultdict(Decimal)
    for item in items:
        rate = float(item.tax_rate if item.tax_rate is not None else DEFAULT_TAX_RATE)
        bases[rate] += _cents(item.quantity * item.unit_sell_price)

    breakdown = []
    for rate in sorted(bases):
        base = float(bases[rate])
        breakdown.append(TaxGroup(rate=rate, base=base, amount=round2(base * rate / 100)))

    subtotal = float(sum(_cents(group.base) for group in breakdown))
    total_tax = float(sum(_cents(group.amount) for group in breakdown))

    return EstimateTotals(
        subtotal=subtotal,
        tax_breakdown=breakdown,
        total_tax=total_tax,
        total=round2(subtotal + total_tax),
    )


def detect_drift(
    items: Sequence[LineItem],
    persisted_total: float,
    tolerance: float = DRIFT_TOLERANCE,
    totals: Optional[EstimateTotals] = None
) -> DriftReport:
    """Compare a persisted total with the total recomputed from items.

    Drift is only reported. Resyncing is an explicit user action.
    """
    recomputed = totals or compute_totals(items)
    difference = round2(recomputed.total - persisted_total)
    has_drift = abs(difference) > tolerance

    if has_drift:
        logger.warning(
            "estimate_total_drift",
            persisted_total=persisted_total,
            recomputed_total=recomputed.total,
            difference=difference,
        )

    return DriftReport(
        persisted_total=persisted_total,
        recomputed_total=recomputed.total,
        difference=difference,
        has_drift=has_drift,
    )
