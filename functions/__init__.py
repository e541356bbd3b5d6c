"""ObraCost - Cloud Functions.

This package contains the Python Cloud Functions for ObraCost, the
AI-assisted estimating backend for building works and renovations.

Architecture:
- Generation agent: work description (and photos) -> priced estimate
- Modification agent: instruction + current items -> replacement estimate
- Pricing engine and totals calculator: margin, rounding and tax breakdown
- Invoice status reconciler: status transitions projected to the ledger
"""

__version__ = "1.0.0"
