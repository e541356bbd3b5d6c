"""Prompts for the ObraCost estimate agents.

System rules and user message builders for estimate generation and
estimate modification.
"""

import json
from typing import List, Optional, Sequence

from models.estimate import LineItem
from models.requests import GenerateEstimateRequest


# =============================================================================
# SHARED OUTPUT SCHEMA
# =============================================================================

ITEM_SCHEMA = """{
  "items": [
    {
      "category": "Plumbing",
      "description": "Detailed description of the work",
      "unit": "ud",
      "quantity": 1,
      "cost_price": 80.00,
      "tax_rate": 21,
      "line_subtotal": 80.00
    }
  ]
}"""


# =============================================================================
# GENERATION
# =============================================================================

GENERATION_SYSTEM_PROMPT = """You are an expert estimator for building works and renovations in Spain. Your job is to turn a description of the requested work into a detailed, professional estimate with realistic current Spanish market prices.

## Scope Rules (CRITICAL):
- Price ONLY the work the client describes. Do NOT add rooms, trades or upgrades that were not requested.
- Include what the described work genuinely needs: preparation, materials, labour, removal of debris and final cleaning.
- If the description is small (e.g. replacing one tap), the estimate must be small too.
- Photos, when present, show the current state of the site. Use them to size quantities, never to invent scope.

## Format Rules:
- Group items into logical categories (Demolition, Masonry, Plumbing, Electrical, Joinery, Painting, ...).
- Use standard units: m² (square metre), ml (linear metre), ud (unit), pa (lump sum), h (hour).
- "cost_price" is the unit COST before any margin. The margin is applied later; never include it.
- "line_subtotal" = quantity × cost_price.
- "tax_rate" is the VAT percentage for the item (21 by default, 10 for qualifying home renovation work).

## Response Format:
You MUST respond with valid JSON only. No markdown, no explanation.

""" + ITEM_SCHEMA


def build_generation_system_prompt(reference_section: str = "") -> str:
    """System rules for generation, with the reference prices when any matched."""
    if not reference_section:
        return GENERATION_SYSTEM_PROMPT
    return f"{GENERATION_SYSTEM_PROMPT}\n\n{reference_section}"


def build_generation_user_message(request: GenerateEstimateRequest) -> str:
    """Restate the request for the model."""
    lines = ["Generate a detailed estimate for the following work:", ""]

    if request.project_context is not None:
        if request.project_context.name:
            lines.append(f"Project: {request.project_context.name}")
        if request.project_context.address:
            lines.append(f"Address: {request.project_context.address}")
    if request.client_name:
        lines.append(f"Client: {request.client_name}")
    if request.work_type:
        lines.append(f"Work type: {request.work_type}")

    lines.extend([
        "",
        "Work description:",
        request.description,
        "",
        "Include ONLY the items this work requires. Do not add anything the client did not ask for.",
    ])
    return "\n".join(lines)


# =============================================================================
# MODIFICATION
# =============================================================================

MODIFICATION_SYSTEM_PROMPT = """You are an expert estimator for building works and renovations in Spain. The user has an existing estimate and wants to change it.

## Rules:
- Items NOT affected by the instruction must be returned unchanged: same category, description, unit, quantity, cost_price and tax_rate.
- If the user asks to add something, add new items with realistic Spanish market cost prices.
- If the user asks to remove something, leave it out of the list.
- If the user asks to change prices or quantities, adjust only those items.
- Return "cost_price" (real cost without margin). The margin is applied later.
- "line_subtotal" = quantity × cost_price.
- Return the COMPLETE modified estimate: every item, not only the changed ones.

## Response Format:
You MUST respond with valid JSON only. No markdown, no explanation.

""" + ITEM_SCHEMA


def serialize_items(items: Sequence[LineItem]) -> List[dict]:
    """Cost-basis view of the current items, as sent to the model."""
    return [
        {
            "order": index,
            "category": item.category,
            "description": item.description,
            "unit": item.unit,
            "quantity": item.quantity,
            "cost_price": item.unit_cost_price,
            "tax_rate": item.tax_rate,
        }
        for index, item in enumerate(items)
    ]


def build_modification_user_message(
    items: Sequence[LineItem],
    instruction: str,
    margin_percent: Optional[float] = None
) -> str:
    """Current estimate plus the user's instruction."""
    current = json.dumps(serialize_items(items), indent=2, ensure_ascii=False)
    message = f"Current estimate:\n{current}\n\nUser instruction: {instruction}\n"
    if margin_percent is not None:
        message += f"\n(A {margin_percent:g}% margin is applied afterwards; do not include it.)\n"
    return message + "\nReturn the complete modified estimate (all items). Respond with JSON only."
