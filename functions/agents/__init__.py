"""ObraCost estimate agents.

This package contains the agents that call the generation model:
- Base class with the shared extract / price / totals chain
- Generation agent (new estimate from a work description)
- Modification agent (instruction applied to an existing estimate)
"""

from agents.base_agent import BaseEstimateAgent
from agents.generation_agent import EstimateGenerationAgent
from agents.modification_agent import EstimateModificationAgent

__all__ = ["BaseEstimateAgent", "EstimateGenerationAgent", "EstimateModificationAgent"]
