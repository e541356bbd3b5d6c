"""Reference price catalog models."""

from typing import List

from pydantic import BaseModel, Field


class ReferencePriceEntry(BaseModel):
    """One read-only entry of the reference price catalog (EUR, cost basis)."""

    code: str = Field(..., description="Catalog code (e.g., 'FON-003')")
    description: str
    unit: str
    unit_price: float = Field(..., ge=0, description="Unit cost price in EUR")
    category: str
    keywords: List[str] = Field(default_factory=list, description="Extra match terms")

    class Config:
        frozen = True

    def prompt_line(self) -> str:
        """Render the entry as one line of the prompt's reference section."""
        return f"- [{self.code}] {self.description}: {self.unit_price:.2f} €/{self.unit}"
