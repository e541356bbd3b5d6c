"""Invoice lifecycle and ledger models for ObraCost.

Only the fields the status reconciler needs; the full invoice document
lives in Firestore.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator


class InvoiceStatus(str, Enum):
    """Status of an invoice."""

    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"
    PARTIAL = "partial"


class TransactionType(str, Enum):
    """Ledger transaction type."""

    INCOME = "income"
    EXPENSE = "expense"


class LedgerAction(str, Enum):
    """What the reconciler did to the ledger for one transition."""

    CREATED = "created"
    DELETED = "deleted"
    UNCHANGED = "unchanged"
    FAILED = "failed"


def ledger_key(invoice_number: str) -> str:
    """Deterministic ledger key for the income derived from an invoice."""
    return f"invoice-{invoice_number}"


class Invoice(BaseModel):
    """Invoice document as read from the store."""

    id: str
    invoice_number: str = Field(..., alias="invoiceNumber")
    status: InvoiceStatus = Field(default=InvoiceStatus.DRAFT)
    total: float = Field(default=0.0, ge=0)
    paid_amount: float = Field(default=0.0, ge=0, alias="paidAmount")
    payment_date: Optional[date] = Field(default=None, alias="paymentDate")
    payment_method: Optional[str] = Field(default=None, alias="paymentMethod")

    # Carried onto the derived ledger transaction
    user_id: Optional[str] = Field(default=None, alias="userId")
    company_id: Optional[str] = Field(default=None, alias="companyId")
    project_id: Optional[str] = Field(default=None, alias="projectId")
    client_id: Optional[str] = Field(default=None, alias="clientId")

    class Config:
        populate_by_name = True

    @field_validator("payment_date", mode="before")
    @classmethod
    def date_only(cls, v: Any) -> Any:
        if isinstance(v, datetime):
            return v.date()
        if isinstance(v, str) and "T" in v:
            return v.split("T", 1)[0]
        return v

    @property
    def ledger_key(self) -> str:
        return ledger_key(self.invoice_number)


class LedgerTransaction(BaseModel):
    """Income/expense record in the finance ledger."""

    id: Optional[str] = None
    key: str = Field(..., description="Deterministic key linking the entry to its source")
    type: TransactionType = Field(default=TransactionType.INCOME)
    amount: float = Field(..., gt=0)
    transaction_date: date = Field(..., alias="transactionDate")
    description: str
    payment_method: str = Field(default="transfer", alias="paymentMethod")
    notes: Optional[str] = None
    invoice_id: Optional[str] = Field(default=None, alias="invoiceId")
    user_id: Optional[str] = Field(default=None, alias="userId")
    company_id: Optional[str] = Field(default=None, alias="companyId")
    project_id: Optional[str] = Field(default=None, alias="projectId")
    client_id: Optional[str] = Field(default=None, alias="clientId")

    class Config:
        populate_by_name = True
        use_enum_values = True

    def to_firestore_dict(self) -> Dict[str, Any]:
        """Convert to Firestore-compatible dict (camelCase, ISO dates)."""
        data = self.model_dump(by_alias=True, exclude_none=True, exclude={"id"})
        data["transactionDate"] = self.transaction_date.isoformat()
        return data


class StatusTransitionRequest(BaseModel):
    """Explicit request to move an invoice to another status."""

    invoice_id: str = Field(..., min_length=1, alias="invoiceId")
    target_status: InvoiceStatus = Field(..., alias="targetStatus")
    payment_date: Optional[date] = Field(default=None, alias="paymentDate")
    payment_method: Optional[str] = Field(default=None, alias="paymentMethod")
    paid_amount: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False, alias="paidAmount")

    class Config:
        populate_by_name = True


class StatusTransitionResult(BaseModel):
    """Outcome of a status transition."""

    invoice_id: str = Field(..., alias="invoiceId")
    previous_status: InvoiceStatus = Field(..., alias="previousStatus")
    status: InvoiceStatus
    paid_amount: float = Field(..., alias="paidAmount")
    ledger_action: LedgerAction = Field(..., alias="ledgerAction")

    class Config:
        populate_by_name = True
        use_enum_values = True
