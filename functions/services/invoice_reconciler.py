"""Invoice status reconciler for ObraCost.

Applies an explicit invoice status transition and keeps the finance
ledger consistent with it: an invoice entering "paid" produces one income
transaction, an invoice leaving "paid" removes it. Ledger writes are a
best-effort projection; the status update itself is authoritative.
"""

from datetime import date
from typing import Any, Dict, Optional
import structlog

from config.errors import InvoiceNotFoundError
from models.invoice import (
    Invoice,
    InvoiceStatus,
    LedgerAction,
    LedgerTransaction,
    StatusTransitionRequest,
    StatusTransitionResult,
    TransactionType,
)
from services.firestore_service import FirestoreService

logger = structlog.get_logger()

DEFAULT_PAYMENT_METHOD = "transfer"


class InvoiceStatusReconciler:
    """Moves invoices between statuses and projects payments to the ledger."""

    def __init__(self, store: Optional[FirestoreService] = None, today=date.today):
        """Initialize InvoiceStatusReconciler.

        Args:
            store: Invoice and ledger store.
            today: Callable returning the current date.
        """
        self.store = store or FirestoreService()
        self._today = today

    def build_update(
        self,
        invoice: Invoice,
        request: StatusTransitionRequest
    ) -> Dict[str, Any]:
        """Invoice fields to write for a transition (camelCase)."""
        target = InvoiceStatus(request.target_status)
        update: Dict[str, Any] = {"status": target.value}

        if target == InvoiceStatus.PAID:
            payment_date = request.payment_date or self._today()
            update["paymentDate"] = payment_date.isoformat()
            update["paymentMethod"] = request.payment_method or invoice.payment_method
            update["paidAmount"] = request.paid_amount or invoice.total
        elif target == InvoiceStatus.PARTIAL:
            update["paidAmount"] = (
                request.paid_amount if request.paid_amount is not None else invoice.paid_amount
            )
            if request.payment_date:
                update["paymentDate"] = request.payment_date.isoformat()
            if request.payment_method:
                update["paymentMethod"] = request.payment_method
        elif invoice.status == InvoiceStatus.PAID:
            update["paidAmount"] = 0
            update["paymentDate"] = None
            update["paymentMethod"] = None

        return update

    async def transition(self, request: StatusTransitionRequest) -> StatusTransitionResult:
        """Apply a status transition.

        Args:
            request: Invoice ID, target status and optional payment details.

        Returns:
            StatusTransitionResult with the ledger action taken.

        Raises:
            InvoiceNotFoundError: If the invoice does not exist.
            StoreError: If the status update cannot be persisted.
        """
        invoice = await self.store.get_invoice(request.invoice_id)
        if invoice is None:
            raise InvoiceNotFoundError(request.invoice_id)

        previous = InvoiceStatus(invoice.status)
        target = InvoiceStatus(request.target_status)
        update = self.build_update(invoice, request)

        await self.store.update_invoice(invoice.id, update)
        logger.info(
            "invoice_status_changed",
            invoice_id=invoice.id,
            previous_status=previous.value,
            status=target.value
        )

        ledger_action = await self._project_to_ledger(invoice, previous, target, update)

        return StatusTransitionResult(
            invoice_id=invoice.id,
            previous_status=previous,
            status=target,
            paid_amount=update.get("paidAmount", invoice.paid_amount) or 0,
            ledger_action=ledger_action,
        )

    async def _project_to_ledger(
        self,
        invoice: Invoice,
        previous: InvoiceStatus,
        target: InvoiceStatus,
        update: Dict[str, Any]
    ) -> LedgerAction:
        """Create or delete the invoice's income transaction. Never raises."""
        key = invoice.ledger_key
        try:
            if target == InvoiceStatus.PAID and previous != InvoiceStatus.PAID:
                return await self._record_income(invoice, update)

            if previous == InvoiceStatus.PAID and target != InvoiceStatus.PAID:
                deleted = await self.store.delete_transactions_by_key(key)
                return LedgerAction.DELETED if deleted else LedgerAction.UNCHANGED

        except Exception as e:
            logger.error(
                "ledger_projection_failed",
                invoice_id=invoice.id,
                key=key,
                previous_status=previous.value,
                status=target.value,
                error=str(e)
            )
            return LedgerAction.FAILED

        return LedgerAction.UNCHANGED

    async def _record_income(self, invoice: Invoice, update: Dict[str, Any]) -> LedgerAction:
        amount = update.get("paidAmount") or invoice.total
        existing = await self.store.find_transactions_by_key(invoice.ledger_key)
        if existing or amount <= 0:
            logger.info(
                "ledger_income_skipped",
                invoice_id=invoice.id,
                existing=len(existing),
                amount=amount
            )
            return LedgerAction.UNCHANGED

        transaction = LedgerTransaction(
            key=invoice.ledger_key,
            type=TransactionType.INCOME,
            amount=amount,
            transaction_date=date.fromisoformat(update["paymentDate"]),
            description=f"Invoice {invoice.invoice_number}",
            payment_method=update.get("paymentMethod") or DEFAULT_PAYMENT_METHOD,
            notes=f"Automatic income from invoice {invoice.invoice_number}",
            invoice_id=invoice.id,
            user_id=invoice.user_id,
            company_id=invoice.company_id,
            project_id=invoice.project_id,
            client_id=invoice.client_id,
        )
        await self.store.create_transaction(transaction)
        return LedgerAction.CREATED
