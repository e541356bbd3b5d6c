"""Firestore service for ObraCost.

Provides the invoice and finance-ledger operations used by the invoice
status reconciler.
"""

from typing import Dict, Any, Optional, List
import inspect
import structlog

from firebase_admin import firestore

from config.errors import StoreError, ErrorCode
from models.invoice import Invoice, LedgerTransaction

logger = structlog.get_logger()


class FirestoreService:
    """Service for Firestore operations.

    Handles invoice reads/updates and the ledger transactions derived
    from paid invoices.

    Note: Firebase Admin SDK for Python is synchronous. Methods are
    marked async for interface compatibility but operations are sync.
    """

    COLLECTION_INVOICES = "invoices"
    COLLECTION_TRANSACTIONS = "financeTransactions"

    def __init__(self, db=None):
        """Initialize FirestoreService.

        Args:
            db: Optional Firestore client. If not provided, uses default.
        """
        self._db = db

    @property
    def db(self):
        """Get Firestore client (lazy initialization)."""
        if self._db is None:
            self._db = firestore.client()
        return self._db

    async def _maybe_await(self, result: Any) -> Any:
        """Await result if it is awaitable (supports AsyncMock in unit tests)."""
        if inspect.isawaitable(result):
            return await result
        return result

    # =========================================================================
    # INVOICES
    # =========================================================================

    async def get_invoice(self, invoice_id: str) -> Optional[Invoice]:
        """Fetch invoice document by ID.

        Args:
            invoice_id: The invoice document ID.

        Returns:
            Invoice or None if not found.

        Raises:
            StoreError: If Firestore operation fails.
        """
        try:
            doc_ref = self.db.collection(self.COLLECTION_INVOICES).document(invoice_id)
            doc = await self._maybe_await(doc_ref.get())

            if doc.exists:
                return Invoice.model_validate({**(doc.to_dict() or {}), "id": doc.id})
            return None

        except Exception as e:
            logger.error("firestore_get_failed", invoice_id=invoice_id, error=str(e))
            raise StoreError(
                code=ErrorCode.FIRESTORE_ERROR,
                message=f"Failed to get invoice: {str(e)}",
                details={"invoice_id": invoice_id}
            )

    async def update_invoice(
        self,
        invoice_id: str,
        data: Dict[str, Any]
    ) -> None:
        """Update invoice document.

        Args:
            invoice_id: The invoice document ID.
            data: Fields to update (camelCase, dates as ISO strings).

        Raises:
            StoreError: If Firestore operation fails.
        """
        try:
            doc_ref = self.db.collection(self.COLLECTION_INVOICES).document(invoice_id)

            data = {**data, "updatedAt": firestore.SERVER_TIMESTAMP}

            await self._maybe_await(doc_ref.update(data))
            logger.info("invoice_updated", invoice_id=invoice_id, fields=list(data.keys()))

        except Exception as e:
            logger.error("firestore_update_failed", invoice_id=invoice_id, error=str(e))
            raise StoreError(
                code=ErrorCode.FIRESTORE_WRITE_FAILED,
                message=f"Failed to update invoice: {str(e)}",
                details={"invoice_id": invoice_id}
            )

    # =========================================================================
    # LEDGER
    # =========================================================================

    def _transactions_by_key(self, key: str):
        return self.db.collection(self.COLLECTION_TRANSACTIONS).where("key", "==", key)

    async def find_transactions_by_key(self, key: str) -> List[Dict[str, Any]]:
        """List ledger transactions carrying a key.

        Raises:
            StoreError: If Firestore operation fails.
        """
        try:
            docs = self._transactions_by_key(key).stream()
            return [{"id": doc.id, **(doc.to_dict() or {})} for doc in docs]
        except Exception as e:
            logger.error("ledger_query_failed", key=key, error=str(e))
            raise StoreError(
                code=ErrorCode.FIRESTORE_ERROR,
                message=f"Failed to query ledger: {str(e)}",
                details={"key": key}
            )

    async def create_transaction(self, transaction: LedgerTransaction) -> str:
        """Create a ledger transaction.

        Returns:
            The new document ID.

        Raises:
            StoreError: If Firestore operation fails.
        """
        try:
            doc_ref = self.db.collection(self.COLLECTION_TRANSACTIONS).document()
            data = transaction.to_firestore_dict()
            data["createdAt"] = firestore.SERVER_TIMESTAMP

            await self._maybe_await(doc_ref.set(data))
            logger.info(
                "ledger_transaction_created",
                transaction_id=doc_ref.id,
                key=transaction.key,
                amount=transaction.amount
            )
            return doc_ref.id

        except Exception as e:
            logger.error("ledger_create_failed", key=transaction.key, error=str(e))
            raise StoreError(
                code=ErrorCode.FIRESTORE_WRITE_FAILED,
                message=f"Failed to create ledger transaction: {str(e)}",
                details={"key": transaction.key}
            )

    async def delete_transactions_by_key(self, key: str) -> int:
        """Delete every ledger transaction carrying a key.

        Deleting a key with no transactions is not an error.

        Returns:
            Number of transactions deleted.

        Raises:
            StoreError: If Firestore operation fails.
        """
        try:
            deleted = 0
            for doc in self._transactions_by_key(key).stream():
                await self._maybe_await(doc.reference.delete())
                deleted += 1

            logger.info("ledger_transactions_deleted", key=key, deleted=deleted)
            return deleted

        except Exception as e:
            logger.error("ledger_delete_failed", key=key, error=str(e))
            raise StoreError(
                code=ErrorCode.FIRESTORE_WRITE_FAILED,
                message=f"Failed to delete ledger transactions: {str(e)}",
                details={"key": key}
            )
