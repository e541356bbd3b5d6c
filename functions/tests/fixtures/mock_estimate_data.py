"""Sample estimate data and an in-memory invoice store for tests."""

import json
from typing import Any, Dict, List, Optional

from models.invoice import Invoice, LedgerTransaction


# =============================================================================
# GENERATION OUTPUTS
# =============================================================================

FAUCET_PAYLOAD = {
    "items": [
        {
            "category": "Plumbing",
            "description": "Replace kitchen faucet",
            "unit": "ud",
            "quantity": 1,
            "cost_price": 80,
            "tax_rate": 21,
            "line_subtotal": 80,
        }
    ]
}

FAUCET_RESPONSE = json.dumps(FAUCET_PAYLOAD)

FAUCET_FENCED_RESPONSE = (
    "Sure! Here is the estimate you asked for:\n\n"
    "```json\n" + json.dumps(FAUCET_PAYLOAD, indent=2) + "\n```\n\n"
    "Let me know if you need anything else."
)

FAUCET_PROSE_RESPONSE = (
    "Here is the estimate: " + json.dumps(FAUCET_PAYLOAD) + " Prices include materials."
)

TWO_RATE_RESPONSE = json.dumps({
    "items": [
        {
            "category": "Masonry",
            "description": "Partition wall with hollow brick",
            "unit": "m²",
            "quantity": 2,
            "cost_price": 100,
            "tax_rate": 21,
            "line_subtotal": 200,
        },
        {
            "category": "Painting",
            "description": "Plastic paint on walls",
            "unit": "m²",
            "quantity": 3,
            "cost_price": 50,
            "tax_rate": 10,
            "line_subtotal": 150,
        },
    ]
})

LEGACY_SPANISH_RESPONSE = json.dumps({
    "partidas": [
        {
            "categoria": "Fontanería",
            "descripcion": "Sustitución de grifo de cocina",
            "unidad": "ud",
            "cantidad": "1",
            "precio_unitario": "80,00",
            "subtotal": 80,
        }
    ],
    "subtotal": 80,
    "iva": 16.8,
    "total": 96.8,
})


# =============================================================================
# PRICED ITEMS (camelCase, as sent by the frontend)
# =============================================================================

SAMPLE_LINE_ITEMS: List[Dict[str, Any]] = [
    {
        "category": "Demolition",
        "description": "Remove existing wall tiles",
        "unit": "m²",
        "quantity": 12,
        "costPrice": 9.5,
        "marginPercent": 20,
        "sellPrice": 11.4,
        "taxRate": 10,
        "lineSubtotal": 136.8,
        "orderIndex": 0,
    },
    {
        "category": "Flooring & Tiling",
        "description": "Ceramic wall tiling",
        "unit": "m²",
        "quantity": 12,
        "costPrice": 28,
        "marginPercent": 20,
        "sellPrice": 33.6,
        "taxRate": 10,
        "lineSubtotal": 403.2,
        "orderIndex": 1,
    },
    {
        "category": "Plumbing",
        "description": "Replace kitchen faucet",
        "unit": "ud",
        "quantity": 1,
        "costPrice": 80,
        "marginPercent": 20,
        "sellPrice": 96,
        "taxRate": 21,
        "lineSubtotal": 96,
        "orderIndex": 2,
    },
]


# =============================================================================
# IN-MEMORY STORE
# =============================================================================


class InMemoryInvoiceStore:
    """Invoice and ledger store backed by dicts, same interface as FirestoreService."""

    def __init__(self):
        self.invoices: Dict[str, Invoice] = {}
        self.transactions: Dict[str, LedgerTransaction] = {}
        self.fail_ledger = False
        self._next_id = 1

    def add_invoice(self, **fields: Any) -> Invoice:
        fields.setdefault("id", f"inv-{len(self.invoices) + 1}")
        fields.setdefault("invoice_number", f"2026-{len(self.invoices) + 1:03d}")
        invoice = Invoice(**fields)
        self.invoices[invoice.id] = invoice
        return invoice

    def transactions_for(self, key: str) -> List[LedgerTransaction]:
        return [tx for tx in self.transactions.values() if tx.key == key]

    async def get_invoice(self, invoice_id: str) -> Optional[Invoice]:
        return self.invoices.get(invoice_id)

    async def update_invoice(self, invoice_id: str, data: Dict[str, Any]) -> None:
        current = self.invoices[invoice_id].model_dump(by_alias=True)
        current.update(data)
        self.invoices[invoice_id] = Invoice.model_validate(current)

    async def find_transactions_by_key(self, key: str) -> List[Dict[str, Any]]:
        if self.fail_ledger:
            raise RuntimeError("ledger unavailable")
        return [tx.model_dump(by_alias=True) for tx in self.transactions_for(key)]

    async def create_transaction(self, transaction: LedgerTransaction) -> str:
        if self.fail_ledger:
            raise RuntimeError("ledger unavailable")
        transaction_id = f"tx-{self._next_id}"
        self._next_id += 1
        self.transactions[transaction_id] = transaction.model_copy(update={"id": transaction_id})
        return transaction_id

    async def delete_transactions_by_key(self, key: str) -> int:
        if self.fail_ledger:
            raise RuntimeError("ledger unavailable")
        doomed = [tx_id for tx_id, tx in self.transactions.items() if tx.key == key]
        for tx_id in doomed:
            del self.transactions[tx_id]
        return len(doomed)
