"""
Invoice service.

Invoices are line-item documents numbered INV-000001, INV-000002, ... per
user. Status workflow:

    draft -> sent -> paid
    sent -> overdue -> paid
    draft | sent | overdue -> void
"""

from typing import Any, Dict

from ledgerbooks.db import Database
from ledgerbooks.services.document_service import (
    DocumentResource,
    next_document_number,
    update_document_status,
)
from ledgerbooks.utils.errors import ServiceResult

INVOICE_TRANSITIONS = {
    "draft": ("sent", "void"),
    "sent": ("paid", "overdue", "void"),
    "overdue": ("paid", "void"),
    "paid": (),
    "void": (),
}

INVOICES = DocumentResource(
    table="invoice",
    label="Invoice",
    prefix="INV",
    number_field="invoice_number",
    transitions=INVOICE_TRANSITIONS,
    search_columns=("invoice_number", "customer_name", "reference"),
    date_column="invoice_date",
    defaults={"discount_type": "flat"},
    amount_fields=("discount", "shipping_charges"),
)


async def get_next_invoice_number(db: Database, user_id: str) -> str:
    return await next_document_number(db, INVOICES, user_id)


async def update_invoice_status(
    db: Database,
    user_id: str,
    invoice_id: str,
    status: str,
) -> ServiceResult[Dict[str, Any]]:
    """Move an invoice along its workflow (invalid transitions are VALIDATION errors)."""
    return await update_document_status(db, INVOICES, user_id, invoice_id, status)
