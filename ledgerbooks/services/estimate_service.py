"""
Estimate (quote) service.

Estimates share the invoice line-item totals and are numbered EST-000001.
Status workflow:

    draft -> sent -> accepted | declined
    sent -> expired
"""

from typing import Any, Dict

from ledgerbooks.db import Database
from ledgerbooks.services.document_service import (
    DocumentResource,
    next_document_number,
    update_document_status,
)
from ledgerbooks.utils.errors import ServiceResult

ESTIMATE_TRANSITIONS = {
    "draft": ("sent",),
    "sent": ("accepted", "declined", "expired"),
    "accepted": (),
    "declined": (),
    "expired": (),
}

ESTIMATES = DocumentResource(
    table="estimate",
    label="Estimate",
    prefix="EST",
    number_field="estimate_number",
    transitions=ESTIMATE_TRANSITIONS,
    search_columns=("estimate_number", "customer_name", "reference"),
    date_column="estimate_date",
    defaults={"discount_type": "flat"},
    amount_fields=("discount", "shipping_charges"),
)


async def get_next_estimate_number(db: Database, user_id: str) -> str:
    return await next_document_number(db, ESTIMATES, user_id)


async def update_estimate_status(
    db: Database,
    user_id: str,
    estimate_id: str,
    status: str,
) -> ServiceResult[Dict[str, Any]]:
    return await update_document_status(db, ESTIMATES, user_id, estimate_id, status)
