"""
Vendor directory.

`?search=` matches name, display name, company and email. The display
name falls back to the company name, then the vendor name.
"""

from typing import Any, Dict

from ledgerbooks.db import Database
from ledgerbooks.services.resource_service import Resource

VENDOR_STATUSES = ("active", "inactive")


class VendorResource(Resource):
    async def prepare_create(self, db: Database, user_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
        data = await super().prepare_create(db, user_id, values)
        if not data.get("name", "").strip():
            raise ValueError("Vendor name is required")
        data["display_name"] = data.get("display_name") or data.get("company_name") or data["name"]
        return data


VENDORS = VendorResource(
    table="vendor",
    label="Vendor",
    search_columns=("name", "display_name", "company_name", "email"),
    order_by="name",
    order_desc=False,
    defaults={"currency": "USD", "payment_terms": "Due on Receipt", "status": "active"},
    choices={"status": VENDOR_STATUSES},
)
