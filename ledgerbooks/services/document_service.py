"""
Shared logic for line-item documents (invoices and estimates).

Totals are always computed server-side from the line items:

    sub_total       = sum(quantity * rate)
    discount_amount = sub_total * discount / 100   (discount_type == "percentage")
                      discount                     (discount_type == "flat")
    tax_amount      = sum(item tax_amount)
    total           = sub_total - discount_amount + tax_amount
                      + shipping_charges + adjustment + round_off

Each figure is quantized to 2 places. Document numbers look like
INV-000001 and are assigned per user when the client omits one.
"""

import logging
import re
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from ledgerbooks.db import Database, PersistenceError, Query, RowNotFoundError, UnitOfWork
from ledgerbooks.services.resource_service import Resource, get_resource
from ledgerbooks.utils.errors import ErrorKind, ServiceResult
from ledgerbooks.utils.money import money_str, read_money

logger = logging.getLogger(__name__)

PRICING_FIELDS = ("items", "discount", "discount_type", "shipping_charges", "adjustment", "round_off")
DISCOUNT_TYPES = ("percentage", "flat")


def _decimal(value: Any) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    try:
        return Decimal(str(value))
    except ArithmeticError as e:
        raise ValueError(f"numeric value required, got {value!r}") from e


def compute_totals(
    items: Iterable[Mapping[str, Any]],
    discount: Any = 0,
    discount_type: str = "flat",
    shipping_charges: Any = 0,
    adjustment: Any = 0,
    round_off: Any = 0,
) -> Dict[str, Any]:
    """
    Compute document totals from line items.

    Returns:
        dict with the normalized `items` (each with its line `amount`) and
        `sub_total`, `discount_amount`, `tax_amount`, `total` as money strings

    Raises:
        ValueError: on negative quantities/rates, unknown discount type or
        non-numeric input
    """
    if discount_type not in DISCOUNT_TYPES:
        raise ValueError(f"discount_type must be one of {', '.join(DISCOUNT_TYPES)}")

    normalized: List[Dict[str, Any]] = []
    sub_total = Decimal("0")
    tax_total = Decimal("0")

    for item in items:
        quantity = _decimal(item.get("quantity"))
        rate = _decimal(item.get("rate"))
        if quantity < 0 or rate < 0:
            raise ValueError("Line item quantity and rate must be non-negative")
        tax = _decimal(item.get("tax_amount"))

        line_amount = quantity * rate
        sub_total += line_amount
        tax_total += tax
        normalized.append({
            **item,
            "quantity": str(quantity),
            "rate": money_str(rate),
            "tax_amount": money_str(tax),
            "amount": money_str(line_amount),
        })

    discount_value = _decimal(discount)
    if discount_type == "percentage":
        if not Decimal("0") <= discount_value <= Decimal("100"):
            raise ValueError("Percentage discount must be between 0 and 100")
        discount_amount = sub_total * discount_value / Decimal("100")
    else:
        discount_amount = discount_value

    total = (
        sub_total
        - discount_amount
        + tax_total
        + _decimal(shipping_charges)
        + _decimal(adjustment)
        + _decimal(round_off)
    )

    return {
        "items": normalized,
        "sub_total": money_str(sub_total),
        "discount_amount": money_str(discount_amount),
        "tax_amount": money_str(tax_total),
        "total": money_str(total),
    }


def _totals_for(values: Mapping[str, Any]) -> Dict[str, Any]:
    return compute_totals(
        values.get("items") or [],
        discount=values.get("discount"),
        discount_type=values.get("discount_type") or "flat",
        shipping_charges=values.get("shipping_charges"),
        adjustment=values.get("adjustment"),
        round_off=values.get("round_off"),
    )


class DocumentResource(Resource):
    """A numbered line-item document with a status workflow."""

    def __init__(
        self,
        table: str,
        label: str,
        prefix: str,
        number_field: str,
        transitions: Dict[str, Tuple[str, ...]],
        initial_status: str = "draft",
        **kwargs: Any,
    ):
        super().__init__(table, label, **kwargs)
        self.prefix = prefix
        self.number_field = number_field
        self.transitions = transitions
        self.initial_status = initial_status
        self._number_pattern = re.compile(rf"^{re.escape(prefix)}-(\d+)$")

    def can_transition(self, current: str, new: str) -> bool:
        return new in self.transitions.get(current, ())

    def parse_number(self, number: Optional[str]) -> Optional[int]:
        match = self._number_pattern.match(number or "")
        return int(match.group(1)) if match else None

    def format_number(self, sequence: int) -> str:
        return f"{self.prefix}-{sequence:06d}"

    async def prepare_create(self, db: Database, user_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
        data = self.normalize(values)
        if not data.get(self.number_field):
            data[self.number_field] = await next_document_number(db, self, user_id)
        data["status"] = data.get("status") or self.initial_status
        if data["status"] not in self.transitions:
            raise ValueError(f"Unknown {self.label.lower()} status '{data['status']}'")
        data.update(_totals_for(data))
        return data

    async def prepare_update(
        self,
        db: Database,
        user_id: str,
        existing: Dict[str, Any],
        changes: Dict[str, Any],
    ) -> Dict[str, Any]:
        # Status only moves through update_document_status
        data = self.normalize({key: value for key, value in changes.items() if key != "status"})
        if any(field in data for field in PRICING_FIELDS):
            data.update(_totals_for({**existing, **data}))
        return data


async def next_document_number(db: Database, resource: DocumentResource, user_id: str) -> str:
    """Next free number for the user, e.g. INV-000007 after INV-000006."""
    records = await db.fetch(Query(resource.table).eq("user_id", user_id))
    sequences = [
        sequence
        for sequence in (resource.parse_number(r.get(resource.number_field)) for r in records)
        if sequence is not None
    ]
    return resource.format_number(max(sequences, default=0) + 1)


async def update_document_status(
    db: Database,
    resource: DocumentResource,
    user_id: str,
    document_id: str,
    new_status: str,
) -> ServiceResult[Dict[str, Any]]:
    """
    Move a document through its status workflow.

    Returns:
        ServiceResult with the updated document, NOT_FOUND, VALIDATION for an
        invalid transition, or PERSISTENCE
    """
    existing = await get_resource(db, resource, user_id, document_id)
    if not existing:
        return ServiceResult.failure(ErrorKind.NOT_FOUND, f"{resource.label} {document_id} not found")

    current = existing.get("status") or resource.initial_status
    if not resource.can_transition(current, new_status):
        logger.warning(
            f"Rejected {resource.label} {document_id} status change {current} -> {new_status}"
        )
        return ServiceResult.failure(
            ErrorKind.VALIDATION,
            f"Invalid status transition from '{current}' to '{new_status}'",
        )

    uow = UnitOfWork(f"{resource.table}_status")
    uow.update(resource.table, document_id, {"status": new_status})
    try:
        await db.commit(uow)
    except RowNotFoundError:
        return ServiceResult.failure(ErrorKind.NOT_FOUND, f"{resource.label} {document_id} not found")
    except PersistenceError as e:
        logger.error(f"Failed to update {resource.label} {document_id} status: {e}", exc_info=True)
        return ServiceResult.failure(ErrorKind.PERSISTENCE, "Failed to update status")

    logger.info(f"{resource.label} {document_id} status {current} -> {new_status}")
    return ServiceResult.success({**existing, "status": new_status})


def document_total(document: Mapping[str, Any]) -> Decimal:
    """Stored total of a document (zero when missing)."""
    return read_money(document.get("total"))

