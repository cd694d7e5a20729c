"""
Unit of work: an explicit commit/rollback boundary.

Services create a UnitOfWork, pass it by reference into every store
operation that must land together, and hand it to Database.commit().
Operations are only staged here; nothing is visible to other readers
until the store commits the whole batch in one database transaction.
Dropping a unit of work without committing it leaves no trace.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from ledgerbooks.db.errors import UnitOfWorkClosedError


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string (the format every table uses)."""
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class Operation:
    """One staged write."""

    op: str  # insert | update | increment | delete
    table: str
    row_id: str
    values: Dict[str, Any] = field(default_factory=dict)
    column: Optional[str] = None
    amount: Optional[Decimal] = None

    def to_payload(self) -> Dict[str, Any]:
        """JSON-safe representation sent to the commit_unit_of_work RPC."""
        payload: Dict[str, Any] = {"op": self.op, "table": self.table, "id": self.row_id}
        if self.op in ("insert", "update"):
            payload["values"] = self.values
        if self.op == "increment":
            payload["column"] = self.column
            payload["amount"] = f"{self.amount:.2f}"
        return payload


class UnitOfWork:
    """Collects writes that must commit or roll back together."""

    def __init__(self, label: str = "unit_of_work"):
        self.label = label
        self.operations: List[Operation] = []
        self.closed = False

    def _stage(self, operation: Operation) -> None:
        if self.closed:
            raise UnitOfWorkClosedError(f"{self.label} is already finished")
        self.operations.append(operation)

    def insert(self, table: str, values: Dict[str, Any]) -> Dict[str, Any]:
        """
        Stage an insert and return the row as it will be stored.

        Ids and timestamps are assigned here so later operations in the
        same unit of work can reference the new row.
        """
        now = utc_now_iso()
        row = dict(values)
        row.setdefault("id", str(uuid.uuid4()))
        row.setdefault("created_at", now)
        row.setdefault("updated_at", now)
        self._stage(Operation(op="insert", table=table, row_id=row["id"], values=row))
        return row

    def update(self, table: str, row_id: str, values: Dict[str, Any]) -> None:
        changes = dict(values)
        changes.setdefault("updated_at", utc_now_iso())
        self._stage(Operation(op="update", table=table, row_id=row_id, values=changes))

    def increment(self, table: str, row_id: str, column: str, amount: Decimal) -> None:
        """Stage `column = column + amount`; the store applies it atomically."""
        self._stage(
            Operation(op="increment", table=table, row_id=row_id, column=column, amount=amount)
        )

    def delete(self, table: str, row_id: str) -> None:
        self._stage(Operation(op="delete", table=table, row_id=row_id))

    def close(self) -> None:
        self.closed = True

    def __len__(self) -> int:
        return len(self.operations)

    def __repr__(self) -> str:
        return f"UnitOfWork({self.label!r}, operations={len(self.operations)}, closed={self.closed})"
