"""
In-process document store.

Used for local runs (STORAGE_BACKEND=memory) and the test-suite. Commits
are all-or-nothing: operations are applied to a copy of the tables which
replaces the live data only when every operation succeeded.
"""

import copy
import logging
import threading
from decimal import Decimal
from typing import Any, Dict, List, Optional

from ledgerbooks.db.base import Database
from ledgerbooks.db.errors import PersistenceError, RowNotFoundError, UnitOfWorkClosedError
from ledgerbooks.db.query import Query
from ledgerbooks.db.unit_of_work import Operation, UnitOfWork

logger = logging.getLogger(__name__)

Tables = Dict[str, Dict[str, Dict[str, Any]]]


class MemoryDatabase(Database):
    """Dict-of-tables store with atomic batch commits."""

    def __init__(self) -> None:
        self._tables: Tables = {}
        self._lock = threading.Lock()

    async def fetch(self, query: Query) -> List[Dict[str, Any]]:
        with self._lock:
            rows = [
                copy.deepcopy(row)
                for row in self._tables.get(query.table, {}).values()
                if query.matches(row)
            ]

        if query.order_by:
            column = query.order_by
            tiebreak = query.then_by
            present = [r for r in rows if r.get(column) is not None]
            missing = [r for r in rows if r.get(column) is None]
            present.sort(
                key=lambda r: (r[column], str(r.get(tiebreak) or "") if tiebreak else ""),
                reverse=query.descending,
            )
            rows = present + missing

        end = None if query.limit is None else query.offset + query.limit
        return rows[query.offset:end]

    async def get(self, table: str, row_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            row = self._tables.get(table, {}).get(row_id)
            return copy.deepcopy(row) if row is not None else None

    async def commit(self, uow: UnitOfWork) -> None:
        if uow.closed:
            raise UnitOfWorkClosedError(f"{uow.label} is already finished")
        uow.close()

        with self._lock:
            staged = copy.deepcopy(self._tables)
            for operation in uow.operations:
                self._apply(staged, operation)
            self._tables = staged

        logger.debug(f"Committed {uow.label} with {len(uow)} operation(s)")

    def _apply(self, tables: Tables, operation: Operation) -> None:
        table = tables.setdefault(operation.table, {})

        if operation.op == "insert":
            if operation.row_id in table:
                raise PersistenceError(
                    f"Duplicate id {operation.row_id} in table '{operation.table}'"
                )
            table[operation.row_id] = copy.deepcopy(operation.values)
            return

        row = table.get(operation.row_id)
        if row is None:
            raise RowNotFoundError(operation.table, operation.row_id)

        if operation.op == "update":
            row.update(copy.deepcopy(operation.values))
        elif operation.op == "increment":
            current = Decimal(str(row.get(operation.column) or "0"))
            row[operation.column] = f"{current + operation.amount:.2f}"
        elif operation.op == "delete":
            del table[operation.row_id]
        else:
            raise PersistenceError(f"Unknown operation '{operation.op}'")
