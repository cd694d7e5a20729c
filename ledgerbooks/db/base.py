"""
Database interface shared by the Supabase and in-memory stores.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ledgerbooks.db.query import Query
from ledgerbooks.db.unit_of_work import UnitOfWork


class Database(ABC):
    """Reads are immediate; writes only happen through commit(uow)."""

    @abstractmethod
    async def fetch(self, query: Query) -> List[Dict[str, Any]]:
        """Run a read query and return matching rows (possibly empty)."""

    @abstractmethod
    async def get(self, table: str, row_id: str) -> Optional[Dict[str, Any]]:
        """Fetch a single row by id, or None."""

    @abstractmethod
    async def commit(self, uow: UnitOfWork) -> None:
        """
        Apply every staged operation of `uow` in one atomic step.

        Raises:
            RowNotFoundError: a staged update/increment/delete hit a missing row
            PersistenceError: any other store failure

        On any error nothing from `uow` is applied. The unit of work is
        closed afterwards whatever the outcome.
        """

    async def fetch_one(self, query: Query) -> Optional[Dict[str, Any]]:
        rows = await self.fetch(query.page(0, 1))
        return rows[0] if rows else None
