"""
Supabase client factory and the Supabase-backed Database.

The backend authenticates users itself (see ledgerbooks/auth), so it talks
to PostgREST with a single server-side client and scopes every query by
user_id explicitly in the service layer.

Atomic scopes are committed through one RPC call, `commit_unit_of_work`,
which applies the staged operations inside a single Postgres transaction
(see supabase/commit_unit_of_work.sql).
"""

import logging
import re
from functools import lru_cache
from typing import Any, Dict, List, Optional, cast

from postgrest.exceptions import APIError
from supabase import Client, create_client

from ledgerbooks.config import settings
from ledgerbooks.db.base import Database
from ledgerbooks.db.errors import PersistenceError, RowNotFoundError, UnitOfWorkClosedError
from ledgerbooks.db.memory import MemoryDatabase
from ledgerbooks.db.query import Query
from ledgerbooks.db.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

# Raised by commit_unit_of_work: 'row_not_found:<table>:<id>'
_ROW_NOT_FOUND = re.compile(r"row_not_found:(?P<table>[a-z_]+):(?P<row_id>[^\s\"']+)")


@lru_cache()
def get_supabase_client() -> Client:
    """
    Create the server-side Supabase client (one per process).

    Returns:
        A Supabase client authenticated with SUPABASE_SECRET_KEY.

    Raises:
        ValueError: If SUPABASE_URL or SUPABASE_SECRET_KEY is not configured.
    """
    if not settings.SUPABASE_URL or not settings.SUPABASE_SECRET_KEY:
        raise ValueError(
            "SUPABASE_URL and SUPABASE_SECRET_KEY must be configured "
            "when STORAGE_BACKEND=supabase."
        )

    client: Client = create_client(
        supabase_url=settings.SUPABASE_URL,
        supabase_key=settings.SUPABASE_SECRET_KEY,
    )
    logger.debug("Created server-side Supabase client")
    return client


def _search_term(text: str) -> str:
    # PostgREST `or=` syntax reserves commas, parentheses and dots
    return re.sub(r"[,().*%]", " ", text).strip()


class SupabaseDatabase(Database):
    """Database over PostgREST tables plus the commit_unit_of_work RPC."""

    def __init__(self, client: Client):
        self.client = client

    async def fetch(self, query: Query) -> List[Dict[str, Any]]:
        builder = self.client.table(query.table).select("*")

        for op, column, value in query.filters:
            if op == "eq":
                builder = builder.eq(column, value)
            elif op == "gte":
                builder = builder.gte(column, value)
            elif op == "lte":
                builder = builder.lte(column, value)

        if query.search_text and query.search_columns:
            term = _search_term(query.search_text)
            if term:
                builder = builder.or_(
                    ",".join(f"{column}.ilike.*{term}*" for column in query.search_columns)
                )

        if query.order_by:
            builder = builder.order(query.order_by, desc=query.descending)
            if query.then_by:
                builder = builder.order(query.then_by, desc=query.descending)

        if query.limit is not None:
            builder = builder.range(query.offset, query.offset + query.limit - 1)

        try:
            result = builder.execute()
        except APIError as e:
            logger.error(f"Query on '{query.table}' failed: code={e.code}")
            raise PersistenceError(f"Failed to read from '{query.table}'") from e

        return cast(List[Dict[str, Any]], result.data or [])

    async def get(self, table: str, row_id: str) -> Optional[Dict[str, Any]]:
        rows = await self.fetch(Query(table).eq("id", row_id).page(0, 1))
        return rows[0] if rows else None

    async def commit(self, uow: UnitOfWork) -> None:
        if uow.closed:
            raise UnitOfWorkClosedError(f"{uow.label} is already finished")
        uow.close()

        if not uow.operations:
            return

        payload = [operation.to_payload() for operation in uow.operations]

        try:
            self.client.rpc("commit_unit_of_work", {"p_operations": payload}).execute()
        except APIError as e:
            match = _ROW_NOT_FOUND.search(e.message or "")
            if match:
                raise RowNotFoundError(match.group("table"), match.group("row_id")) from e
            logger.error(f"commit_unit_of_work failed for {uow.label}: code={e.code}")
            raise PersistenceError(f"Failed to commit {uow.label}") from e

        logger.debug(f"Committed {uow.label} with {len(uow)} operation(s)")


_memory_database: Optional[MemoryDatabase] = None


def get_database() -> Database:
    """
    FastAPI dependency returning the configured Database.

    Usage:
        @router.get("/things")
        async def list_things(db: Annotated[Database, Depends(get_database)]):
            ...
    """
    global _memory_database

    if settings.STORAGE_BACKEND == "memory":
        if _memory_database is None:
            logger.info("Using in-memory storage backend")
            _memory_database = MemoryDatabase()
        return _memory_database

    return SupabaseDatabase(get_supabase_client())
