"""
Database access layer for Ledgerbooks Backend.

All writes go through a UnitOfWork committed by a Database:
- SupabaseDatabase commits through the commit_unit_of_work RPC
- MemoryDatabase commits in-process (local runs and tests)

DO NOT define table schemas or migrations here.
"""

from .base import Database
from .client import SupabaseDatabase, get_database, get_supabase_client
from .errors import PersistenceError, RowNotFoundError, UnitOfWorkClosedError
from .memory import MemoryDatabase
from .query import Query
from .unit_of_work import UnitOfWork, utc_now_iso

__all__ = [
    "Database",
    "MemoryDatabase",
    "PersistenceError",
    "Query",
    "RowNotFoundError",
    "SupabaseDatabase",
    "UnitOfWork",
    "UnitOfWorkClosedError",
    "get_database",
    "get_supabase_client",
    "utc_now_iso",
]
