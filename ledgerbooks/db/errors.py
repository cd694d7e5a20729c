"""
Persistence-level exceptions.

These never reach HTTP handlers directly: the service that owns a unit of
work catches them and turns them into a ServiceResult.
"""

from typing import Optional


class PersistenceError(Exception):
    """A store operation or a unit-of-work commit failed."""


class RowNotFoundError(PersistenceError):
    """A staged update/increment/delete targeted a row that does not exist."""

    def __init__(self, table: str, row_id: str, message: Optional[str] = None):
        self.table = table
        self.row_id = row_id
        super().__init__(message or f"Row {row_id} not found in table '{table}'")


class UnitOfWorkClosedError(PersistenceError):
    """Operations were staged on, or commit was called for, a finished unit of work."""
