"""Shared helpers for service tests."""

from decimal import Decimal
from typing import Any, Dict

from ledgerbooks.db import MemoryDatabase, PersistenceError, RowNotFoundError
from ledgerbooks.db.unit_of_work import Operation
from ledgerbooks.services.account_service import ACCOUNT_TABLE, create_account


async def make_account(db, user_id: str, opening_balance: Any = "100.00", name: str = "Checking") -> Dict[str, Any]:
    result = await create_account(db, user_id, name=name, opening_balance=opening_balance)
    assert result.ok, result.message
    return result.value


async def balance_of(db, account_id: str) -> Decimal:
    account = await db.get(ACCOUNT_TABLE, account_id)
    return Decimal(account["balance"])


class FailingMemoryDatabase(MemoryDatabase):
    """MemoryDatabase that fails the first staged operation matching `fail_on`."""

    def __init__(self, fail_on: str = "increment", error: Exception = None):
        super().__init__()
        self.fail_on = fail_on
        self.error = error
        self.armed = False

    def _apply(self, tables, operation: Operation) -> None:
        if self.armed and operation.op == self.fail_on:
            if self.error is not None:
                raise self.error
            raise PersistenceError("simulated store failure")
        super()._apply(tables, operation)


def account_vanishes(account_id: str) -> RowNotFoundError:
    return RowNotFoundError(ACCOUNT_TABLE, account_id)
