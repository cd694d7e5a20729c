"""
Balance mutator.

Applies or reverts the balance effect of one bank transaction against its
account, as part of a caller-supplied unit of work.

Sign convention: a transaction's amount is signed. Positive amounts are
money into the account (deposits) and raise the balance; negative amounts
are money out (withdrawals) and lower it. The effect is exactly the stored
amount, so revert_effect(apply_effect(b)) == b to the cent.
"""

import logging
from decimal import Decimal
from typing import Any, Dict

from ledgerbooks.db import Database, UnitOfWork
from ledgerbooks.services.account_service import ACCOUNT_TABLE, require_account
from ledgerbooks.utils.money import read_money

logger = logging.getLogger(__name__)


def effect_of(transaction: Dict[str, Any]) -> Decimal:
    """Signed delta the transaction applies to its account's balance."""
    return read_money(transaction.get("amount"))


async def _stage_delta(
    db: Database,
    uow: UnitOfWork,
    transaction: Dict[str, Any],
    delta: Decimal,
) -> None:
    account = await require_account(db, transaction["user_id"], transaction["account_id"])
    uow.increment(ACCOUNT_TABLE, account["id"], "balance", delta)


async def apply_effect(db: Database, uow: UnitOfWork, transaction: Dict[str, Any]) -> None:
    """
    Stage the transaction's effect on its account within `uow`.

    Raises:
        AccountNotFoundError: If the account reference does not resolve
    """
    delta = effect_of(transaction)
    await _stage_delta(db, uow, transaction, delta)
    logger.debug(f"Staged balance effect {delta} on account {transaction['account_id']}")


async def revert_effect(db: Database, uow: UnitOfWork, transaction: Dict[str, Any]) -> None:
    """
    Stage the inverse of the transaction's effect within `uow`.

    Raises:
        AccountNotFoundError: If the account reference does not resolve
    """
    delta = -effect_of(transaction)
    await _stage_delta(db, uow, transaction, delta)
    logger.debug(f"Staged balance revert {delta} on account {transaction['account_id']}")
