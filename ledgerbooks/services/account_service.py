"""
Account ledger service.

Accounts hold the current balance of a bank/cash account. They are created
on their own; afterwards the balance only changes through the balance
mutator (balance_service) inside a bank transaction's unit of work.

CRITICAL RULES:
1. Every query is scoped by the authenticated user_id
2. Never write `balance` directly outside an atomic scope
"""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from ledgerbooks.db import Database, PersistenceError, Query, UnitOfWork
from ledgerbooks.utils.errors import AccountNotFoundError, ErrorKind, ServiceResult
from ledgerbooks.utils.money import money_str, to_money

logger = logging.getLogger(__name__)

ACCOUNT_TABLE = "account"


async def get_account_by_id(
    db: Database,
    user_id: str,
    account_id: str,
) -> Optional[Dict[str, Any]]:
    """
    Fetch a single account.

    Returns:
        The account dict, or None if it doesn't exist or belongs to another user
    """
    account = await db.get(ACCOUNT_TABLE, account_id)
    if not account or account.get("user_id") != user_id:
        logger.debug(f"Account {account_id} not found for user {user_id}")
        return None
    return account


async def require_account(db: Database, user_id: str, account_id: str) -> Dict[str, Any]:
    """
    Resolve an account reference inside an atomic scope.

    Raises:
        AccountNotFoundError: If the account does not resolve for this user
    """
    account = await get_account_by_id(db, user_id, account_id)
    if account is None:
        raise AccountNotFoundError(account_id)
    return account


async def get_user_accounts(db: Database, user_id: str) -> List[Dict[str, Any]]:
    """List the user's accounts ordered by name."""
    accounts = await db.fetch(Query(ACCOUNT_TABLE).eq("user_id", user_id).order("name"))
    logger.info(f"Fetched {len(accounts)} accounts for user {user_id}")
    return accounts


async def create_account(
    db: Database,
    user_id: str,
    name: str,
    opening_balance: Any = 0,
    account_type: str = "bank",
    currency: str = "USD",
    description: Optional[str] = None,
) -> ServiceResult[Dict[str, Any]]:
    """
    Create an account with its opening balance.

    The opening balance is the starting point of the balance invariant:
    afterwards balance == opening balance + sum of applied transaction effects.
    """
    if not name or not name.strip():
        return ServiceResult.failure(ErrorKind.VALIDATION, "Account name is required")

    try:
        balance: Decimal = to_money(opening_balance)
    except ValueError as e:
        return ServiceResult.failure(ErrorKind.VALIDATION, f"Invalid opening balance: {e}")

    uow = UnitOfWork("create_account")
    account = uow.insert(
        ACCOUNT_TABLE,
        {
            "user_id": user_id,
            "name": name.strip(),
            "type": account_type,
            "currency": currency.upper(),
            "balance": money_str(balance),
            "description": description,
        },
    )

    try:
        await db.commit(uow)
    except PersistenceError as e:
        logger.error(f"Failed to create account for user {user_id}: {e}", exc_info=True)
        return ServiceResult.failure(ErrorKind.PERSISTENCE, "Failed to save account")

    logger.info(f"Account created: id={account['id']}, user_id={user_id}")
    return ServiceResult.success(account)
