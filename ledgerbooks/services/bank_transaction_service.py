"""
Bank transaction lifecycle service.

A bank transaction record and its effect on the account balance are
created and destroyed together, never partially:

    Absent --create--> Active   (insert record + apply effect, one unit of work)
    Active --reconcile-> Active (flag only, no balance effect)
    Active --delete--> Absent   (revert effect + delete record, one unit of work)

Every mutating operation builds a UnitOfWork, stages the record change and
the balance change into it, and commits once. If anything fails before or
during the commit the unit of work is discarded and neither change is
observable. Failures are returned as ServiceResult errors.

CRITICAL RULES:
1. All queries are scoped by the authenticated user_id
2. Never change `amount` or `account_id` outside a unit of work that also
   moves the balance
"""

import logging
from collections import defaultdict
from datetime import date as date_type
from decimal import Decimal
from typing import Any, Dict, List, Optional

from ledgerbooks.db import Database, PersistenceError, Query, RowNotFoundError, UnitOfWork
from ledgerbooks.services.account_service import ACCOUNT_TABLE
from ledgerbooks.services.balance_service import apply_effect, effect_of, revert_effect
from ledgerbooks.utils.errors import AccountNotFoundError, ErrorKind, ServiceResult
from ledgerbooks.utils.money import ZERO, money_str, read_money, to_money

logger = logging.getLogger(__name__)

TRANSACTION_TABLE = "bank_transaction"
UNCATEGORIZED = "Uncategorized"
SEARCH_COLUMNS = ("description", "category", "reference")

# Fields that can be patched without touching the balance
DESCRIPTIVE_FIELDS = ("txn_date", "type", "description", "category", "tags", "reference")


def _default_type(amount: Decimal) -> str:
    return "deposit" if amount > 0 else "withdrawal"


def _parse_amount(raw: Any) -> Decimal:
    amount = to_money(raw)
    if amount == ZERO:
        raise ValueError("Amount must be non-zero")
    return amount


async def _commit(
    db: Database,
    uow: UnitOfWork,
    user_id: str,
) -> Optional[ServiceResult[Any]]:
    """
    Commit `uow`, mapping store failures to a failed result.

    Returns:
        None on success, otherwise the failure to hand back to the caller
    """
    try:
        await db.commit(uow)
    except RowNotFoundError as e:
        # The account vanished between the lookup and the commit
        if e.table == ACCOUNT_TABLE:
            logger.warning(f"{uow.label} aborted: account {e.row_id} missing at commit")
            return ServiceResult.failure(ErrorKind.ACCOUNT_NOT_FOUND, f"Account {e.row_id} not found")
        logger.warning(f"{uow.label} aborted: {e}")
        return ServiceResult.failure(ErrorKind.PERSISTENCE, "Transaction changed concurrently, nothing was applied")
    except PersistenceError as e:
        logger.error(f"{uow.label} aborted for user {user_id}: {e}", exc_info=True)
        return ServiceResult.failure(ErrorKind.PERSISTENCE, "Failed to save transaction, nothing was applied")
    return None


async def get_transaction_by_id(
    db: Database,
    user_id: str,
    transaction_id: str,
) -> Optional[Dict[str, Any]]:
    """
    Fetch a single bank transaction.

    Returns:
        The record, or None if it doesn't exist or belongs to another user
    """
    transaction = await db.get(TRANSACTION_TABLE, transaction_id)
    if not transaction or transaction.get("user_id") != user_id:
        logger.warning(f"Transaction {transaction_id} not found for user {user_id}")
        return None
    return transaction


async def create_transaction(
    db: Database,
    user_id: str,
    account_id: str,
    amount: Any,
    txn_date: Optional[str] = None,
    transaction_type: Optional[str] = None,
    description: Optional[str] = None,
    category: Optional[str] = None,
    tags: Optional[List[str]] = None,
    reference: Optional[str] = None,
) -> ServiceResult[Dict[str, Any]]:
    """
    Create a bank transaction and apply its balance effect atomically.

    Args:
        db: Database handle
        user_id: The authenticated user's ID
        account_id: Account the transaction belongs to
        amount: Signed amount (positive = deposit, negative = withdrawal), non-zero
        txn_date: ISO date the transaction occurred (defaults to today)
        transaction_type: Free-text type; derived from the sign when omitted
        description, category, tags, reference: Optional metadata

    Returns:
        ServiceResult with the persisted record, or VALIDATION /
        ACCOUNT_NOT_FOUND / PERSISTENCE. On failure nothing was written.
    """
    if not account_id:
        return ServiceResult.failure(ErrorKind.VALIDATION, "account_id is required")

    try:
        parsed_amount = _parse_amount(amount)
    except ValueError as e:
        return ServiceResult.failure(ErrorKind.VALIDATION, str(e))

    logger.info(
        f"Creating bank transaction for user {user_id}: "
        f"account={account_id}, amount={parsed_amount}"
    )

    uow = UnitOfWork("create_bank_transaction")
    record = uow.insert(
        TRANSACTION_TABLE,
        {
            "user_id": user_id,
            "account_id": account_id,
            "amount": money_str(parsed_amount),
            "type": transaction_type or _default_type(parsed_amount),
            "txn_date": txn_date or date_type.today().isoformat(),
            "description": description,
            "category": category or UNCATEGORIZED,
            "tags": list(tags or []),
            "reference": reference,
            "status": "pending",
            "reconciled": False,
        },
    )

    try:
        await apply_effect(db, uow, record)
    except AccountNotFoundError as e:
        uow.close()
        logger.warning(f"Cannot create transaction for user {user_id}: {e}")
        return ServiceResult.failure(ErrorKind.ACCOUNT_NOT_FOUND, str(e))

    failure = await _commit(db, uow, user_id)
    if failure:
        return failure

    logger.info(f"Bank transaction created: id={record['id']}, user_id={user_id}")
    return ServiceResult.success(record)


async def delete_transaction(
    db: Database,
    user_id: str,
    transaction_id: str,
) -> ServiceResult[Dict[str, Any]]:
    """
    Revert a transaction's balance effect and delete it, atomically.

    Returns:
        ServiceResult with the deleted record, NOT_FOUND if it doesn't exist
        (no side effect), or ACCOUNT_NOT_FOUND / PERSISTENCE with the record
        and balance left exactly as they were.
    """
    existing = await get_transaction_by_id(db, user_id, transaction_id)
    if not existing:
        return ServiceResult.failure(ErrorKind.NOT_FOUND, f"Transaction {transaction_id} not found")

    logger.info(f"Deleting bank transaction {transaction_id} for user {user_id}")

    uow = UnitOfWork("delete_bank_transaction")
    try:
        await revert_effect(db, uow, existing)
    except AccountNotFoundError as e:
        uow.close()
        logger.warning(f"Cannot delete transaction {transaction_id}: {e}")
        return ServiceResult.failure(ErrorKind.ACCOUNT_NOT_FOUND, str(e))
    uow.delete(TRANSACTION_TABLE, transaction_id)

    failure = await _commit(db, uow, user_id)
    if failure:
        return failure

    logger.info(f"Bank transaction {transaction_id} deleted for user {user_id}")
    return ServiceResult.success(existing)


async def update_transaction(
    db: Database,
    user_id: str,
    transaction_id: str,
    changes: Dict[str, Any],
) -> ServiceResult[Dict[str, Any]]:
    """
    Update a transaction.

    Descriptive fields are written as-is. When `amount` or `account_id`
    change, the old effect is reverted and the new one applied in the same
    unit of work as the record update.
    """
    existing = await get_transaction_by_id(db, user_id, transaction_id)
    if not existing:
        return ServiceResult.failure(ErrorKind.NOT_FOUND, f"Transaction {transaction_id} not found")

    update_data: Dict[str, Any] = {
        key: value for key, value in changes.items()
        if key in DESCRIPTIVE_FIELDS and value is not None
    }

    if changes.get("amount") is not None:
        try:
            update_data["amount"] = money_str(_parse_amount(changes["amount"]))
        except ValueError as e:
            return ServiceResult.failure(ErrorKind.VALIDATION, str(e))
    if changes.get("account_id"):
        update_data["account_id"] = changes["account_id"]

    if not update_data:
        logger.warning(f"No fields to update for transaction {transaction_id}")
        return ServiceResult.success(existing)

    # A type that was derived from the old sign follows the new one
    if "amount" in update_data and "type" not in update_data:
        old_amount = read_money(existing["amount"])
        if existing.get("type") == _default_type(old_amount):
            new_type = _default_type(read_money(update_data["amount"]))
            if new_type != existing.get("type"):
                update_data["type"] = new_type

    updated = {**existing, **update_data}
    moves_balance = (
        read_money(updated["amount"]) != read_money(existing["amount"])
        or updated["account_id"] != existing["account_id"]
    )

    uow = UnitOfWork("update_bank_transaction")
    if moves_balance:
        try:
            await revert_effect(db, uow, existing)
            await apply_effect(db, uow, updated)
        except AccountNotFoundError as e:
            uow.close()
            logger.warning(f"Cannot update transaction {transaction_id}: {e}")
            return ServiceResult.failure(ErrorKind.ACCOUNT_NOT_FOUND, str(e))
    uow.update(TRANSACTION_TABLE, transaction_id, update_data)

    failure = await _commit(db, uow, user_id)
    if failure:
        return failure

    logger.info(
        f"Bank transaction {transaction_id} updated for user {user_id}: "
        f"fields={list(update_data.keys())}, balance_moved={moves_balance}"
    )
    return ServiceResult.success(await get_transaction_by_id(db, user_id, transaction_id) or updated)


async def _patch_flags(
    db: Database,
    user_id: str,
    transaction_id: str,
    values: Dict[str, Any],
    label: str,
) -> ServiceResult[Dict[str, Any]]:
    existing = await get_transaction_by_id(db, user_id, transaction_id)
    if not existing:
        return ServiceResult.failure(ErrorKind.NOT_FOUND, f"Transaction {transaction_id} not found")

    uow = UnitOfWork(label)
    uow.update(TRANSACTION_TABLE, transaction_id, values)
    failure = await _commit(db, uow, user_id)
    if failure:
        return failure

    return ServiceResult.success({**existing, **values})


async def reconcile_transaction(
    db: Database,
    user_id: str,
    transaction_id: str,
) -> ServiceResult[Dict[str, Any]]:
    """Mark a transaction as matched against a statement. No balance effect."""
    logger.info(f"Reconciling bank transaction {transaction_id} for user {user_id}")
    return await _patch_flags(
        db, user_id, transaction_id,
        {"reconciled": True, "status": "reconciled"},
        "reconcile_bank_transaction",
    )


async def categorize_transaction(
    db: Database,
    user_id: str,
    transaction_id: str,
    category: str,
    tags: Optional[List[str]] = None,
) -> ServiceResult[Dict[str, Any]]:
    """Set the category (and optionally the tags) of a transaction."""
    if not category or not category.strip():
        return ServiceResult.failure(ErrorKind.VALIDATION, "category is required")

    values: Dict[str, Any] = {"category": category.strip()}
    if tags is not None:
        values["tags"] = list(tags)

    return await _patch_flags(db, user_id, transaction_id, values, "categorize_bank_transaction")


def _filtered_query(
    user_id: str,
    account_id: Optional[str] = None,
    reconciled: Optional[bool] = None,
    status: Optional[str] = None,
    category: Optional[str] = None,
    transaction_type: Optional[str] = None,
    from_date: Optional[str] = None,
    to_date: Optional[str] = None,
    search: Optional[str] = None,
) -> Query:
    query = Query(TRANSACTION_TABLE).eq("user_id", user_id)
    if account_id:
        query = query.eq("account_id", account_id)
    if reconciled is not None:
        query = query.eq("reconciled", reconciled)
    if status and status != "all":
        query = query.eq("status", status)
    if category and category != "all":
        query = query.eq("category", category)
    if transaction_type and transaction_type != "all":
        query = query.eq("type", transaction_type)
    if from_date:
        query = query.gte("txn_date", from_date)
    if to_date:
        query = query.lte("txn_date", to_date)
    if search:
        query = query.search(SEARCH_COLUMNS, search)
    return query


async def list_transactions(
    db: Database,
    user_id: str,
    limit: int = 50,
    offset: int = 0,
    **filters: Any,
) -> List[Dict[str, Any]]:
    """
    List the user's transactions, newest first.

    Filters: account_id, reconciled, status, category, transaction_type,
    from_date, to_date (inclusive ISO dates) and search (substring of
    description/category/reference). Returns an empty list when nothing matches.
    """
    query = (
        _filtered_query(user_id, **filters)
        .order("txn_date", desc=True, then_by="created_at")
        .page(offset, limit)
    )
    transactions = await db.fetch(query)
    logger.info(f"Fetched {len(transactions)} bank transactions for user {user_id}")
    return transactions


def summarize(transactions: List[Dict[str, Any]]) -> Dict[str, Decimal]:
    """Net total, money in and money out over the given transactions."""
    income = ZERO
    expenses = ZERO
    for transaction in transactions:
        amount = effect_of(transaction)
        if amount > 0:
            income += amount
        else:
            expenses += -amount
    return {"total": income - expenses, "income": income, "expenses": expenses}


async def get_transaction_summary(
    db: Database,
    user_id: str,
    from_date: Optional[str] = None,
    to_date: Optional[str] = None,
    account_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Aggregate statistics over the user's transactions in a date range."""
    transactions = await db.fetch(
        _filtered_query(user_id, account_id=account_id, from_date=from_date, to_date=to_date)
    )

    by_category: Dict[str, Dict[str, Any]] = defaultdict(lambda: {"count": 0, "amount": ZERO})
    by_type: Dict[str, int] = defaultdict(int)
    reconciled = 0

    for transaction in transactions:
        category = transaction.get("category") or UNCATEGORIZED
        by_category[category]["count"] += 1
        by_category[category]["amount"] += effect_of(transaction)
        by_type[transaction.get("type") or _default_type(effect_of(transaction))] += 1
        if transaction.get("reconciled"):
            reconciled += 1

    totals = summarize(transactions)
    return {
        "total_transactions": len(transactions),
        "total_amount": totals["total"],
        "income": totals["income"],
        "expenses": totals["expenses"],
        "reconciled": reconciled,
        "unreconciled": len(transactions) - reconciled,
        "by_category": dict(by_category),
        "by_type": dict(by_type),
    }


async def get_transaction_categories(db: Database, user_id: str) -> List[str]:
    """Distinct categories in use, excluding empty and 'Uncategorized'."""
    transactions = await db.fetch(Query(TRANSACTION_TABLE).eq("user_id", user_id))
    categories = {
        transaction.get("category")
        for transaction in transactions
        if transaction.get("category") and transaction.get("category") != UNCATEGORIZED
    }
    return sorted(categories)
