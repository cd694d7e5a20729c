"""
Bank transaction API endpoints.

A bank transaction moves its account's balance by its signed amount.
Creating, deleting and re-pointing a transaction update the record and the
balance together in one unit of work; reconciling and categorizing only
touch the record.

Endpoints:
- POST   /bank-transactions                   create (201)
- GET    /bank-transactions                   list with filters + page summary
- GET    /bank-transactions/summary           aggregate statistics
- GET    /bank-transactions/categories        distinct categories in use
- GET    /bank-transactions/{id}              fetch one
- PATCH  /bank-transactions/{id}              update (re-applies the balance effect if needed)
- PATCH  /bank-transactions/{id}/reconcile    mark reconciled
- PATCH  /bank-transactions/{id}/categorize   set category/tags
- DELETE /bank-transactions/{id}              delete (204)
"""

import logging
from datetime import date
from typing import Annotated, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status

from ledgerbooks.auth.dependencies import AuthenticatedUser, get_authenticated_user
from ledgerbooks.db import Database, get_database
from ledgerbooks.schemas.bank_transactions import (
    BankTransactionCategoriesResponse,
    BankTransactionCategorizeRequest,
    BankTransactionCreateRequest,
    BankTransactionListResponse,
    BankTransactionPageSummary,
    BankTransactionResponse,
    BankTransactionSummaryResponse,
    BankTransactionUpdateRequest,
)
from ledgerbooks.services.bank_transaction_service import (
    categorize_transaction,
    create_transaction,
    delete_transaction,
    get_transaction_by_id,
    get_transaction_categories,
    get_transaction_summary,
    list_transactions,
    reconcile_transaction,
    summarize,
    update_transaction,
)
from ledgerbooks.utils.errors import ErrorKind, raise_error, unwrap_or_raise

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bank-transactions", tags=["bank-transactions"])


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


@router.post(
    "",
    response_model=BankTransactionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a bank transaction",
    description="""
    Record a bank transaction and apply it to the account balance.

    The record and the balance change are saved together: on any failure
    neither is stored.

    Errors:
    - 400 invalid_request: zero or malformed amount
    - 400 account_not_found: the account does not exist for this user
    - 500 persistence_error: the store rejected the write (nothing applied)
    """
)
async def create_bank_transaction(
    request: BankTransactionCreateRequest,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    db: Annotated[Database, Depends(get_database)],
) -> BankTransactionResponse:
    logger.info(f"Creating bank transaction for user {auth_user.user_id} on account {request.account_id}")

    try:
        result = await create_transaction(
            db,
            auth_user.user_id,
            account_id=request.account_id,
            amount=request.amount,
            txn_date=_iso(request.txn_date),
            transaction_type=request.type,
            description=request.description,
            category=request.category,
            tags=request.tags,
            reference=request.reference,
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error creating bank transaction for user {auth_user.user_id}: {e}", exc_info=True)
        raise_error(ErrorKind.PERSISTENCE, "Failed to create bank transaction")

    return BankTransactionResponse.model_validate(unwrap_or_raise(result))


@router.get(
    "",
    response_model=BankTransactionListResponse,
    summary="List bank transactions",
    description="""
    List the user's bank transactions, newest first, with totals over the
    returned page. An empty page is a normal result.
    """
)
async def list_bank_transactions(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    db: Annotated[Database, Depends(get_database)],
    account_id: Optional[str] = Query(None, description="Filter by account"),
    reconciled: Optional[bool] = Query(None, description="Filter by reconciliation flag"),
    status_filter: Optional[Literal["pending", "reconciled", "all"]] = Query(None, alias="status"),
    category: Optional[str] = Query(None, description="Filter by category"),
    transaction_type: Optional[str] = Query(None, alias="type", description="Filter by type"),
    from_date: Optional[date] = Query(None, description="Transactions on or after this date"),
    to_date: Optional[date] = Query(None, description="Transactions on or before this date"),
    search: Optional[str] = Query(None, description="Search description, category or reference"),
    limit: int = Query(50, ge=1, le=200, description="Maximum number of transactions to return"),
    offset: int = Query(0, ge=0, description="Number of transactions to skip"),
) -> BankTransactionListResponse:
    transactions = await list_transactions(
        db,
        auth_user.user_id,
        limit=limit,
        offset=offset,
        account_id=account_id,
        reconciled=reconciled,
        status=status_filter,
        category=category,
        transaction_type=transaction_type,
        from_date=_iso(from_date),
        to_date=_iso(to_date),
        search=search,
    )

    return BankTransactionListResponse(
        transactions=[BankTransactionResponse.model_validate(t) for t in transactions],
        count=len(transactions),
        limit=limit,
        offset=offset,
        summary=BankTransactionPageSummary(**summarize(transactions)),
    )


@router.get(
    "/summary",
    response_model=BankTransactionSummaryResponse,
    summary="Bank transaction statistics",
)
async def bank_transaction_summary(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    db: Annotated[Database, Depends(get_database)],
    account_id: Optional[str] = Query(None),
    from_date: Optional[date] = Query(None),
    to_date: Optional[date] = Query(None),
) -> BankTransactionSummaryResponse:
    summary = await get_transaction_summary(
        db, auth_user.user_id,
        from_date=_iso(from_date),
        to_date=_iso(to_date),
        account_id=account_id,
    )
    return BankTransactionSummaryResponse.model_validate(summary)


@router.get(
    "/categories",
    response_model=BankTransactionCategoriesResponse,
    summary="Categories in use",
)
async def bank_transaction_categories(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    db: Annotated[Database, Depends(get_database)],
) -> BankTransactionCategoriesResponse:
    categories = await get_transaction_categories(db, auth_user.user_id)
    return BankTransactionCategoriesResponse(categories=categories)


@router.get(
    "/{transaction_id}",
    response_model=BankTransactionResponse,
    summary="Get bank transaction",
)
async def get_bank_transaction(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    db: Annotated[Database, Depends(get_database)],
    transaction_id: str = Path(..., description="Bank transaction ID"),
) -> BankTransactionResponse:
    transaction = await get_transaction_by_id(db, auth_user.user_id, transaction_id)
    if transaction is None:
        raise_error(ErrorKind.NOT_FOUND, f"Transaction {transaction_id} not found")
    return BankTransactionResponse.model_validate(transaction)


@router.patch(
    "/{transaction_id}",
    response_model=BankTransactionResponse,
    summary="Update bank transaction",
    description="""
    Partially update a transaction. When `amount` or `account_id` change,
    the old balance effect is reverted and the new one applied together
    with the record update.
    """
)
async def update_bank_transaction(
    request: BankTransactionUpdateRequest,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    db: Annotated[Database, Depends(get_database)],
    transaction_id: str = Path(..., description="Bank transaction ID"),
) -> BankTransactionResponse:
    logger.info(f"Updating bank transaction {transaction_id} for user {auth_user.user_id}")

    changes = request.model_dump(exclude_none=True)
    if "txn_date" in changes:
        changes["txn_date"] = changes["txn_date"].isoformat()

    result = await update_transaction(db, auth_user.user_id, transaction_id, changes)
    return BankTransactionResponse.model_validate(unwrap_or_raise(result))


@router.patch(
    "/{transaction_id}/reconcile",
    response_model=BankTransactionResponse,
    summary="Reconcile bank transaction",
    description="Mark the transaction as matched against a bank statement. The balance is not touched.",
)
async def reconcile_bank_transaction(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    db: Annotated[Database, Depends(get_database)],
    transaction_id: str = Path(..., description="Bank transaction ID"),
) -> BankTransactionResponse:
    result = await reconcile_transaction(db, auth_user.user_id, transaction_id)
    return BankTransactionResponse.model_validate(unwrap_or_raise(result))


@router.patch(
    "/{transaction_id}/categorize",
    response_model=BankTransactionResponse,
    summary="Categorize bank transaction",
)
async def categorize_bank_transaction(
    request: BankTransactionCategorizeRequest,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    db: Annotated[Database, Depends(get_database)],
    transaction_id: str = Path(..., description="Bank transaction ID"),
) -> BankTransactionResponse:
    result = await categorize_transaction(
        db, auth_user.user_id, transaction_id, request.category, request.tags
    )
    return BankTransactionResponse.model_validate(unwrap_or_raise(result))


@router.delete(
    "/{transaction_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete bank transaction",
    description="""
    Delete a transaction and revert its balance effect, together.

    Deleting an unknown id returns 404 and changes nothing.
    """
)
async def delete_bank_transaction(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    db: Annotated[Database, Depends(get_database)],
    transaction_id: str = Path(..., description="Bank transaction ID"),
) -> Response:
    logger.info(f"Deleting bank transaction {transaction_id} for user {auth_user.user_id}")

    try:
        result = await delete_transaction(db, auth_user.user_id, transaction_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error deleting bank transaction {transaction_id}: {e}", exc_info=True)
        raise_error(ErrorKind.PERSISTENCE, "Failed to delete bank transaction")

    unwrap_or_raise(result)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
