"""
Account API endpoints.

Accounts hold a running balance. The opening balance is set on creation;
afterwards the balance changes only through bank transactions.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Path, status

from ledgerbooks.auth.dependencies import AuthenticatedUser, get_authenticated_user
from ledgerbooks.db import Database, get_database
from ledgerbooks.schemas.accounts import (
    AccountCreateRequest,
    AccountListResponse,
    AccountResponse,
)
from ledgerbooks.services.account_service import (
    create_account,
    get_account_by_id,
    get_user_accounts,
)
from ledgerbooks.utils.errors import ErrorKind, raise_error, unwrap_or_raise

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/accounts", tags=["accounts"])


@router.get(
    "",
    response_model=AccountListResponse,
    status_code=status.HTTP_200_OK,
    summary="List user accounts",
    description="""
    Retrieve all accounts belonging to the authenticated user, ordered by name.

    Security:
    - Requires valid Authorization Bearer token
    - Only the owner's accounts are returned
    """
)
async def list_accounts(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    db: Annotated[Database, Depends(get_database)],
) -> AccountListResponse:
    logger.info(f"Listing accounts for user {auth_user.user_id}")

    accounts = await get_user_accounts(db, auth_user.user_id)
    return AccountListResponse(
        accounts=[AccountResponse.model_validate(acc) for acc in accounts],
        count=len(accounts),
    )


@router.post(
    "",
    response_model=AccountResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create account",
    description="""
    Create a new account with an opening balance.

    This endpoint:
    - Validates the name and opening balance
    - Stores the opening balance as the account's starting balance
    - Returns the created account
    """
)
async def create_new_account(
    request: AccountCreateRequest,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    db: Annotated[Database, Depends(get_database)],
) -> AccountResponse:
    logger.info(f"Creating account for user {auth_user.user_id}: {request.name}")

    result = await create_account(
        db,
        auth_user.user_id,
        name=request.name,
        opening_balance=request.opening_balance,
        account_type=request.type,
        currency=request.currency,
        description=request.description,
    )
    return AccountResponse.model_validate(unwrap_or_raise(result))


@router.get(
    "/{account_id}",
    response_model=AccountResponse,
    summary="Get account",
    description="Retrieve one account with its current balance. 404 if it doesn't exist.",
)
async def get_account(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    db: Annotated[Database, Depends(get_database)],
    account_id: str = Path(..., description="Account ID"),
) -> AccountResponse:
    account = await get_account_by_id(db, auth_user.user_id, account_id)
    if account is None:
        logger.warning(f"Account {account_id} not found for user {auth_user.user_id}")
        raise_error(ErrorKind.NOT_FOUND, f"Account {account_id} not found")
    return AccountResponse.model_validate(account)
