"""Expense API endpoints: standard CRUD with status/category/vendor/date filters."""

from datetime import date
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from ledgerbooks.auth.dependencies import AuthenticatedUser, get_authenticated_user
from ledgerbooks.db import Database, get_database
from ledgerbooks.routes.crud import add_crud_routes
from ledgerbooks.schemas.expenses import (
    ExpenseCreateRequest,
    ExpenseListResponse,
    ExpenseResponse,
    ExpenseStatus,
    ExpenseUpdateRequest,
)
from ledgerbooks.services.expense_service import EXPENSES
from ledgerbooks.services.resource_service import list_resources

router = APIRouter(prefix="/expenses", tags=["expenses"])


@router.get("", response_model=ExpenseListResponse, summary="List expenses")
async def list_expenses(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    db: Annotated[Database, Depends(get_database)],
    status_filter: Optional[ExpenseStatus] = Query(None, alias="status"),
    category: Optional[str] = Query(None),
    vendor: Optional[str] = Query(None),
    project_id: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Search description, vendor, reference or notes"),
    from_date: Optional[date] = Query(None),
    to_date: Optional[date] = Query(None),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
) -> ExpenseListResponse:
    expenses = await list_resources(
        db, EXPENSES, auth_user.user_id,
        filters={"status": status_filter, "category": category, "vendor": vendor, "project_id": project_id},
        search=search,
        from_date=from_date.isoformat() if from_date else None,
        to_date=to_date.isoformat() if to_date else None,
        limit=limit,
        offset=offset,
    )
    return ExpenseListResponse(
        expenses=[ExpenseResponse.model_validate(e) for e in expenses],
        count=len(expenses),
        limit=limit,
        offset=offset,
    )


add_crud_routes(router, EXPENSES, ExpenseCreateRequest, ExpenseUpdateRequest, ExpenseResponse)
