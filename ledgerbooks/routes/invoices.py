"""
Invoice API endpoints.

Standard CRUD (see routes/crud.py) plus:
- GET   /invoices/next-number   next free INV-xxxxxx number
- PATCH /invoices/{id}/status   move along draft -> sent -> paid / overdue / void
"""

import logging
from datetime import date
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Path, Query, status

from ledgerbooks.auth.dependencies import AuthenticatedUser, get_authenticated_user
from ledgerbooks.db import Database, get_database
from ledgerbooks.routes.crud import add_crud_routes
from ledgerbooks.schemas.invoices import (
    InvoiceCreateRequest,
    InvoiceListResponse,
    InvoiceResponse,
    InvoiceStatus,
    InvoiceStatusUpdateRequest,
    InvoiceUpdateRequest,
    NextNumberResponse,
)
from ledgerbooks.services.invoice_service import (
    INVOICES,
    get_next_invoice_number,
    update_invoice_status,
)
from ledgerbooks.services.resource_service import list_resources
from ledgerbooks.utils.errors import unwrap_or_raise

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/invoices", tags=["invoices"])


@router.get(
    "",
    response_model=InvoiceListResponse,
    status_code=status.HTTP_200_OK,
    summary="List invoices",
    description="""
    List the authenticated user's invoices, newest first.

    Filters: status, customer/number search, project and invoice date range.
    """
)
async def list_invoices(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    db: Annotated[Database, Depends(get_database)],
    status_filter: Optional[InvoiceStatus] = Query(None, alias="status", description="Filter by status"),
    project_id: Optional[str] = Query(None, description="Filter by project"),
    search: Optional[str] = Query(None, description="Search number, customer or reference"),
    from_date: Optional[date] = Query(None, description="Invoice date on or after"),
    to_date: Optional[date] = Query(None, description="Invoice date on or before"),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
) -> InvoiceListResponse:
    invoices = await list_resources(
        db, INVOICES, auth_user.user_id,
        filters={"status": status_filter, "project_id": project_id},
        search=search,
        from_date=from_date.isoformat() if from_date else None,
        to_date=to_date.isoformat() if to_date else None,
        limit=limit,
        offset=offset,
    )
    return InvoiceListResponse(
        invoices=[InvoiceResponse.model_validate(i) for i in invoices],
        count=len(invoices),
        limit=limit,
        offset=offset,
    )


@router.get(
    "/next-number",
    response_model=NextNumberResponse,
    summary="Next invoice number",
)
async def next_invoice_number(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    db: Annotated[Database, Depends(get_database)],
) -> NextNumberResponse:
    return NextNumberResponse(next_number=await get_next_invoice_number(db, auth_user.user_id))


@router.patch(
    "/{invoice_id}/status",
    response_model=InvoiceResponse,
    summary="Change invoice status",
    description="""
    Allowed transitions: draft -> sent | void, sent -> paid | overdue | void,
    overdue -> paid | void. Anything else returns 400 invalid_request.
    """
)
async def change_invoice_status(
    request: InvoiceStatusUpdateRequest,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    db: Annotated[Database, Depends(get_database)],
    invoice_id: str = Path(..., description="Invoice ID"),
) -> InvoiceResponse:
    logger.info(f"Changing status of invoice {invoice_id} to {request.status} for user {auth_user.user_id}")
    result = await update_invoice_status(db, auth_user.user_id, invoice_id, request.status)
    return InvoiceResponse.model_validate(unwrap_or_raise(result))


add_crud_routes(router, INVOICES, InvoiceCreateRequest, InvoiceUpdateRequest, InvoiceResponse)
