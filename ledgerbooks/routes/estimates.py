"""
Estimate API endpoints.

Standard CRUD plus next-number and the draft -> sent -> accepted | declined
| expired status workflow.
"""

import logging
from datetime import date
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Path, Query

from ledgerbooks.auth.dependencies import AuthenticatedUser, get_authenticated_user
from ledgerbooks.db import Database, get_database
from ledgerbooks.routes.crud import add_crud_routes
from ledgerbooks.schemas.estimates import (
    EstimateCreateRequest,
    EstimateListResponse,
    EstimateResponse,
    EstimateStatus,
    EstimateStatusUpdateRequest,
    EstimateUpdateRequest,
)
from ledgerbooks.schemas.invoices import NextNumberResponse
from ledgerbooks.services.estimate_service import (
    ESTIMATES,
    get_next_estimate_number,
    update_estimate_status,
)
from ledgerbooks.services.resource_service import list_resources
from ledgerbooks.utils.errors import unwrap_or_raise

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/estimates", tags=["estimates"])


@router.get("", response_model=EstimateListResponse, summary="List estimates")
async def list_estimates(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    db: Annotated[Database, Depends(get_database)],
    status_filter: Optional[EstimateStatus] = Query(None, alias="status"),
    search: Optional[str] = Query(None),
    from_date: Optional[date] = Query(None),
    to_date: Optional[date] = Query(None),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
) -> EstimateListResponse:
    estimates = await list_resources(
        db, ESTIMATES, auth_user.user_id,
        filters={"status": status_filter},
        search=search,
        from_date=from_date.isoformat() if from_date else None,
        to_date=to_date.isoformat() if to_date else None,
        limit=limit,
        offset=offset,
    )
    return EstimateListResponse(
        estimates=[EstimateResponse.model_validate(e) for e in estimates],
        count=len(estimates),
        limit=limit,
        offset=offset,
    )


@router.get("/next-number", response_model=NextNumberResponse, summary="Next estimate number")
async def next_estimate_number(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    db: Annotated[Database, Depends(get_database)],
) -> NextNumberResponse:
    return NextNumberResponse(next_number=await get_next_estimate_number(db, auth_user.user_id))


@router.patch("/{estimate_id}/status", response_model=EstimateResponse, summary="Change estimate status")
async def change_estimate_status(
    request: EstimateStatusUpdateRequest,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    db: Annotated[Database, Depends(get_database)],
    estimate_id: str = Path(..., description="Estimate ID"),
) -> EstimateResponse:
    logger.info(f"Changing status of estimate {estimate_id} to {request.status}")
    result = await update_estimate_status(db, auth_user.user_id, estimate_id, request.status)
    return EstimateResponse.model_validate(unwrap_or_raise(result))


add_crud_routes(router, ESTIMATES, EstimateCreateRequest, EstimateUpdateRequest, EstimateResponse)
