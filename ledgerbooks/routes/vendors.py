"""Vendor API endpoints: standard CRUD with `?search=` and status filter."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from ledgerbooks.auth.dependencies import AuthenticatedUser, get_authenticated_user
from ledgerbooks.db import Database, get_database
from ledgerbooks.routes.crud import add_crud_routes
from ledgerbooks.schemas.vendors import (
    VendorCreateRequest,
    VendorListResponse,
    VendorResponse,
    VendorStatus,
    VendorUpdateRequest,
)
from ledgerbooks.services.resource_service import list_resources
from ledgerbooks.services.vendor_service import VENDORS

router = APIRouter(prefix="/vendors", tags=["vendors"])


@router.get("", response_model=VendorListResponse, summary="List vendors")
async def list_vendors(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    db: Annotated[Database, Depends(get_database)],
    search: Optional[str] = Query(None, description="Search name, display name, company or email"),
    status_filter: Optional[VendorStatus] = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
) -> VendorListResponse:
    vendors = await list_resources(
        db, VENDORS, auth_user.user_id,
        filters={"status": status_filter},
        search=search,
        limit=limit,
        offset=offset,
    )
    return VendorListResponse(
        vendors=[VendorResponse.model_validate(v) for v in vendors],
        count=len(vendors),
        limit=limit,
        offset=offset,
    )


add_crud_routes(router, VENDORS, VendorCreateRequest, VendorUpdateRequest, VendorResponse)
