"""
Timesheet API endpoints.

Standard CRUD plus:
- GET  /timesheets/stats       hour totals and counts per status
- POST /timesheets/{id}/start  start the timer
- POST /timesheets/{id}/stop   stop the timer and add the elapsed hours
"""

import logging
from datetime import date
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Path, Query

from ledgerbooks.auth.dependencies import AuthenticatedUser, get_authenticated_user
from ledgerbooks.db import Database, get_database
from ledgerbooks.routes.crud import add_crud_routes
from ledgerbooks.schemas.timesheets import (
    TimesheetCreateRequest,
    TimesheetListResponse,
    TimesheetResponse,
    TimesheetStatsResponse,
    TimesheetStatus,
    TimesheetUpdateRequest,
)
from ledgerbooks.services.resource_service import list_resources
from ledgerbooks.services.timesheet_service import (
    TIMESHEETS,
    get_timesheet_stats,
    start_timer,
    stop_timer,
)
from ledgerbooks.utils.errors import unwrap_or_raise

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/timesheets", tags=["timesheets"])


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


@router.get("", response_model=TimesheetListResponse, summary="List timesheet entries")
async def list_timesheets(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    db: Annotated[Database, Depends(get_database)],
    project_id: Optional[str] = Query(None),
    status_filter: Optional[TimesheetStatus] = Query(None, alias="status"),
    from_date: Optional[date] = Query(None),
    to_date: Optional[date] = Query(None),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
) -> TimesheetListResponse:
    entries = await list_resources(
        db, TIMESHEETS, auth_user.user_id,
        filters={"project_id": project_id, "status": status_filter},
        from_date=_iso(from_date),
        to_date=_iso(to_date),
        limit=limit,
        offset=offset,
    )
    return TimesheetListResponse(
        timesheets=[TimesheetResponse.model_validate(e) for e in entries],
        count=len(entries),
        limit=limit,
        offset=offset,
    )


@router.get("/stats", response_model=TimesheetStatsResponse, summary="Timesheet statistics")
async def timesheet_stats(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    db: Annotated[Database, Depends(get_database)],
    project_id: Optional[str] = Query(None),
    from_date: Optional[date] = Query(None),
    to_date: Optional[date] = Query(None),
) -> TimesheetStatsResponse:
    stats = await get_timesheet_stats(
        db, auth_user.user_id, project_id=project_id, from_date=_iso(from_date), to_date=_iso(to_date)
    )
    return TimesheetStatsResponse.model_validate(stats)


@router.post("/{entry_id}/start", response_model=TimesheetResponse, summary="Start timer")
async def start_entry_timer(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    db: Annotated[Database, Depends(get_database)],
    entry_id: str = Path(..., description="Timesheet entry ID"),
) -> TimesheetResponse:
    result = await start_timer(db, auth_user.user_id, entry_id)
    return TimesheetResponse.model_validate(unwrap_or_raise(result))


@router.post("/{entry_id}/stop", response_model=TimesheetResponse, summary="Stop timer")
async def stop_entry_timer(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    db: Annotated[Database, Depends(get_database)],
    entry_id: str = Path(..., description="Timesheet entry ID"),
) -> TimesheetResponse:
    result = await stop_timer(db, auth_user.user_id, entry_id)
    return TimesheetResponse.model_validate(unwrap_or_raise(result))


add_crud_routes(router, TIMESHEETS, TimesheetCreateRequest, TimesheetUpdateRequest, TimesheetResponse)
