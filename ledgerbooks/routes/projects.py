"""Project API endpoints: standard CRUD plus GET /projects/{id}/stats."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Path, Query

from ledgerbooks.auth.dependencies import AuthenticatedUser, get_authenticated_user
from ledgerbooks.db import Database, get_database
from ledgerbooks.routes.crud import add_crud_routes
from ledgerbooks.schemas.projects import (
    ProjectCreateRequest,
    ProjectListResponse,
    ProjectResponse,
    ProjectStatsResponse,
    ProjectStatus,
    ProjectUpdateRequest,
)
from ledgerbooks.services.project_service import PROJECTS, get_project_stats
from ledgerbooks.services.resource_service import list_resources
from ledgerbooks.utils.errors import ErrorKind, raise_error

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("", response_model=ProjectListResponse, summary="List projects")
async def list_projects(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    db: Annotated[Database, Depends(get_database)],
    status_filter: Optional[ProjectStatus] = Query(None, alias="status"),
    search: Optional[str] = Query(None),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
) -> ProjectListResponse:
    projects = await list_resources(
        db, PROJECTS, auth_user.user_id,
        filters={"status": status_filter},
        search=search,
        limit=limit,
        offset=offset,
    )
    return ProjectListResponse(
        projects=[ProjectResponse.model_validate(p) for p in projects],
        count=len(projects),
        limit=limit,
        offset=offset,
    )


@router.get(
    "/{project_id}/stats",
    response_model=ProjectStatsResponse,
    summary="Project statistics",
    description="Hours, expenses and invoiced totals recorded against the project.",
)
async def project_stats(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    db: Annotated[Database, Depends(get_database)],
    project_id: str = Path(..., description="Project ID"),
) -> ProjectStatsResponse:
    stats = await get_project_stats(db, auth_user.user_id, project_id)
    if stats is None:
        raise_error(ErrorKind.NOT_FOUND, f"Project {project_id} not found")
    return ProjectStatsResponse.model_validate(stats)


add_crud_routes(router, PROJECTS, ProjectCreateRequest, ProjectUpdateRequest, ProjectResponse)
