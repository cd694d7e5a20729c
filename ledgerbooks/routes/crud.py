"""
Router factory for the uniform CRUD contract.

Adds to an existing router:

    POST   ""               create (201)
    GET    "/{resource_id}" fetch one (404 when missing)
    PATCH  "/{resource_id}" partial update (404 when missing)
    DELETE "/{resource_id}" delete (204, 404 when missing)

List endpoints carry resource-specific filters, so each resource module
declares its own GET "" route. Register fixed paths such as "/stats"
before calling add_crud_routes so they are not captured by "/{resource_id}".
"""

import logging
from typing import Annotated, Type

from fastapi import APIRouter, Depends, Path, Response, status
from pydantic import BaseModel

from ledgerbooks.auth.dependencies import AuthenticatedUser, get_authenticated_user
from ledgerbooks.db import Database, get_database
from ledgerbooks.services.resource_service import (
    Resource,
    create_resource,
    delete_resource,
    get_resource,
    update_resource,
)
from ledgerbooks.utils.errors import ErrorKind, raise_error, unwrap_or_raise

logger = logging.getLogger(__name__)


def add_crud_routes(
    router: APIRouter,
    resource: Resource,
    create_model: Type[BaseModel],
    update_model: Type[BaseModel],
    response_model: Type[BaseModel],
) -> APIRouter:
    """Register create/get/update/delete endpoints for `resource` on `router`."""
    label = resource.label.lower()

    @router.post(
        "",
        response_model=response_model,
        status_code=status.HTTP_201_CREATED,
        summary=f"Create {label}",
        name=f"create_{resource.table}",
    )
    async def create_item(
        payload: create_model,  # type: ignore[valid-type]
        auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
        db: Annotated[Database, Depends(get_database)],
    ):
        logger.info(f"Creating {label} for user {auth_user.user_id}")
        result = await create_resource(
            db, resource, auth_user.user_id, payload.model_dump(mode="json", exclude_none=True)
        )
        return response_model.model_validate(unwrap_or_raise(result))

    @router.get(
        "/{resource_id}",
        response_model=response_model,
        summary=f"Get {label}",
        name=f"get_{resource.table}",
    )
    async def get_item(
        auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
        db: Annotated[Database, Depends(get_database)],
        resource_id: str = Path(..., description=f"{resource.label} ID"),
    ):
        record = await get_resource(db, resource, auth_user.user_id, resource_id)
        if record is None:
            raise_error(ErrorKind.NOT_FOUND, f"{resource.label} {resource_id} not found")
        return response_model.model_validate(record)

    @router.patch(
        "/{resource_id}",
        response_model=response_model,
        summary=f"Update {label}",
        name=f"update_{resource.table}",
    )
    async def update_item(
        payload: update_model,  # type: ignore[valid-type]
        auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
        db: Annotated[Database, Depends(get_database)],
        resource_id: str = Path(..., description=f"{resource.label} ID"),
    ):
        logger.info(f"Updating {label} {resource_id} for user {auth_user.user_id}")
        result = await update_resource(
            db, resource, auth_user.user_id, resource_id,
            payload.model_dump(mode="json", exclude_none=True),
        )
        return response_model.model_validate(unwrap_or_raise(result))

    @router.delete(
        "/{resource_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        summary=f"Delete {label}",
        name=f"delete_{resource.table}",
    )
    async def delete_item(
        auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
        db: Annotated[Database, Depends(get_database)],
        resource_id: str = Path(..., description=f"{resource.label} ID"),
    ) -> Response:
        logger.info(f"Deleting {label} {resource_id} for user {auth_user.user_id}")
        unwrap_or_raise(await delete_resource(db, resource, auth_user.user_id, resource_id))
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router
