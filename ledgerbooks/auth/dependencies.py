"""
FastAPI dependency functions for authentication.

Protected routes depend on get_authenticated_user, which verifies the
short-lived access token minted by the session service and extracts the
user_id from its 'sub' claim.
"""

import logging
from dataclasses import dataclass
from typing import Annotated

from fastapi import Header, HTTPException, status

from ledgerbooks.services.session_service import decode_access_token

logger = logging.getLogger(__name__)


@dataclass
class AuthenticatedUser:
    """
    Represents an authenticated user with their token.

    Attributes:
        user_id: The user's ID from the access token's 'sub' claim
        access_token: The verified access token
    """
    user_id: str
    access_token: str


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"error": "unauthorized", "message": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_authenticated_user(
    authorization: Annotated[str | None, Header()] = None
) -> AuthenticatedUser:
    """
    Verify the Bearer access token and return the authenticated user.

    Args:
        authorization: Authorization header value ("Bearer <token>")

    Returns:
        AuthenticatedUser: Contains user_id and access_token

    Raises:
        HTTPException: 401 if the token is missing, malformed, invalid or expired

    Security:
        - This is the ONLY source of truth for user_id
        - Any user_id sent in a request body is ignored

    Usage:
        @router.get("/accounts")
        async def list_accounts(
            auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
        ):
            ...
    """
    if not authorization:
        logger.warning("Missing Authorization header")
        raise _unauthorized("Missing Authorization header")

    # Extract token from "Bearer <token>" format
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        logger.warning("Invalid Authorization header format")
        raise _unauthorized("Invalid Authorization header format")

    token = parts[1]
    payload = decode_access_token(token)
    if payload is None:
        raise _unauthorized("Invalid or expired access token")

    user_id = payload.get("sub")
    if not user_id:
        logger.error("Token payload missing 'sub' claim")
        raise _unauthorized("Invalid token: missing user ID")

    logger.debug(f"Token verified for user_id={user_id}")
    return AuthenticatedUser(user_id=str(user_id), access_token=token)
