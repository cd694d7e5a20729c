"""
Session API endpoints.

- POST /auth/refresh-token  rotate the refresh cookie, return a new access token
- POST /auth/logout         revoke the refresh token and clear the cookie

The refresh token only ever travels in an httponly cookie scoped to /auth.
Login and signup live outside this service; they call
session_service.issue_session and set the same cookie.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Cookie, Depends, Header, Response, status
from fastapi.responses import JSONResponse

from ledgerbooks.config import settings
from ledgerbooks.db import Database, get_database
from ledgerbooks.schemas.auth import AccessTokenResponse
from ledgerbooks.services.session_service import SessionTokens, logout, refresh_session
from ledgerbooks.utils.errors import ERROR_STATUS, unwrap_or_raise

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

COOKIE_PATH = "/auth"


def set_refresh_cookie(response: Response, refresh_token: str) -> None:
    response.set_cookie(
        key=settings.REFRESH_COOKIE_NAME,
        value=refresh_token,
        max_age=settings.refresh_cookie_max_age,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="strict",
        path=COOKIE_PATH,
    )


def clear_refresh_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.REFRESH_COOKIE_NAME,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="strict",
        path=COOKIE_PATH,
    )


def _access_token_body(tokens: SessionTokens) -> AccessTokenResponse:
    return AccessTokenResponse(access_token=tokens.access_token, expires_in=tokens.expires_in)


@router.post(
    "/refresh-token",
    response_model=AccessTokenResponse,
    status_code=status.HTTP_200_OK,
    summary="Rotate refresh token",
    description="""
    Exchange the refresh token cookie for a new access token.

    The presented refresh token is revoked and replaced by a new one (sent
    back in the same cookie). A refresh token can be used once: replaying
    it, or presenting an unknown or expired token, returns 401 and clears
    the cookie.
    """
)
async def refresh_token(
    response: Response,
    db: Annotated[Database, Depends(get_database)],
    refresh_cookie: Annotated[Optional[str], Cookie(alias=settings.REFRESH_COOKIE_NAME)] = None,
    user_agent: Annotated[Optional[str], Header()] = None,
):
    result = await refresh_session(db, refresh_cookie, user_agent=user_agent)

    if not result.ok:
        status_code, code = ERROR_STATUS[result.error]
        failure = JSONResponse(status_code=status_code, content={"error": code, "message": result.message})
        clear_refresh_cookie(failure)
        return failure

    tokens = unwrap_or_raise(result)
    set_refresh_cookie(response, tokens.refresh_token)
    return _access_token_body(tokens)


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Log out",
    description="Revoke the refresh token (if any) and clear the cookie. Always succeeds for unknown tokens.",
)
async def logout_session(
    db: Annotated[Database, Depends(get_database)],
    refresh_cookie: Annotated[Optional[str], Cookie(alias=settings.REFRESH_COOKIE_NAME)] = None,
) -> Response:
    unwrap_or_raise(await logout(db, refresh_cookie))

    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    clear_refresh_cookie(response)
    logger.info("Refresh cookie cleared")
    return response
