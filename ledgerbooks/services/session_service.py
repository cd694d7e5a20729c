"""
Session service: refresh-token rotation and access tokens.

A session is a long-lived opaque refresh token (kept by the client in an
httponly cookie) plus short-lived HS256 access tokens minted from it.

Only the SHA-256 hash of a refresh token is stored. Every successful
refresh deletes the presented record and inserts its replacement in one
unit of work, so a token can be used exactly once: a replayed or
concurrently reused token finds no record (or loses the race at commit)
and is rejected as INVALID. There is no grace window.

SECURITY RULES:
- NEVER log refresh tokens, access tokens or their hashes
"""

import hashlib
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from ledgerbooks.config import settings
from ledgerbooks.db import Database, PersistenceError, Query, RowNotFoundError, UnitOfWork
from ledgerbooks.utils.errors import ErrorKind, ServiceResult

logger = logging.getLogger(__name__)

REFRESH_TOKEN_TABLE = "refresh_token"
ACCESS_TOKEN_TYPE = "access"


@dataclass
class SessionTokens:
    """Credentials handed back to the client after login or rotation."""
    user_id: str
    refresh_token: str
    access_token: str
    expires_in: int  # access token lifetime in seconds


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def create_access_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    """
    Mint a signed access token for `user_id`.

    Claims: sub, type="access", iat, exp.
    """
    now = _utc_now()
    expires = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    payload = {
        "sub": user_id,
        "type": ACCESS_TOKEN_TYPE,
        "iat": now,
        "exp": expires,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Decode and verify an access token. Returns the claims, or None if invalid/expired."""
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        logger.info("Access token expired")
        return None
    except jwt.PyJWTError as e:
        logger.warning(f"Invalid access token: {type(e).__name__}")
        return None

    if payload.get("type") != ACCESS_TOKEN_TYPE:
        logger.warning("Rejected token with wrong type claim")
        return None
    return payload


def _stage_refresh_token(uow: UnitOfWork, user_id: str, user_agent: Optional[str]) -> str:
    """Generate a refresh token and stage its (hashed) record. Returns the raw token."""
    token = secrets.token_urlsafe(48)
    expires_at = _utc_now() + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    uow.insert(
        REFRESH_TOKEN_TABLE,
        {
            "token_hash": hash_token(token),
            "user_id": user_id,
            "user_agent": user_agent,
            "expires_at": expires_at.isoformat(),
        },
    )
    return token


def _session_for(user_id: str, refresh_token: str) -> SessionTokens:
    return SessionTokens(
        user_id=user_id,
        refresh_token=refresh_token,
        access_token=create_access_token(user_id),
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )


def _is_expired(record: Dict[str, Any]) -> bool:
    raw = record.get("expires_at")
    if not raw:
        return True
    expires_at = datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return expires_at <= _utc_now()


async def _find_refresh_token(db: Database, token: str) -> Optional[Dict[str, Any]]:
    return await db.fetch_one(Query(REFRESH_TOKEN_TABLE).eq("token_hash", hash_token(token)))


async def issue_session(
    db: Database,
    user_id: str,
    user_agent: Optional[str] = None,
) -> ServiceResult[SessionTokens]:
    """
    Start a new session for an authenticated user (called after login/signup).

    Returns:
        ServiceResult with the new refresh and access tokens, or PERSISTENCE
    """
    uow = UnitOfWork("issue_session")
    refresh_token = _stage_refresh_token(uow, user_id, user_agent)

    try:
        await db.commit(uow)
    except PersistenceError as e:
        logger.error(f"Failed to store refresh token for user {user_id}: {e}", exc_info=True)
        return ServiceResult.failure(ErrorKind.PERSISTENCE, "Failed to start session")

    logger.info(f"Session issued for user {user_id}")
    return ServiceResult.success(_session_for(user_id, refresh_token))


async def refresh_session(
    db: Database,
    presented_token: Optional[str],
    user_agent: Optional[str] = None,
) -> ServiceResult[SessionTokens]:
    """
    Rotate a refresh token.

    The presented token's record is deleted and a replacement inserted in
    one unit of work; a new access token is minted for the same user.

    Returns:
        ServiceResult with the new tokens, INVALID if the token is missing,
        unknown, expired or already used, or PERSISTENCE
    """
    if not presented_token:
        return ServiceResult.failure(ErrorKind.INVALID, "Refresh token missing")

    record = await _find_refresh_token(db, presented_token)
    if record is None:
        logger.warning("Refresh attempted with unknown or already rotated token")
        return ServiceResult.failure(ErrorKind.INVALID, "Invalid refresh token")

    if _is_expired(record):
        logger.info(f"Refresh token expired for user {record['user_id']}")
        cleanup = UnitOfWork("expire_refresh_token")
        cleanup.delete(REFRESH_TOKEN_TABLE, record["id"])
        try:
            await db.commit(cleanup)
        except RowNotFoundError:
            logger.debug("Expired refresh token was already removed")
        except PersistenceError as e:
            logger.warning(f"Failed to delete expired refresh token: {e}")
        return ServiceResult.failure(ErrorKind.INVALID, "Refresh token expired")

    user_id = record["user_id"]

    uow = UnitOfWork("rotate_refresh_token")
    uow.delete(REFRESH_TOKEN_TABLE, record["id"])
    replacement = _stage_refresh_token(uow, user_id, user_agent or record.get("user_agent"))

    try:
        await db.commit(uow)
    except RowNotFoundError:
        # Another request rotated this token first
        logger.warning(f"Concurrent reuse of refresh token rejected for user {user_id}")
        return ServiceResult.failure(ErrorKind.INVALID, "Invalid refresh token")
    except PersistenceError as e:
        logger.error(f"Failed to rotate refresh token for user {user_id}: {e}", exc_info=True)
        return ServiceResult.failure(ErrorKind.PERSISTENCE, "Failed to refresh session")

    logger.info(f"Refresh token rotated for user {user_id}")
    return ServiceResult.success(_session_for(user_id, replacement))


async def logout(db: Database, presented_token: Optional[str]) -> ServiceResult[bool]:
    """
    End the session owning `presented_token`.

    Idempotent: an unknown or missing token is not an error.

    Returns:
        ServiceResult with True if a record was deleted, False otherwise
    """
    if not presented_token:
        return ServiceResult.success(False)

    record = await _find_refresh_token(db, presented_token)
    if record is None:
        return ServiceResult.success(False)

    uow = UnitOfWork("logout")
    uow.delete(REFRESH_TOKEN_TABLE, record["id"])
    try:
        await db.commit(uow)
    except RowNotFoundError:
        return ServiceResult.success(False)
    except PersistenceError as e:
        logger.error(f"Failed to delete refresh token on logout: {e}", exc_info=True)
        return ServiceResult.failure(ErrorKind.PERSISTENCE, "Failed to end session")

    logger.info(f"Session ended for user {record['user_id']}")
    return ServiceResult.success(True)
