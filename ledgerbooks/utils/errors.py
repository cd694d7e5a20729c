"""
Error kinds and service results.

Services report expected failures (bad input, unknown id, invalid token,
store failure) as a ServiceResult instead of raising. Routes turn a failed
result into an HTTPException with `unwrap_or_raise`, so every endpoint maps
the same kind to the same status code and JSON body:

    {"error": "<code>", "message": "<human readable text>"}
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, NoReturn, Optional, TypeVar

from fastapi import HTTPException, status

T = TypeVar("T")


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    ACCOUNT_NOT_FOUND = "account_not_found"
    INVALID = "invalid"
    PERSISTENCE = "persistence"


# kind -> (HTTP status, body error code)
ERROR_STATUS = {
    ErrorKind.VALIDATION: (status.HTTP_400_BAD_REQUEST, "invalid_request"),
    ErrorKind.NOT_FOUND: (status.HTTP_404_NOT_FOUND, "not_found"),
    ErrorKind.ACCOUNT_NOT_FOUND: (status.HTTP_400_BAD_REQUEST, "account_not_found"),
    ErrorKind.INVALID: (status.HTTP_401_UNAUTHORIZED, "unauthorized"),
    ErrorKind.PERSISTENCE: (status.HTTP_500_INTERNAL_SERVER_ERROR, "persistence_error"),
}


class AccountNotFoundError(Exception):
    """Raised inside an atomic scope when a transaction's account does not resolve."""

    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__(f"Account {account_id} not found")


@dataclass(frozen=True)
class ServiceResult(Generic[T]):
    """Either a value or an (error kind, message) pair."""

    value: Optional[T] = None
    error: Optional[ErrorKind] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "ServiceResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "ServiceResult[T]":
        return cls(error=kind, message=message)


def error_response(kind: ErrorKind, message: str) -> HTTPException:
    status_code, code = ERROR_STATUS[kind]
    return HTTPException(status_code=status_code, detail={"error": code, "message": message})


def raise_error(kind: ErrorKind, message: str) -> NoReturn:
    raise error_response(kind, message)


def unwrap_or_raise(result: "ServiceResult[T]") -> T:
    """Return the result's value or raise the matching HTTPException."""
    if result.error is not None:
        raise error_response(result.error, result.message)
    return result.value  # type: ignore[return-value]
