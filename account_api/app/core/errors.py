"""
Error taxonomy and FastAPI exception handlers.

Every failure the account core can report is an ``AccountError``
tagged with an ``ErrorKind``.  Handlers and services raise it through
the small factory functions below; ``register_exception_handlers``
installs the translation to HTTP responses so that routers never build
error payloads by hand.  Failures that are not ``AccountError`` fall
through to a generic 500 handler which logs the traceback and hides
the details from the client.
"""

import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    """Kinds of failure surfaced to API clients."""

    VALIDATION = "validation"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"


STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
}

TITLE_BY_KIND: Dict[ErrorKind, str] = {
    ErrorKind.VALIDATION: "Validation failed",
    ErrorKind.UNAUTHORIZED: "Unauthorized",
    ErrorKind.FORBIDDEN: "Forbidden",
    ErrorKind.NOT_FOUND: "Not found",
    ErrorKind.CONFLICT: "Conflict",
}


class AccountError(Exception):
    """Failure raised by the account core, tagged with its kind."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        details: Optional[List[Dict[str, Any]]] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.details = details

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]

    def __repr__(self) -> str:
        return f"AccountError(kind={self.kind.value!r}, message={self.message!r})"


def validation_error(message: str, details: Optional[List[Dict[str, Any]]] = None) -> AccountError:
    return AccountError(ErrorKind.VALIDATION, message, details)


def unauthorized(message: str = "Authentication required") -> AccountError:
    return AccountError(ErrorKind.UNAUTHORIZED, message)


def forbidden(message: str = "Insufficient permissions") -> AccountError:
    return AccountError(ErrorKind.FORBIDDEN, message)


def not_found(message: str = "User not found") -> AccountError:
    return AccountError(ErrorKind.NOT_FOUND, message)


def conflict(message: str = "User with this email already exists") -> AccountError:
    return AccountError(ErrorKind.CONFLICT, message)


def format_validation_errors(errors: Sequence[Dict[str, Any]]) -> List[Dict[str, str]]:
    """Flatten pydantic error entries into ``{field, message}`` pairs.

    The request location prefix (``body``, ``path``...) is dropped from
    the field name.  Model level errors, which have no field of their
    own, are reported against the location itself.
    """
    details: List[Dict[str, str]] = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ())]
        if len(loc) > 1 and loc[0] in {"body", "path", "query", "cookie", "header"}:
            field = ".".join(loc[1:])
        else:
            field = ".".join(loc)
        message = str(error.get("msg", "Invalid value"))
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        details.append({"field": field, "message": message})
    return details


async def account_error_handler(request: Request, exc: AccountError) -> JSONResponse:
    content: Dict[str, Any] = {"error": TITLE_BY_KIND[exc.kind], "message": exc.message}
    if exc.details:
        content["details"] = exc.details
    headers = None
    if exc.kind is ErrorKind.UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = format_validation_errors(exc.errors())
    logger.info("Validation failed for %s %s: %s", request.method, request.url.path, details)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": TITLE_BY_KIND[ErrorKind.VALIDATION], "details": details},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the error translation on ``app``."""
    app.add_exception_handler(AccountError, account_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
