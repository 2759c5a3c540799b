"""
Exception hierarchy and FastAPI handlers.

    AppException (500)
    ├── ValidationException (400)
    ├── AuthenticationException (401)
    ├── AuthorizationException (403)
    └── PersistenceException (500)

Services raise these; routes let them propagate and the handlers
registered in register_exception_handlers() turn them into JSON.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)


class AppException(Exception):
    """Base exception for all application errors."""
    status_code = 500
    error_type = "ApplicationError"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        if status_code:
            self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "error": self.error_type,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        return f"{self.error_type}: {self.message}"


class ValidationException(AppException):
    """Input failed a domain rule (bad enum value, rating out of range, ...)."""
    status_code = 400
    error_type = "ValidationError"


class AuthenticationException(AppException):
    status_code = 401
    error_type = "AuthenticationError"


class AuthorizationException(AppException):
    status_code = 403
    error_type = "AuthorizationError"


class PersistenceException(AppException):
    """Storage layer failure. The message sent to clients stays generic."""
    status_code = 500
    error_type = "PersistenceError"


# ============================================================
# FASTAPI HANDLERS
# ============================================================

async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationException) else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


async def pymongo_exception_handler(request: Request, exc: PyMongoError) -> JSONResponse:
    logger.exception("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    error = PersistenceException("Database operation failed")
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(PyMongoError, pymongo_exception_handler)
