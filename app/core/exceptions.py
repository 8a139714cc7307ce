# app/core/exceptions.py
"""Authentication failures raised by the session manager.

Every subclass is surfaced to the client as the same 401 response, so callers
cannot tell an unknown e-mail from a wrong password or a reused refresh token
from an expired one.
"""
import logging

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.requests import Request

logger = logging.getLogger(__name__)


class AuthError(Exception):
    reason = "unauthorized"


class InvalidCredential(AuthError):
    reason = "invalid_credential"


class InvalidOrExpiredRefreshToken(AuthError):
    reason = "invalid_or_expired_refresh_token"


class StaleUserOnPasswordChange(AuthError):
    reason = "stale_user_on_password_change"


def register_exception_handlers(api: FastAPI) -> None:
    @api.exception_handler(AuthError)
    def handle_auth_error(request: Request, exc: AuthError):
        logger.warning("auth failure path=%s reason=%s", request.url.path, exc.reason)
        return JSONResponse(
            status_code=401,
            content={"code": "UNAUTHORIZED", "message": "Unauthorized"},
            headers={"WWW-Authenticate": "Bearer"},
        )

    @api.exception_handler(IntegrityError)
    def handle_integrity_error(request: Request, exc: IntegrityError):
        return JSONResponse(
            status_code=409,
            content={"code": "UNIQUE_VIOLATION", "message": "Duplicate record.", "details": str(getattr(exc, "orig", exc))},
        )

    @api.exception_handler(Exception)
    def handle_unexpected(request: Request, exc: Exception):
        logger.exception("unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"code": "INTERNAL_ERROR", "message": "Internal error."},
        )
