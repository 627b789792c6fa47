import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from pymongo.errors import DuplicateKeyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront.api.responses import failure
from storefront.core.errors import AppError, Conflict

logger = logging.getLogger(__name__)


async def app_error_handler(request: Request, exc: AppError):
    return failure(exc.message, exc.status_code, exc.errors)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(p) for p in err.get("loc", ()) if p != "body"), "message": err.get("msg", "")}
        for err in exc.errors()
    ]
    return failure("Validation failed", 400, errors)


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return failure(str(exc.detail), exc.status_code)


async def duplicate_key_handler(request: Request, exc: DuplicateKeyError):
    details = getattr(exc, "details", None) or {}
    fields = sorted((details.get("keyValue") or details.get("keyPattern") or {}).keys())
    message = f"Duplicate value for {', '.join(fields)}" if fields else Conflict.default_message
    return failure(message, Conflict.status_code, {"fields": fields} if fields else None)


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return failure("Internal Server Error", 500)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(DuplicateKeyError, duplicate_key_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
