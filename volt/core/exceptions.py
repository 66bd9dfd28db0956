"""
Global exception handlers for FastAPI application.
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from loguru import logger
from sqlalchemy.exc import TimeoutError as SQLAlchemyTimeoutError

from volt.core.config import settings
from volt.utils.exceptions import VoltError, ErrorKind
from volt.utils.formatters import format_error_response


async def volt_exception_handler(request: Request, exc: VoltError) -> JSONResponse:
    """Handle Volt domain errors."""
    status_code = exc.status_code
    error_response = format_error_response(
        exc, status_code, include_stack=settings.is_development
    )

    if exc.kind == ErrorKind.INTERNAL:
        logger.error(f"{exc.__class__.__name__} on {request.url.path}: {exc.message}")
    else:
        logger.warning(f"{exc.__class__.__name__} on {request.url.path}: {exc.message}")

    headers = None
    if exc.kind == ErrorKind.AUTH:
        headers = {"WWW-Authenticate": "Bearer"}

    return JSONResponse(
        status_code=status_code,
        content=error_response,
        headers=headers,
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle Pydantic validation errors.

    A missing field is a bad request (400); a field that is present but
    fails validation is unprocessable (422).
    """
    errors = []
    missing = False
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error.get("loc", []))
        if error.get("type") == "missing":
            missing = True
        errors.append({
            "field": field,
            "message": error.get("msg"),
            "type": error.get("type")
        })

    status_code = status.HTTP_400_BAD_REQUEST if missing else status.HTTP_422_UNPROCESSABLE_ENTITY
    first = errors[0] if errors else {"field": "", "message": "Request validation failed"}

    error_response = {
        "status": status_code,
        "message": f"{first['field']}: {first['message']}" if first["field"] else first["message"],
        "error": ErrorKind.VALIDATION.value if missing else ErrorKind.UNPROCESSABLE.value,
        "errors": errors,
    }

    logger.warning(f"Validation error: {errors}")

    return JSONResponse(
        status_code=status_code,
        content=error_response
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render framework HTTP errors (404 routes, 405 methods) in the same shape."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"status": exc.status_code, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle generic exceptions."""
    if isinstance(exc, SQLAlchemyTimeoutError):
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": status.HTTP_503_SERVICE_UNAVAILABLE,
                "message": "Database is busy (connection pool exhausted). Please retry in a moment.",
            },
            headers={"Retry-After": "3"},
        )

    error_response = format_error_response(
        exc,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        include_stack=settings.is_development,
        message="Internal server error",
    )

    logger.exception(f"Unhandled exception: {exc}")

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response
    )
