"""
Request logging utilities with correlation IDs.
"""

import uuid
from contextvars import ContextVar
from typing import Optional
from loguru import logger
from fastapi import Request

# Context variable for correlation ID
correlation_id_var: ContextVar[Optional[str]] = ContextVar('correlation_id', default=None)


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID from context."""
    return correlation_id_var.get()


def set_correlation_id(cid: Optional[str] = None) -> str:
    """
    Set correlation ID in context.

    Args:
        cid: Correlation ID to set. If None, generates a new UUID.

    Returns:
        The correlation ID that was set.
    """
    if cid is None:
        cid = str(uuid.uuid4())
    correlation_id_var.set(cid)
    return cid


def log_request(
    request: Request,
    method: str,
    path: str,
    correlation_id: Optional[str] = None
) -> None:
    """
    Log incoming HTTP request with correlation ID.

    Args:
        request: FastAPI request object
        method: HTTP method
        path: Request path
        correlation_id: Correlation ID (generated if not provided)
    """
    if correlation_id is None:
        correlation_id = get_correlation_id() or set_correlation_id()

    client_ip = request.client.host if request.client else None
    logger.bind(correlation_id=correlation_id).info(
        f"Incoming request {method} {path} from {client_ip} [{correlation_id}]"
    )


def log_response(
    status_code: int,
    response_time_ms: float,
    correlation_id: Optional[str] = None
) -> None:
    """
    Log HTTP response.

    Args:
        status_code: HTTP status code
        response_time_ms: Response time in milliseconds
        correlation_id: Correlation ID (uses context if not provided)
    """
    if correlation_id is None:
        correlation_id = get_correlation_id()

    log_level = "error" if status_code >= 500 else "warning" if status_code >= 400 else "info"

    getattr(logger.bind(correlation_id=correlation_id), log_level)(
        f"Response sent {status_code} in {round(response_time_ms, 2)}ms [{correlation_id}]"
    )
