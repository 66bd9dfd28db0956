"""
Data formatting utilities.
"""

import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional


def as_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Return a timezone-aware UTC datetime.

    SQLite drops tzinfo on storage, so naive values read back from the
    database are treated as UTC.

    Args:
        dt: Datetime object

    Returns:
        Aware datetime, or None
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_error_response(
    error: Exception,
    status_code: int = 500,
    include_stack: bool = False,
    message: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Format error response for API.

    Args:
        error: Exception object
        status_code: HTTP status code
        include_stack: Attach the formatted traceback (development only)
        message: Override for the exception message

    Returns:
        Formatted error response dictionary
    """
    response = {
        "status": status_code,
        "message": message if message is not None else str(error),
    }

    kind = getattr(error, "kind", None)
    if kind is not None:
        response["error"] = kind.value

    reason = getattr(error, "reason", None)
    if reason:
        response["reason"] = reason

    if include_stack:
        response["stack"] = "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        )

    return response
