"""
Ownership guard for credential operations.
"""

from typing import Optional, TypeVar
from uuid import UUID

from volt.utils.exceptions import ForbiddenError, NotFoundError

T = TypeVar("T")


def authorize(caller_id: UUID, resource: Optional[T], message: str = "Credential not found") -> T:
    """Allow access to ``resource`` only for its owner.

    Raises:
        NotFoundError: If the resource does not exist.
        ForbiddenError: If the resource belongs to another user.
    """
    if resource is None:
        raise NotFoundError(message)
    if getattr(resource, "user_id", None) != caller_id:
        raise ForbiddenError("You do not have access to this credential")
    return resource
