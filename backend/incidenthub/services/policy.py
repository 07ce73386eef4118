"""
Access policy for incidents.

Role gating is declared on service methods with ``requires_role``; the
one ownership rule lives in ``can_read``. Nothing else in the code base
compares roles directly.
"""

import functools
import inspect
import logging

from incidenthub.core.exceptions import ForbiddenError
from incidenthub.models.incident import Incident
from incidenthub.models.user import Role, User

logger = logging.getLogger(__name__)

REPORTER_ROLES = (Role.USER, Role.ADMIN)


def is_admin(user: User) -> bool:
    return user.role == Role.ADMIN


def can_read(user: User, incident: Incident) -> bool:
    return is_admin(user) or user.id == incident.reported_by_id


def requires_role(*roles: Role):
    """
    Gate a service coroutine on the role of its ``current_user`` argument.

    The wrapped function must accept a parameter named ``current_user``.
    """
    allowed = frozenset(roles)

    def decorator(func):
        signature = inspect.signature(func)
        if "current_user" not in signature.parameters:
            raise TypeError(f"{func.__qualname__} has no 'current_user' parameter")

        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            bound = signature.bind(*args, **kwargs)
            user = bound.arguments["current_user"]
            if user is None or user.role not in allowed:
                logger.warning(
                    "Denied %s for user %s (role %s)",
                    func.__name__,
                    getattr(user, "username", None),
                    getattr(user, "role", None),
                )
                raise ForbiddenError("You do not have permission to perform this action")
            return await func(*args, **kwargs)

        return wrapper

    return decorator
