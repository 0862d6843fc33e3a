# backend/mentorbook/api/dependencies/auth.py
"""
Authentication and authorization dependencies.
"""

import logging
from typing import Callable

from fastapi import Depends

from ...auth import get_current_principal
from ...core.enums import RoleName
from ...core.exceptions import ForbiddenException
from ...principal import UserPrincipal

logger = logging.getLogger(__name__)


def require_role(role: RoleName, message: str) -> Callable[..., UserPrincipal]:
    """Dependency factory rejecting callers without ``role`` with 403."""

    def _dependency(principal: UserPrincipal = Depends(get_current_principal)) -> UserPrincipal:
        if principal.role is not role:
            logger.info("Rejected %s for user %s: role %s", role.value, principal.id, principal.role)
            raise ForbiddenException(message, code="forbidden").to_http_exception()
        return principal

    return _dependency


require_student = require_role(RoleName.STUDENT, "Only students can create bookings")
require_tutor = require_role(RoleName.TUTOR, "Only tutors can manage scheduling")

__all__ = ["get_current_principal", "require_role", "require_student", "require_tutor"]
