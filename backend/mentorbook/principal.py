"""Principal for authenticated API callers."""

from __future__ import annotations

from dataclasses import dataclass

from .core.enums import RoleName


@dataclass(frozen=True)
class UserPrincipal:
    """Authenticated user as described by the access token claims."""

    user_id: str
    role: RoleName

    @property
    def id(self) -> str:
        return self.user_id
