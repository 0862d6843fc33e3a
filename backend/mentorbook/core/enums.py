# backend/mentorbook/core/enums.py
"""
Core enums shared across the scheduling backend.
"""

from enum import Enum


class RoleName(str, Enum):
    """Roles carried in access tokens."""

    TUTOR = "TUTOR"
    STUDENT = "STUDENT"
    ADMIN = "ADMIN"
