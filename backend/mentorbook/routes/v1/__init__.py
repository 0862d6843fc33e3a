"""API v1 routers."""

from . import availability, bookings, scheduling

__all__ = ["availability", "bookings", "scheduling"]
