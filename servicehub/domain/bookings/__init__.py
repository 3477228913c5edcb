"""
Bookings Domain

Booking requests, the owner/admin mutation handler (price recomputation,
paid lock, service-details merge), status transitions and archiving.
"""

from .router import router

__all__ = ["router"]
