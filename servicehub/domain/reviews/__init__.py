"""
Reviews Domain

Customer reviews of completed bookings with provider moderation
(hide/unhide, public response). Deletion is reserved for admins.
"""

from .router import router

__all__ = ["router"]
