"""Notifications Domain - the caller's in-app notifications"""

from .router import router

__all__ = ["router"]
