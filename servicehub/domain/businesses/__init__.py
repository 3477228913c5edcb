"""
Businesses Domain

Business profiles. Owners change a live profile only through edit requests
that an admin approves.
"""

from .router import router

__all__ = ["router"]
