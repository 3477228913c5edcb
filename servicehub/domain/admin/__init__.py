"""
Admin Domain

User moderation (role, suspension, deletion) and business edit request
review. Every mutation runs through a stored procedure.
"""

from .router import router

__all__ = ["router"]
