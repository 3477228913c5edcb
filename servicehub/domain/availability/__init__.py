"""
Availability Domain

Weekly capacity rules, date overrides (blocks and extras), commitment
counting and morning/afternoon slot generation.
"""

from .router import router

__all__ = ["router"]
