"""
Pricing Domain

Tier tables, provider add-on policies and the booking price calculator.
"""

from .router import router

__all__ = ["router"]
