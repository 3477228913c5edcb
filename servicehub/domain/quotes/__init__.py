"""
Quotes Domain

Priced offers on a booking: sent -> viewed -> accepted / rejected / expired.
Only the latest quote for a booking can be answered.
"""

from .router import router

__all__ = ["router"]
