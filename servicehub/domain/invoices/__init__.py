"""
Invoices Domain

Customer invoices issued by a business, optionally from a booking.
Drafts are editable; sending is one-way; payments accumulate until the
balance reaches zero.
"""

from .router import router

__all__ = ["router"]
