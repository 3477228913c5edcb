"""
Ledger Domain

Platform transparency ledger: admin-managed entries per accounting period
and a public per-period summary.
"""

from .router import router

__all__ = ["router"]
