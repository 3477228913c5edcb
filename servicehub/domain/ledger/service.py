"""Ledger service - Admin ledger management and public summaries"""

import logging
from collections import defaultdict
from typing import Optional

from sqlalchemy.orm import Session

from ...auth import RequestContext
from ...errors import NotFound, ValidationFailed
from ...models_invoice import LedgerEntry
from ...shared.validators import validate_period
from .schemas import LedgerEntryCreate, LedgerEntryUpdate

logger = logging.getLogger(__name__)

INCOME_CATEGORIES = ("income_fees", "donations")


def summarize(period: str, entries: list[LedgerEntry]) -> dict:
    """Income, expense and net totals for one period"""
    totals = defaultdict(int)
    for entry in entries:
        totals[entry.category] += entry.amount_cents

    income = sum(amount for category, amount in totals.items() if category in INCOME_CATEGORIES)
    expenses = sum(amount for category, amount in totals.items() if category not in INCOME_CATEGORIES)
    return {
        "period": period,
        "total_income_cents": income,
        "total_expenses_cents": expenses,
        "net_cents": income - expenses,
        "category_totals": dict(totals),
        "entry_count": len(entries),
    }


class LedgerService:
    """Service layer for the platform ledger (callers are admins except for summaries)"""

    def __init__(self, db: Session):
        self.db = db

    def _get(self, entry_id: int) -> LedgerEntry:
        entry = self.db.query(LedgerEntry).filter(LedgerEntry.id == entry_id).first()
        if not entry:
            raise NotFound("Ledger entry not found")
        return entry

    def list_entries(self, period: Optional[str] = None) -> list[LedgerEntry]:
        query = self.db.query(LedgerEntry)
        if period:
            query = query.filter(LedgerEntry.period == period)
        return query.order_by(LedgerEntry.period.desc(), LedgerEntry.id.desc()).all()

    def create_entry(self, ctx: RequestContext, data: LedgerEntryCreate) -> LedgerEntry:
        entry = LedgerEntry(**data.model_dump(), created_by=ctx.user_id)
        self.db.add(entry)
        self.db.commit()
        self.db.refresh(entry)
        logger.info(f"📒 Ledger entry {entry.id} ({entry.category} {entry.amount_cents}) for {entry.period}")
        return entry

    def update_entry(self, ctx: RequestContext, entry_id: int, data: LedgerEntryUpdate) -> LedgerEntry:
        entry = self._get(entry_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            if value is None and field != "note":
                continue
            setattr(entry, field, value)
        self.db.commit()
        self.db.refresh(entry)
        logger.info(f"📒 Ledger entry {entry.id} updated by admin {ctx.user_id}")
        return entry

    def delete_entry(self, ctx: RequestContext, entry_id: int) -> dict:
        entry = self._get(entry_id)
        self.db.delete(entry)
        self.db.commit()
        logger.info(f"🗑️ Ledger entry {entry_id} deleted by admin {ctx.user_id}")
        return {"message": "Ledger entry deleted"}

    def summary(self, period: str) -> dict:
        try:
            validate_period(period)
        except ValueError as e:
            raise ValidationFailed(str(e)) from None
        return summarize(period, self.list_entries(period))
