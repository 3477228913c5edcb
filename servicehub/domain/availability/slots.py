"""
Morning/afternoon slot generation.

For each UTC calendar date in an inclusive range the generator combines the
weekday rule, the date's overrides and the committed jobs into two slot
records. A slot is available when it is not blocked, not inside the advance
notice window, has capacity, and is not full.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from ...config import DEFAULT_NOTICE_HOURS
from ...models import Business
from .commitments import SLOTS, CommitmentQuery
from .overrides import DayOverrides, OverrideResolver
from .rules import RuleResolver, weekday_of

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 1000


@dataclass(frozen=True)
class SlotRecord:
    day: date
    slot: str
    available: bool
    max_jobs: int
    current_bookings: int
    reason: Optional[str] = None  # blocked, too_soon, no_capacity, full

    @property
    def public_status(self) -> str:
        if self.available:
            return "available"
        return "busy" if self.reason == "full" else "unavailable"


def iter_dates(start: date, end: date):
    """Yield every calendar date from start to end inclusive"""
    current = start
    iterations = 0
    while current <= end and iterations < MAX_ITERATIONS:
        yield current
        current += timedelta(days=1)
        iterations += 1


def notice_cutoff(now: datetime, notice_hours: Optional[int]) -> datetime:
    hours = DEFAULT_NOTICE_HOURS if notice_hours is None else notice_hours
    return now + timedelta(hours=hours)


def is_too_soon(day: date, slot_start: str, cutoff: datetime) -> bool:
    """A slot is too soon when its nominal start is before the notice cutoff"""
    hour, minute = (int(part) for part in slot_start.split(":"))
    return datetime.combine(day, time(hour, minute)) < cutoff


def slot_status(
    blocked: bool, too_soon: bool, max_jobs: int, current: int
) -> tuple[bool, Optional[str]]:
    if blocked:
        return False, "blocked"
    if too_soon:
        return False, "too_soon"
    if max_jobs <= 0:
        return False, "no_capacity"
    if current >= max_jobs:
        return False, "full"
    return True, None


class SlotGenerator:
    def __init__(self, db: Session, commitments: Optional[CommitmentQuery] = None):
        self.db = db
        self.rules = RuleResolver(db)
        self.overrides = OverrideResolver(db)
        self.commitments = commitments or CommitmentQuery(db)

    def generate(
        self, business: Business, start: date, end: date, now: Optional[datetime] = None
    ) -> list[SlotRecord]:
        now = now or datetime.utcnow()
        cutoff = notice_cutoff(now, business.min_booking_notice_hours)
        overrides = self.overrides.for_range(business.id, start, end)
        counts = self.commitments.counts(business.id, start, end)

        slots = []
        for day in iter_dates(start, end):
            rule = self.rules.resolve_or_default(business.id, weekday_of(day))
            day_overrides = overrides.get(day) or DayOverrides(day)
            for slot in SLOTS:
                max_jobs = rule.max_jobs(slot)
                current = counts.get((day, slot), 0)
                available, reason = slot_status(
                    day_overrides.is_blocked(slot),
                    is_too_soon(day, rule.slot_start(slot), cutoff),
                    max_jobs,
                    current,
                )
                slots.append(SlotRecord(day, slot, available, max_jobs, current, reason))

        logger.info(
            f"📅 Generated {len(slots)} slots for business {business.id} ({start} to {end}), "
            f"{sum(1 for s in slots if s.available)} available"
        )
        return slots

    def check(
        self, business: Business, day: date, slot: str, now: Optional[datetime] = None
    ) -> SlotRecord:
        return next(s for s in self.generate(business, day, day, now) if s.slot == slot)
