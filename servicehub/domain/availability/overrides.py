"""Date override resolution (blocks and extras layered on the weekly rule)"""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...models_availability import AvailabilityOverride
from .repository import AvailabilityRepository


@dataclass
class DayOverrides:
    day: date
    full_day_blocked: bool = False
    morning_blocked: bool = False
    afternoon_blocked: bool = False
    extras: list = field(default_factory=list)
    records: list = field(default_factory=list)

    def is_blocked(self, slot: str) -> bool:
        if self.full_day_blocked:
            return True
        return self.morning_blocked if slot == "morning" else self.afternoon_blocked

    def extra_capacity(self) -> Optional[int]:
        """
        max_concurrent_jobs of the day's extra overrides. Reported only:
        slot capacity comes from the weekly rule.
        """
        values = [o.max_concurrent_jobs for o in self.extras if o.max_concurrent_jobs is not None]
        return max(values) if values else None

    def most_restrictive(self) -> Optional[AvailabilityOverride]:
        """Full-day block, then half-day block, then extra"""

        def rank(override):
            if override.kind == "block":
                return 0 if override.time_slot == "full_day" else 1
            return 2

        return min(self.records, key=rank) if self.records else None


class OverrideResolver:
    def __init__(self, db: Session):
        self.db = db
        self.repo = AvailabilityRepository()

    def for_range(self, business_id: int, start: date, end: date) -> dict[date, DayOverrides]:
        result: dict[date, DayOverrides] = {}
        for override in self.repo.get_overrides(self.db, business_id, start, end):
            day = result.get(override.override_date)
            if day is None:
                day = result[override.override_date] = DayOverrides(override.override_date)
            day.records.append(override)
            if override.kind == "block":
                slot = override.time_slot or "full_day"
                if slot == "morning":
                    day.morning_blocked = True
                elif slot == "afternoon":
                    day.afternoon_blocked = True
                else:
                    day.full_day_blocked = True
            elif override.kind == "extra":
                day.extras.append(override)
        return result

    def for_day(self, business_id: int, day: date) -> DayOverrides:
        return self.for_range(business_id, day, day).get(day, DayOverrides(day))
