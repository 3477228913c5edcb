"""Weekly rule resolution with idempotent auto-creation of defaults"""

import logging
from dataclasses import dataclass
from datetime import date

from sqlalchemy.orm import Session

from ...config import DEFAULT_AFTERNOON_JOBS, DEFAULT_MORNING_JOBS
from ...errors import StoreFailure
from ...store.procedures import auto_create_availability_rule
from .repository import AvailabilityRepository

logger = logging.getLogger(__name__)


def weekday_of(day: date) -> int:
    """0=Sunday..6=Saturday"""
    return day.isoweekday() % 7


@dataclass(frozen=True)
class RuleView:
    weekday: int
    morning_jobs: int = DEFAULT_MORNING_JOBS
    afternoon_jobs: int = DEFAULT_AFTERNOON_JOBS
    morning_start: str = "08:00"
    afternoon_start: str = "12:00"
    afternoon_end: str = "17:00"
    is_active: bool = True
    persisted: bool = True

    @classmethod
    def from_model(cls, rule) -> "RuleView":
        return cls(
            weekday=rule.weekday,
            morning_jobs=rule.morning_jobs,
            afternoon_jobs=rule.afternoon_jobs,
            morning_start=rule.morning_start,
            afternoon_start=rule.afternoon_start,
            afternoon_end=rule.afternoon_end,
            is_active=rule.is_active,
        )

    def max_jobs(self, slot: str) -> int:
        if not self.is_active:
            return 0
        return self.morning_jobs if slot == "morning" else self.afternoon_jobs

    def slot_start(self, slot: str) -> str:
        return self.morning_start if slot == "morning" else self.afternoon_start


class RuleResolver:
    def __init__(self, db: Session):
        self.db = db
        self.repo = AvailabilityRepository()
        self._cache: dict[tuple, RuleView] = {}

    def resolve(self, business_id: int, weekday: int) -> RuleView:
        """
        Return the rule for a weekday, creating the default rule when none exists.

        Raises StoreFailure when the default rule cannot be stored.
        """
        key = (business_id, weekday)
        if key in self._cache:
            return self._cache[key]

        rule = self.repo.get_rule(self.db, business_id, weekday)
        if rule is None:
            result = auto_create_availability_rule(self.db, business_id, weekday)
            if not result.ok:
                logger.error(
                    f"❌ Could not auto-create rule for business {business_id} weekday {weekday}: "
                    f"{result.message}"
                )
                raise StoreFailure()
            rule = self.repo.get_rule_by_id(self.db, result.data["rule_id"])

        view = RuleView.from_model(rule)
        self._cache[key] = view
        return view

    def resolve_or_default(self, business_id: int, weekday: int) -> RuleView:
        """Like resolve, but fall back to an unsaved default rule on store errors"""
        try:
            return self.resolve(business_id, weekday)
        except StoreFailure:
            logger.warning(
                f"⚠️ Using in-memory default rule for business {business_id} weekday {weekday}"
            )
            return RuleView(weekday=weekday, persisted=False)
