"""Availability service - Business logic for rules, overrides and slots"""

import logging
from datetime import date, datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...auth import RequestContext
from ...config import MAX_SLOT_RANGE_DAYS
from ...errors import NotFound, StateConflict, ValidationFailed
from ...models import Business
from ...models_availability import AvailabilityOverride, AvailabilityRule
from ...shared.access import get_business_or_404, require_business_owner
from ...shared.validators import validate_date_range
from .overrides import OverrideResolver
from .repository import AvailabilityRepository
from .rules import RuleResolver
from .schemas import OverrideCreate, RuleUpdate
from .slots import SlotGenerator, SlotRecord

logger = logging.getLogger(__name__)

UNAVAILABLE_MESSAGES = {
    "blocked": "The provider is not available for this slot",
    "too_soon": "This slot is inside the provider's advance notice window",
    "no_capacity": "The provider does not take jobs in this slot",
    "full": "This slot is fully booked",
}


class AvailabilityService:
    """Service layer for availability business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AvailabilityRepository()

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    def get_rules(self, ctx: RequestContext, business_id: int) -> list[AvailabilityRule]:
        require_business_owner(self.db, ctx, business_id)
        return self.repo.get_rules(self.db, business_id)

    def get_rule(self, ctx: RequestContext, business_id: int, weekday: int) -> AvailabilityRule:
        """Get the rule for a weekday, creating the default rule when missing"""
        require_business_owner(self.db, ctx, business_id)
        if weekday < 0 or weekday > 6:
            raise ValidationFailed("weekday must be between 0 (Sunday) and 6 (Saturday)")
        RuleResolver(self.db).resolve(business_id, weekday)
        return self.repo.get_rule(self.db, business_id, weekday)

    def upsert_rule(self, ctx: RequestContext, business_id: int, data: RuleUpdate) -> AvailabilityRule:
        require_business_owner(self.db, ctx, business_id)
        rule_data = data.model_dump(exclude={"weekday"})
        rule = self.repo.upsert_rule(self.db, business_id, data.weekday, **rule_data)
        logger.info(
            f"📅 Rule saved for business {business_id} weekday {rule.weekday}: "
            f"{rule.morning_jobs} morning / {rule.afternoon_jobs} afternoon"
        )
        return rule

    # ------------------------------------------------------------------
    # Overrides
    # ------------------------------------------------------------------

    def get_overrides(
        self, ctx: RequestContext, business_id: int, start: date, end: date
    ) -> list[AvailabilityOverride]:
        require_business_owner(self.db, ctx, business_id)
        self._check_range(start, end)
        return self.repo.get_overrides(self.db, business_id, start, end)

    def get_day_overrides(self, ctx: RequestContext, business_id: int, day: date):
        require_business_owner(self.db, ctx, business_id)
        return OverrideResolver(self.db).for_day(business_id, day)

    def create_override(
        self, ctx: RequestContext, business_id: int, data: OverrideCreate
    ) -> AvailabilityOverride:
        """
        Create an override. A full-day block replaces every block on the date;
        a half-day block replaces a full-day block and the same-slot block.
        Extras are upserted per (date, slot).
        """
        require_business_owner(self.db, ctx, business_id)
        time_slot = data.time_slot or "full_day"

        if data.kind == "block":
            if time_slot == "full_day":
                removed = self.repo.delete_blocks(self.db, business_id, data.override_date)
            else:
                removed = self.repo.delete_blocks(
                    self.db, business_id, data.override_date, ("full_day", time_slot)
                )
            if removed:
                logger.info(f"🔁 Replaced {removed} block(s) on {data.override_date}")
            override = AvailabilityOverride(
                business_id=business_id,
                override_date=data.override_date,
                kind="block",
                time_slot=time_slot,
                note=data.note,
            )
            self.db.add(override)
        else:
            override = self.repo.find_override(
                self.db, business_id, data.override_date, "extra", time_slot
            )
            if override is None:
                override = AvailabilityOverride(
                    business_id=business_id,
                    override_date=data.override_date,
                    kind="extra",
                    time_slot=time_slot,
                )
                self.db.add(override)
            override.start_time = data.start_time
            override.end_time = data.end_time
            override.max_concurrent_jobs = data.max_concurrent_jobs
            override.note = data.note

        self.db.commit()
        self.db.refresh(override)
        logger.info(
            f"✅ {override.kind} override ({override.time_slot}) saved for business {business_id} "
            f"on {override.override_date}"
        )
        return override

    def delete_override(self, ctx: RequestContext, business_id: int, override_id: int) -> dict:
        require_business_owner(self.db, ctx, business_id)
        override = self.repo.get_override(self.db, business_id, override_id)
        if not override:
            raise NotFound("Override not found")
        self.repo.delete_override(self.db, override)
        return {"message": "Override deleted successfully"}

    # ------------------------------------------------------------------
    # Slots
    # ------------------------------------------------------------------

    def get_slots(
        self,
        ctx: RequestContext,
        business_id: int,
        start: date,
        end: date,
        now: Optional[datetime] = None,
    ) -> list[SlotRecord]:
        business = require_business_owner(self.db, ctx, business_id)
        self._check_range(start, end)
        return SlotGenerator(self.db).generate(business, start, end, now)

    def public_calendar(
        self, business_id: int, start: date, end: date, now: Optional[datetime] = None
    ) -> list[SlotRecord]:
        business = get_business_or_404(self.db, business_id)
        if business.is_archived:
            raise NotFound("Business not found")
        self._check_range(start, end)
        return SlotGenerator(self.db).generate(business, start, end, now)

    def ensure_bookable(
        self, business: Business, day: date, slot: str, now: Optional[datetime] = None
    ) -> SlotRecord:
        """Raise StateConflict unless the slot can take another job"""
        record = SlotGenerator(self.db).check(business, day, slot, now)
        if not record.available:
            raise StateConflict(UNAVAILABLE_MESSAGES.get(record.reason, "This slot is not available"))
        return record

    @staticmethod
    def _check_range(start: date, end: date) -> None:
        try:
            validate_date_range(start, end, MAX_SLOT_RANGE_DAYS)
        except ValueError as e:
            raise ValidationFailed(str(e)) from None
