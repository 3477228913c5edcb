"""Availability repository - Database operations for rules, overrides and commitments"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Booking, ScheduledJob
from ...models_availability import AvailabilityOverride, AvailabilityRule

ACTIVE_JOB_STATUSES = ("scheduled", "in_progress")
ACTIVE_BOOKING_STATUSES = ("pending", "confirmed", "in_progress")


class AvailabilityRepository:
    """Repository for availability database operations"""

    # Rules

    @staticmethod
    def get_rules(db: Session, business_id: int) -> list[AvailabilityRule]:
        return (
            db.query(AvailabilityRule)
            .filter(AvailabilityRule.business_id == business_id)
            .order_by(AvailabilityRule.weekday)
            .all()
        )

    @staticmethod
    def get_rule(db: Session, business_id: int, weekday: int) -> Optional[AvailabilityRule]:
        return (
            db.query(AvailabilityRule)
            .filter(AvailabilityRule.business_id == business_id, AvailabilityRule.weekday == weekday)
            .first()
        )

    @staticmethod
    def get_rule_by_id(db: Session, rule_id: int) -> Optional[AvailabilityRule]:
        return db.query(AvailabilityRule).filter(AvailabilityRule.id == rule_id).first()

    @staticmethod
    def upsert_rule(db: Session, business_id: int, weekday: int, **rule_data) -> AvailabilityRule:
        rule = (
            db.query(AvailabilityRule)
            .filter(AvailabilityRule.business_id == business_id, AvailabilityRule.weekday == weekday)
            .first()
        )
        if rule is None:
            rule = AvailabilityRule(business_id=business_id, weekday=weekday)
            db.add(rule)
        for key, value in rule_data.items():
            setattr(rule, key, value)
        rule.auto_created = False
        db.commit()
        db.refresh(rule)
        return rule

    # Overrides

    @staticmethod
    def get_overrides(
        db: Session, business_id: int, start: date, end: date
    ) -> list[AvailabilityOverride]:
        return (
            db.query(AvailabilityOverride)
            .filter(
                AvailabilityOverride.business_id == business_id,
                AvailabilityOverride.override_date >= start,
                AvailabilityOverride.override_date <= end,
            )
            .order_by(AvailabilityOverride.override_date, AvailabilityOverride.id)
            .all()
        )

    @staticmethod
    def get_override(db: Session, business_id: int, override_id: int) -> Optional[AvailabilityOverride]:
        return (
            db.query(AvailabilityOverride)
            .filter(
                AvailabilityOverride.id == override_id,
                AvailabilityOverride.business_id == business_id,
            )
            .first()
        )

    @staticmethod
    def find_override(
        db: Session, business_id: int, override_date: date, kind: str, time_slot: str
    ) -> Optional[AvailabilityOverride]:
        return (
            db.query(AvailabilityOverride)
            .filter(
                AvailabilityOverride.business_id == business_id,
                AvailabilityOverride.override_date == override_date,
                AvailabilityOverride.kind == kind,
                AvailabilityOverride.time_slot == time_slot,
            )
            .first()
        )

    @staticmethod
    def delete_blocks(
        db: Session, business_id: int, override_date: date, time_slots: Optional[tuple] = None
    ) -> int:
        """Delete block overrides on a date (optionally only for some slots). Does not commit."""
        query = db.query(AvailabilityOverride).filter(
            AvailabilityOverride.business_id == business_id,
            AvailabilityOverride.override_date == override_date,
            AvailabilityOverride.kind == "block",
        )
        if time_slots:
            query = query.filter(AvailabilityOverride.time_slot.in_(time_slots))
        return query.delete(synchronize_session=False)

    @staticmethod
    def delete_override(db: Session, override: AvailabilityOverride) -> None:
        db.delete(override)
        db.commit()

    # Commitments

    @staticmethod
    def get_active_jobs(db: Session, business_id: int, start: date, end: date) -> list[ScheduledJob]:
        return (
            db.query(ScheduledJob)
            .filter(
                ScheduledJob.business_id == business_id,
                ScheduledJob.job_date >= start,
                ScheduledJob.job_date <= end,
                ScheduledJob.status.in_(ACTIVE_JOB_STATUSES),
                ScheduledJob.is_archived.is_(False),
            )
            .all()
        )

    @staticmethod
    def get_linked_job_booking_ids(db: Session, booking_ids: list[int]) -> set[int]:
        """Which of the given bookings already have a scheduled job (any date, not cancelled)"""
        if not booking_ids:
            return set()
        rows = (
            db.query(ScheduledJob.booking_id)
            .filter(
                ScheduledJob.booking_id.in_(booking_ids),
                ScheduledJob.status != "cancelled",
            )
            .all()
        )
        return {row[0] for row in rows}

    @staticmethod
    def get_active_bookings(db: Session, business_id: int, start: date, end: date) -> list[Booking]:
        return (
            db.query(Booking)
            .filter(
                Booking.business_id == business_id,
                Booking.requested_date >= start,
                Booking.requested_date <= end,
                Booking.booking_status.in_(ACTIVE_BOOKING_STATUSES),
                Booking.is_archived.is_(False),
            )
            .all()
        )
