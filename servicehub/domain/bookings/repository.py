"""Booking repository - Database operations for bookings"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Booking, BookingItem, ScheduledJob


class BookingRepository:
    """Repository for booking database operations"""

    @staticmethod
    def get_booking(db: Session, booking_id: int) -> Optional[Booking]:
        return (
            db.query(Booking)
            .options(joinedload(Booking.business), joinedload(Booking.items))
            .filter(Booking.id == booking_id)
            .first()
        )

    @staticmethod
    def get_customer_bookings(db: Session, customer_id: int) -> list[Booking]:
        return (
            db.query(Booking)
            .filter(Booking.customer_id == customer_id, Booking.is_archived.is_(False))
            .order_by(Booking.requested_date.desc())
            .all()
        )

    @staticmethod
    def get_business_bookings(
        db: Session, business_id: int, include_archived: bool = False
    ) -> list[Booking]:
        query = db.query(Booking).filter(Booking.business_id == business_id)
        if not include_archived:
            query = query.filter(Booking.is_archived.is_(False))
        return query.order_by(Booking.requested_date.desc()).all()

    @staticmethod
    def replace_items(db: Session, booking: Booking, items: list[dict]) -> None:
        """Replace a booking's line items. Does not commit."""
        booking.items.clear()
        for item in items:
            booking.items.append(BookingItem(**item))

    @staticmethod
    def get_linked_job(db: Session, booking_id: int) -> Optional[ScheduledJob]:
        return db.query(ScheduledJob).filter(ScheduledJob.booking_id == booking_id).first()

    @staticmethod
    def save(db: Session, booking: Booking) -> Booking:
        db.commit()
        db.refresh(booking)
        return booking
