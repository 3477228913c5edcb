"""Booking service - Business logic for booking requests and provider edits"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...auth import RequestContext
from ...errors import NotFound, PermissionDenied, StateConflict, ValidationFailed
from ...models import Booking, BookingItem, Business, ScheduledJob
from ...shared.access import get_business_or_404
from ...store.procedures import archive_booking
from ..availability.service import AvailabilityService
from ..pricing.calculator import PriceResult, apply_price, calculate_price
from ..pricing.schemas import team_field_for
from ..pricing.service import PricingService
from .repository import BookingRepository
from .schemas import BookingCreate, BookingStatusUpdate, BookingUpdate

logger = logging.getLogger(__name__)

PAID_LOCK_MESSAGE = "Cannot edit booking after payment has been completed"
STATUS_FIELDS = {"booking_status", "payment_status"}
PRICE_FIELDS = {
    "service_details",
    "team_size",
    "estimated_duration_hours",
    "additional_fees_cents",
    "items",
}
SCHEDULE_FIELDS = ("requested_date", "time_slot", "requested_time", "service_address", "customer_notes")
HEAVY_ITEM_SUMMARY_FIELDS = ("heavy_items_count", "heavy_item_band", "heavy_item_price_cents")

STATUS_TRANSITIONS = {
    "pending": {"confirmed", "cancelled"},
    "confirmed": {"in_progress", "cancelled"},
    "in_progress": {"completed", "cancelled"},
    "completed": set(),
    "cancelled": set(),
}
JOB_STATUS_FOR_BOOKING = {
    "in_progress": "in_progress",
    "completed": "completed",
    "cancelled": "cancelled",
}


def merge_service_details(existing: Optional[dict], patch: dict) -> dict:
    """
    Merge a partial service-details document into the stored one key by key.

    Explicit removals: an empty heavy_items list clears the heavy item
    summary, zero stairs_flights turns stairs off and packing "none" clears
    rooms and materials.
    """
    merged = {**(existing or {}), **patch}

    if "heavy_items" in patch and not patch["heavy_items"]:
        for key in HEAVY_ITEM_SUMMARY_FIELDS:
            merged.pop(key, None)
    if "stairs_flights" in patch and patch["stairs_flights"] == 0:
        merged["stairs"] = False
    if patch.get("packing") == "none":
        merged["packing_rooms"] = 0
        merged["packing_materials"] = []

    return merged


def items_total_cents(booking: Booking) -> int:
    return sum(item.quantity * item.unit_price_cents for item in booking.items)


class BookingService:
    """Service layer for booking business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = BookingRepository()
        self.pricing = PricingService(db)
        self.availability = AvailabilityService(db)

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def _get(self, booking_id: int) -> Booking:
        booking = self.repo.get_booking(self.db, booking_id)
        if not booking:
            raise NotFound("Booking not found")
        return booking

    def _require_provider(self, ctx: RequestContext, booking: Booking, action: str = "edit") -> None:
        if booking.business.owner_id == ctx.user_id or ctx.is_admin:
            return
        logger.warning(f"⚠️ User {ctx.user_id} tried to {action} booking {booking.id}")
        raise PermissionDenied(f"Only the service provider or admin can {action} bookings")

    def get_booking(self, ctx: RequestContext, booking_id: int) -> Booking:
        booking = self._get(booking_id)
        if booking.customer_id == ctx.user_id:
            return booking
        self._require_provider(ctx, booking, "view")
        return booking

    def list_bookings(self, ctx: RequestContext, business_id: Optional[int] = None) -> list[Booking]:
        if business_id is None:
            return self.repo.get_customer_bookings(self.db, ctx.user_id)
        business = get_business_or_404(self.db, business_id)
        if business.owner_id != ctx.user_id and not ctx.is_admin:
            raise PermissionDenied("You do not have access to this business")
        return self.repo.get_business_bookings(self.db, business_id)

    # ------------------------------------------------------------------
    # Pricing
    # ------------------------------------------------------------------

    def _reprice(
        self,
        booking: Booking,
        business: Business,
        document: dict,
        requested_duration: Optional[int],
    ) -> PriceResult:
        """Price a service-details document and write every derived field onto the booking"""
        details = self.pricing.parse_details(business, document)
        result = calculate_price(
            details,
            self.pricing.tier_rates(business.id),
            self.pricing.policy(business.id),
            previous_team_size=booking.team_size,
            previous_hourly_rate_cents=booking.hourly_rate_cents,
            requested_duration_hours=requested_duration,
            additional_fees_cents=booking.additional_fees_cents or 0,
            items_cents=items_total_cents(booking),
        )

        booking.service_details = apply_price(details, result)
        booking.team_size = result.team_size
        booking.hourly_rate_cents = result.hourly_rate_cents
        booking.estimated_duration_hours = result.duration_hours
        booking.base_price_cents = result.subtotal_cents
        booking.total_price_cents = result.total_cents
        return result

    # ------------------------------------------------------------------
    # Customer requests
    # ------------------------------------------------------------------

    def create_booking(self, ctx: RequestContext, data: BookingCreate) -> Booking:
        business = get_business_or_404(self.db, data.business_id)
        if business.is_archived:
            raise NotFound("Business not found")

        self.availability.ensure_bookable(business, data.requested_date, data.time_slot)

        booking = Booking(
            business_id=business.id,
            customer_id=ctx.user_id,
            status="requested",
            booking_status="pending",
            payment_status="unpaid",
            requested_date=data.requested_date,
            time_slot=data.time_slot,
            requested_time=data.requested_time,
            service_address=data.service_address,
            customer_notes=data.customer_notes,
            estimated_duration_hours=data.estimated_duration_hours,
            additional_fees_cents=0,
            base_price_cents=0,
            total_price_cents=0,
        )
        for item in data.items:
            booking.items.append(BookingItem(**item.model_dump()))

        if self.pricing.tier_rates(business.id):
            self._reprice(booking, business, data.service_details, data.estimated_duration_hours)
        else:
            # Priced later through a quote
            booking.service_details = self.pricing.parse_details(
                business, data.service_details
            ).model_dump(mode="json")
            booking.total_price_cents = items_total_cents(booking)

        self.db.add(booking)
        self.db.commit()
        self.db.refresh(booking)
        logger.info(
            f"📥 Booking {booking.id} requested for business {business.id} on "
            f"{booking.requested_date} ({booking.time_slot}), total={booking.total_price_cents}"
        )
        return booking

    # ------------------------------------------------------------------
    # Provider / admin edits
    # ------------------------------------------------------------------

    def update_booking(self, ctx: RequestContext, booking_id: int, data: BookingUpdate) -> Booking:
        """
        Apply a partial update.

        Only the provider or an admin may edit. A paid booking only accepts an
        admin changing booking_status or payment_status. booking_status follows
        the same transitions as the status endpoint. Rescheduling moves the
        linked job too. Price fields are recomputed whenever anything that
        affects the price changes.
        """
        booking = self._get(booking_id)
        self._require_provider(ctx, booking)

        changes = data.model_dump(exclude_unset=True)
        if STATUS_FIELDS & changes.keys() and not ctx.is_admin:
            raise PermissionDenied("Only admins can change booking or payment status")

        if booking.payment_status == "paid":
            if not ctx.is_admin or set(changes) - STATUS_FIELDS:
                logger.warning(f"⚠️ Edit rejected for paid booking {booking.id} by user {ctx.user_id}")
                raise StateConflict(PAID_LOCK_MESSAGE)

        if not changes:
            return booking

        business = booking.business
        patch = changes.get("service_details") or {}
        if patch.get("category") not in (None, business.category):
            raise ValidationFailed(
                f"service_details.category must be '{business.category}' for this business"
            )
        new_status = changes.get("booking_status", booking.booking_status)
        if new_status != booking.booking_status:
            self._check_transition(booking, new_status)

        for field in SCHEDULE_FIELDS:
            if field in changes:
                setattr(booking, field, changes[field])
        if "payment_status" in changes:
            booking.payment_status = changes["payment_status"]
        if new_status != booking.booking_status:
            self._apply_status(booking, new_status)
        if {"requested_date", "time_slot"} & changes.keys():
            self._sync_job_schedule(booking)

        if PRICE_FIELDS & changes.keys():
            document = merge_service_details(booking.service_details, patch)
            if "team_size" in changes:
                document[team_field_for(business.category)] = changes["team_size"]
            if "additional_fees_cents" in changes:
                booking.additional_fees_cents = changes["additional_fees_cents"]
            if "items" in changes:
                self.repo.replace_items(self.db, booking, changes["items"])

            duration = changes.get("estimated_duration_hours", booking.estimated_duration_hours)
            result = self._reprice(booking, business, document, duration)
            logger.info(
                f"💰 Booking {booking.id} repriced: team={result.team_size}, "
                f"hourly={result.hourly_rate_cents}, total={result.total_cents} ({result.rate_source})"
            )

        booking = self.repo.save(self.db, booking)
        logger.info(f"✅ Booking {booking.id} updated by user {ctx.user_id}: {sorted(changes)}")
        return booking

    def recalculate(self, ctx: RequestContext, booking_id: int) -> Booking:
        """Recompute a booking's totals from its stored service details"""
        booking = self._get(booking_id)
        self._require_provider(ctx, booking)
        if booking.payment_status == "paid":
            raise StateConflict(PAID_LOCK_MESSAGE)

        self._reprice(booking, booking.business, booking.service_details or {}, booking.estimated_duration_hours)
        return self.repo.save(self.db, booking)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def update_status(self, ctx: RequestContext, booking_id: int, data: BookingStatusUpdate) -> Booking:
        booking = self._get(booking_id)
        self._require_provider(ctx, booking)
        if booking.payment_status == "paid" and not ctx.is_admin:
            raise StateConflict(PAID_LOCK_MESSAGE)

        self._check_transition(booking, data.booking_status)
        old_status = booking.booking_status
        self._apply_status(booking, data.booking_status)
        booking = self.repo.save(self.db, booking)
        logger.info(f"🔄 Booking {booking.id} status {old_status} -> {booking.booking_status}")
        return booking

    @staticmethod
    def _check_transition(booking: Booking, new_status: str) -> None:
        if new_status not in STATUS_TRANSITIONS.get(booking.booking_status, set()):
            raise StateConflict(f"Cannot move booking from {booking.booking_status} to {new_status}")

    def _apply_status(self, booking: Booking, new_status: str) -> None:
        """Move booking_status and keep the linked scheduled job in step. Does not commit."""
        job = self.repo.get_linked_job(self.db, booking.id)
        if new_status == "confirmed":
            booking.status = "scheduled"
            if job is None:
                self.db.add(
                    ScheduledJob(
                        business_id=booking.business_id,
                        booking_id=booking.id,
                        job_date=booking.requested_date,
                        time_slot=booking.time_slot,
                        status="scheduled",
                    )
                )
            else:
                job.status = "scheduled"
        elif job is not None:
            job.status = JOB_STATUS_FOR_BOOKING[new_status]

        if new_status == "completed":
            booking.status = "completed"
        elif new_status == "cancelled":
            booking.status = "canceled"
        booking.booking_status = new_status

    def _sync_job_schedule(self, booking: Booking) -> None:
        """Move the linked job to the booking's current date and slot. Does not commit."""
        job = self.repo.get_linked_job(self.db, booking.id)
        if job is not None:
            job.job_date = booking.requested_date
            job.time_slot = booking.time_slot

    def archive(self, ctx: RequestContext, booking_id: int) -> dict:
        result = archive_booking(self.db, ctx, booking_id).raise_for_error()
        logger.info(f"🗄️ Booking {booking_id} archived by user {ctx.user_id}")
        return {"message": result.message, "booking_id": result.data["booking_id"]}
