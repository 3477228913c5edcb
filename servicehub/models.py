from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    full_name = Column(String(255), nullable=True)
    role = Column(String(20), nullable=False, default="customer")  # customer, business, admin

    # Moderation
    is_suspended = Column(Boolean, default=False, nullable=False)
    suspended_reason = Column(Text, nullable=True)
    suspended_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    businesses = relationship("Business", back_populates="owner")


class Business(Base):
    __tablename__ = "businesses"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    category = Column(String(30), nullable=False, default="moving")  # moving, cleaning, general
    description = Column(Text, nullable=True)
    phone = Column(String(20), nullable=True)
    email = Column(String(255), nullable=True)
    service_area = Column(String(255), nullable=True)
    min_booking_notice_hours = Column(Integer, nullable=False, default=24)
    payment_terms_days = Column(Integer, nullable=False, default=30)
    is_archived = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    owner = relationship("User", back_populates="businesses")
    config = relationship(
        "ProviderConfig", back_populates="business", uselist=False, cascade="all, delete-orphan"
    )
    tiers = relationship(
        "PricingTier",
        back_populates="business",
        cascade="all, delete-orphan",
        order_by="PricingTier.crew_size",
    )
    bookings = relationship("Booking", back_populates="business")


class ProviderConfig(Base):
    """Per-business pricing policies (packing, stairs, heavy items, travel)"""

    __tablename__ = "provider_configs"

    id = Column(Integer, primary_key=True, index=True)
    business_id = Column(
        Integer, ForeignKey("businesses.id", ondelete="CASCADE"), unique=True, nullable=False
    )

    # Travel policy
    base_zip = Column(String(10), nullable=True)
    service_radius_miles = Column(Integer, nullable=True)
    min_lead_minutes = Column(Integer, nullable=True)
    destination_fee_per_mile_cents = Column(Integer, nullable=True)
    max_travel_distance_miles = Column(Integer, nullable=True)

    # Packing policy
    packing_enabled = Column(Boolean, default=True, nullable=False)
    packing_per_room_cents = Column(Integer, nullable=True)
    packing_materials_included = Column(Boolean, default=False, nullable=False)
    packing_materials = Column(JSON, default=list)  # [{"name", "price_cents", "included"}]

    # Stairs policy
    stairs_included = Column(Boolean, default=False, nullable=False)
    stairs_per_flight_cents = Column(Integer, nullable=True)

    # Heavy item bands: [{"min_weight", "max_weight", "price_cents"}]
    heavy_item_tiers = Column(JSON, default=list)

    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    business = relationship("Business", back_populates="config")


class PricingTier(Base):
    __tablename__ = "pricing_tiers"
    __table_args__ = (UniqueConstraint("business_id", "crew_size", name="uq_pricing_tier_crew"),)

    id = Column(Integer, primary_key=True, index=True)
    business_id = Column(
        Integer, ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    crew_size = Column(Integer, nullable=False)
    min_hours = Column(Integer, nullable=False, default=3)
    base_rate_cents = Column(Integer, nullable=True)
    hourly_rate_cents = Column(Integer, nullable=True)  # Team rate, not per mover
    per_mile_cents = Column(Integer, nullable=True)

    created_at = Column(DateTime, server_default=func.now())

    business = relationship("Business", back_populates="tiers")


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    business_id = Column(Integer, ForeignKey("businesses.id"), nullable=False, index=True)
    customer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Lifecycle
    status = Column(String(20), nullable=False, default="requested")
    # requested, quoted, accepted, scheduled, completed, canceled
    booking_status = Column(String(20), nullable=False, default="pending")
    # pending, confirmed, in_progress, completed, cancelled
    payment_status = Column(String(20), nullable=False, default="unpaid")  # unpaid, paid, refunded

    # Scheduling
    requested_date = Column(Date, nullable=False, index=True)
    time_slot = Column(String(20), nullable=False, default="morning")  # morning, afternoon
    requested_time = Column(String(5), nullable=True)  # HH:MM
    service_address = Column(Text, nullable=True)

    # Pricing (integer cents)
    team_size = Column(Integer, nullable=True)
    hourly_rate_cents = Column(Integer, nullable=True)
    estimated_duration_hours = Column(Integer, nullable=True)
    base_price_cents = Column(Integer, nullable=False, default=0)
    additional_fees_cents = Column(Integer, nullable=False, default=0)
    total_price_cents = Column(Integer, nullable=False, default=0)

    service_details = Column(JSON, default=dict)
    customer_notes = Column(Text, nullable=True)

    is_archived = Column(Boolean, default=False, nullable=False)
    archived_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    business = relationship("Business", back_populates="bookings")
    customer = relationship("User")
    items = relationship("BookingItem", back_populates="booking", cascade="all, delete-orphan")
    quotes = relationship(
        "Quote", back_populates="booking", cascade="all, delete-orphan", order_by="Quote.created_at"
    )


class BookingItem(Base):
    __tablename__ = "booking_items"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(
        Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    description = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    unit_price_cents = Column(Integer, nullable=False, default=0)

    booking = relationship("Booking", back_populates="items")


class ScheduledJob(Base):
    """Crew assignment on the provider calendar (may originate from a booking)"""

    __tablename__ = "scheduled_jobs"

    id = Column(Integer, primary_key=True, index=True)
    business_id = Column(Integer, ForeignKey("businesses.id"), nullable=False, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=True, index=True)
    job_date = Column(Date, nullable=False, index=True)
    time_slot = Column(String(20), nullable=False, default="morning")
    status = Column(String(20), nullable=False, default="scheduled")
    # scheduled, in_progress, completed, cancelled
    notes = Column(Text, nullable=True)
    is_archived = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, server_default=func.now())


class Quote(Base):
    __tablename__ = "quotes"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(
        Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount_cents = Column(Integer, nullable=False)
    message = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="sent")
    # sent, viewed, accepted, rejected, expired

    sent_at = Column(DateTime, nullable=True)
    viewed_at = Column(DateTime, nullable=True)
    responded_at = Column(DateTime, nullable=True)
    expires_at = Column(DateTime, nullable=True)
    response_message = Column(Text, nullable=True)
    rejection_reason = Column(Text, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    booking = relationship("Booking", back_populates="quotes")


class Review(Base):
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id"), unique=True, nullable=False)
    business_id = Column(Integer, ForeignKey("businesses.id"), nullable=False, index=True)
    reviewer_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    rating = Column(Integer, nullable=False)
    body = Column(Text, nullable=True)

    # Moderation
    is_hidden = Column(Boolean, default=False, nullable=False)
    hidden_reason = Column(Text, nullable=True)
    owner_response = Column(Text, nullable=True)
    owner_responded_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())


class BusinessEditRequest(Base):
    __tablename__ = "business_edit_requests"

    id = Column(Integer, primary_key=True, index=True)
    business_id = Column(
        Integer, ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    requester_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    proposed_changes = Column(JSON, nullable=False)
    status = Column(String(20), nullable=False, default="pending")  # pending, approved, rejected
    admin_notes = Column(Text, nullable=True)
    reviewed_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    kind = Column(String(50), nullable=False)  # review_request, quote_response, ...
    title = Column(String(255), nullable=False)
    body = Column(Text, nullable=True)
    data = Column(JSON, nullable=True)
    is_read = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, server_default=func.now())
