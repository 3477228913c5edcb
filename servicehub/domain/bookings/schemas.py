"""Booking domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_time_hhmm

BookingStatus = Literal["pending", "confirmed", "in_progress", "completed", "cancelled"]
PaymentStatus = Literal["unpaid", "paid", "refunded"]


class BookingItemIn(BaseModel):
    description: str = Field(..., min_length=1, max_length=255)
    quantity: int = Field(1, ge=1)
    unit_price_cents: int = Field(0, ge=0)


class BookingItemResponse(BaseModel):
    id: int
    description: str
    quantity: int
    unit_price_cents: int

    class Config:
        from_attributes = True


class BookingCreate(BaseModel):
    """Schema for a customer's booking request"""

    business_id: int
    requested_date: date
    time_slot: Literal["morning", "afternoon"] = "morning"
    requested_time: Optional[str] = None
    service_address: Optional[str] = None
    customer_notes: Optional[str] = Field(None, max_length=2000)
    estimated_duration_hours: Optional[int] = Field(None, ge=1, le=24)
    service_details: dict = Field(default_factory=dict)
    items: list[BookingItemIn] = Field(default_factory=list)

    @field_validator("requested_time")
    @classmethod
    def validate_time(cls, v):
        return validate_time_hhmm(v)


class BookingUpdate(BaseModel):
    """Partial update of a booking by its provider or an admin"""

    requested_date: Optional[date] = None
    time_slot: Optional[Literal["morning", "afternoon"]] = None
    requested_time: Optional[str] = None
    service_address: Optional[str] = None
    customer_notes: Optional[str] = Field(None, max_length=2000)
    team_size: Optional[int] = None
    estimated_duration_hours: Optional[int] = Field(None, ge=1, le=24)
    additional_fees_cents: Optional[int] = Field(None, ge=0)
    service_details: Optional[dict] = None
    items: Optional[list[BookingItemIn]] = None

    # Admin only
    booking_status: Optional[BookingStatus] = None
    payment_status: Optional[PaymentStatus] = None

    @field_validator("requested_time")
    @classmethod
    def validate_time(cls, v):
        return validate_time_hhmm(v)

    @field_validator("requested_date", "time_slot", "booking_status", "payment_status")
    @classmethod
    def reject_null(cls, v, info):
        # Only runs for values the client sent; omitted fields keep their default
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


class BookingStatusUpdate(BaseModel):
    booking_status: Literal["confirmed", "in_progress", "completed", "cancelled"]


class RecalculateRequest(BaseModel):
    booking_id: int


class BookingResponse(BaseModel):
    id: int
    business_id: int
    customer_id: int
    status: str
    booking_status: str
    payment_status: str
    requested_date: date
    time_slot: str
    requested_time: Optional[str] = None
    service_address: Optional[str] = None
    team_size: Optional[int] = None
    hourly_rate_cents: Optional[int] = None
    estimated_duration_hours: Optional[int] = None
    base_price_cents: int
    additional_fees_cents: int
    total_price_cents: int
    service_details: Optional[dict] = None
    customer_notes: Optional[str] = None
    is_archived: bool
    items: list[BookingItemResponse] = Field(default_factory=list)
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
