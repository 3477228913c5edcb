"""Invoice domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field


class InvoiceItemIn(BaseModel):
    description: str = Field(..., min_length=1, max_length=255)
    quantity: int = Field(1, ge=1)
    unit_price_cents: int = Field(..., ge=0)


class InvoiceItemResponse(BaseModel):
    id: int
    description: str
    quantity: int
    unit_price_cents: int
    amount_cents: int

    class Config:
        from_attributes = True


class InvoiceCreate(BaseModel):
    """
    Schema for creating a draft invoice.

    With a booking_id the customer comes from the booking and, when no items
    are given, the booking total becomes the single line item.
    """

    business_id: int
    booking_id: Optional[int] = None
    customer_id: Optional[int] = None
    title: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = Field(None, max_length=5000)
    issue_date: Optional[date] = None
    items: list[InvoiceItemIn] = Field(default_factory=list)


class InvoiceUpdate(BaseModel):
    """Schema for editing a draft invoice"""

    title: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = Field(None, max_length=5000)
    due_date: Optional[date] = None
    items: Optional[list[InvoiceItemIn]] = None


class InvoicePayment(BaseModel):
    amount_cents: int = Field(..., gt=0)
    payment_method: Optional[str] = Field(None, max_length=50)


class InvoiceBatchCreate(BaseModel):
    """Create one draft invoice per booking"""

    business_id: int
    booking_ids: list[int] = Field(..., min_length=1, max_length=100)


class InvoiceResponse(BaseModel):
    id: int
    business_id: int
    customer_id: int
    booking_id: Optional[int] = None
    invoice_number: str
    title: Optional[str] = None
    notes: Optional[str] = None
    subtotal_cents: int
    total_cents: int
    paid_cents: int
    balance_cents: int
    currency: str
    status: str
    payment_method: Optional[str] = None
    issue_date: date
    due_date: date
    email_sent_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    items: list[InvoiceItemResponse] = Field(default_factory=list)

    class Config:
        from_attributes = True


class BatchFailure(BaseModel):
    booking_id: int
    error: str
    code: str


class InvoiceBatchResponse(BaseModel):
    succeeded: list[InvoiceResponse]
    failed: list[BatchFailure]
