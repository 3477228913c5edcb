"""Quote domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from ...config import QUOTE_VALID_DAYS


class QuoteCreate(BaseModel):
    """Schema for sending a quote on a booking"""

    amount_cents: int = Field(..., gt=0)
    message: Optional[str] = Field(None, max_length=2000)
    valid_days: int = Field(QUOTE_VALID_DAYS, ge=1, le=90)


class QuoteRespond(BaseModel):
    """Customer's answer to a quote"""

    response: Literal["accepted", "rejected"]
    message: Optional[str] = Field(None, max_length=2000)
    rejection_reason: Optional[str] = Field(None, max_length=1000)


class QuoteResponse(BaseModel):
    id: int
    booking_id: int
    amount_cents: int
    message: Optional[str] = None
    status: str
    sent_at: Optional[datetime] = None
    viewed_at: Optional[datetime] = None
    responded_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    response_message: Optional[str] = None
    rejection_reason: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
