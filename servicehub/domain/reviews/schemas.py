"""Review domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class ReviewCreate(BaseModel):
    booking_id: int
    rating: int = Field(..., ge=1, le=5)
    body: Optional[str] = Field(None, max_length=5000)


class ReviewHide(BaseModel):
    reason: Optional[str] = Field(None, max_length=1000)


class ReviewOwnerResponse(BaseModel):
    response: str = Field(..., max_length=5000)

    @field_validator("response")
    @classmethod
    def validate_response(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Response cannot be empty")
        return v


class ReviewResponse(BaseModel):
    id: int
    booking_id: int
    business_id: int
    reviewer_id: int
    rating: int
    body: Optional[str] = None
    is_hidden: bool
    hidden_reason: Optional[str] = None
    owner_response: Optional[str] = None
    owner_responded_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ReviewSummary(BaseModel):
    business_id: int
    review_count: int
    average_rating: Optional[float] = None
    reviews: list[ReviewResponse]
