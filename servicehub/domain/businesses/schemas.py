"""Business domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...shared.validators import validate_email, validate_us_phone

BusinessCategory = Literal["moving", "cleaning", "general"]


class BusinessCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    category: BusinessCategory = "moving"
    description: Optional[str] = Field(None, max_length=5000)
    phone: Optional[str] = None
    email: Optional[str] = None
    service_area: Optional[str] = Field(None, max_length=255)
    min_booking_notice_hours: int = Field(24, ge=0, le=24 * 30)
    payment_terms_days: int = Field(30, ge=0, le=365)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return validate_us_phone(v)

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, v):
        return validate_email(v)


class BusinessEdit(BaseModel):
    """Proposed profile changes; only the listed fields can be edited"""

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    category: Optional[BusinessCategory] = None
    description: Optional[str] = Field(None, max_length=5000)
    phone: Optional[str] = None
    email: Optional[str] = None
    service_area: Optional[str] = Field(None, max_length=255)
    min_booking_notice_hours: Optional[int] = Field(None, ge=0, le=24 * 30)
    payment_terms_days: Optional[int] = Field(None, ge=0, le=365)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return validate_us_phone(v)

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, v):
        return validate_email(v)


class BusinessResponse(BaseModel):
    id: int
    owner_id: int
    name: str
    category: str
    description: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    service_area: Optional[str] = None
    min_booking_notice_hours: int
    payment_terms_days: int
    is_archived: bool

    class Config:
        from_attributes = True


class EditRequestResponse(BaseModel):
    id: int
    business_id: int
    requester_id: int
    proposed_changes: dict
    status: str
    admin_notes: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
