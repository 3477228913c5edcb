"""Availability domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ...shared.validators import validate_time_hhmm

SlotName = Literal["morning", "afternoon"]
OverrideSlot = Literal["full_day", "morning", "afternoon"]


class RuleUpdate(BaseModel):
    """Schema for creating or replacing a weekday rule"""

    weekday: int = Field(..., ge=0, le=6)
    morning_jobs: int = Field(3, ge=0, le=50)
    afternoon_jobs: int = Field(2, ge=0, le=50)
    morning_start: str = "08:00"
    afternoon_start: str = "12:00"
    afternoon_end: str = "17:00"
    is_active: bool = True

    @field_validator("morning_start", "afternoon_start", "afternoon_end")
    @classmethod
    def validate_times(cls, v):
        return validate_time_hhmm(v)

    @model_validator(mode="after")
    def check_window_order(self):
        if not (self.morning_start < self.afternoon_start < self.afternoon_end):
            raise ValueError("Times must satisfy morning_start < afternoon_start < afternoon_end")
        return self


class RuleResponse(BaseModel):
    id: int
    weekday: int
    morning_jobs: int
    afternoon_jobs: int
    morning_start: str
    afternoon_start: str
    afternoon_end: str
    is_active: bool
    auto_created: bool

    class Config:
        from_attributes = True


class OverrideCreate(BaseModel):
    """Schema for creating a block or extra-capacity override"""

    override_date: date
    kind: Literal["block", "extra"]
    time_slot: Optional[OverrideSlot] = "full_day"
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    max_concurrent_jobs: Optional[int] = Field(None, ge=1, le=50)
    note: Optional[str] = Field(None, max_length=500)

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_times(cls, v):
        return validate_time_hhmm(v)

    @field_validator("time_slot")
    @classmethod
    def default_full_day(cls, v):
        return v or "full_day"


class OverrideResponse(BaseModel):
    id: int
    override_date: date
    kind: str
    time_slot: str
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    max_concurrent_jobs: Optional[int] = None
    note: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DayOverridesResponse(BaseModel):
    date: str
    most_restrictive: Optional[OverrideResponse] = None
    overrides: list[OverrideResponse]
    extra_capacity: Optional[int] = None


class SlotResponse(BaseModel):
    date: str
    slot: str
    available: bool
    maxJobs: int
    currentBookings: int
    reason: Optional[str] = None


class SlotsResponse(BaseModel):
    business_id: int
    start_date: str
    end_date: str
    slots: list[SlotResponse]


class PublicDayResponse(BaseModel):
    date: str
    morning: str
    afternoon: str


class PublicCalendarResponse(BaseModel):
    business_id: int
    days: list[PublicDayResponse]
