"""Ledger domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_period

LedgerCategory = Literal[
    "income_fees", "donations", "infra_costs", "staff", "grants", "reserves", "other"
]


class LedgerEntryCreate(BaseModel):
    category: LedgerCategory
    amount_cents: int = Field(..., gt=0)
    period: str
    note: Optional[str] = Field(None, max_length=2000)

    @field_validator("period")
    @classmethod
    def validate_period_format(cls, v):
        return validate_period(v)


class LedgerEntryUpdate(BaseModel):
    category: Optional[LedgerCategory] = None
    amount_cents: Optional[int] = Field(None, gt=0)
    period: Optional[str] = None
    note: Optional[str] = Field(None, max_length=2000)

    @field_validator("period")
    @classmethod
    def validate_period_format(cls, v):
        if v is None:
            return v
        return validate_period(v)


class LedgerEntryResponse(BaseModel):
    id: int
    category: str
    amount_cents: int
    period: str
    note: Optional[str] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class LedgerSummary(BaseModel):
    period: str
    total_income_cents: int
    total_expenses_cents: int
    net_cents: int
    category_totals: dict[str, int]
    entry_count: int
