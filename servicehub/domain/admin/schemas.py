"""Admin domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field


class UserRoleUpdate(BaseModel):
    role: Literal["customer", "business", "admin"]


class UserSuspend(BaseModel):
    reason: Optional[str] = Field(None, max_length=1000)


class EditRequestDecision(BaseModel):
    admin_notes: Optional[str] = Field(None, max_length=2000)


class AdminUserResponse(BaseModel):
    id: int
    email: str
    full_name: Optional[str] = None
    role: str
    is_suspended: bool
    suspended_reason: Optional[str] = None
    suspended_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProcedureResponse(BaseModel):
    message: str
    data: dict = Field(default_factory=dict)
