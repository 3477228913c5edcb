"""
Availability Models for provider capacity (weekly rules and date overrides)
"""

from sqlalchemy import (
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
from sqlalchemy.sql import func

from .database import Base


class AvailabilityRule(Base):
    """Weekly capacity rule for one weekday (0=Sunday..6=Saturday)"""

    __tablename__ = "availability_rules"
    __table_args__ = (
        UniqueConstraint("business_id", "weekday", name="uq_availability_rule_weekday"),
    )

    id = Column(Integer, primary_key=True, index=True)
    business_id = Column(
        Integer, ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    weekday = Column(Integer, nullable=False)

    # Half-day capacity
    morning_jobs = Column(Integer, nullable=False, default=3)
    afternoon_jobs = Column(Integer, nullable=False, default=2)

    # Time windows (HH:MM)
    morning_start = Column(String(5), nullable=False, default="08:00")
    afternoon_start = Column(String(5), nullable=False, default="12:00")
    afternoon_end = Column(String(5), nullable=False, default="17:00")

    is_active = Column(Boolean, default=True, nullable=False)
    auto_created = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class AvailabilityOverride(Base):
    """Date-specific exception layered on the weekly rule (block or extra)"""

    __tablename__ = "availability_overrides"
    __table_args__ = (
        UniqueConstraint(
            "business_id", "override_date", "kind", "time_slot", name="uq_availability_override"
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    business_id = Column(
        Integer, ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    override_date = Column(Date, nullable=False, index=True)
    kind = Column(String(10), nullable=False)  # block, extra
    time_slot = Column(String(20), nullable=False, default="full_day")  # full_day, morning, afternoon

    # Only meaningful for "extra" overrides
    start_time = Column(String(5), nullable=True)
    end_time = Column(String(5), nullable=True)
    max_concurrent_jobs = Column(Integer, nullable=True)

    note = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
