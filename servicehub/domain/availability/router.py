"""Availability router - FastAPI endpoints for rules, overrides and slots"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import RequestContext, get_request_context
from ...database import get_db
from .schemas import (
    DayOverridesResponse,
    OverrideCreate,
    OverrideResponse,
    PublicCalendarResponse,
    PublicDayResponse,
    RuleResponse,
    RuleUpdate,
    SlotResponse,
    SlotsResponse,
)
from .service import AvailabilityService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/availability", tags=["Availability"])


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    """Dependency injection for AvailabilityService"""
    return AvailabilityService(db)


# ============================================================================
# WEEKLY RULES
# ============================================================================


@router.get("/{business_id}/rules", response_model=list[RuleResponse])
async def get_rules(
    business_id: int,
    ctx: RequestContext = Depends(get_request_context),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Get all weekday rules for a business"""
    return service.get_rules(ctx, business_id)


@router.get("/{business_id}/rules/{weekday}", response_model=RuleResponse)
async def get_rule(
    business_id: int,
    weekday: int,
    ctx: RequestContext = Depends(get_request_context),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Get the rule for a weekday (0=Sunday), creating the default when missing"""
    return service.get_rule(ctx, business_id, weekday)


@router.put("/{business_id}/rules", response_model=RuleResponse)
async def upsert_rule(
    business_id: int,
    data: RuleUpdate,
    ctx: RequestContext = Depends(get_request_context),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Create or replace the rule for a weekday"""
    return service.upsert_rule(ctx, business_id, data)


# ============================================================================
# OVERRIDES
# ============================================================================


@router.get("/{business_id}/overrides", response_model=list[OverrideResponse])
async def get_overrides(
    business_id: int,
    start_date: date = Query(...),
    end_date: date = Query(...),
    ctx: RequestContext = Depends(get_request_context),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Get overrides in a date range"""
    return service.get_overrides(ctx, business_id, start_date, end_date)


@router.get("/{business_id}/overrides/{day}", response_model=DayOverridesResponse)
async def get_day_overrides(
    business_id: int,
    day: date,
    ctx: RequestContext = Depends(get_request_context),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Get a date's overrides and the one that restricts it most"""
    resolved = service.get_day_overrides(ctx, business_id, day)
    most_restrictive = resolved.most_restrictive()
    return DayOverridesResponse(
        date=day.isoformat(),
        most_restrictive=OverrideResponse.model_validate(most_restrictive) if most_restrictive else None,
        overrides=[OverrideResponse.model_validate(o) for o in resolved.records],
        extra_capacity=resolved.extra_capacity(),
    )


@router.post("/{business_id}/overrides", response_model=OverrideResponse, status_code=201)
async def create_override(
    business_id: int,
    data: OverrideCreate,
    ctx: RequestContext = Depends(get_request_context),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Block a date (or half day) or add an extra-capacity override"""
    return service.create_override(ctx, business_id, data)


@router.delete("/{business_id}/overrides/{override_id}")
async def delete_override(
    business_id: int,
    override_id: int,
    ctx: RequestContext = Depends(get_request_context),
    service: AvailabilityService = Depends(get_availability_service),
):
    return service.delete_override(ctx, business_id, override_id)


# ============================================================================
# SLOTS
# ============================================================================


@router.get("/{business_id}/slots", response_model=SlotsResponse)
async def get_slots(
    business_id: int,
    start_date: date = Query(...),
    end_date: Optional[date] = Query(None),
    ctx: RequestContext = Depends(get_request_context),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Get morning/afternoon slots with capacity and current bookings"""
    end_date = end_date or start_date
    slots = service.get_slots(ctx, business_id, start_date, end_date)
    return SlotsResponse(
        business_id=business_id,
        start_date=start_date.isoformat(),
        end_date=end_date.isoformat(),
        slots=[
            SlotResponse(
                date=s.day.isoformat(),
                slot=s.slot,
                available=s.available,
                maxJobs=s.max_jobs,
                currentBookings=s.current_bookings,
                reason=s.reason,
            )
            for s in slots
        ],
    )


@router.get("/public/{business_id}", response_model=PublicCalendarResponse)
async def get_public_calendar(
    business_id: int,
    start_date: date = Query(...),
    end_date: Optional[date] = Query(None),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Public calendar: available / busy / unavailable per half day (no counts)"""
    end_date = end_date or start_date
    slots = service.public_calendar(business_id, start_date, end_date)

    by_day: dict[date, dict] = {}
    for s in slots:
        by_day.setdefault(s.day, {})[s.slot] = s.public_status
    return PublicCalendarResponse(
        business_id=business_id,
        days=[
            PublicDayResponse(date=day.isoformat(), morning=status["morning"], afternoon=status["afternoon"])
            for day, status in by_day.items()
        ],
    )
