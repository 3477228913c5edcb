"""Booking router - FastAPI endpoints for booking operations"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import RequestContext, get_request_context
from ...database import get_db
from .schemas import (
    BookingCreate,
    BookingResponse,
    BookingStatusUpdate,
    BookingUpdate,
    RecalculateRequest,
)
from .service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["Bookings"])


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    """Dependency injection for BookingService"""
    return BookingService(db)


# ============================================================================
# CUSTOMER REQUESTS
# ============================================================================


@router.post("", response_model=BookingResponse, status_code=201)
async def create_booking(
    data: BookingCreate,
    ctx: RequestContext = Depends(get_request_context),
    service: BookingService = Depends(get_booking_service),
):
    """Request a booking for an available half-day slot"""
    return service.create_booking(ctx, data)


@router.get("", response_model=list[BookingResponse])
async def list_bookings(
    business_id: Optional[int] = Query(None),
    ctx: RequestContext = Depends(get_request_context),
    service: BookingService = Depends(get_booking_service),
):
    """Get the caller's bookings, or a business's bookings for its owner"""
    return service.list_bookings(ctx, business_id)


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: int,
    ctx: RequestContext = Depends(get_request_context),
    service: BookingService = Depends(get_booking_service),
):
    return service.get_booking(ctx, booking_id)


# ============================================================================
# PROVIDER / ADMIN EDITS
# ============================================================================


@router.patch("/{booking_id}", response_model=BookingResponse)
async def update_booking(
    booking_id: int,
    data: BookingUpdate,
    ctx: RequestContext = Depends(get_request_context),
    service: BookingService = Depends(get_booking_service),
):
    """Partially update a booking and recompute its price"""
    return service.update_booking(ctx, booking_id, data)


@router.post("/recalculate", response_model=BookingResponse)
async def recalculate_booking(
    data: RecalculateRequest,
    ctx: RequestContext = Depends(get_request_context),
    service: BookingService = Depends(get_booking_service),
):
    """Recompute a booking's totals from its stored service details"""
    return service.recalculate(ctx, data.booking_id)


@router.post("/{booking_id}/status", response_model=BookingResponse)
async def update_booking_status(
    booking_id: int,
    data: BookingStatusUpdate,
    ctx: RequestContext = Depends(get_request_context),
    service: BookingService = Depends(get_booking_service),
):
    """Move a booking through confirmed / in_progress / completed / cancelled"""
    return service.update_status(ctx, booking_id, data)


@router.post("/{booking_id}/archive")
async def archive_booking(
    booking_id: int,
    ctx: RequestContext = Depends(get_request_context),
    service: BookingService = Depends(get_booking_service),
):
    return service.archive(ctx, booking_id)
