"""Quote router - FastAPI endpoints for quotes"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import RequestContext, get_request_context
from ...database import get_db
from .schemas import QuoteCreate, QuoteRespond, QuoteResponse
from .service import QuoteService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/quotes", tags=["Quotes"])


def get_quote_service(db: Session = Depends(get_db)) -> QuoteService:
    """Dependency injection for QuoteService"""
    return QuoteService(db)


@router.post("/booking/{booking_id}", response_model=QuoteResponse, status_code=201)
async def send_quote(
    booking_id: int,
    data: QuoteCreate,
    ctx: RequestContext = Depends(get_request_context),
    service: QuoteService = Depends(get_quote_service),
):
    """Send a quote for a booking (replaces any open quote)"""
    return service.send(ctx, booking_id, data)


@router.get("/booking/{booking_id}", response_model=list[QuoteResponse])
async def list_quotes(
    booking_id: int,
    ctx: RequestContext = Depends(get_request_context),
    service: QuoteService = Depends(get_quote_service),
):
    """Get every quote for a booking, newest first"""
    return service.list_quotes(ctx, booking_id)


@router.get("/booking/{booking_id}/latest", response_model=QuoteResponse)
async def get_latest_quote(
    booking_id: int,
    ctx: RequestContext = Depends(get_request_context),
    service: QuoteService = Depends(get_quote_service),
):
    """Get the actionable quote for a booking"""
    return service.get_latest(ctx, booking_id)


@router.get("/{quote_id}", response_model=QuoteResponse)
async def view_quote(
    quote_id: int,
    ctx: RequestContext = Depends(get_request_context),
    service: QuoteService = Depends(get_quote_service),
):
    return service.view(ctx, quote_id)


@router.post("/{quote_id}/respond", response_model=QuoteResponse)
async def respond_to_quote(
    quote_id: int,
    data: QuoteRespond,
    ctx: RequestContext = Depends(get_request_context),
    service: QuoteService = Depends(get_quote_service),
):
    """Accept or reject a quote (a rejection needs a reason)"""
    return service.respond(ctx, quote_id, data)
