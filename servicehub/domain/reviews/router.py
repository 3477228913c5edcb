"""Review router - FastAPI endpoints for reviews"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import RequestContext, get_optional_context, get_request_context
from ...database import get_db
from .schemas import ReviewCreate, ReviewHide, ReviewOwnerResponse, ReviewResponse, ReviewSummary
from .service import ReviewService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reviews", tags=["Reviews"])


def get_review_service(db: Session = Depends(get_db)) -> ReviewService:
    """Dependency injection for ReviewService"""
    return ReviewService(db)


@router.post("", response_model=ReviewResponse, status_code=201)
async def create_review(
    data: ReviewCreate,
    ctx: RequestContext = Depends(get_request_context),
    service: ReviewService = Depends(get_review_service),
):
    """Review a completed booking (once per booking)"""
    return service.create_review(ctx, data)


@router.get("/business/{business_id}", response_model=ReviewSummary)
async def list_business_reviews(
    business_id: int,
    ctx: Optional[RequestContext] = Depends(get_optional_context),
    service: ReviewService = Depends(get_review_service),
):
    return service.list_reviews(ctx, business_id)


@router.post("/{review_id}/hide", response_model=ReviewResponse)
async def hide_review(
    review_id: int,
    data: ReviewHide,
    ctx: RequestContext = Depends(get_request_context),
    service: ReviewService = Depends(get_review_service),
):
    return service.set_hidden(ctx, review_id, True, data.reason)


@router.post("/{review_id}/unhide", response_model=ReviewResponse)
async def unhide_review(
    review_id: int,
    ctx: RequestContext = Depends(get_request_context),
    service: ReviewService = Depends(get_review_service),
):
    return service.set_hidden(ctx, review_id, False)


@router.post("/{review_id}/respond", response_model=ReviewResponse)
async def respond_to_review(
    review_id: int,
    data: ReviewOwnerResponse,
    ctx: RequestContext = Depends(get_request_context),
    service: ReviewService = Depends(get_review_service),
):
    """Publish the business owner's response"""
    return service.respond(ctx, review_id, data.response)


@router.delete("/{review_id}")
async def delete_review(
    review_id: int,
    ctx: RequestContext = Depends(get_request_context),
    service: ReviewService = Depends(get_review_service),
):
    """Delete a review (admin only)"""
    return service.delete_review(ctx, review_id)
