"""Business router - FastAPI endpoints for business profiles"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import RequestContext, get_request_context
from ...database import get_db
from .schemas import BusinessCreate, BusinessEdit, BusinessResponse, EditRequestResponse
from .service import BusinessService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/businesses", tags=["Businesses"])


def get_business_service(db: Session = Depends(get_db)) -> BusinessService:
    """Dependency injection for BusinessService"""
    return BusinessService(db)


@router.post("", response_model=BusinessResponse, status_code=201)
async def create_business(
    data: BusinessCreate,
    ctx: RequestContext = Depends(get_request_context),
    service: BusinessService = Depends(get_business_service),
):
    return service.create_business(ctx, data)


@router.get("/mine", response_model=list[BusinessResponse])
async def list_my_businesses(
    ctx: RequestContext = Depends(get_request_context),
    service: BusinessService = Depends(get_business_service),
):
    return service.list_owned(ctx)


@router.get("/{business_id}", response_model=BusinessResponse)
async def get_business(business_id: int, service: BusinessService = Depends(get_business_service)):
    """Public business profile"""
    return service.get_business(business_id)


@router.post("/{business_id}/edit-requests", response_model=EditRequestResponse, status_code=201)
async def submit_edit_request(
    business_id: int,
    data: BusinessEdit,
    ctx: RequestContext = Depends(get_request_context),
    service: BusinessService = Depends(get_business_service),
):
    """Propose profile changes for admin approval"""
    return service.submit_edit_request(ctx, business_id, data)


@router.get("/{business_id}/edit-requests", response_model=list[EditRequestResponse])
async def list_edit_requests(
    business_id: int,
    ctx: RequestContext = Depends(get_request_context),
    service: BusinessService = Depends(get_business_service),
):
    return service.list_edit_requests(ctx, business_id)
