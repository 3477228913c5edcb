"""Pricing router - FastAPI endpoints for tiers, provider config and estimates"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import RequestContext, get_request_context
from ...database import get_db
from .schemas import (
    EstimateRequest,
    EstimateResponse,
    ProviderConfigResponse,
    ProviderConfigUpdate,
    TierCreate,
    TierResponse,
)
from .service import PricingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pricing", tags=["Pricing"])


def get_pricing_service(db: Session = Depends(get_db)) -> PricingService:
    """Dependency injection for PricingService"""
    return PricingService(db)


# ============================================================================
# TIERS
# ============================================================================


@router.get("/{business_id}/tiers", response_model=list[TierResponse])
async def get_tiers(business_id: int, service: PricingService = Depends(get_pricing_service)):
    """Get pricing tiers for a business"""
    return service.get_tiers(business_id)


@router.put("/{business_id}/tiers", response_model=TierResponse)
async def upsert_tier(
    business_id: int,
    data: TierCreate,
    ctx: RequestContext = Depends(get_request_context),
    service: PricingService = Depends(get_pricing_service),
):
    """Create or replace the tier for a crew size"""
    return service.upsert_tier(ctx, business_id, data)


@router.delete("/{business_id}/tiers/{tier_id}")
async def delete_tier(
    business_id: int,
    tier_id: int,
    ctx: RequestContext = Depends(get_request_context),
    service: PricingService = Depends(get_pricing_service),
):
    return service.delete_tier(ctx, business_id, tier_id)


# ============================================================================
# PROVIDER CONFIG
# ============================================================================


@router.get("/{business_id}/config", response_model=ProviderConfigResponse)
async def get_config(business_id: int, service: PricingService = Depends(get_pricing_service)):
    """Get packing, stairs and travel policies for a business"""
    return service.get_config(business_id)


@router.put("/{business_id}/config", response_model=ProviderConfigResponse)
async def update_config(
    business_id: int,
    data: ProviderConfigUpdate,
    ctx: RequestContext = Depends(get_request_context),
    service: PricingService = Depends(get_pricing_service),
):
    """Update packing, stairs and travel policies"""
    return service.update_config(ctx, business_id, data)


# ============================================================================
# ESTIMATES (public)
# ============================================================================


@router.post("/{business_id}/estimate", response_model=EstimateResponse)
async def estimate_price(
    business_id: int,
    data: EstimateRequest,
    service: PricingService = Depends(get_pricing_service),
):
    """Price a service for a business without creating a booking"""
    result = service.estimate(business_id, data)
    return EstimateResponse(
        team_size=result.team_size,
        hourly_rate_cents=result.hourly_rate_cents,
        estimated_duration_hours=result.duration_hours,
        total_price_cents=result.total_cents,
        breakdown=result.breakdown,
    )
