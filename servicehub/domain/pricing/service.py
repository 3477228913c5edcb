"""Pricing service - Business logic for tiers, provider policies and estimates"""

import logging

from pydantic import ValidationError
from sqlalchemy.orm import Session

from ...auth import RequestContext
from ...errors import NotFound, ValidationFailed
from ...models import Business, PricingTier, ProviderConfig
from ...shared.access import get_business_or_404, require_business_owner
from .calculator import PriceResult, PricingPolicy, TierRate, calculate_price
from .repository import PricingRepository
from .schemas import EstimateRequest, ProviderConfigUpdate, TierCreate, parse_service_details

logger = logging.getLogger(__name__)


def validation_messages(error: ValidationError) -> list[str]:
    """Flatten pydantic errors into "field: message" strings"""
    messages = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ()))
        messages.append(f"{location}: {item.get('msg')}" if location else item.get("msg", "invalid"))
    return messages


class PricingService:
    """Service layer for pricing business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = PricingRepository()

    # ------------------------------------------------------------------
    # Inputs for the calculator
    # ------------------------------------------------------------------

    def tier_rates(self, business_id: int) -> list[TierRate]:
        return [TierRate.from_model(t) for t in self.repo.get_tiers(self.db, business_id)]

    def policy(self, business_id: int) -> PricingPolicy:
        return PricingPolicy.from_config(self.repo.get_config(self.db, business_id))

    def parse_details(self, business: Business, data: dict):
        try:
            return parse_service_details(data, business.category)
        except ValidationError as e:
            raise ValidationFailed("Invalid service details", details=validation_messages(e)) from None

    # ------------------------------------------------------------------
    # Tiers
    # ------------------------------------------------------------------

    def get_tiers(self, business_id: int) -> list[PricingTier]:
        get_business_or_404(self.db, business_id)
        return self.repo.get_tiers(self.db, business_id)

    def upsert_tier(self, ctx: RequestContext, business_id: int, data: TierCreate) -> PricingTier:
        require_business_owner(self.db, ctx, business_id)
        if not data.hourly_rate_cents and not data.base_rate_cents:
            raise ValidationFailed("A tier needs an hourly rate or a base rate")

        tier = self.repo.upsert_tier(self.db, business_id, **data.model_dump())
        logger.info(
            f"💰 Tier saved for business {business_id}: crew_size={tier.crew_size}, "
            f"hourly={tier.hourly_rate_cents}, base={tier.base_rate_cents}"
        )
        return tier

    def delete_tier(self, ctx: RequestContext, business_id: int, tier_id: int) -> dict:
        require_business_owner(self.db, ctx, business_id)
        tier = self.repo.get_tier(self.db, business_id, tier_id)
        if not tier:
            raise NotFound("Pricing tier not found")
        self.repo.delete_tier(self.db, tier)
        return {"message": "Pricing tier deleted successfully"}

    # ------------------------------------------------------------------
    # Provider configuration
    # ------------------------------------------------------------------

    def get_config(self, business_id: int) -> ProviderConfig:
        get_business_or_404(self.db, business_id)
        config = self.repo.get_config(self.db, business_id)
        if config is None:
            config = ProviderConfig(
                business_id=business_id,
                packing_enabled=True,
                packing_materials_included=False,
                stairs_included=False,
                packing_materials=[],
                heavy_item_tiers=[],
            )
        return config

    def update_config(
        self, ctx: RequestContext, business_id: int, data: ProviderConfigUpdate
    ) -> ProviderConfig:
        require_business_owner(self.db, ctx, business_id)
        updates = data.model_dump(exclude_unset=True, mode="json")
        config = self.repo.upsert_config(self.db, business_id, **updates)
        logger.info(f"✅ Provider config updated for business {business_id}: {sorted(updates)}")
        return config

    # ------------------------------------------------------------------
    # Estimates
    # ------------------------------------------------------------------

    def estimate(self, business_id: int, data: EstimateRequest) -> PriceResult:
        """Price service details for a business without persisting anything"""
        business = get_business_or_404(self.db, business_id)
        details = self.parse_details(business, data.service_details)
        return calculate_price(
            details,
            self.tier_rates(business_id),
            self.policy(business_id),
            requested_duration_hours=data.estimated_duration_hours,
        )
