"""Pricing repository - Database operations for tiers and provider configuration"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import PricingTier, ProviderConfig


class PricingRepository:
    """Repository for pricing database operations"""

    @staticmethod
    def get_tiers(db: Session, business_id: int) -> list[PricingTier]:
        return (
            db.query(PricingTier)
            .filter(PricingTier.business_id == business_id)
            .order_by(PricingTier.crew_size)
            .all()
        )

    @staticmethod
    def get_tier(db: Session, business_id: int, tier_id: int) -> Optional[PricingTier]:
        return (
            db.query(PricingTier)
            .filter(PricingTier.id == tier_id, PricingTier.business_id == business_id)
            .first()
        )

    @staticmethod
    def upsert_tier(db: Session, business_id: int, **tier_data) -> PricingTier:
        """Create the tier for a crew size, or replace its rates"""
        tier = (
            db.query(PricingTier)
            .filter(
                PricingTier.business_id == business_id,
                PricingTier.crew_size == tier_data["crew_size"],
            )
            .first()
        )
        if tier is None:
            tier = PricingTier(business_id=business_id, **tier_data)
            db.add(tier)
        else:
            for key, value in tier_data.items():
                setattr(tier, key, value)
        db.commit()
        db.refresh(tier)
        return tier

    @staticmethod
    def delete_tier(db: Session, tier: PricingTier) -> None:
        db.delete(tier)
        db.commit()

    @staticmethod
    def get_config(db: Session, business_id: int) -> Optional[ProviderConfig]:
        return db.query(ProviderConfig).filter(ProviderConfig.business_id == business_id).first()

    @staticmethod
    def upsert_config(db: Session, business_id: int, **updates) -> ProviderConfig:
        config = db.query(ProviderConfig).filter(ProviderConfig.business_id == business_id).first()
        if config is None:
            config = ProviderConfig(business_id=business_id, packing_materials=[], heavy_item_tiers=[])
            db.add(config)
        for key, value in updates.items():
            if value is not None and hasattr(config, key):
                setattr(config, key, value)
        db.commit()
        db.refresh(config)
        return config
