"""Pricing domain schemas - Pydantic models for validation"""

from typing import Annotated, ClassVar, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

PackingMode = Literal["none", "kit", "paygo"]
StorageOption = Literal["none", "temporary", "long_term"]
StorageUnit = Literal["5x10", "10x10", "10x20"]
InsuranceCoverage = Literal["basic", "standard", "premium"]


# ============================================================================
# Service details (tagged per business category)
# ============================================================================


class PackingMaterial(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    price_cents: int = Field(0, ge=0)
    quantity: int = Field(1, ge=1)


class HeavyItem(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    price_cents: int = Field(0, ge=0)
    count: int = Field(1, ge=0)


class ServiceDetailsBase(BaseModel):
    """Fields shared by every category. Derived fields are rewritten on each price run."""

    model_config = ConfigDict(extra="forbid")

    team_field: ClassVar[str] = "crew_size"

    bill_additional_hours: bool = False
    notes: Optional[str] = None

    # Derived
    hourly_rate_cents: Optional[int] = None
    breakdown: Optional[dict] = None

    def requested_team_size(self) -> Optional[int]:
        return getattr(self, self.team_field)


class MovingDetails(ServiceDetailsBase):
    team_field: ClassVar[str] = "mover_team"

    category: Literal["moving"] = "moving"
    mover_team: Optional[int] = None
    move_size: Optional[str] = None
    pickup_address: Optional[str] = None
    dropoff_address: Optional[str] = None

    packing: PackingMode = "none"
    packing_rooms: int = Field(0, ge=0)
    packing_materials: list[PackingMaterial] = Field(default_factory=list)

    stairs: bool = False
    stairs_flights: int = Field(0, ge=0)

    heavy_items: list[HeavyItem] = Field(default_factory=list)
    heavy_items_count: Optional[int] = None
    heavy_item_band: Optional[str] = None
    heavy_item_price_cents: Optional[int] = None

    storage: StorageOption = "none"
    storage_size: Optional[StorageUnit] = None
    insurance: InsuranceCoverage = "basic"
    destination_fee_cents: int = Field(0, ge=0)

    # Derived
    packing_cost_cents: Optional[int] = None


class CleaningDetails(ServiceDetailsBase):
    category: Literal["cleaning"] = "cleaning"
    crew_size: Optional[int] = None
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[int] = Field(None, ge=0)
    frequency: Literal["one-time", "weekly", "bi-weekly", "monthly"] = "one-time"
    supplies_provided: bool = True


class GeneralDetails(ServiceDetailsBase):
    category: Literal["general"] = "general"
    crew_size: Optional[int] = None
    description: Optional[str] = None


ServiceDetails = Annotated[
    Union[MovingDetails, CleaningDetails, GeneralDetails], Field(discriminator="category")
]
service_details_adapter = TypeAdapter(ServiceDetails)


def parse_service_details(data: dict, category: str) -> ServiceDetailsBase:
    """Validate a stored or merged document against its category's schema"""
    payload = dict(data or {})
    payload["category"] = category
    return service_details_adapter.validate_python(payload)


# ============================================================================
# Tiers and provider configuration
# ============================================================================


class TierCreate(BaseModel):
    """Schema for creating or replacing a pricing tier"""

    crew_size: int = Field(..., ge=1, le=8)
    min_hours: int = Field(3, ge=1, le=24)
    base_rate_cents: Optional[int] = Field(None, ge=0)
    hourly_rate_cents: Optional[int] = Field(None, ge=0)
    per_mile_cents: Optional[int] = Field(None, ge=0)


class TierResponse(BaseModel):
    id: int
    crew_size: int
    min_hours: int
    base_rate_cents: Optional[int]
    hourly_rate_cents: Optional[int]
    per_mile_cents: Optional[int]

    class Config:
        from_attributes = True


class MaterialOption(BaseModel):
    name: str
    price_cents: int = Field(0, ge=0)
    included: bool = False


class HeavyItemTier(BaseModel):
    min_weight: int = Field(0, ge=0)
    max_weight: Optional[int] = Field(None, ge=0)
    price_cents: int = Field(0, ge=0)


class ProviderConfigUpdate(BaseModel):
    """Schema for updating provider pricing policies"""

    base_zip: Optional[str] = Field(None, pattern=r"^\d{5}$")
    service_radius_miles: Optional[int] = Field(None, ge=0)
    min_lead_minutes: Optional[int] = Field(None, ge=0)
    destination_fee_per_mile_cents: Optional[int] = Field(None, ge=0)
    max_travel_distance_miles: Optional[int] = Field(None, ge=0)
    packing_enabled: Optional[bool] = None
    packing_per_room_cents: Optional[int] = Field(None, ge=0)
    packing_materials_included: Optional[bool] = None
    packing_materials: Optional[list[MaterialOption]] = None
    stairs_included: Optional[bool] = None
    stairs_per_flight_cents: Optional[int] = Field(None, ge=0)
    heavy_item_tiers: Optional[list[HeavyItemTier]] = None


class ProviderConfigResponse(BaseModel):
    business_id: int
    base_zip: Optional[str] = None
    service_radius_miles: Optional[int] = None
    min_lead_minutes: Optional[int] = None
    destination_fee_per_mile_cents: Optional[int] = None
    max_travel_distance_miles: Optional[int] = None
    packing_enabled: bool = True
    packing_per_room_cents: Optional[int] = None
    packing_materials_included: bool = False
    packing_materials: list[dict] = Field(default_factory=list)
    stairs_included: bool = False
    stairs_per_flight_cents: Optional[int] = None
    heavy_item_tiers: list[dict] = Field(default_factory=list)

    class Config:
        from_attributes = True


# ============================================================================
# Estimates
# ============================================================================


class EstimateRequest(BaseModel):
    """Price a service without creating a booking"""

    service_details: dict = Field(default_factory=dict)
    estimated_duration_hours: Optional[int] = Field(None, ge=1, le=24)


class EstimateResponse(BaseModel):
    team_size: int
    hourly_rate_cents: int
    estimated_duration_hours: int
    total_price_cents: int
    breakdown: dict


DETAILS_BY_CATEGORY = {"moving": MovingDetails, "cleaning": CleaningDetails, "general": GeneralDetails}


def team_field_for(category: str) -> str:
    """Name of the service-details key holding the requested team size"""
    return DETAILS_BY_CATEGORY.get(category, GeneralDetails).team_field
