"""
Booking price calculator.

Pure functions only: nothing here touches the database. Every amount is an
integer number of cents.

Pricing rules:
- Team size is clamped to [1, 8]. A missing or zero size falls back to the
  previously stored size, then to the default of 2.
- The team hourly rate comes from the tier whose crew size matches the team
  size exactly, else the nearest crew size (earliest tier wins a tie). A
  tier with only a base rate derives hourly = base / min_hours.
- When no tier can be matched the previously stored hourly rate is used and
  the breakdown records rate_source="stored".
- Billable duration is never below the tier's min_hours.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence, Union

from ...config import (
    DEFAULT_MIN_HOURS,
    DEFAULT_PACKING_PER_ROOM_CENTS,
    DEFAULT_TEAM_SIZE,
    MAX_TEAM_SIZE,
    MIN_TEAM_SIZE,
)
from ...errors import ValidationFailed
from .schemas import MovingDetails, ServiceDetailsBase

logger = logging.getLogger(__name__)

STORAGE_COSTS_CENTS = {"none": 0, "temporary": 15000, "long_term": 25000}
STORAGE_UNIT_COSTS_CENTS = {"5x10": 25000, "10x10": 30000, "10x20": 55000}
INSURANCE_COSTS_CENTS = {"basic": 0, "standard": 15000, "premium": 30000}


@dataclass(frozen=True)
class TierRate:
    crew_size: int
    min_hours: int = DEFAULT_MIN_HOURS
    base_rate_cents: Optional[int] = None
    hourly_rate_cents: Optional[int] = None

    @classmethod
    def from_model(cls, tier) -> "TierRate":
        return cls(
            crew_size=tier.crew_size,
            min_hours=tier.min_hours or DEFAULT_MIN_HOURS,
            base_rate_cents=tier.base_rate_cents,
            hourly_rate_cents=tier.hourly_rate_cents,
        )

    def team_hourly_cents(self) -> Optional[int]:
        if self.hourly_rate_cents and self.hourly_rate_cents > 0:
            return self.hourly_rate_cents
        if self.base_rate_cents and self.min_hours > 0:
            return divide_half_up(self.base_rate_cents, self.min_hours)
        return None


@dataclass(frozen=True)
class TierMatch:
    tier: TierRate
    hourly_rate_cents: int
    exact: bool


@dataclass(frozen=True)
class TierMiss:
    reason: str


TierLookup = Union[TierMatch, TierMiss]


@dataclass(frozen=True)
class PricingPolicy:
    """Provider add-on pricing (packing, stairs)"""

    packing_per_room_cents: int = DEFAULT_PACKING_PER_ROOM_CENTS
    stairs_included: bool = False
    stairs_per_flight_cents: int = 0

    @classmethod
    def from_config(cls, config) -> "PricingPolicy":
        if config is None:
            return cls()
        return cls(
            packing_per_room_cents=config.packing_per_room_cents or DEFAULT_PACKING_PER_ROOM_CENTS,
            stairs_included=bool(config.stairs_included),
            stairs_per_flight_cents=config.stairs_per_flight_cents or 0,
        )


@dataclass
class PriceResult:
    team_size: int
    hourly_rate_cents: int
    rate_source: str
    min_hours: int
    duration_hours: int
    breakdown: dict = field(default_factory=dict)

    @property
    def subtotal_cents(self) -> int:
        return self.breakdown["subtotal_cents"]

    @property
    def total_cents(self) -> int:
        return self.breakdown["total_cents"]


def divide_half_up(numerator: int, denominator: int) -> int:
    return (2 * numerator + denominator) // (2 * denominator)


def clamp_team_size(value: int) -> int:
    return max(MIN_TEAM_SIZE, min(MAX_TEAM_SIZE, value))


def resolve_team_size(requested, previous=None) -> int:
    """Clamp a requested team size, falling back to the stored one when invalid or zero"""
    if isinstance(requested, int) and not isinstance(requested, bool) and requested != 0:
        return clamp_team_size(requested)
    if isinstance(previous, int) and not isinstance(previous, bool) and previous > 0:
        return clamp_team_size(previous)
    return DEFAULT_TEAM_SIZE


def pick_tier(tiers: Sequence[TierRate], crew_size: int) -> TierLookup:
    if not tiers:
        return TierMiss("no pricing tiers configured")

    ordered = sorted(tiers, key=lambda t: t.crew_size)
    exact = next((t for t in ordered if t.crew_size == crew_size), None)
    tier = exact
    if tier is None:
        tier = ordered[0]
        for candidate in ordered[1:]:
            if abs(candidate.crew_size - crew_size) < abs(tier.crew_size - crew_size):
                tier = candidate

    rate = tier.team_hourly_cents()
    if rate is None:
        return TierMiss(f"tier for crew size {tier.crew_size} has no rate")
    return TierMatch(tier=tier, hourly_rate_cents=rate, exact=exact is not None)


def packing_cost_cents(details: MovingDetails, policy: PricingPolicy) -> int:
    if details.packing == "kit" and details.packing_rooms > 0:
        return policy.packing_per_room_cents * details.packing_rooms
    if details.packing == "paygo":
        materials = sum(m.price_cents * m.quantity for m in details.packing_materials)
        if materials == 0 and details.packing_rooms > 0:
            return policy.packing_per_room_cents * details.packing_rooms
        return materials
    return 0


def stairs_cost_cents(details: MovingDetails, policy: PricingPolicy) -> int:
    if details.stairs_flights <= 0 or policy.stairs_included:
        return 0
    return policy.stairs_per_flight_cents * details.stairs_flights


def heavy_items_cost_cents(details: MovingDetails) -> int:
    return sum(item.price_cents * item.count for item in details.heavy_items)


def storage_cost_cents(details: MovingDetails) -> int:
    if details.storage_size:
        return STORAGE_UNIT_COSTS_CENTS[details.storage_size]
    return STORAGE_COSTS_CENTS[details.storage]


def calculate_price(
    details: ServiceDetailsBase,
    tiers: Sequence[TierRate],
    policy: Optional[PricingPolicy] = None,
    previous_team_size: Optional[int] = None,
    previous_hourly_rate_cents: Optional[int] = None,
    requested_duration_hours: Optional[int] = None,
    additional_fees_cents: int = 0,
    items_cents: int = 0,
) -> PriceResult:
    """
    Price a booking from its validated service details.

    Raises ValidationFailed when no tier matches and no stored rate exists.
    """
    policy = policy or PricingPolicy()
    team_size = resolve_team_size(details.requested_team_size(), previous_team_size)

    lookup = pick_tier(tiers, team_size)
    if isinstance(lookup, TierMatch):
        hourly_rate = lookup.hourly_rate_cents
        min_hours = lookup.tier.min_hours
        rate_source = "tier"
    elif previous_hourly_rate_cents:
        logger.warning(
            f"⚠️ Tier lookup failed for team size {team_size} ({lookup.reason}), "
            f"using stored rate {previous_hourly_rate_cents}"
        )
        hourly_rate = previous_hourly_rate_cents
        min_hours = DEFAULT_MIN_HOURS
        rate_source = "stored"
    else:
        raise ValidationFailed(f"No hourly rate available for a team of {team_size}: {lookup.reason}")

    duration = max(requested_duration_hours or min_hours, min_hours)
    base = hourly_rate * min_hours
    additional_hours = hourly_rate * (duration - min_hours) if details.bill_additional_hours else 0

    destination = heavy_items = packing = stairs = storage = insurance = 0
    if isinstance(details, MovingDetails):
        destination = details.destination_fee_cents
        heavy_items = heavy_items_cost_cents(details)
        packing = packing_cost_cents(details, policy)
        stairs = stairs_cost_cents(details, policy)
        storage = storage_cost_cents(details)
        insurance = INSURANCE_COSTS_CENTS[details.insurance]

    subtotal = base + additional_hours + destination + heavy_items + packing + stairs
    if storage > 0:
        subtotal += storage
    if insurance > 0:
        subtotal += insurance
    total = subtotal + additional_fees_cents + items_cents

    breakdown = {
        "mover_team": team_size,
        "hourly_rate_cents": hourly_rate,
        "rate_source": rate_source,
        "min_hours": min_hours,
        "billable_hours": duration,
        "base_cents": base,
        "additional_hours_cents": additional_hours,
        "destination_cents": destination,
        "heavy_items_cents": heavy_items,
        "packing_cents": packing,
        "stairs_cents": stairs,
        "storage_cents": storage,
        "insurance_cents": insurance,
        "subtotal_cents": subtotal,
        "additional_fees_cents": additional_fees_cents,
        "items_cents": items_cents,
        "total_cents": total,
    }

    return PriceResult(
        team_size=team_size,
        hourly_rate_cents=hourly_rate,
        rate_source=rate_source,
        min_hours=min_hours,
        duration_hours=duration,
        breakdown=breakdown,
    )


def apply_price(details: ServiceDetailsBase, result: PriceResult) -> dict:
    """
    Serialize details with the team-size-derived fields overwritten from a
    price result. Returns the document to store on the booking.
    """
    document = details.model_dump(mode="json")
    document[details.team_field] = result.team_size
    document["hourly_rate_cents"] = result.hourly_rate_cents
    document["breakdown"] = dict(result.breakdown)
    if isinstance(details, MovingDetails):
        document["packing_cost_cents"] = result.breakdown["packing_cents"]
    return document
