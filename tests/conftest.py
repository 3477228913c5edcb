"""Shared test fixtures and helpers."""

import itertools
import os
from datetime import date, datetime

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from servicehub.auth import RequestContext, create_access_token  # noqa: E402
from servicehub.database import Base, SessionLocal, engine, get_db  # noqa: E402
from servicehub.main import app  # noqa: E402
from servicehub.models import Booking, Business, PricingTier, ProviderConfig, User  # noqa: E402

# 2030-01-01 is a Tuesday (weekday 2); far enough ahead to clear any notice window
TUESDAY = date(2030, 1, 1)
WEDNESDAY = date(2030, 1, 2)
NOW = datetime(2029, 12, 1, 9, 0)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    # The in-memory engine has a single connection, so requests share the test session
    app.dependency_overrides[get_db] = lambda: db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    def _make(role: str = "customer", **kwargs) -> User:
        n = next(counter)
        user = User(
            email=kwargs.pop("email", f"{role}{n}@example.com"),
            full_name=kwargs.pop("full_name", f"{role.title()} {n}"),
            role=role,
            **kwargs,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def customer(make_user):
    return make_user("customer")


@pytest.fixture
def owner(make_user):
    return make_user("business")


@pytest.fixture
def admin(make_user):
    return make_user("admin")


@pytest.fixture
def make_business(db):
    def _make(owner: User, **kwargs) -> Business:
        business = Business(
            owner_id=owner.id,
            name=kwargs.pop("name", "Swift Movers"),
            category=kwargs.pop("category", "moving"),
            min_booking_notice_hours=kwargs.pop("min_booking_notice_hours", 24),
            payment_terms_days=kwargs.pop("payment_terms_days", 30),
            **kwargs,
        )
        db.add(business)
        db.commit()
        db.refresh(business)
        return business

    return _make


@pytest.fixture
def business(make_business, owner):
    return make_business(owner)


@pytest.fixture
def make_tier(db):
    def _make(business: Business, crew_size: int, hourly_rate_cents=None, **kwargs) -> PricingTier:
        tier = PricingTier(
            business_id=business.id,
            crew_size=crew_size,
            hourly_rate_cents=hourly_rate_cents,
            min_hours=kwargs.pop("min_hours", 3),
            **kwargs,
        )
        db.add(tier)
        db.commit()
        db.refresh(tier)
        return tier

    return _make


@pytest.fixture
def tiers(business, make_tier):
    """Team rates: 2 movers $120/hr, 4 movers $180/hr"""
    return [make_tier(business, 2, 12000), make_tier(business, 4, 18000)]


@pytest.fixture
def provider_config(db, business):
    config = ProviderConfig(
        business_id=business.id,
        packing_enabled=True,
        packing_per_room_cents=9900,
        packing_materials_included=False,
        stairs_included=False,
        stairs_per_flight_cents=5000,
        packing_materials=[],
        heavy_item_tiers=[],
    )
    db.add(config)
    db.commit()
    return config


@pytest.fixture
def make_booking(db):
    def _make(business: Business, customer: User, **kwargs) -> Booking:
        team_size = kwargs.pop("team_size", 2)
        booking = Booking(
            business_id=business.id,
            customer_id=customer.id,
            status=kwargs.pop("status", "requested"),
            booking_status=kwargs.pop("booking_status", "pending"),
            payment_status=kwargs.pop("payment_status", "unpaid"),
            requested_date=kwargs.pop("requested_date", TUESDAY),
            time_slot=kwargs.pop("time_slot", "morning"),
            team_size=team_size,
            hourly_rate_cents=kwargs.pop("hourly_rate_cents", 12000),
            estimated_duration_hours=kwargs.pop("estimated_duration_hours", 3),
            base_price_cents=kwargs.pop("base_price_cents", 36000),
            additional_fees_cents=kwargs.pop("additional_fees_cents", 0),
            total_price_cents=kwargs.pop("total_price_cents", 36000),
            service_details=kwargs.pop(
                "service_details", {"category": business.category, "mover_team": team_size}
            ),
            **kwargs,
        )
        db.add(booking)
        db.commit()
        db.refresh(booking)
        return booking

    return _make


def context_for(user: User) -> RequestContext:
    """RequestContext for calling services directly."""
    return RequestContext(user_id=user.id, role=user.role, email=user.email)


def auth_headers(user: User) -> dict:
    """Bearer token headers for calling the API as a user."""
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}
