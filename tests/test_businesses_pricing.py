"""Tests for business profiles and the pricing endpoints."""

from servicehub.models import PricingTier
from tests.conftest import auth_headers


class TestBusinesses:
    def test_business_account_creates_business(self, client, owner):
        response = client.post(
            "/businesses",
            json={"name": "Sparkle Cleaning", "category": "cleaning", "payment_terms_days": 14},
            headers=auth_headers(owner),
        )

        assert response.status_code == 201
        body = response.json()
        assert body["owner_id"] == owner.id
        assert body["min_booking_notice_hours"] == 24
        assert body["payment_terms_days"] == 14

    def test_customer_cannot_create_business(self, client, customer):
        response = client.post("/businesses", json={"name": "Side hustle"}, headers=auth_headers(customer))
        assert response.status_code == 403

    def test_unknown_category_rejected(self, client, owner):
        response = client.post(
            "/businesses", json={"name": "Pets", "category": "grooming"}, headers=auth_headers(owner)
        )
        assert response.status_code == 422

    def test_public_profile(self, client, business):
        response = client.get(f"/businesses/{business.id}")
        assert response.json()["name"] == "Swift Movers"

    def test_archived_business_hidden(self, client, make_business, owner):
        archived = make_business(owner, is_archived=True)
        assert client.get(f"/businesses/{archived.id}").status_code == 404

    def test_list_owned(self, client, owner, business, make_business, make_user):
        make_business(make_user("business"), name="Someone Else")

        response = client.get("/businesses/mine", headers=auth_headers(owner))

        assert [b["id"] for b in response.json()] == [business.id]


class TestTiers:
    def test_upsert_replaces_rates_for_crew_size(self, client, db, owner, business):
        headers = auth_headers(owner)
        client.put(f"/pricing/{business.id}/tiers", json={"crew_size": 2, "hourly_rate_cents": 11000}, headers=headers)

        response = client.put(
            f"/pricing/{business.id}/tiers", json={"crew_size": 2, "hourly_rate_cents": 12500}, headers=headers
        )

        assert response.json()["hourly_rate_cents"] == 12500
        assert db.query(PricingTier).filter_by(business_id=business.id).count() == 1

    def test_tier_needs_a_rate(self, client, owner, business):
        response = client.put(
            f"/pricing/{business.id}/tiers", json={"crew_size": 3}, headers=auth_headers(owner)
        )
        assert response.status_code == 400

    def test_other_owner_forbidden(self, client, business, make_user):
        intruder = make_user("business")
        response = client.put(
            f"/pricing/{business.id}/tiers",
            json={"crew_size": 2, "hourly_rate_cents": 1},
            headers=auth_headers(intruder),
        )
        assert response.status_code == 403

    def test_public_tier_listing_and_delete(self, client, owner, business, tiers):
        listed = client.get(f"/pricing/{business.id}/tiers").json()
        assert sorted(t["crew_size"] for t in listed) == [2, 4]

        deleted = client.delete(f"/pricing/{business.id}/tiers/{tiers[0].id}", headers=auth_headers(owner))

        assert deleted.status_code == 200
        assert len(client.get(f"/pricing/{business.id}/tiers").json()) == 1


class TestProviderConfig:
    def test_defaults_without_config(self, client, business):
        body = client.get(f"/pricing/{business.id}/config").json()
        assert body["packing_enabled"] is True
        assert body["stairs_included"] is False

    def test_update_config(self, client, owner, business):
        response = client.put(
            f"/pricing/{business.id}/config",
            json={"stairs_per_flight_cents": 7500, "stairs_included": False},
            headers=auth_headers(owner),
        )

        assert response.status_code == 200
        assert response.json()["stairs_per_flight_cents"] == 7500


class TestEstimate:
    def test_estimate_uses_provider_policy(self, client, business, tiers, provider_config):
        response = client.post(
            f"/pricing/{business.id}/estimate",
            json={"service_details": {"mover_team": 4, "stairs": True, "stairs_flights": 1}},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["hourly_rate_cents"] == 18000
        assert body["breakdown"]["stairs_cents"] == 5000
        assert body["total_price_cents"] == 54000 + 5000

    def test_estimate_without_tiers_fails(self, client, business):
        response = client.post(f"/pricing/{business.id}/estimate", json={"service_details": {}})
        assert response.status_code == 400
