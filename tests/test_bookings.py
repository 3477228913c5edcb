"""Tests for booking creation, provider edits, repricing and lifecycle."""

import pytest

from servicehub.domain.bookings.service import PAID_LOCK_MESSAGE, merge_service_details
from servicehub.domain.availability.commitments import CommitmentQuery
from servicehub.models import Booking, ScheduledJob
from servicehub.models_availability import AvailabilityOverride
from tests.conftest import TUESDAY, WEDNESDAY, auth_headers


class TestMergeServiceDetails:
    """Partial service-details documents merge key by key."""

    def test_keys_are_merged(self):
        merged = merge_service_details({"mover_team": 2, "packing": "kit"}, {"mover_team": 3})
        assert merged == {"mover_team": 3, "packing": "kit"}

    def test_empty_heavy_items_clears_summary(self):
        existing = {
            "heavy_items": [{"name": "Piano", "price_cents": 25000, "count": 1}],
            "heavy_items_count": 1,
            "heavy_item_band": "200-400",
            "heavy_item_price_cents": 25000,
        }
        merged = merge_service_details(existing, {"heavy_items": []})
        assert merged == {"heavy_items": []}

    def test_zero_flights_turns_stairs_off(self):
        merged = merge_service_details({"stairs": True, "stairs_flights": 2}, {"stairs_flights": 0})
        assert merged["stairs"] is False

    def test_packing_none_clears_rooms_and_materials(self):
        existing = {
            "packing": "paygo",
            "packing_rooms": 3,
            "packing_materials": [{"name": "Box", "price_cents": 300, "quantity": 5}],
        }
        merged = merge_service_details(existing, {"packing": "none"})
        assert merged["packing_rooms"] == 0
        assert merged["packing_materials"] == []

    def test_missing_existing_document(self):
        assert merge_service_details(None, {"notes": "gate code 1234"}) == {"notes": "gate code 1234"}


class TestProviderEdits:
    def test_team_change_uses_tier_team_rate(self, client, owner, business, customer, tiers, make_booking):
        booking = make_booking(business, customer, team_size=2)

        response = client.patch(
            f"/bookings/{booking.id}", json={"team_size": 4}, headers=auth_headers(owner)
        )

        assert response.status_code == 200
        body = response.json()
        assert body["team_size"] == 4
        assert body["hourly_rate_cents"] == 18000
        assert body["service_details"]["mover_team"] == 4
        assert body["service_details"]["breakdown"]["mover_team"] == 4
        assert body["total_price_cents"] == 54000

    def test_team_change_through_service_details(self, client, owner, business, customer, tiers, make_booking):
        booking = make_booking(business, customer)

        response = client.patch(
            f"/bookings/{booking.id}",
            json={"service_details": {"mover_team": 4}},
            headers=auth_headers(owner),
        )

        assert response.json()["hourly_rate_cents"] == 18000

    def test_out_of_range_team_is_clamped(self, client, owner, business, customer, tiers, make_booking):
        booking = make_booking(business, customer)

        response = client.patch(
            f"/bookings/{booking.id}", json={"team_size": 15}, headers=auth_headers(owner)
        )

        assert response.json()["team_size"] == 8

    def test_repeated_update_is_idempotent(self, client, owner, business, customer, tiers, provider_config, make_booking):
        booking = make_booking(business, customer)
        patch = {
            "service_details": {"packing": "kit", "packing_rooms": 3},
            "additional_fees_cents": 2500,
        }

        first = client.patch(f"/bookings/{booking.id}", json=patch, headers=auth_headers(owner))
        second = client.patch(f"/bookings/{booking.id}", json=patch, headers=auth_headers(owner))

        assert first.status_code == second.status_code == 200
        assert first.json()["total_price_cents"] == second.json()["total_price_cents"]
        assert first.json()["total_price_cents"] == 36000 + 29700 + 2500
        assert second.json()["service_details"]["packing_cost_cents"] == 29700

    def test_items_contribute_to_total(self, client, owner, business, customer, tiers, make_booking):
        booking = make_booking(business, customer)

        response = client.patch(
            f"/bookings/{booking.id}",
            json={"items": [{"description": "Wardrobe box", "quantity": 4, "unit_price_cents": 1500}]},
            headers=auth_headers(owner),
        )

        body = response.json()
        assert body["total_price_cents"] == 36000 + 6000
        assert body["service_details"]["breakdown"]["items_cents"] == 6000
        assert body["base_price_cents"] == 36000

    def test_customer_cannot_edit(self, client, business, customer, tiers, make_booking):
        booking = make_booking(business, customer)

        response = client.patch(
            f"/bookings/{booking.id}", json={"team_size": 4}, headers=auth_headers(customer)
        )

        assert response.status_code == 403
        assert response.json()["error"] == "Only the service provider or admin can edit bookings"

    def test_status_fields_are_admin_only(self, client, owner, business, customer, make_booking):
        booking = make_booking(business, customer)

        response = client.patch(
            f"/bookings/{booking.id}", json={"payment_status": "paid"}, headers=auth_headers(owner)
        )

        assert response.status_code == 403

    def test_category_mismatch_rejected(self, client, db, owner, business, customer, tiers, make_booking):
        booking = make_booking(business, customer)

        response = client.patch(
            f"/bookings/{booking.id}",
            json={"requested_date": WEDNESDAY.isoformat(), "service_details": {"category": "cleaning"}},
            headers=auth_headers(owner),
        )

        assert response.status_code == 400
        db.refresh(booking)
        assert booking.requested_date == TUESDAY

    def test_invalid_service_details_rejected(self, client, owner, business, customer, tiers, make_booking):
        booking = make_booking(business, customer)

        response = client.patch(
            f"/bookings/{booking.id}",
            json={"service_details": {"packing": "everything"}},
            headers=auth_headers(owner),
        )

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "invalid"
        assert any("packing" in message for message in body["details"])

    def test_stored_rate_used_without_tiers(self, client, owner, business, customer, make_booking):
        booking = make_booking(business, customer, hourly_rate_cents=15000)

        response = client.patch(
            f"/bookings/{booking.id}", json={"team_size": 3}, headers=auth_headers(owner)
        )

        body = response.json()
        assert body["hourly_rate_cents"] == 15000
        assert body["service_details"]["breakdown"]["rate_source"] == "stored"


class TestPaidLock:
    def test_paid_booking_cannot_be_rescheduled(self, client, db, owner, business, customer, make_booking):
        booking = make_booking(business, customer, payment_status="paid")

        response = client.patch(
            f"/bookings/{booking.id}",
            json={"requested_date": WEDNESDAY.isoformat()},
            headers=auth_headers(owner),
        )

        assert response.status_code == 400
        assert response.json()["error"] == PAID_LOCK_MESSAGE
        db.refresh(booking)
        assert booking.requested_date == TUESDAY

    def test_admin_cannot_change_prices_after_payment(self, client, admin, business, customer, make_booking):
        booking = make_booking(business, customer, payment_status="paid")

        response = client.patch(
            f"/bookings/{booking.id}", json={"team_size": 4}, headers=auth_headers(admin)
        )

        assert response.status_code == 400
        assert response.json()["error"] == PAID_LOCK_MESSAGE

    def test_admin_can_change_status_after_payment(self, client, admin, business, customer, make_booking):
        booking = make_booking(business, customer, payment_status="paid")

        response = client.patch(
            f"/bookings/{booking.id}", json={"payment_status": "refunded"}, headers=auth_headers(admin)
        )

        assert response.status_code == 200
        assert response.json()["payment_status"] == "refunded"

    def test_recalculate_locked_after_payment(self, client, owner, business, customer, make_booking):
        booking = make_booking(business, customer, payment_status="paid")

        response = client.post(
            "/bookings/recalculate", json={"booking_id": booking.id}, headers=auth_headers(owner)
        )

        assert response.status_code == 400


class TestCreateBooking:
    def test_customer_books_available_slot(self, client, customer, business, tiers):
        response = client.post(
            "/bookings",
            json={
                "business_id": business.id,
                "requested_date": TUESDAY.isoformat(),
                "time_slot": "afternoon",
                "service_details": {"mover_team": 2, "packing": "kit", "packing_rooms": 1},
            },
            headers=auth_headers(customer),
        )

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "requested"
        assert body["booking_status"] == "pending"
        assert body["total_price_cents"] == 36000 + 9900
        assert body["service_details"]["category"] == "moving"

    def test_without_tiers_price_waits_for_quote(self, client, customer, business):
        response = client.post(
            "/bookings",
            json={"business_id": business.id, "requested_date": TUESDAY.isoformat()},
            headers=auth_headers(customer),
        )

        assert response.status_code == 201
        assert response.json()["total_price_cents"] == 0

    def test_blocked_date_rejected(self, client, db, customer, business):
        db.add(
            AvailabilityOverride(
                business_id=business.id, override_date=TUESDAY, kind="block", time_slot="full_day"
            )
        )
        db.commit()

        response = client.post(
            "/bookings",
            json={"business_id": business.id, "requested_date": TUESDAY.isoformat()},
            headers=auth_headers(customer),
        )

        assert response.status_code == 400
        assert response.json()["code"] == "conflict"
        assert db.query(Booking).count() == 0

    def test_full_slot_rejected(self, client, customer, business, make_booking):
        for _ in range(3):
            make_booking(business, customer)

        response = client.post(
            "/bookings",
            json={"business_id": business.id, "requested_date": TUESDAY.isoformat()},
            headers=auth_headers(customer),
        )

        assert response.status_code == 400
        assert response.json()["error"] == "This slot is fully booked"

    def test_requires_authentication(self, client, business):
        response = client.post(
            "/bookings", json={"business_id": business.id, "requested_date": TUESDAY.isoformat()}
        )
        assert response.status_code == 401


class TestLifecycle:
    def test_confirming_creates_linked_job(self, client, db, owner, business, customer, make_booking):
        booking = make_booking(business, customer)

        response = client.post(
            f"/bookings/{booking.id}/status",
            json={"booking_status": "confirmed"},
            headers=auth_headers(owner),
        )

        assert response.status_code == 200
        assert response.json()["status"] == "scheduled"
        job = db.query(ScheduledJob).filter_by(booking_id=booking.id).one()
        assert job.job_date == TUESDAY
        counts = CommitmentQuery(db).counts(business.id, TUESDAY, TUESDAY)
        assert counts[(TUESDAY, "morning")] == 1

    def test_invalid_transition_rejected(self, client, owner, business, customer, make_booking):
        booking = make_booking(business, customer)

        response = client.post(
            f"/bookings/{booking.id}/status",
            json={"booking_status": "completed"},
            headers=auth_headers(owner),
        )

        assert response.status_code == 400
        assert response.json()["code"] == "conflict"

    @pytest.mark.parametrize("final_status", ["completed", "cancelled"])
    def test_job_follows_booking(self, client, db, owner, business, customer, make_booking, final_status):
        booking = make_booking(business, customer)
        headers = auth_headers(owner)
        client.post(f"/bookings/{booking.id}/status", json={"booking_status": "confirmed"}, headers=headers)
        client.post(f"/bookings/{booking.id}/status", json={"booking_status": "in_progress"}, headers=headers)

        response = client.post(
            f"/bookings/{booking.id}/status", json={"booking_status": final_status}, headers=headers
        )

        assert response.status_code == 200
        job = db.query(ScheduledJob).filter_by(booking_id=booking.id).one()
        assert job.status == final_status

    def test_archive_requires_closed_booking(self, client, owner, business, customer, make_booking):
        booking = make_booking(business, customer)

        response = client.post(f"/bookings/{booking.id}/archive", headers=auth_headers(owner))

        assert response.status_code == 400
        assert response.json()["code"] == "conflict"

    def test_archive_completed_booking(self, client, db, owner, business, customer, make_booking):
        booking = make_booking(business, customer, booking_status="completed")

        response = client.post(f"/bookings/{booking.id}/archive", headers=auth_headers(owner))

        assert response.status_code == 200
        assert response.json()["booking_id"] == booking.id
        db.refresh(booking)
        assert booking.is_archived
        assert booking.archived_at is not None

    def test_customer_cannot_archive(self, client, business, customer, make_booking):
        booking = make_booking(business, customer, booking_status="completed")

        response = client.post(f"/bookings/{booking.id}/archive", headers=auth_headers(customer))

        assert response.status_code == 403


class TestEditsKeepScheduleInStep:
    """PATCH edits move the linked job and honor status transitions."""

    def _confirm(self, client, booking, owner):
        response = client.post(
            f"/bookings/{booking.id}/status", json={"booking_status": "confirmed"}, headers=auth_headers(owner)
        )
        assert response.status_code == 200

    def test_reschedule_moves_linked_job(self, client, db, owner, business, customer, make_booking):
        booking = make_booking(business, customer)
        self._confirm(client, booking, owner)

        response = client.patch(
            f"/bookings/{booking.id}",
            json={"requested_date": WEDNESDAY.isoformat(), "time_slot": "afternoon"},
            headers=auth_headers(owner),
        )

        assert response.status_code == 200
        job = db.query(ScheduledJob).filter_by(booking_id=booking.id).one()
        assert job.job_date == WEDNESDAY
        assert job.time_slot == "afternoon"
        counts = CommitmentQuery(db).counts(business.id, TUESDAY, WEDNESDAY)
        assert counts[(TUESDAY, "morning")] == 0
        assert counts[(WEDNESDAY, "afternoon")] == 1

    def test_admin_cancel_releases_capacity(self, client, db, owner, admin, business, customer, make_booking):
        booking = make_booking(business, customer)
        self._confirm(client, booking, owner)

        response = client.patch(
            f"/bookings/{booking.id}", json={"booking_status": "cancelled"}, headers=auth_headers(admin)
        )

        assert response.status_code == 200
        assert response.json()["status"] == "canceled"
        job = db.query(ScheduledJob).filter_by(booking_id=booking.id).one()
        assert job.status == "cancelled"
        assert CommitmentQuery(db).counts(business.id, TUESDAY, TUESDAY)[(TUESDAY, "morning")] == 0

    def test_admin_confirm_creates_linked_job(self, client, db, admin, business, customer, make_booking):
        booking = make_booking(business, customer)

        response = client.patch(
            f"/bookings/{booking.id}", json={"booking_status": "confirmed"}, headers=auth_headers(admin)
        )

        assert response.status_code == 200
        assert response.json()["status"] == "scheduled"
        assert db.query(ScheduledJob).filter_by(booking_id=booking.id).count() == 1

    def test_admin_cannot_reopen_completed_booking(self, client, db, admin, business, customer, make_booking):
        booking = make_booking(business, customer, booking_status="completed")

        response = client.patch(
            f"/bookings/{booking.id}", json={"booking_status": "pending"}, headers=auth_headers(admin)
        )

        assert response.status_code == 400
        assert response.json()["code"] == "conflict"
        db.refresh(booking)
        assert booking.booking_status == "completed"

    def test_unchanged_status_is_accepted(self, client, admin, business, customer, make_booking):
        booking = make_booking(business, customer, booking_status="completed")

        response = client.patch(
            f"/bookings/{booking.id}",
            json={"booking_status": "completed", "payment_status": "paid"},
            headers=auth_headers(admin),
        )

        assert response.status_code == 200
        assert response.json()["payment_status"] == "paid"

    @pytest.mark.parametrize("field", ["requested_date", "time_slot", "booking_status", "payment_status"])
    def test_null_for_required_field_rejected(self, client, db, admin, business, customer, make_booking, field):
        booking = make_booking(business, customer)

        response = client.patch(f"/bookings/{booking.id}", json={field: None}, headers=auth_headers(admin))

        assert response.status_code == 422
        assert response.json()["code"] == "invalid"
        db.refresh(booking)
        assert booking.requested_date == TUESDAY
        assert booking.time_slot == "morning"
