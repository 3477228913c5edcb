"""Tests for the quote lifecycle."""

from datetime import datetime, timedelta

import pytest

from servicehub.models import Notification, Quote
from tests.conftest import auth_headers


@pytest.fixture
def booking(make_booking, business, customer):
    return make_booking(business, customer)


def send(client, user, booking, amount_cents=45000, **extra):
    return client.post(
        f"/quotes/booking/{booking.id}",
        json={"amount_cents": amount_cents, **extra},
        headers=auth_headers(user),
    )


class TestSendQuote:
    def test_provider_sends_quote(self, client, db, owner, customer, booking):
        response = send(client, owner, booking, message="Includes two movers")

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "sent"
        assert body["amount_cents"] == 45000
        assert body["expires_at"] is not None

        db.refresh(booking)
        assert booking.status == "quoted"
        note = db.query(Notification).filter_by(user_id=customer.id).one()
        assert note.kind == "quote_sent"

    def test_new_quote_supersedes_open_quote(self, client, db, owner, booking):
        first = send(client, owner, booking).json()
        second = send(client, owner, booking, amount_cents=50000).json()

        statuses = {q.id: q.status for q in db.query(Quote).all()}
        assert statuses[first["id"]] == "expired"
        assert statuses[second["id"]] == "sent"

    def test_customer_cannot_send(self, client, customer, booking):
        assert send(client, customer, booking).status_code == 403

    def test_amount_must_be_positive(self, client, owner, booking):
        assert send(client, owner, booking, amount_cents=0).status_code == 422

    def test_closed_booking_rejected(self, client, owner, make_booking, business, customer):
        closed = make_booking(business, customer, booking_status="completed")

        response = send(client, owner, closed)

        assert response.status_code == 400
        assert response.json()["code"] == "conflict"


class TestReadQuotes:
    def test_customer_view_marks_viewed(self, client, owner, customer, booking):
        quote = send(client, owner, booking).json()

        response = client.get(f"/quotes/{quote['id']}", headers=auth_headers(customer))

        assert response.json()["status"] == "viewed"
        assert response.json()["viewed_at"] is not None

    def test_provider_view_does_not_mark_viewed(self, client, owner, booking):
        quote = send(client, owner, booking).json()

        response = client.get(f"/quotes/{quote['id']}", headers=auth_headers(owner))

        assert response.json()["status"] == "sent"

    def test_latest_is_newest_quote(self, client, owner, customer, booking):
        send(client, owner, booking, amount_cents=40000)
        newest = send(client, owner, booking, amount_cents=42000).json()

        response = client.get(f"/quotes/booking/{booking.id}/latest", headers=auth_headers(customer))

        assert response.json()["id"] == newest["id"]
        listed = client.get(f"/quotes/booking/{booking.id}", headers=auth_headers(customer)).json()
        assert [q["id"] for q in listed][0] == newest["id"]

    def test_latest_without_quotes(self, client, customer, booking):
        response = client.get(f"/quotes/booking/{booking.id}/latest", headers=auth_headers(customer))
        assert response.status_code == 404

    def test_outsider_cannot_read(self, client, owner, make_user, booking):
        quote = send(client, owner, booking).json()
        stranger = make_user("customer")

        response = client.get(f"/quotes/{quote['id']}", headers=auth_headers(stranger))

        assert response.status_code == 403

    def test_past_expiry_is_marked_expired_on_read(self, client, db, owner, customer, booking):
        quote = send(client, owner, booking).json()
        stored = db.get(Quote, quote["id"])
        stored.expires_at = datetime.utcnow() - timedelta(hours=1)
        db.commit()

        response = client.get(f"/quotes/{quote['id']}", headers=auth_headers(customer))

        assert response.json()["status"] == "expired"


class TestRespond:
    def test_accept(self, client, db, owner, customer, booking):
        quote = send(client, owner, booking).json()

        response = client.post(
            f"/quotes/{quote['id']}/respond",
            json={"response": "accepted", "message": "See you Tuesday"},
            headers=auth_headers(customer),
        )

        assert response.status_code == 200
        assert response.json()["status"] == "accepted"
        db.refresh(booking)
        assert booking.status == "accepted"
        note = db.query(Notification).filter_by(user_id=owner.id, kind="quote_response").one()
        assert note.data["response"] == "accepted"

    def test_reject_requires_reason(self, client, owner, customer, booking):
        quote = send(client, owner, booking).json()

        response = client.post(
            f"/quotes/{quote['id']}/respond",
            json={"response": "rejected"},
            headers=auth_headers(customer),
        )

        assert response.status_code == 400
        assert response.json()["error"] == "A rejection reason is required"

    def test_reject_returns_booking_to_requested(self, client, db, owner, customer, booking):
        quote = send(client, owner, booking).json()

        response = client.post(
            f"/quotes/{quote['id']}/respond",
            json={"response": "rejected", "rejection_reason": "  Too expensive "},
            headers=auth_headers(customer),
        )

        assert response.json()["rejection_reason"] == "Too expensive"
        db.refresh(booking)
        assert booking.status == "requested"

    def test_only_latest_quote_is_actionable(self, client, owner, customer, booking):
        older = send(client, owner, booking).json()
        send(client, owner, booking, amount_cents=39000)

        response = client.post(
            f"/quotes/{older['id']}/respond",
            json={"response": "accepted"},
            headers=auth_headers(customer),
        )

        assert response.status_code == 400
        assert response.json()["code"] == "conflict"

    def test_cannot_respond_twice(self, client, owner, customer, booking):
        quote = send(client, owner, booking).json()
        payload = {"response": "accepted"}
        client.post(f"/quotes/{quote['id']}/respond", json=payload, headers=auth_headers(customer))

        again = client.post(f"/quotes/{quote['id']}/respond", json=payload, headers=auth_headers(customer))

        assert again.status_code == 400
        assert again.json()["error"] == "Quote has already been accepted"

    def test_provider_cannot_respond(self, client, owner, booking):
        quote = send(client, owner, booking).json()

        response = client.post(
            f"/quotes/{quote['id']}/respond",
            json={"response": "accepted"},
            headers=auth_headers(owner),
        )

        assert response.status_code == 403

    def test_expired_quote_cannot_be_accepted(self, client, db, owner, customer, booking):
        quote = send(client, owner, booking).json()
        stored = db.get(Quote, quote["id"])
        stored.expires_at = datetime.utcnow() - timedelta(minutes=5)
        db.commit()

        response = client.post(
            f"/quotes/{quote['id']}/respond",
            json={"response": "accepted"},
            headers=auth_headers(customer),
        )

        assert response.status_code == 400
        db.refresh(stored)
        assert stored.status == "expired"
