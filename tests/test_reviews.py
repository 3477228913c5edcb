"""Tests for reviews and review moderation."""

import pytest

from servicehub.models import Review
from tests.conftest import auth_headers


@pytest.fixture
def completed(make_booking, business, customer):
    return make_booking(business, customer, booking_status="completed", status="completed")


@pytest.fixture
def review(db, completed, customer):
    review = Review(
        booking_id=completed.id,
        business_id=completed.business_id,
        reviewer_id=customer.id,
        rating=4,
        body="Careful with the piano",
    )
    db.add(review)
    db.commit()
    db.refresh(review)
    return review


class TestCreateReview:
    def test_customer_reviews_completed_booking(self, client, customer, completed):
        response = client.post(
            "/reviews",
            json={"booking_id": completed.id, "rating": 5, "body": "Great crew"},
            headers=auth_headers(customer),
        )

        assert response.status_code == 201
        assert response.json()["rating"] == 5
        assert response.json()["is_hidden"] is False

    def test_one_review_per_booking(self, client, customer, completed, review):
        response = client.post(
            "/reviews", json={"booking_id": completed.id, "rating": 1}, headers=auth_headers(customer)
        )

        assert response.status_code == 400
        assert response.json()["code"] == "conflict"

    def test_open_booking_cannot_be_reviewed(self, client, customer, business, make_booking):
        booking = make_booking(business, customer)

        response = client.post(
            "/reviews", json={"booking_id": booking.id, "rating": 3}, headers=auth_headers(customer)
        )

        assert response.status_code == 400

    def test_only_the_customer_reviews(self, client, owner, completed):
        response = client.post(
            "/reviews", json={"booking_id": completed.id, "rating": 5}, headers=auth_headers(owner)
        )
        assert response.status_code == 403

    @pytest.mark.parametrize("rating", [0, 6])
    def test_rating_range(self, client, customer, completed, rating):
        response = client.post(
            "/reviews", json={"booking_id": completed.id, "rating": rating}, headers=auth_headers(customer)
        )
        assert response.status_code == 422


class TestModeration:
    def test_hidden_review_excluded_from_public_listing(self, client, owner, business, review):
        client.post(
            f"/reviews/{review.id}/hide", json={"reason": "Contains an address"}, headers=auth_headers(owner)
        )

        public = client.get(f"/reviews/business/{business.id}").json()
        moderated = client.get(f"/reviews/business/{business.id}", headers=auth_headers(owner)).json()

        assert public["reviews"] == []
        assert public["review_count"] == 0
        assert public["average_rating"] is None
        assert moderated["reviews"][0]["hidden_reason"] == "Contains an address"

    def test_unhide_clears_reason(self, client, owner, review):
        client.post(f"/reviews/{review.id}/hide", json={"reason": "spam"}, headers=auth_headers(owner))

        response = client.post(f"/reviews/{review.id}/unhide", headers=auth_headers(owner))

        assert response.json()["is_hidden"] is False
        assert response.json()["hidden_reason"] is None

    def test_admin_can_hide(self, client, admin, review):
        response = client.post(f"/reviews/{review.id}/hide", json={}, headers=auth_headers(admin))
        assert response.json()["is_hidden"] is True

    def test_customer_cannot_hide(self, client, customer, review):
        response = client.post(f"/reviews/{review.id}/hide", json={}, headers=auth_headers(customer))
        assert response.status_code == 403

    def test_public_summary(self, client, business, review):
        summary = client.get(f"/reviews/business/{business.id}").json()

        assert summary["review_count"] == 1
        assert summary["average_rating"] == 4.0


class TestOwnerResponse:
    def test_owner_responds(self, client, owner, review):
        response = client.post(
            f"/reviews/{review.id}/respond", json={"response": "  Thank you! "}, headers=auth_headers(owner)
        )

        assert response.status_code == 200
        assert response.json()["owner_response"] == "Thank you!"
        assert response.json()["owner_responded_at"] is not None

    def test_admin_cannot_respond_for_owner(self, client, admin, review):
        response = client.post(
            f"/reviews/{review.id}/respond", json={"response": "Thanks"}, headers=auth_headers(admin)
        )
        assert response.status_code == 403

    def test_blank_response_rejected(self, client, owner, review):
        response = client.post(
            f"/reviews/{review.id}/respond", json={"response": "   "}, headers=auth_headers(owner)
        )
        assert response.status_code == 422


class TestDeleteReview:
    def test_admin_deletes(self, client, db, admin, review):
        response = client.delete(f"/reviews/{review.id}", headers=auth_headers(admin))

        assert response.status_code == 200
        assert db.query(Review).count() == 0

    def test_owner_cannot_delete(self, client, owner, review):
        assert client.delete(f"/reviews/{review.id}", headers=auth_headers(owner)).status_code == 403
