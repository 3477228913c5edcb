"""Tests for the platform ledger, user administration and business edit requests."""

import pytest

from servicehub.domain.ledger.service import summarize
from servicehub.models import Business, BusinessEditRequest, Notification, User
from servicehub.models_invoice import LedgerEntry
from tests.conftest import auth_headers


def add_entry(client, admin, **payload):
    body = {"category": "income_fees", "amount_cents": 1000, "period": "2030-01", **payload}
    return client.post("/ledger", json=body, headers=auth_headers(admin))


class TestLedgerSummary:
    def test_summarize(self):
        entries = [
            LedgerEntry(category="income_fees", amount_cents=50000),
            LedgerEntry(category="donations", amount_cents=10000),
            LedgerEntry(category="infra_costs", amount_cents=20000),
            LedgerEntry(category="staff", amount_cents=15000),
        ]

        summary = summarize("2030-01", entries)

        assert summary["total_income_cents"] == 60000
        assert summary["total_expenses_cents"] == 35000
        assert summary["net_cents"] == 25000
        assert summary["category_totals"]["staff"] == 15000
        assert summary["entry_count"] == 4

    def test_public_summary_for_period(self, client, admin):
        add_entry(client, admin, amount_cents=80000)
        add_entry(client, admin, category="infra_costs", amount_cents=30000)
        add_entry(client, admin, period="2030-02", amount_cents=99999)

        response = client.get("/ledger/summary/2030-01")

        assert response.status_code == 200
        assert response.json()["net_cents"] == 50000
        assert response.json()["entry_count"] == 2

    def test_empty_period(self, client):
        body = client.get("/ledger/summary/2031-06").json()
        assert body["net_cents"] == 0
        assert body["category_totals"] == {}

    @pytest.mark.parametrize("period", ["2030-13", "2030-1", "January"])
    def test_bad_period(self, client, period):
        response = client.get(f"/ledger/summary/{period}")
        assert response.status_code == 400
        assert response.json()["code"] == "invalid"


class TestLedgerEntries:
    def test_admin_manages_entries(self, client, db, admin):
        created = add_entry(client, admin, note="Stripe fees").json()
        assert created["created_by"] == admin.id

        updated = client.patch(
            f"/ledger/{created['id']}", json={"amount_cents": 2500}, headers=auth_headers(admin)
        ).json()
        assert updated["amount_cents"] == 2500
        assert updated["note"] == "Stripe fees"

        deleted = client.delete(f"/ledger/{created['id']}", headers=auth_headers(admin))
        assert deleted.status_code == 200
        assert db.query(LedgerEntry).count() == 0

    def test_non_admin_forbidden(self, client, owner):
        assert add_entry(client, owner).status_code == 403
        assert client.get("/ledger", headers=auth_headers(owner)).status_code == 403

    def test_unknown_category_rejected(self, client, admin):
        assert add_entry(client, admin, category="snacks").status_code == 422

    def test_amount_must_be_positive(self, client, admin):
        assert add_entry(client, admin, amount_cents=0).status_code == 422


class TestUserAdministration:
    def test_change_role(self, client, db, admin, customer):
        response = client.patch(
            f"/admin/users/{customer.id}/role", json={"role": "business"}, headers=auth_headers(admin)
        )

        assert response.status_code == 200
        assert response.json()["data"] == {"old_role": "customer", "new_role": "business"}
        db.refresh(customer)
        assert customer.role == "business"

    def test_same_role_is_conflict(self, client, admin, customer):
        response = client.patch(
            f"/admin/users/{customer.id}/role", json={"role": "customer"}, headers=auth_headers(admin)
        )
        assert response.status_code == 400
        assert response.json()["code"] == "conflict"

    def test_admin_cannot_change_own_role(self, client, admin):
        response = client.patch(
            f"/admin/users/{admin.id}/role", json={"role": "customer"}, headers=auth_headers(admin)
        )
        assert response.status_code == 400

    def test_suspended_user_locked_out(self, client, admin, customer):
        client.post(
            f"/admin/users/{customer.id}/suspend", json={"reason": "chargebacks"}, headers=auth_headers(admin)
        )

        response = client.get("/bookings", headers=auth_headers(customer))

        assert response.status_code == 403
        assert response.json()["error"] == "Account suspended"

        client.post(f"/admin/users/{customer.id}/unsuspend", headers=auth_headers(admin))
        assert client.get("/bookings", headers=auth_headers(customer)).status_code == 200

    def test_suspend_twice_is_conflict(self, client, admin, customer):
        client.post(f"/admin/users/{customer.id}/suspend", json={}, headers=auth_headers(admin))

        again = client.post(f"/admin/users/{customer.id}/suspend", json={}, headers=auth_headers(admin))

        assert again.status_code == 400

    def test_delete_user_without_history(self, client, db, admin, make_user):
        user = make_user("customer")

        response = client.delete(f"/admin/users/{user.id}", headers=auth_headers(admin))

        assert response.status_code == 200
        assert db.query(User).filter_by(id=user.id).first() is None

    def test_delete_user_with_bookings_is_conflict(self, client, admin, business, customer, make_booking):
        make_booking(business, customer)

        response = client.delete(f"/admin/users/{customer.id}", headers=auth_headers(admin))

        assert response.status_code == 400
        assert response.json()["code"] == "conflict"

    def test_missing_user(self, client, admin):
        response = client.delete("/admin/users/9999", headers=auth_headers(admin))
        assert response.status_code == 404

    def test_list_users_filters(self, client, admin, customer, owner):
        response = client.get("/admin/users", params={"role": "business"}, headers=auth_headers(admin))
        assert [u["id"] for u in response.json()] == [owner.id]

    def test_non_admin_forbidden(self, client, owner, customer):
        response = client.post(f"/admin/users/{customer.id}/suspend", json={}, headers=auth_headers(owner))
        assert response.status_code == 403


class TestEditRequests:
    def submit(self, client, owner, business, **changes):
        return client.post(
            f"/businesses/{business.id}/edit-requests", json=changes, headers=auth_headers(owner)
        )

    def test_approval_applies_changes(self, client, db, admin, owner, business):
        request = self.submit(client, owner, business, name="Swift & Sons", payment_terms_days=14).json()

        response = client.post(
            f"/admin/edit-requests/{request['id']}/approve", json={}, headers=auth_headers(admin)
        )

        assert response.status_code == 200
        assert sorted(response.json()["data"]["applied"]) == ["name", "payment_terms_days"]
        stored = db.get(Business, business.id)
        db.refresh(stored)
        assert stored.name == "Swift & Sons"
        assert stored.payment_terms_days == 14
        assert db.query(Notification).filter_by(user_id=owner.id, kind="edit_request_approved").count() == 1

    def test_rejection_leaves_business_unchanged(self, client, db, admin, owner, business):
        request = self.submit(client, owner, business, name="Renamed").json()

        client.post(
            f"/admin/edit-requests/{request['id']}/reject",
            json={"admin_notes": "Name already taken"},
            headers=auth_headers(admin),
        )

        db.refresh(business)
        assert business.name == "Swift Movers"
        edit_request = db.get(BusinessEditRequest, request["id"])
        assert edit_request.status == "rejected"
        assert edit_request.admin_notes == "Name already taken"

    def test_decided_request_cannot_be_reapplied(self, client, admin, owner, business):
        request = self.submit(client, owner, business, name="Renamed").json()
        url = f"/admin/edit-requests/{request['id']}/approve"
        client.post(url, json={}, headers=auth_headers(admin))

        again = client.post(url, json={}, headers=auth_headers(admin))

        assert again.status_code == 400

    def test_one_pending_request_at_a_time(self, client, owner, business):
        self.submit(client, owner, business, name="First")

        response = self.submit(client, owner, business, name="Second")

        assert response.status_code == 400
        assert response.json()["code"] == "conflict"

    def test_required_field_cannot_be_cleared(self, client, owner, business):
        response = self.submit(client, owner, business, name=None)
        assert response.status_code == 400

    def test_unknown_field_rejected(self, client, owner, business):
        response = self.submit(client, owner, business, owner_id=1)
        assert response.status_code == 422

    def test_pending_queue(self, client, admin, owner, business):
        request = self.submit(client, owner, business, description="Family run since 1998").json()

        queue = client.get("/admin/edit-requests", headers=auth_headers(admin)).json()

        assert [r["id"] for r in queue] == [request["id"]]
