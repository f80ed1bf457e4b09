"""Tests for the /api/students and /api/admin endpoints."""

from datetime import datetime, timezone
from decimal import Decimal

from shared.models import StudentTier, SubscriptionStatus
from modules.billing.models import InvoiceSummary
from modules.students.models import PendingEnrollment

from tests.conftest import TEST_PASSWORD


class TestAdminRequired:
    def test_no_session(self, client, make_student):
        student = make_student()
        assert client.get(f"/api/students/{student.id}").status_code == 401
        assert client.get("/api/admin/stats").status_code == 401
        assert client.get("/api/students").status_code == 401

    def test_student_session_forbidden(self, client, make_student, student_cookie):
        student = make_student()
        client.cookies.update(student_cookie(student))
        assert client.get(f"/api/students/{student.id}").status_code == 403
        assert client.delete(f"/api/students/{student.id}").status_code == 403


class TestCreateStudent:
    def test_create_with_generated_password(self, admin_client, repo):
        response = admin_client.post(
            "/api/students",
            json={"email": "New@Example.com", "name": "New", "tier": "self-paced"},
        )
        assert response.status_code == 201
        data = response.json()
        assert data["student"]["email"] == "new@example.com"
        assert data["student"]["subscription_status"] == "active"
        assert len(data["temporary_password"]) == 12
        assert "password_hash" not in data["student"]
        assert len(repo.list_progress(data["student"]["id"])) == 8

    def test_duplicate_email(self, admin_client, make_student):
        make_student()
        response = admin_client.post(
            "/api/students",
            json={"email": "ada@example.com", "name": "Ada", "tier": "mentorship"},
        )
        assert response.status_code == 409

    def test_invalid_tier(self, admin_client):
        response = admin_client.post(
            "/api/students",
            json={"email": "x@example.com", "name": "X", "tier": "premium"},
        )
        assert response.status_code == 422


class TestEnroll:
    def _seed(self, repo):
        repo.upsert_pending_enrollment(
            PendingEnrollment(
                email="paid@example.com",
                name="Paid",
                tier=StudentTier.MENTORSHIP,
                checkout_session_ref="cs_paid",
            )
        )

    def test_enroll_then_login(self, client, repo):
        self._seed(repo)

        response = client.post(
            "/api/students/enroll",
            json={
                "email": "paid@example.com",
                "password": TEST_PASSWORD,
                "checkout_session_id": "cs_paid",
            },
        )
        assert response.status_code == 201

        login = client.post(
            "/api/auth/student/login",
            json={"email": "paid@example.com", "password": TEST_PASSWORD},
        )
        assert login.status_code == 200

    def test_enroll_without_checkout_cannot_claim_account(self, client, repo):
        self._seed(repo)

        response = client.post(
            "/api/students/enroll",
            json={"email": "paid@example.com", "password": "attacker-pass"},
        )
        assert response.status_code == 401
        assert response.json()["error"] == "ENROLLMENT_NOT_VERIFIED"

        login = client.post(
            "/api/auth/student/login",
            json={"email": "paid@example.com", "password": "attacker-pass"},
        )
        assert login.status_code == 401
        assert repo.get_pending_enrollment("paid@example.com") is not None

    def test_enroll_with_wrong_checkout(self, client, repo):
        self._seed(repo)
        response = client.post(
            "/api/students/enroll",
            json={
                "email": "paid@example.com",
                "password": "attacker-pass",
                "checkout_session_id": "cs_guess",
            },
        )
        assert response.status_code == 401

    def test_enroll_without_pending(self, client):
        response = client.post(
            "/api/students/enroll",
            json={
                "email": "nobody@example.com",
                "password": TEST_PASSWORD,
                "checkout_session_id": "cs_paid",
            },
        )
        assert response.status_code == 401


class TestStudentDetailAndUpdate:
    def test_get_detail(self, admin_client, make_student):
        student = make_student()
        response = admin_client.get(f"/api/students/{student.id}")
        assert response.status_code == 200
        data = response.json()
        assert data["student"]["id"] == student.id
        assert data["progress_percent"] == 0
        assert len(data["progress"]) == 8

    def test_get_missing(self, admin_client):
        response = admin_client.get("/api/students/missing")
        assert response.status_code == 404
        assert response.json()["error"] == "STUDENT_NOT_FOUND"

    def test_reactivate_canceled_student(self, admin_client, make_student, repo):
        student = make_student(status=SubscriptionStatus.CANCELED)
        response = admin_client.patch(
            f"/api/students/{student.id}",
            json={"subscription_status": "active", "name": "Ada L."},
        )
        assert response.status_code == 200
        assert response.json()["subscription_status"] == "active"
        assert repo.get_student(student.id).name == "Ada L."

    def test_revoke(self, admin_client, make_student, repo, billing_provider):
        student = make_student(billing_subscription_ref="sub_r")
        response = admin_client.delete(f"/api/students/{student.id}?cancel_billing=true")
        assert response.status_code == 200
        assert response.json()["subscription_status"] == "canceled"
        billing_provider.cancel_subscription.assert_called_once_with("sub_r")
        assert repo.get_student(student.id) is not None


class TestInvoices:
    def test_list_invoices(self, admin_client, make_student, billing_provider):
        student = make_student()
        billing_provider.list_invoices.return_value = [
            InvoiceSummary(
                id="in_1",
                amount=Decimal("49.00"),
                status="paid",
                date=datetime(2026, 1, 1, tzinfo=timezone.utc),
            )
        ]
        response = admin_client.get(f"/api/students/{student.id}/invoices")
        assert response.status_code == 200
        assert response.json()[0]["id"] == "in_1"

    def test_no_billing_customer(self, admin_client, make_student):
        student = make_student(billing_customer_ref=None)
        response = admin_client.get(f"/api/students/{student.id}/invoices")
        assert response.status_code == 400
        assert response.json()["error"] == "NO_BILLING_CUSTOMER"


class TestStats:
    def test_stats(self, admin_client, make_student):
        make_student(email="a@example.com")
        make_student(email="b@example.com", status=SubscriptionStatus.PAST_DUE)
        response = admin_client.get("/api/admin/stats")
        assert response.status_code == 200
        data = response.json()
        assert data["total_students"] == 2
        assert data["active_students"] == 1
        assert data["past_due_students"] == 1
        assert len(data["recent_signups"]) == 2


class TestListStudents:
    def test_list_with_filters(self, admin_client, make_student):
        make_student(email="a@example.com", name="Ada")
        make_student(email="b@example.com", name="Bea", status=SubscriptionStatus.PAST_DUE)

        response = admin_client.get("/api/students", params={"status": "past_due"})

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["page"] == 1
        assert data["students"][0]["email"] == "b@example.com"
        assert data["students"][0]["progress_percent"] == 0
        assert "password_hash" not in data["students"][0]

    def test_invalid_page_size(self, admin_client):
        response = admin_client.get("/api/students", params={"page_size": 500})
        assert response.status_code == 422
