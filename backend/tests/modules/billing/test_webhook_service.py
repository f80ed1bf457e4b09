"""Tests for modules/billing/service.py."""

import json
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from shared.models import StudentTier, SubscriptionStatus
from modules.billing.exceptions import WebhookVerificationError
from modules.billing.models import RejectionReason
from modules.billing.service import BillingWebhookService, map_processor_status


def delivery(event_type: str, obj: dict, event_id: str = "evt_1", created: int = 1767225600) -> bytes:
    return json.dumps({
        "id": event_id,
        "type": event_type,
        "created": created,
        "data": {"object": obj},
    }).encode()


@pytest.fixture
def service(billing_provider, repo, settings) -> BillingWebhookService:
    return BillingWebhookService(provider=billing_provider, students=repo, settings=settings)


class TestMapProcessorStatus:
    @pytest.mark.parametrize(
        "processor_status, expected",
        [
            ("past_due", SubscriptionStatus.PAST_DUE),
            ("canceled", SubscriptionStatus.CANCELED),
            ("unpaid", SubscriptionStatus.CANCELED),
            ("active", SubscriptionStatus.ACTIVE),
            ("trialing", SubscriptionStatus.ACTIVE),
            ("incomplete", SubscriptionStatus.ACTIVE),
        ],
    )
    def test_mapping(self, processor_status, expected):
        assert map_processor_status(processor_status) == expected


class TestTierForPrice:
    def test_self_paced_prices(self, service):
        assert service.tier_for_price("price_self_paced") == StudentTier.SELF_PACED
        assert service.tier_for_price("price_self_paced_installment") == StudentTier.SELF_PACED

    def test_other_prices_default_to_mentorship(self, service):
        assert service.tier_for_price("price_other") == StudentTier.MENTORSHIP
        assert service.tier_for_price(None) == StudentTier.MENTORSHIP


class TestIngestRejections:
    @pytest.mark.asyncio
    async def test_missing_signature(self, service, repo):
        result = await service.ingest(b"{}", None)
        assert result.accepted is False
        assert result.reason == RejectionReason.MISSING_SIGNATURE
        assert result.status_code == 400

    @pytest.mark.asyncio
    async def test_invalid_signature_changes_nothing(self, service, billing_provider, repo, make_student):
        student = make_student()
        billing_provider.verify_signature.side_effect = WebhookVerificationError("bad")

        result = await service.ingest(
            delivery("customer.subscription.deleted", {"id": "sub_123", "customer": "cus_123"}),
            "t=1,v1=bad",
        )

        assert result.reason == RejectionReason.INVALID_SIGNATURE
        assert result.status_code == 400
        assert repo.get_student(student.id).subscription_status == SubscriptionStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_malformed_json(self, service):
        result = await service.ingest(b"not json", "t=1,v1=sig")
        assert result.reason == RejectionReason.MALFORMED_EVENT
        assert result.status_code == 400

    @pytest.mark.asyncio
    async def test_handler_failure_returns_500(self, service, repo, make_student):
        make_student()

        def explode(*args, **kwargs):
            raise RuntimeError("store write failed")

        repo.update_student = explode
        result = await service.ingest(
            delivery("customer.subscription.deleted", {"id": "sub_123", "customer": "cus_123"}),
            "t=1,v1=sig",
        )

        assert result.accepted is False
        assert result.reason == RejectionReason.HANDLER_FAILED
        assert result.status_code == 500
        assert result.event_id == "evt_1"


class TestCheckoutCompleted:
    @pytest.mark.asyncio
    async def test_new_customer_creates_pending_enrollment(self, service, repo):
        result = await service.ingest(
            delivery("checkout.session.completed", {
                "id": "cs_1",
                "customer": "cus_new",
                "subscription": "sub_new",
                "customer_details": {"email": "new@example.com", "name": "New Student"},
                "metadata": {"price_id": "price_self_paced"},
            }),
            "t=1,v1=sig",
        )

        assert result.accepted and result.handled
        pending = repo.get_pending_enrollment("new@example.com")
        assert pending is not None
        assert pending.tier == StudentTier.SELF_PACED
        assert pending.billing_customer_ref == "cus_new"
        assert pending.billing_subscription_ref == "sub_new"
        assert pending.checkout_session_ref == "cs_1"
        assert repo.get_student_by_email("new@example.com") is None

    @pytest.mark.asyncio
    async def test_redelivery_keeps_single_pending_enrollment(self, service, repo):
        payload = delivery("checkout.session.completed", {
            "id": "cs_1",
            "customer": "cus_new",
            "customer_details": {"email": "new@example.com"},
        })
        await service.ingest(payload, "t=1,v1=sig")
        await service.ingest(payload, "t=1,v1=sig")
        assert len(repo._pending) == 1

    @pytest.mark.asyncio
    async def test_price_looked_up_from_provider(self, service, billing_provider, repo):
        billing_provider.get_checkout_price_id.return_value = "price_self_paced_installment"
        await service.ingest(
            delivery("checkout.session.completed", {
                "id": "cs_1",
                "customer_details": {"email": "new@example.com"},
            }),
            "t=1,v1=sig",
        )
        billing_provider.get_checkout_price_id.assert_called_once_with("cs_1")
        assert repo.get_pending_enrollment("new@example.com").tier == StudentTier.SELF_PACED

    @pytest.mark.asyncio
    async def test_existing_student_reactivated(self, service, repo, make_student):
        student = make_student(status=SubscriptionStatus.CANCELED)
        await service.ingest(
            delivery("checkout.session.completed", {
                "id": "cs_2",
                "customer": "cus_again",
                "subscription": "sub_again",
                "customer_details": {"email": "ada@example.com"},
                "metadata": {"price_id": "price_other"},
            }),
            "t=1,v1=sig",
        )
        updated = repo.get_student(student.id)
        assert updated.subscription_status == SubscriptionStatus.ACTIVE
        assert updated.billing_customer_ref == "cus_again"
        assert updated.tier == StudentTier.MENTORSHIP
        assert repo.get_pending_enrollment("ada@example.com") is None

    @pytest.mark.asyncio
    async def test_no_email_is_ignored(self, service, repo):
        result = await service.ingest(
            delivery("checkout.session.completed", {"id": "cs_1"}),
            "t=1,v1=sig",
        )
        assert result.accepted
        assert repo._pending == {}


class TestInvoiceEvents:
    @pytest.mark.asyncio
    async def test_payment_failed_marks_past_due_and_records_amount(self, service, repo, make_student):
        student = make_student()

        result = await service.ingest(
            delivery("invoice.payment_failed", {"id": "in_1", "customer": "cus_123", "amount_due": 4900}),
            "t=1,v1=sig",
        )

        assert result.status_code == 200
        assert repo.get_student(student.id).subscription_status == SubscriptionStatus.PAST_DUE
        payments = repo.list_payments(student.id)
        assert len(payments) == 1
        assert payments[0].amount == Decimal("49.00")
        assert payments[0].status.value == "failed"
        assert payments[0].description == "Subscription payment failed"

    @pytest.mark.asyncio
    async def test_payment_succeeded_is_idempotent(self, service, repo, make_student):
        student = make_student(status=SubscriptionStatus.PAST_DUE)
        payload = delivery(
            "invoice.payment_succeeded",
            {"id": "in_2", "customer": "cus_123", "amount_paid": 9900},
        )

        await service.ingest(payload, "t=1,v1=sig")
        first = repo.get_student(student.id)
        await service.ingest(payload, "t=1,v1=sig")

        assert repo.get_student(student.id).subscription_status == SubscriptionStatus.ACTIVE
        assert first.subscription_status == SubscriptionStatus.ACTIVE
        payments = repo.list_payments(student.id)
        assert len(payments) == 1
        assert payments[0].amount == Decimal("99.00")
        assert payments[0].description == "Subscription payment"

    @pytest.mark.asyncio
    async def test_failed_then_succeeded_same_invoice_records_both(self, service, repo, make_student):
        student = make_student()
        await service.ingest(
            delivery("invoice.payment_failed", {"id": "in_3", "customer": "cus_123", "amount_due": 100}),
            "t=1,v1=sig",
        )
        await service.ingest(
            delivery("invoice.payment_succeeded", {"id": "in_3", "customer": "cus_123", "amount_paid": 100}, event_id="evt_2"),
            "t=1,v1=sig",
        )
        assert len(repo.list_payments(student.id)) == 2
        assert repo.get_student(student.id).subscription_status == SubscriptionStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_unknown_customer_is_noop(self, service, repo, make_student):
        student = make_student()
        result = await service.ingest(
            delivery("invoice.payment_failed", {"id": "in_1", "customer": "cus_other", "amount_due": 100}),
            "t=1,v1=sig",
        )
        assert result.accepted
        assert repo.get_student(student.id).subscription_status == SubscriptionStatus.ACTIVE
        assert repo.list_payments(student.id) == []


class TestSubscriptionEvents:
    @pytest.mark.asyncio
    async def test_deleted_cancels(self, service, repo, make_student):
        student = make_student()
        await service.ingest(
            delivery("customer.subscription.deleted", {"id": "sub_123", "customer": "cus_123"}),
            "t=1,v1=sig",
        )
        assert repo.get_student(student.id).subscription_status == SubscriptionStatus.CANCELED

    @pytest.mark.asyncio
    async def test_updated_maps_status(self, service, repo, make_student):
        student = make_student()
        await service.ingest(
            delivery("customer.subscription.updated", {"id": "sub_123", "customer": "cus_123", "status": "unpaid"}),
            "t=1,v1=sig",
        )
        assert repo.get_student(student.id).subscription_status == SubscriptionStatus.CANCELED

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "event_type, obj",
        [
            ("invoice.payment_succeeded", {"id": "in_9", "customer": "cus_123", "amount_paid": 100}),
            ("invoice.payment_failed", {"id": "in_9", "customer": "cus_123", "amount_due": 100}),
            ("customer.subscription.updated", {"id": "sub_123", "customer": "cus_123", "status": "active"}),
        ],
    )
    async def test_canceled_is_terminal_for_webhooks(self, service, repo, make_student, event_type, obj):
        student = make_student(status=SubscriptionStatus.CANCELED)
        await service.ingest(delivery(event_type, obj), "t=1,v1=sig")
        assert repo.get_student(student.id).subscription_status == SubscriptionStatus.CANCELED


class TestUnrecognizedEvents:
    @pytest.mark.asyncio
    async def test_unknown_type_acknowledged(self, service, repo, make_student):
        student = make_student()
        result = await service.ingest(
            delivery("customer.created", {"id": "cus_123"}),
            "t=1,v1=sig",
        )
        assert result.accepted is True
        assert result.handled is False
        assert result.status_code == 200
        assert repo.get_student(student.id).subscription_status == SubscriptionStatus.ACTIVE


class TestStaleEvents:
    @pytest.mark.asyncio
    async def test_stale_event_skipped_when_enabled(self, billing_provider, repo, settings, make_student):
        service = BillingWebhookService(
            billing_provider,
            repo,
            settings.model_copy(update={"reject_stale_billing_events": True}),
        )
        student = make_student()
        an_hour_ago = int((datetime.now(timezone.utc) - timedelta(hours=1)).timestamp())

        await service.ingest(
            delivery("invoice.payment_failed", {"id": "in_1", "customer": "cus_123"}, created=an_hour_ago),
            "t=1,v1=sig",
        )

        assert repo.get_student(student.id).subscription_status == SubscriptionStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_stale_event_applied_by_default(self, service, repo, make_student):
        student = make_student()
        an_hour_ago = int((datetime.now(timezone.utc) - timedelta(hours=1)).timestamp())

        await service.ingest(
            delivery("invoice.payment_failed", {"id": "in_1", "customer": "cus_123"}, created=an_hour_ago),
            "t=1,v1=sig",
        )

        assert repo.get_student(student.id).subscription_status == SubscriptionStatus.PAST_DUE
