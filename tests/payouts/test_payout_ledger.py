from decimal import Decimal

import pytest
from django.db.models import ProtectedError
from django.test import override_settings

from core.exceptions import PreconditionError, SchemaViolation
from payouts.models import Payout
from payouts.services import (
    accrue_order_payout,
    approve_payout,
    calculate_commission,
    create_payout,
    get_commission_rate,
    get_pending_payout_total,
    get_scheduled_payout_stats,
    mark_payout_paid,
    process_scheduled_payouts,
    reject_payout,
    release_payout,
    request_payout,
)


@pytest.mark.django_db
class TestCreatePayout:
    def test_accrues_in_hold(self, verified_seller):
        payout = create_payout(seller=verified_seller, order_reference="ORD-1", amount=2500, commission=250)
        assert payout.status == Payout.Status.HOLD
        assert payout.amount == 2500
        assert payout.commission == 250

    def test_duplicate_order_returns_existing(self, verified_seller):
        first = create_payout(seller=verified_seller, order_reference="ORD-1", amount=2500)
        second = create_payout(seller=verified_seller, order_reference="ORD-1", amount=9999)
        assert second.pk == first.pk
        assert second.amount == 2500
        assert Payout.objects.count() == 1

    @pytest.mark.parametrize("amount", [0, -5, 10.5, "100", True])
    def test_amount_must_be_positive_minor_units(self, verified_seller, amount):
        with pytest.raises(SchemaViolation):
            create_payout(seller=verified_seller, order_reference="ORD-1", amount=amount)
        assert Payout.objects.count() == 0

    def test_order_reference_required(self, verified_seller):
        with pytest.raises(SchemaViolation):
            create_payout(seller=verified_seller, order_reference="  ", amount=100)

    def test_amount_is_immutable(self, verified_seller):
        payout = create_payout(seller=verified_seller, order_reference="ORD-1", amount=100)
        payout.amount = 200
        with pytest.raises(SchemaViolation):
            payout.save()
        payout.refresh_from_db()
        assert payout.amount == 100

    def test_seller_with_payouts_cannot_be_deleted(self, verified_seller):
        create_payout(seller=verified_seller, order_reference="ORD-1", amount=100)
        with pytest.raises(ProtectedError):
            verified_seller.delete()


@pytest.mark.django_db
class TestOrderAccrual:
    @override_settings(PAYOUT_DEFAULT_COMMISSION_RATE=Decimal("0.15"))
    def test_default_rate_applies_when_seller_has_none(self, verified_seller):
        assert verified_seller.commission_rate is None

        payout = accrue_order_payout(seller=verified_seller, order_reference="ORD-1", order_total=10000)

        assert payout.commission == 1500
        assert payout.amount == 8500
        assert payout.status == Payout.Status.HOLD

    @override_settings(PAYOUT_DEFAULT_COMMISSION_RATE=Decimal("0.15"))
    def test_seller_rate_overrides_default(self, verified_seller):
        verified_seller.commission_rate = Decimal("0.0800")
        verified_seller.save(update_fields=["commission_rate"])

        payout = accrue_order_payout(seller=verified_seller, order_reference="ORD-1", order_total=10000)

        assert get_commission_rate(verified_seller) == Decimal("0.08")
        assert payout.commission == 800
        assert payout.amount == 9200

    def test_zero_rate_keeps_full_total(self, verified_seller):
        verified_seller.commission_rate = Decimal("0")
        payout = accrue_order_payout(seller=verified_seller, order_reference="ORD-1", order_total=4999)
        assert (payout.amount, payout.commission) == (4999, 0)

    def test_repeated_order_event_accrues_once(self, verified_seller):
        first = accrue_order_payout(seller=verified_seller, order_reference="ORD-1", order_total=10000)
        second = accrue_order_payout(seller=verified_seller, order_reference="ORD-1", order_total=10000)
        assert first.pk == second.pk
        assert Payout.objects.count() == 1

    @pytest.mark.parametrize(
        "order_total, rate, expected",
        [(10000, "0.15", 1500), (333, "0.15", 50), (1, "0.5", 1), (999, "1", 999)],
    )
    def test_commission_rounds_half_up(self, order_total, rate, expected):
        assert calculate_commission(order_total, Decimal(rate)) == expected

    @pytest.mark.parametrize("order_total, rate", [(0, "0.1"), (100, "1.2"), (100, "-0.1"), (100, "abc")])
    def test_invalid_commission_inputs(self, order_total, rate):
        with pytest.raises(SchemaViolation):
            calculate_commission(order_total, rate)


@pytest.mark.django_db
class TestPayoutStateMachine:
    def test_full_happy_path(self, verified_seller, make_payout):
        payout = make_payout(verified_seller)

        payout = release_payout(payout)
        assert payout.status == Payout.Status.PENDING
        assert payout.released_at is not None

        payout = approve_payout(payout)
        assert payout.status == Payout.Status.APPROVED
        assert payout.approved_at is not None

        payout = mark_payout_paid(payout)
        assert payout.status == Payout.Status.PAID
        assert payout.paid_at is not None

    def test_reject_records_reason(self, verified_seller, make_payout):
        payout = make_payout(verified_seller, status=Payout.Status.PENDING)
        payout = reject_payout(payout, reason="IBAN invalide")
        assert payout.status == Payout.Status.REJECTED
        assert payout.failure_reason == "IBAN invalide"
        assert payout.rejected_at is not None

    @pytest.mark.parametrize(
        "status, transition",
        [
            (Payout.Status.HOLD, approve_payout),
            (Payout.Status.HOLD, mark_payout_paid),
            (Payout.Status.PENDING, mark_payout_paid),
            (Payout.Status.PAID, reject_payout),
            (Payout.Status.REJECTED, release_payout),
        ],
    )
    def test_illegal_transitions(self, verified_seller, make_payout, status, transition):
        payout = make_payout(verified_seller, status=status)
        with pytest.raises(PreconditionError):
            transition(payout)
        payout.refresh_from_db()
        assert payout.status == status


@pytest.mark.django_db
class TestProcessScheduledPayouts:
    def test_releases_every_hold_payout(self, verified_seller, company_seller, make_payout):
        make_payout(verified_seller, amount=1000)
        make_payout(verified_seller, amount=500)
        make_payout(company_seller, amount=250)
        untouched = make_payout(verified_seller, amount=7000, status=Payout.Status.APPROVED)

        result = process_scheduled_payouts()

        assert result.total_processed == 3
        assert result.sellers_affected == 2
        assert result.total_amount == 1750
        assert not Payout.objects.filter(status=Payout.Status.HOLD).exists()
        assert Payout.objects.filter(status=Payout.Status.PENDING, released_at__isnull=False).count() == 3
        untouched.refresh_from_db()
        assert untouched.status == Payout.Status.APPROVED

    def test_nothing_to_release(self, verified_seller, make_payout):
        make_payout(verified_seller, status=Payout.Status.PAID)
        result = process_scheduled_payouts()
        assert (result.total_processed, result.sellers_affected, result.total_amount) == (0, 0, 0)

    def test_second_batch_finds_nothing(self, verified_seller, make_payout):
        make_payout(verified_seller)
        process_scheduled_payouts()
        assert process_scheduled_payouts().total_processed == 0

    def test_stats_do_not_mutate(self, verified_seller, company_seller, make_payout):
        make_payout(verified_seller, amount=1000)
        make_payout(company_seller, amount=300)

        stats = get_scheduled_payout_stats()

        assert stats.total_processed == 2
        assert stats.sellers_affected == 2
        assert stats.total_amount == 1300
        assert Payout.objects.filter(status=Payout.Status.HOLD).count() == 2


@pytest.mark.django_db
class TestRequestPayout:
    def test_releases_seller_hold_payouts(self, verified_seller, company_seller, make_payout):
        make_payout(verified_seller, amount=600)
        make_payout(verified_seller, amount=400)
        other = make_payout(company_seller, amount=900)

        released = request_payout(verified_seller, minimum_threshold=1000)

        assert len(released) == 2
        assert all(p.status == Payout.Status.PENDING for p in released)
        other.refresh_from_db()
        assert other.status == Payout.Status.HOLD

    def test_below_threshold_is_refused(self, verified_seller, make_payout):
        make_payout(verified_seller, amount=600)
        with pytest.raises(PreconditionError):
            request_payout(verified_seller, minimum_threshold=1000)
        assert Payout.objects.filter(status=Payout.Status.HOLD).count() == 1

    @override_settings(PAYOUT_MINIMUM_THRESHOLD=0)
    def test_nothing_held_is_refused(self, verified_seller):
        with pytest.raises(PreconditionError):
            request_payout(verified_seller)

    def test_pending_total(self, verified_seller, make_payout):
        make_payout(verified_seller, amount=600)
        make_payout(verified_seller, amount=400, status=Payout.Status.PENDING)
        make_payout(verified_seller, amount=5000, status=Payout.Status.PAID)
        assert get_pending_payout_total(verified_seller) == 1000
