import pytest
from django.core.management import call_command
from django.db import DatabaseError

from core.exceptions import PreconditionError
from routing import services as routing_services
from routing.models import DEFAULT_CHANNEL_CODE, Channel
from routing.services import (
    allocate_channel,
    backfill_seller_channels,
    get_default_channel,
    resolve_seller_channel,
)
from sellers.models import Seller


def _activate_without_channel(seller):
    Seller.objects.filter(pk=seller.pk).update(
        is_active=True,
        verification_status=Seller.VerificationStatus.VERIFIED,
    )
    seller.refresh_from_db()
    return seller


@pytest.mark.django_db
class TestAllocateChannel:
    def test_creates_and_links_channel(self, individual_seller):
        seller = _activate_without_channel(individual_seller)
        channel = allocate_channel(seller)

        assert channel.code == Channel.code_for_seller(seller.pk)
        assert channel.token == Channel.token_for_seller(seller.pk)
        seller.refresh_from_db()
        assert seller.channel_id == channel.pk

    def test_is_idempotent(self, verified_seller):
        first = verified_seller.channel
        second = allocate_channel(verified_seller)
        assert second.pk == first.pk
        assert Channel.objects.filter(is_default=False).count() == 1

    def test_inactive_seller_is_refused(self, individual_seller):
        with pytest.raises(PreconditionError):
            allocate_channel(individual_seller)
        assert Channel.objects.count() == 0

    def test_existing_channel_returned_for_inactive_seller(self, verified_seller):
        channel_id = verified_seller.channel_id
        Seller.objects.filter(pk=verified_seller.pk).update(is_active=False)
        assert allocate_channel(verified_seller).pk == channel_id


@pytest.mark.django_db
class TestChannelDeletion:
    def test_deleting_channel_unlinks_seller(self, verified_seller):
        verified_seller.channel.delete()

        verified_seller.refresh_from_db()
        assert verified_seller.channel_id is None
        assert verified_seller.is_active is True
        assert "routable" not in verified_seller.capabilities

    def test_orders_fall_back_to_default_channel(self, verified_seller):
        own = resolve_seller_channel(verified_seller)
        assert own.pk == verified_seller.channel_id

        verified_seller.channel.delete()
        verified_seller.refresh_from_db()

        fallback = resolve_seller_channel(verified_seller)
        assert fallback.is_default is True
        assert fallback.code == DEFAULT_CHANNEL_CODE

    def test_default_channel_is_unique(self, db):
        assert get_default_channel().pk == get_default_channel().pk
        assert Channel.objects.filter(is_default=True).count() == 1


@pytest.mark.django_db
class TestBackfillSellerChannels:
    def test_allocates_for_active_sellers_only(self, individual_seller, company_seller):
        active = _activate_without_channel(individual_seller)

        result = backfill_seller_channels()

        assert result.allocated_count == 1
        assert result.failed_count == 0
        active.refresh_from_db()
        company_seller.refresh_from_db()
        assert active.channel_id in result.allocated_ids
        assert company_seller.channel_id is None

    def test_failures_are_collected(self, individual_seller, company_seller, monkeypatch):
        _activate_without_channel(individual_seller)
        _activate_without_channel(company_seller)
        real_allocate = routing_services.allocate_channel

        def flaky_allocate(seller):
            if seller.pk == company_seller.pk:
                raise DatabaseError("connection lost")
            return real_allocate(seller)

        monkeypatch.setattr(routing_services, "allocate_channel", flaky_allocate)

        result = backfill_seller_channels()

        assert result.allocated_count == 1
        assert result.failed_count == 1
        assert result.failures[0]["seller_id"] == company_seller.pk

    def test_command_dry_run_changes_nothing(self, individual_seller, capsys):
        _activate_without_channel(individual_seller)

        call_command("backfill_seller_channels")

        assert "[DRY-RUN]" in capsys.readouterr().out
        individual_seller.refresh_from_db()
        assert individual_seller.channel_id is None

    def test_command_apply(self, individual_seller, capsys):
        _activate_without_channel(individual_seller)

        call_command("backfill_seller_channels", "--apply", "--seller", str(individual_seller.pk))

        assert "1 allocated" in capsys.readouterr().out
        individual_seller.refresh_from_db()
        assert individual_seller.channel_id is not None
