"""Channel allocation: one dedicated routing channel per active seller."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from django.db import DatabaseError, transaction

from core.exceptions import PreconditionError
from sellers.models import Seller

from .models import DEFAULT_CHANNEL_CODE, Channel

logger = logging.getLogger("marketplace")


@dataclass
class ChannelBackfillResult:
    """Result payload for a channel backfill run."""

    allocated_count: int = 0
    allocated_ids: list[int] = field(default_factory=list)
    failed_count: int = 0
    failures: list[dict] = field(default_factory=list)


@transaction.atomic
def allocate_channel(seller) -> Channel:
    """Return the seller's channel, creating and linking one if needed.

    A seller that already has a channel gets it back unchanged. Otherwise the
    seller must be active, else ``PreconditionError`` is raised.
    """
    locked = (
        Seller.objects
        .select_for_update()
        .select_related("channel")
        .get(pk=seller.pk)
    )

    if locked.channel_id is not None:
        seller.channel = locked.channel
        return locked.channel

    if not locked.is_active:
        raise PreconditionError(
            "Impossible d'attribuer un canal a un vendeur inactif.",
            seller_id=locked.pk,
        )

    channel, created = Channel.objects.get_or_create(
        code=Channel.code_for_seller(locked.pk),
        defaults={"token": Channel.token_for_seller(locked.pk)},
    )
    locked.channel = channel
    locked.save(update_fields=["channel", "updated_at"])
    seller.channel = channel

    logger.info(
        "Channel %s %s for seller %s",
        channel.code,
        "created" if created else "relinked",
        locked.pk,
    )
    return channel


def get_default_channel() -> Channel:
    """Return the platform default channel, creating it on first access."""
    channel, _created = Channel.objects.get_or_create(
        is_default=True,
        defaults={"code": DEFAULT_CHANNEL_CODE, "token": f"{DEFAULT_CHANNEL_CODE}-token"},
    )
    return channel


def resolve_seller_channel(seller) -> Channel:
    """Channel an order line sold by ``seller`` is routed to.

    Falls back to the default channel while the seller has no channel,
    including after its channel was deleted.
    """
    if seller.channel_id is not None:
        channel = Channel.objects.filter(pk=seller.channel_id).first()
        if channel is not None:
            return channel
    return get_default_channel()


def backfill_seller_channels(*, seller_ids=None) -> ChannelBackfillResult:
    """Allocate channels for every active seller that has none.

    Failures are logged and collected; one failing seller does not stop the
    batch.
    """
    qs = (
        Seller.objects
        .filter(is_active=True, channel__isnull=True)
        .order_by("created_at", "pk")
    )
    if seller_ids:
        qs = qs.filter(pk__in=seller_ids)

    result = ChannelBackfillResult()
    for seller in qs:
        try:
            channel = allocate_channel(seller)
        except (PreconditionError, DatabaseError) as exc:
            result.failures.append({"seller_id": seller.pk, "error": str(exc)})
            logger.exception("Channel backfill failed for seller %s", seller.pk)
            continue
        result.allocated_ids.append(channel.pk)

    result.allocated_count = len(result.allocated_ids)
    result.failed_count = len(result.failures)
    logger.info(
        "Channel backfill allocated=%s failed=%s",
        result.allocated_count,
        result.failed_count,
    )
    return result
