"""Settlement ledger: payout accrual and the payout state machine.

Every state change locks the affected payout rows with ``select_for_update()``
so concurrent workflows cannot transition the same payout twice.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Count, Sum
from django.utils import timezone

from core.exceptions import PreconditionError, SchemaViolation, TransientStorageError

from .models import Payout

logger = logging.getLogger("marketplace")

STATUS_TIMESTAMP_FIELDS = {
    Payout.Status.PENDING: "released_at",
    Payout.Status.APPROVED: "approved_at",
    Payout.Status.PAID: "paid_at",
    Payout.Status.REJECTED: "rejected_at",
}


@dataclass
class LedgerBatchResult:
    """Aggregate over a set of payouts."""

    total_processed: int = 0
    sellers_affected: int = 0
    total_amount: int = 0


def _summarize(payouts) -> LedgerBatchResult:
    return LedgerBatchResult(
        total_processed=len(payouts),
        sellers_affected=len({p.seller_id for p in payouts}),
        total_amount=sum(p.amount for p in payouts),
    )


def _is_minor_units(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


# ---------------------------------------------------------------------------
# create_payout
# ---------------------------------------------------------------------------

def create_payout(*, seller, order_reference, amount, commission=0) -> Payout:
    """Accrue a HOLD payout for ``seller`` on ``order_reference``.

    A payout already recorded for the same seller and order is returned
    unchanged, so repeated order events never accrue twice.
    """
    errors = {}
    reference = str(order_reference or "").strip()
    if not reference:
        errors["order_reference"] = "La reference de commande est obligatoire."
    if not _is_minor_units(amount) or amount <= 0:
        errors["amount"] = "Le montant doit etre un entier strictement positif (unites mineures)."
    if not _is_minor_units(commission) or commission < 0:
        errors["commission"] = "La commission doit etre un entier positif ou nul (unites mineures)."
    if errors:
        raise SchemaViolation(errors)

    existing = Payout.objects.filter(seller=seller, order_reference=reference).first()
    if existing is not None:
        return existing

    try:
        with transaction.atomic():
            payout = Payout.objects.create(
                seller=seller,
                order_reference=reference,
                amount=amount,
                commission=commission,
                status=Payout.Status.HOLD,
            )
    except IntegrityError:
        # Concurrent accrual for the same order committed first.
        return Payout.objects.get(seller=seller, order_reference=reference)

    logger.info(
        "Payout accrued: %s seller=%s order=%s amount=%s",
        payout.pk,
        seller.pk,
        reference,
        amount,
    )
    return payout


# ---------------------------------------------------------------------------
# Commission
# ---------------------------------------------------------------------------

def get_commission_rate(seller) -> Decimal:
    """The seller's own rate, or ``PAYOUT_DEFAULT_COMMISSION_RATE`` when unset."""
    if seller.commission_rate is not None:
        return Decimal(seller.commission_rate)
    return Decimal(str(settings.PAYOUT_DEFAULT_COMMISSION_RATE))


def calculate_commission(order_total: int, rate) -> int:
    """Commission on ``order_total`` minor units, rounded half up to a whole unit."""
    if not _is_minor_units(order_total) or order_total <= 0:
        raise SchemaViolation(
            {"order_total": "Le total de commande doit etre un entier strictement positif."}
        )
    try:
        rate = Decimal(str(rate))
    except InvalidOperation as exc:
        raise SchemaViolation({"commission_rate": "Taux de commission invalide."}) from exc
    if not rate.is_finite() or not Decimal("0") <= rate <= Decimal("1"):
        raise SchemaViolation(
            {"commission_rate": "Le taux de commission doit etre compris entre 0 et 1."}
        )
    return int((Decimal(order_total) * rate).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def accrue_order_payout(*, seller, order_reference, order_total: int) -> Payout:
    """Accrue the seller's share of a paid order as a HOLD payout.

    The commission is taken at the seller's rate (or the platform default) and
    the payout amount is what remains of ``order_total``.
    """
    rate = get_commission_rate(seller)
    commission = calculate_commission(order_total, rate)
    logger.debug(
        "Commission for seller %s order=%s rate=%s commission=%s",
        seller.pk,
        order_reference,
        rate,
        commission,
    )
    return create_payout(
        seller=seller,
        order_reference=order_reference,
        amount=order_total - commission,
        commission=commission,
    )


# ---------------------------------------------------------------------------
# State machine
# ---------------------------------------------------------------------------

@transaction.atomic
def transition_payout(payout, new_status, *, reason: str = "", now=None) -> Payout:
    """Move one payout along the state machine.

    Raises ``PreconditionError`` for any transition not listed in
    ``Payout.ALLOWED_TRANSITIONS``.
    """
    locked = Payout.objects.select_for_update().get(pk=payout.pk)
    if not locked.can_transition_to(new_status):
        raise PreconditionError(
            f"Transition {locked.status} -> {new_status} non autorisee.",
            payout_id=locked.pk,
        )

    timestamp_field = STATUS_TIMESTAMP_FIELDS[new_status]
    locked.status = new_status
    setattr(locked, timestamp_field, now or timezone.now())
    update_fields = ["status", timestamp_field, "updated_at"]
    if new_status == Payout.Status.REJECTED:
        locked.failure_reason = (reason or "").strip()
        update_fields.append("failure_reason")
    locked.save(update_fields=update_fields)

    logger.info("Payout %s transitioned to %s", locked.pk, new_status)
    return locked


def release_payout(payout) -> Payout:
    return transition_payout(payout, Payout.Status.PENDING)


def approve_payout(payout) -> Payout:
    return transition_payout(payout, Payout.Status.APPROVED)


def mark_payout_paid(payout) -> Payout:
    return transition_payout(payout, Payout.Status.PAID)


def reject_payout(payout, *, reason: str = "") -> Payout:
    return transition_payout(payout, Payout.Status.REJECTED, reason=reason)


# ---------------------------------------------------------------------------
# process_scheduled_payouts
# ---------------------------------------------------------------------------

@transaction.atomic
def process_scheduled_payouts(*, now=None) -> LedgerBatchResult:
    """Release every HOLD payout to PENDING as one all-or-nothing batch.

    Payouts outside HOLD are untouched and excluded from the aggregate.
    A seller with several HOLD payouts counts once in ``sellers_affected``.
    """
    released_at = now or timezone.now()
    held = list(
        Payout.objects
        .select_for_update()
        .filter(status=Payout.Status.HOLD)
        .only("id", "seller_id", "amount")
        .order_by("pk")
    )
    if not held:
        return LedgerBatchResult()

    updated = (
        Payout.objects
        .filter(pk__in=[p.pk for p in held], status=Payout.Status.HOLD)
        .update(
            status=Payout.Status.PENDING,
            released_at=released_at,
            updated_at=released_at,
        )
    )
    if updated != len(held):
        # Rolls back the whole batch.
        raise TransientStorageError(
            "Le lot de versements a ete modifie pendant le traitement.",
            expected=len(held),
            updated=updated,
        )

    result = _summarize(held)
    logger.info(
        "Scheduled payouts released=%s sellers=%s amount=%s",
        result.total_processed,
        result.sellers_affected,
        result.total_amount,
    )
    return result


def get_scheduled_payout_stats() -> LedgerBatchResult:
    """What ``process_scheduled_payouts`` would release right now."""
    stats = Payout.objects.filter(status=Payout.Status.HOLD).aggregate(
        count=Count("id"),
        sellers=Count("seller", distinct=True),
        total=Sum("amount"),
    )
    return LedgerBatchResult(
        total_processed=stats["count"] or 0,
        sellers_affected=stats["sellers"] or 0,
        total_amount=stats["total"] or 0,
    )


# ---------------------------------------------------------------------------
# Seller-initiated release
# ---------------------------------------------------------------------------

def get_pending_payout_total(seller) -> int:
    """Sum of the seller's HOLD and PENDING payouts, in minor units."""
    total = (
        Payout.objects
        .filter(seller=seller, status__in=[Payout.Status.HOLD, Payout.Status.PENDING])
        .aggregate(total=Sum("amount"))["total"]
    )
    return total or 0


@transaction.atomic
def request_payout(seller, *, minimum_threshold: int | None = None) -> list[Payout]:
    """Release all of one seller's HOLD payouts if their total meets the threshold.

    The threshold check and the release run on the same locked rows.
    """
    if minimum_threshold is None:
        minimum_threshold = settings.PAYOUT_MINIMUM_THRESHOLD

    held = list(
        Payout.objects
        .select_for_update()
        .filter(seller=seller, status=Payout.Status.HOLD)
        .order_by("pk")
    )
    held_total = sum(p.amount for p in held)
    if held_total < minimum_threshold:
        raise PreconditionError(
            "Le seuil minimum de versement n'est pas atteint.",
            seller_id=seller.pk,
            total=held_total,
            threshold=minimum_threshold,
        )
    if not held:
        raise PreconditionError(
            "Aucun versement disponible pour une demande.",
            seller_id=seller.pk,
        )

    released_at = timezone.now()
    Payout.objects.filter(pk__in=[p.pk for p in held]).update(
        status=Payout.Status.PENDING,
        released_at=released_at,
        updated_at=released_at,
    )
    for payout in held:
        payout.status = Payout.Status.PENDING
        payout.released_at = released_at

    logger.info(
        "Payout requested by seller %s: %s payout(s), amount=%s",
        seller.pk,
        len(held),
        held_total,
    )
    return held
