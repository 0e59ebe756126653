"""Business logic for seller registration, profile updates and verification."""
from __future__ import annotations

import logging

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from core.exceptions import ConflictError, SchemaViolation
from routing.services import allocate_channel

from .models import COMPANY_FIELDS, INDIVIDUAL_FIELDS, Seller

logger = logging.getLogger("marketplace")

EDITABLE_FIELDS = ("name", "email", "commission_rate") + INDIVIDUAL_FIELDS + COMPANY_FIELDS


def _normalize(value):
    if isinstance(value, str):
        return value.strip()
    return value


def _apply_changes(seller: Seller, changes: dict):
    unknown = sorted(set(changes) - set(EDITABLE_FIELDS))
    if unknown:
        raise SchemaViolation({key: "Champ inconnu." for key in unknown})
    for key, value in changes.items():
        setattr(seller, key, _normalize(value))


def _validate(seller: Seller):
    """Run field + variant validation, reported as ``SchemaViolation``."""
    try:
        seller.full_clean(validate_unique=False, validate_constraints=False)
    except ValidationError as exc:
        raise SchemaViolation(exc.message_dict) from exc


def _vat_in_use(seller: Seller) -> bool:
    if not seller.is_company or not seller.vat_number:
        return False
    return (
        Seller.objects
        .filter(seller_type=Seller.SellerType.COMPANY, vat_number=seller.vat_number)
        .exclude(pk=seller.pk)
        .exists()
    )


def _save(seller: Seller, **kwargs):
    """Persist ``seller`` translating a VAT uniqueness race into ConflictError."""
    if _vat_in_use(seller):
        raise ConflictError(
            "Ce numero de TVA est deja utilise par une autre entreprise.",
            vat_number=seller.vat_number,
        )
    try:
        with transaction.atomic():
            seller.save(**kwargs)
    except IntegrityError as exc:
        if _vat_in_use(seller):
            raise ConflictError(
                "Ce numero de TVA est deja utilise par une autre entreprise.",
                vat_number=seller.vat_number,
            ) from exc
        raise


# ---------------------------------------------------------------------------
# register_seller
# ---------------------------------------------------------------------------

def register_seller(*, seller_type, name, email, **payload) -> Seller:
    """Create a new, unverified and inactive seller without channel.

    Parameters
    ----------
    seller_type : str
        ``Seller.SellerType.INDIVIDUAL`` or ``Seller.SellerType.COMPANY``.
    name, email : str
        Shared, always required.
    **payload
        Variant fields (``first_name``/``last_name``/``birth_date`` or
        ``company_name``/``vat_number``/``legal_form``) and optionally
        ``commission_rate``.

    Raises
    ------
    SchemaViolation
        Required shared or variant fields are missing or invalid.
    ConflictError
        The Company ``vat_number`` is already registered.
    """
    seller = Seller(
        seller_type=seller_type,
        verification_status=Seller.VerificationStatus.PENDING,
        is_active=False,
    )
    _apply_changes(seller, {"name": name, "email": email, **payload})
    _validate(seller)
    _save(seller)

    logger.info("Seller registered: %s type=%s", seller.pk, seller.seller_type)
    return seller


# ---------------------------------------------------------------------------
# update_seller_profile
# ---------------------------------------------------------------------------

@transaction.atomic
def update_seller_profile(seller: Seller, **changes) -> Seller:
    """Update shared and variant fields. The seller type is fixed."""
    locked = Seller.objects.select_for_update().get(pk=seller.pk)

    new_type = changes.pop("seller_type", locked.seller_type)
    if new_type != locked.seller_type:
        raise SchemaViolation(
            {"seller_type": "Le type de vendeur ne peut pas etre modifie."}
        )

    _apply_changes(locked, changes)
    _validate(locked)
    _save(locked)

    logger.info("Seller profile updated: %s fields=%s", locked.pk, sorted(changes))
    return locked


# ---------------------------------------------------------------------------
# Verification workflow
# ---------------------------------------------------------------------------

@transaction.atomic
def verify_seller(seller: Seller) -> Seller:
    """Mark the seller verified and active, then allocate its channel."""
    locked = Seller.objects.select_for_update().get(pk=seller.pk)
    locked.verification_status = Seller.VerificationStatus.VERIFIED
    locked.is_active = True
    locked.verified_at = timezone.now()
    locked.rejection_reason = ""
    locked.save(
        update_fields=[
            "verification_status",
            "is_active",
            "verified_at",
            "rejection_reason",
            "updated_at",
        ]
    )
    allocate_channel(locked)

    logger.info("Seller verified: %s channel=%s", locked.pk, locked.channel_id)
    return locked


@transaction.atomic
def reject_seller(seller: Seller, *, reason: str = "") -> Seller:
    locked = Seller.objects.select_for_update().get(pk=seller.pk)
    locked.verification_status = Seller.VerificationStatus.REJECTED
    locked.is_active = False
    locked.rejection_reason = (reason or "").strip()
    locked.save(
        update_fields=["verification_status", "is_active", "rejection_reason", "updated_at"]
    )
    logger.info("Seller rejected: %s", locked.pk)
    return locked


@transaction.atomic
def suspend_seller(seller: Seller) -> Seller:
    locked = Seller.objects.select_for_update().get(pk=seller.pk)
    locked.verification_status = Seller.VerificationStatus.SUSPENDED
    locked.is_active = False
    locked.save(update_fields=["verification_status", "is_active", "updated_at"])
    logger.info("Seller suspended: %s", locked.pk)
    return locked


def deactivate_seller(seller: Seller) -> Seller:
    """Deactivate without touching the verification status. Sellers are never deleted."""
    Seller.objects.filter(pk=seller.pk).update(is_active=False, updated_at=timezone.now())
    seller.refresh_from_db(fields=["is_active", "updated_at"])
    logger.info("Seller deactivated: %s", seller.pk)
    return seller
