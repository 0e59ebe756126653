"""Models for the sellers app.

A seller is one row tagged by ``seller_type``.  The shared columns hold the
base contract (name, email, verification, activation, channel); the variant
columns hold either the Individual or the Company payload, never both.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from core.models import TimeStampedModel


@dataclass(frozen=True)
class IndividualProfile:
    first_name: str
    last_name: str
    birth_date: date | None = None


@dataclass(frozen=True)
class CompanyProfile:
    company_name: str
    vat_number: str | None = None
    legal_form: str | None = None


INDIVIDUAL_FIELDS = ("first_name", "last_name", "birth_date")
COMPANY_FIELDS = ("company_name", "vat_number", "legal_form")


class Seller(TimeStampedModel):
    """Marketplace participant receiving payouts."""

    class SellerType(models.TextChoices):
        INDIVIDUAL = "INDIVIDUAL", "Particulier"
        COMPANY = "COMPANY", "Entreprise"

    class VerificationStatus(models.TextChoices):
        PENDING = "PENDING", "En attente"
        VERIFIED = "VERIFIED", "Verifie"
        REJECTED = "REJECTED", "Rejete"
        SUSPENDED = "SUSPENDED", "Suspendu"

    class LegalForm(models.TextChoices):
        LLC = "LLC", "SARL"
        INC = "INC", "Inc."
        CORPORATION = "CORPORATION", "Societe anonyme"
        PARTNERSHIP = "PARTNERSHIP", "Societe de personnes"
        SOLE_PROPRIETORSHIP = "SOLE_PROPRIETORSHIP", "Entreprise individuelle"
        OTHER = "OTHER", "Autre"

    seller_type = models.CharField(
        "type de vendeur",
        max_length=20,
        choices=SellerType.choices,
        default=SellerType.INDIVIDUAL,
        db_index=True,
    )
    name = models.CharField("nom", max_length=100)
    email = models.EmailField("email", max_length=200)
    verification_status = models.CharField(
        "statut de verification",
        max_length=20,
        choices=VerificationStatus.choices,
        default=VerificationStatus.PENDING,
        db_index=True,
    )
    is_active = models.BooleanField("actif", default=False)
    verified_at = models.DateTimeField("verifie le", null=True, blank=True)
    rejection_reason = models.TextField("motif de rejet", blank=True, default="")
    channel = models.OneToOneField(
        "routing.Channel",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="seller",
        verbose_name="canal",
    )
    commission_rate = models.DecimalField(
        "taux de commission",
        max_digits=5,
        decimal_places=4,
        null=True,
        blank=True,
        help_text="Entre 0 et 1 (0.15 = 15%). Vide = taux par defaut.",
    )

    # Individual payload
    first_name = models.CharField("prenom", max_length=100, null=True, blank=True)
    last_name = models.CharField("nom de famille", max_length=100, null=True, blank=True)
    birth_date = models.DateField("date de naissance", null=True, blank=True)

    # Company payload
    company_name = models.CharField("raison sociale", max_length=200, null=True, blank=True)
    vat_number = models.CharField("numero de TVA", max_length=100, null=True, blank=True)
    legal_form = models.CharField(
        "forme juridique",
        max_length=50,
        choices=LegalForm.choices,
        null=True,
        blank=True,
    )

    class Meta:
        verbose_name = "vendeur"
        verbose_name_plural = "vendeurs"
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["vat_number"],
                condition=Q(seller_type="COMPANY", vat_number__isnull=False),
                name="uniq_company_seller_vat_number",
            ),
            models.CheckConstraint(
                condition=~Q(name=""),
                name="seller_name_not_empty",
            ),
            models.CheckConstraint(
                condition=~Q(email=""),
                name="seller_email_not_empty",
            ),
            models.CheckConstraint(
                condition=~Q(seller_type="COMPANY")
                | (Q(company_name__isnull=False) & ~Q(company_name="")),
                name="company_seller_has_company_name",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.get_seller_type_display()})"

    def clean(self):
        """Enforce the variant rules and clear the other variant's columns."""
        errors = {}
        if self.seller_type == self.SellerType.INDIVIDUAL:
            if not self.first_name:
                errors["first_name"] = "Le prenom est obligatoire pour un particulier."
            if not self.last_name:
                errors["last_name"] = "Le nom de famille est obligatoire pour un particulier."
            for field_name in COMPANY_FIELDS:
                setattr(self, field_name, None)
        elif self.seller_type == self.SellerType.COMPANY:
            if not self.company_name:
                errors["company_name"] = "La raison sociale est obligatoire pour une entreprise."
            self.vat_number = self.vat_number or None
            self.legal_form = self.legal_form or None
            for field_name in INDIVIDUAL_FIELDS:
                setattr(self, field_name, None)

        if isinstance(self.commission_rate, Decimal) and not 0 <= self.commission_rate <= 1:
            errors["commission_rate"] = "Le taux de commission doit etre compris entre 0 et 1."

        if errors:
            raise ValidationError(errors)

    # ------------------------------------------------------------------
    # Polymorphic view
    # ------------------------------------------------------------------

    @property
    def is_company(self) -> bool:
        return self.seller_type == self.SellerType.COMPANY

    @property
    def profile(self) -> IndividualProfile | CompanyProfile:
        """The variant payload selected by ``seller_type``."""
        if self.is_company:
            return CompanyProfile(
                company_name=self.company_name,
                vat_number=self.vat_number,
                legal_form=self.legal_form,
            )
        return IndividualProfile(
            first_name=self.first_name,
            last_name=self.last_name,
            birth_date=self.birth_date,
        )

    @property
    def capabilities(self) -> list[str]:
        tags = ["company" if self.is_company else "individual"]
        if self.channel_id is not None:
            tags.append("routable")
        if self.is_active and self.verification_status == self.VerificationStatus.VERIFIED:
            tags.append("payable")
        return tags
