"""Models for the payouts app."""
from django.db import models
from django.db.models import Q

from core.exceptions import SchemaViolation
from core.models import TimeStampedModel


class Payout(TimeStampedModel):
    """Amount owed to a seller, tracked from accrual to payment.

    Rows are never deleted; only ``status`` and its timestamps change.
    ``amount`` is expressed in minor units and is immutable once created.
    """

    class Status(models.TextChoices):
        HOLD = "HOLD", "Bloque"
        PENDING = "PENDING", "En attente d'approbation"
        APPROVED = "APPROVED", "Approuve"
        PAID = "PAID", "Paye"
        REJECTED = "REJECTED", "Rejete"

    ALLOWED_TRANSITIONS = {
        Status.HOLD: {Status.PENDING},
        Status.PENDING: {Status.APPROVED, Status.REJECTED},
        Status.APPROVED: {Status.PAID, Status.REJECTED},
        Status.PAID: set(),
        Status.REJECTED: set(),
    }

    seller = models.ForeignKey(
        "sellers.Seller",
        on_delete=models.PROTECT,
        related_name="payouts",
        verbose_name="vendeur",
    )
    order_reference = models.CharField("reference commande", max_length=100)
    amount = models.PositiveBigIntegerField(
        "montant",
        help_text="En unites mineures (centimes).",
    )
    commission = models.PositiveBigIntegerField(
        "commission",
        default=0,
        help_text="Commission deduite, en unites mineures.",
    )
    status = models.CharField(
        "statut",
        max_length=20,
        choices=Status.choices,
        default=Status.HOLD,
        db_index=True,
    )
    released_at = models.DateTimeField("libere le", null=True, blank=True)
    approved_at = models.DateTimeField("approuve le", null=True, blank=True)
    paid_at = models.DateTimeField("paye le", null=True, blank=True)
    rejected_at = models.DateTimeField("rejete le", null=True, blank=True)
    failure_reason = models.TextField("motif", blank=True, default="")

    class Meta:
        verbose_name = "versement vendeur"
        verbose_name_plural = "versements vendeurs"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["seller", "status"], name="payout_seller_status_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["seller", "order_reference"],
                name="uniq_payout_per_seller_order",
            ),
            models.CheckConstraint(
                condition=Q(amount__gt=0),
                name="payout_amount_positive",
            ),
        ]

    def __str__(self):
        return f"Versement {self.order_reference} - {self.amount} ({self.get_status_display()})"

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        instance._loaded_amount = instance.__dict__.get("amount")
        return instance

    def save(self, *args, **kwargs):
        loaded = getattr(self, "_loaded_amount", None)
        if not self._state.adding and loaded is not None and self.amount != loaded:
            raise SchemaViolation({"amount": "Le montant d'un versement ne peut pas etre modifie."})
        super().save(*args, **kwargs)
        self._loaded_amount = self.amount

    def can_transition_to(self, status) -> bool:
        return status in self.ALLOWED_TRANSITIONS.get(self.status, set())
