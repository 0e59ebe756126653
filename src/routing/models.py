"""Models for the routing app."""
from django.db import models
from django.db.models import Q

from core.models import TimeStampedModel

DEFAULT_CHANNEL_CODE = "__default_channel__"


class Channel(TimeStampedModel):
    """Order-routing scope. Seller channels split multi-vendor orders."""

    code = models.CharField("code", max_length=100, unique=True)
    token = models.CharField("jeton", max_length=100, unique=True)
    is_default = models.BooleanField("canal par defaut", default=False)

    class Meta:
        verbose_name = "canal"
        verbose_name_plural = "canaux"
        ordering = ["code"]
        constraints = [
            models.UniqueConstraint(
                fields=["is_default"],
                condition=Q(is_default=True),
                name="uniq_default_channel",
            ),
        ]

    def __str__(self):
        return self.code

    @staticmethod
    def code_for_seller(seller_id) -> str:
        return f"seller-{seller_id}"

    @staticmethod
    def token_for_seller(seller_id) -> str:
        return f"seller-{seller_id}-token"
