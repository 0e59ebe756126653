"""Models for the configuration app."""
from django.db import models

from core.models import TimeStampedModel


class GlobalSettings(TimeStampedModel):
    """Platform-wide settings record (single row).

    ``custom_fields`` is a free-form document shared by several unrelated
    features; every writer merges its own keys into it and never replaces the
    whole document.
    """

    SINGLETON_PK = 1

    custom_fields = models.JSONField(
        "champs personnalises",
        default=dict,
        blank=True,
        help_text="Configuration cle/valeur partagee (ex: payoutScheduleFrequency).",
    )

    class Meta:
        verbose_name = "parametres globaux"
        verbose_name_plural = "parametres globaux"

    def __str__(self):
        return "Parametres globaux"
