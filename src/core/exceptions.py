"""Error taxonomy for the settlement core.

``SchemaViolation`` extends Django's ``ValidationError`` so that forms, the
admin and DRF serializers render its field-level messages unchanged.  The other
errors are plain domain exceptions raised by the service layer.
"""
from django.core.exceptions import ValidationError


class SchemaViolation(ValidationError):
    """Input fails the required-field / variant rules. Never persisted."""


class MarketplaceError(Exception):
    """Base class for non-validation domain errors."""

    default_message = "Erreur marketplace."

    def __init__(self, message=None, **context):
        self.message = message or self.default_message
        self.context = context
        super().__init__(self.message)


class ConflictError(MarketplaceError):
    """A uniqueness rule would be violated."""

    default_message = "Conflit avec une donnee existante."


class PreconditionError(MarketplaceError):
    """The target entity is not in the state the operation requires."""

    default_message = "L'operation n'est pas autorisee dans l'etat actuel."


class TransientStorageError(MarketplaceError):
    """A storage round-trip failed. The caller retries on its own cadence."""

    default_message = "Erreur de stockage temporaire."
