"""Read / read-merge-write access to the global settings record."""
from __future__ import annotations

import logging

from django.db import transaction

from .models import GlobalSettings

logger = logging.getLogger("marketplace")


def merge_fields(current, updates) -> dict:
    """Return a new document with ``updates`` merged over ``current``.

    A ``None`` value in ``updates`` removes the key. Neither argument is
    mutated.
    """
    merged = dict(current) if isinstance(current, dict) else {}
    for key, value in updates.items():
        if value is None:
            merged.pop(key, None)
        else:
            merged[key] = value
    return merged


def get_global_settings() -> GlobalSettings:
    """Return the settings record, creating an empty one on first access."""
    settings_obj, _created = GlobalSettings.objects.get_or_create(
        pk=GlobalSettings.SINGLETON_PK,
        defaults={"custom_fields": {}},
    )
    return settings_obj


def read_custom_fields() -> dict:
    """Return a copy of the shared custom fields document."""
    return dict(get_global_settings().custom_fields or {})


def lock_global_settings() -> GlobalSettings:
    """Return the settings row locked with ``SELECT ... FOR UPDATE``.

    Must be called inside ``transaction.atomic()``; the lock is held until the
    surrounding transaction ends.
    """
    get_global_settings()
    return GlobalSettings.objects.select_for_update().get(pk=GlobalSettings.SINGLETON_PK)


@transaction.atomic
def merge_custom_fields(updates: dict, *, instance: GlobalSettings | None = None) -> dict:
    """Merge ``updates`` into the stored document and return the result.

    When ``instance`` is given it must already be locked by the caller;
    otherwise the row is locked here.
    """
    locked = instance or lock_global_settings()
    locked.custom_fields = merge_fields(locked.custom_fields, updates)
    locked.save(update_fields=["custom_fields", "updated_at"])
    logger.debug("Global settings merged keys=%s", sorted(updates))
    return dict(locked.custom_fields)
