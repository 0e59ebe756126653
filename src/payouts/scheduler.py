"""Periodic release of held payouts, gated by the configured frequency.

The scheduler reads its frequency and last-run timestamp from the shared
``GlobalSettings.custom_fields`` document, decides whether a run is due, and
on a due run hands over to the ledger before recording the new last-run time.
"""
from __future__ import annotations

import logging
import math
from datetime import timezone as dt_timezone
from dataclasses import dataclass

from django.db import DatabaseError, models, transaction
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from configuration.services import lock_global_settings, merge_custom_fields, read_custom_fields
from core.exceptions import TransientStorageError

from .services import process_scheduled_payouts

logger = logging.getLogger("marketplace")

FREQUENCY_KEY = "payoutScheduleFrequency"
LAST_RUN_KEY = "payoutSchedulerLastRun"

SECONDS_PER_DAY = 86400


class Frequency(models.TextChoices):
    WEEKLY = "weekly", "Hebdomadaire"
    MONTHLY = "monthly", "Mensuel"


REQUIRED_DAYS = {
    Frequency.WEEKLY: 7,
    Frequency.MONTHLY: 30,
}


def _parse_last_run(raw):
    if not raw:
        return None
    try:
        parsed = parse_datetime(raw) if isinstance(raw, str) else None
    except ValueError:
        # Well-formed but impossible dates, e.g. month 13.
        parsed = None
    if parsed is None:
        logger.warning("Ignoring malformed %s value %r", LAST_RUN_KEY, raw)
        return None
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed, dt_timezone.utc)
    return parsed


@dataclass(frozen=True)
class SchedulerSettings:
    frequency: str = Frequency.WEEKLY
    last_run: object = None

    @classmethod
    def from_custom_fields(cls, fields: dict) -> "SchedulerSettings":
        if not isinstance(fields, dict):
            fields = {}
        raw_frequency = fields.get(FREQUENCY_KEY)
        if raw_frequency in Frequency.values:
            frequency = Frequency(raw_frequency)
        else:
            if raw_frequency is not None:
                logger.warning(
                    "Unknown %s value %r, falling back to weekly",
                    FREQUENCY_KEY,
                    raw_frequency,
                )
            frequency = Frequency.WEEKLY
        return cls(
            frequency=frequency,
            last_run=_parse_last_run(fields.get(LAST_RUN_KEY)),
        )

    @property
    def required_days(self) -> int:
        return REQUIRED_DAYS[self.frequency]

    def days_since_last_run(self, now) -> int | None:
        """Whole days elapsed since the last run, ``None`` when never run."""
        if self.last_run is None:
            return None
        return math.floor((now - self.last_run).total_seconds() / SECONDS_PER_DAY)

    def is_due(self, now) -> bool:
        days = self.days_since_last_run(now)
        return days is None or days >= self.required_days


@dataclass
class SchedulerRunResult:
    success: bool = True
    skipped: bool = False
    reason: str = ""
    total_processed: int = 0
    sellers_affected: int = 0
    total_amount: int = 0
    frequency: str = Frequency.WEEKLY
    days_since_last_run: int | None = None

    def as_dict(self) -> dict:
        if self.skipped:
            return {
                "success": self.success,
                "skipped": True,
                "reason": self.reason,
            }
        return {
            "success": self.success,
            "skipped": False,
            "total_processed": self.total_processed,
            "sellers_affected": self.sellers_affected,
            "total_amount": self.total_amount,
            "frequency": str(self.frequency),
            "days_since_last_run": self.days_since_last_run,
        }


class PayoutScheduler:
    """Decides whether held payouts are due for release and releases them.

    ``ledger`` and ``clock`` are injectable so the decision logic can be
    exercised without a timer or a real batch.
    """

    def __init__(self, ledger=process_scheduled_payouts, clock=timezone.now):
        self.ledger = ledger
        self.clock = clock

    def load_settings(self) -> SchedulerSettings:
        return SchedulerSettings.from_custom_fields(read_custom_fields())

    def should_run(self, now=None) -> bool:
        return self.load_settings().is_due(now or self.clock())

    def run(self, now=None) -> SchedulerRunResult:
        now = now or self.clock()
        try:
            with transaction.atomic():
                row = lock_global_settings()
                sched = SchedulerSettings.from_custom_fields(row.custom_fields)
                days = sched.days_since_last_run(now)

                if not sched.is_due(now):
                    reason = (
                        f"Not enough time elapsed ({days} < {sched.required_days} days)"
                    )
                    logger.info("Payout scheduler skipped: %s", reason)
                    return SchedulerRunResult(skipped=True, reason=reason)

                batch = self.ledger(now=now)
                merge_custom_fields({LAST_RUN_KEY: now.isoformat()}, instance=row)
        except DatabaseError as exc:
            logger.exception("Payout scheduler failed on storage")
            raise TransientStorageError(
                "Echec de stockage pendant le traitement planifie des versements.",
            ) from exc
        except Exception:
            logger.exception("Payout scheduler failed")
            raise

        logger.info(
            "Payout scheduler processed=%s sellers=%s amount=%s frequency=%s",
            batch.total_processed,
            batch.sellers_affected,
            batch.total_amount,
            sched.frequency,
        )
        return SchedulerRunResult(
            total_processed=batch.total_processed,
            sellers_affected=batch.sellers_affected,
            total_amount=batch.total_amount,
            frequency=sched.frequency,
            days_since_last_run=days,
        )
