"""Celery tasks for the payouts app."""
from __future__ import annotations

import logging

from celery import shared_task
from django.conf import settings

from payouts.scheduler import PayoutScheduler, SchedulerRunResult

logger = logging.getLogger("marketplace")


@shared_task(name="payouts.tasks.process_scheduled_payouts")
def process_scheduled_payouts_task():
    """Release held payouts when the configured frequency says a run is due."""
    if not settings.PAYOUT_SCHEDULER_ENABLED:
        logger.info("Scheduled payouts disabled by PAYOUT_SCHEDULER_ENABLED")
        return SchedulerRunResult(skipped=True, reason="Payout scheduler disabled").as_dict()

    result = PayoutScheduler().run()
    if result.skipped:
        logger.info("Scheduled payouts skipped: %s", result.reason)
    else:
        logger.info(
            "Scheduled payouts processed=%s sellers=%s amount=%s",
            result.total_processed,
            result.sellers_affected,
            result.total_amount,
        )
    return result.as_dict()
