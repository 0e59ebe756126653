"""Trigger the payout scheduler outside of Celery beat."""

from __future__ import annotations

import json

from django.core.management.base import BaseCommand

from payouts.scheduler import PayoutScheduler
from payouts.services import get_scheduled_payout_stats


class Command(BaseCommand):
    help = "Release held payouts now if the configured payout frequency says a run is due."

    def add_arguments(self, parser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Only report whether a run is due and what it would release.",
        )

    def handle(self, *args, **options):
        scheduler = PayoutScheduler()

        if options.get("dry_run"):
            settings_view = scheduler.load_settings()
            now = scheduler.clock()
            stats = get_scheduled_payout_stats()
            due = "due" if settings_view.is_due(now) else "not due"
            self.stdout.write(
                f"[DRY-RUN] frequency={settings_view.frequency} "
                f"days_since_last_run={settings_view.days_since_last_run(now)} -> {due}"
            )
            self.stdout.write(
                f"[DRY-RUN] would release {stats.total_processed} payout(s) "
                f"for {stats.sellers_affected} seller(s), amount={stats.total_amount}"
            )
            return

        result = scheduler.run()
        self.stdout.write(self.style.SUCCESS(json.dumps(result.as_dict())))
