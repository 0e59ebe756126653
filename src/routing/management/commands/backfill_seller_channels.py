"""Allocate routing channels for active sellers registered without one."""

from __future__ import annotations

from django.core.management.base import BaseCommand

from routing.services import backfill_seller_channels
from sellers.models import Seller


class Command(BaseCommand):
    help = (
        "Create a dedicated routing channel for every active seller "
        "that does not have one yet."
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--seller",
            type=int,
            action="append",
            default=[],
            help="Process only this seller id (repeatable).",
        )
        parser.add_argument(
            "--apply",
            action="store_true",
            help="Apply changes. Without this flag, command runs in dry-run mode.",
        )

    def handle(self, *args, **options):
        seller_ids = options.get("seller") or []
        apply_changes = bool(options.get("apply"))

        pending = Seller.objects.filter(is_active=True, channel__isnull=True)
        if seller_ids:
            pending = pending.filter(pk__in=seller_ids)

        if not pending.exists():
            self.stdout.write("No sellers without channel. Nothing to backfill.")
            return

        if not apply_changes:
            for seller in pending.order_by("created_at", "pk"):
                self.stdout.write(
                    f"[DRY-RUN] seller {seller.pk} ({seller.name}) -> would create channel"
                )
            return

        result = backfill_seller_channels(seller_ids=seller_ids or None)
        for failure in result.failures:
            self.stderr.write(
                self.style.ERROR(f"[FAILED] seller {failure['seller_id']}: {failure['error']}")
            )
        self.stdout.write(
            self.style.SUCCESS(
                f"Backfill complete: {result.allocated_count} allocated, "
                f"{result.failed_count} failed."
            )
        )
