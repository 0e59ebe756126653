"""Admin configuration for the payouts app."""
from django.contrib import admin, messages

from core.exceptions import PreconditionError

from .models import Payout
from .services import approve_payout, mark_payout_paid, reject_payout


@admin.register(Payout)
class PayoutAdmin(admin.ModelAdmin):
    list_display = (
        "order_reference",
        "seller",
        "amount",
        "commission",
        "status",
        "released_at",
        "paid_at",
        "created_at",
    )
    list_filter = ("status",)
    search_fields = ("order_reference", "seller__name", "seller__email")
    list_select_related = ("seller",)
    readonly_fields = (
        "amount",
        "status",
        "released_at",
        "approved_at",
        "paid_at",
        "rejected_at",
        "failure_reason",
        "created_at",
        "updated_at",
    )
    actions = ["action_approve", "action_mark_paid", "action_reject"]

    def get_readonly_fields(self, request, obj=None):
        if obj is None:
            # Amount is set once, on creation.
            return tuple(f for f in self.readonly_fields if f != "amount")
        return self.readonly_fields

    def has_delete_permission(self, request, obj=None):
        return False

    def _apply(self, request, queryset, transition, **kwargs):
        done = 0
        for payout in queryset:
            try:
                transition(payout, **kwargs)
                done += 1
            except PreconditionError as exc:
                self.message_user(request, f"{payout}: {exc.message}", level=messages.ERROR)
        if done:
            self.message_user(request, f"{done} versement(s) mis a jour.", level=messages.SUCCESS)

    @admin.action(description="Approuver les versements selectionnes")
    def action_approve(self, request, queryset):
        self._apply(request, queryset, approve_payout)

    @admin.action(description="Marquer comme payes")
    def action_mark_paid(self, request, queryset):
        self._apply(request, queryset, mark_payout_paid)

    @admin.action(description="Rejeter les versements selectionnes")
    def action_reject(self, request, queryset):
        self._apply(request, queryset, reject_payout, reason="Rejete depuis l'administration.")
