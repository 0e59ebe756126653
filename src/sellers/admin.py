"""Admin configuration for the sellers app."""
from django.contrib import admin, messages

from core.exceptions import PreconditionError

from .models import Seller
from .services import suspend_seller, verify_seller


@admin.register(Seller)
class SellerAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "email",
        "seller_type",
        "verification_status",
        "is_active",
        "channel",
        "created_at",
    )
    list_filter = ("seller_type", "verification_status", "is_active")
    search_fields = ("name", "email", "company_name", "vat_number", "last_name")
    readonly_fields = ("channel", "verified_at", "created_at", "updated_at")
    list_select_related = ("channel",)
    actions = ["action_verify", "action_suspend"]
    fieldsets = (
        (None, {
            "fields": ("seller_type", "name", "email", "commission_rate"),
        }),
        ("Particulier", {
            "fields": ("first_name", "last_name", "birth_date"),
        }),
        ("Entreprise", {
            "fields": ("company_name", "vat_number", "legal_form"),
        }),
        ("Statut", {
            "fields": ("verification_status", "is_active", "verified_at", "rejection_reason", "channel"),
        }),
        ("Metadonnees", {
            "classes": ("collapse",),
            "fields": ("created_at", "updated_at"),
        }),
    )

    def has_delete_permission(self, request, obj=None):
        return False

    @admin.action(description="Verifier les vendeurs selectionnes")
    def action_verify(self, request, queryset):
        for seller in queryset:
            try:
                verify_seller(seller)
            except PreconditionError as exc:
                self.message_user(request, f"{seller}: {exc.message}", level=messages.ERROR)

    @admin.action(description="Suspendre les vendeurs selectionnes")
    def action_suspend(self, request, queryset):
        for seller in queryset:
            suspend_seller(seller)
