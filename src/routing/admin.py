"""Admin configuration for the routing app."""
from django.contrib import admin

from .models import Channel


@admin.register(Channel)
class ChannelAdmin(admin.ModelAdmin):
    list_display = ("code", "is_default", "created_at")
    list_filter = ("is_default",)
    search_fields = ("code",)
    readonly_fields = ("created_at", "updated_at")
