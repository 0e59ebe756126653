"""URL configuration for the Marketplace Settlement service."""
from django.conf import settings
from django.contrib import admin
from django.urls import path

urlpatterns = []

if getattr(settings, "ENABLE_DJANGO_ADMIN", False):
    urlpatterns.append(path("admin/", admin.site.urls))
