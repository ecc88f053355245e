"""Admin interface for accounts app."""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from accounts.models import KinshipUser


@admin.register(KinshipUser)
class KinshipUserAdmin(UserAdmin):
    list_display = ["email", "first_name", "last_name", "organization", "role", "is_active", "email_verified"]
    list_filter = ["role", "is_active", "email_verified", "organization", "is_staff"]
    search_fields = ["email", "first_name", "last_name"]
    ordering = ["email"]
    fieldsets = (
        *UserAdmin.fieldsets,  # type: ignore[misc]
        ("Organization", {"fields": ("organization", "role", "email_verified", "email_verified_at")}),
    )
