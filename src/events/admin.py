import typing as t

from django.contrib import admin
from django.urls import reverse
from django.utils.html import format_html

from . import models


class UserLinkMixin:
    """Mixin to add a link to the member's account."""

    def user_link(self, obj: t.Any) -> str:
        user = obj.user
        url = reverse("admin:accounts_kinshipuser_change", args=[user.id])
        return format_html('<a href="{}">{}</a>', url, user.email)

    user_link.short_description = "User"  # type: ignore[attr-defined]


class FamilyMemberInline(admin.TabularInline):
    model = models.FamilyMember
    extra = 0
    fields = ["first_name", "last_name", "relationship", "date_of_birth", "is_active"]


@admin.register(models.Organization)
class OrganizationAdmin(admin.ModelAdmin):
    list_display = ["name", "slug", "web_url", "contact_email", "is_active", "created_at"]
    list_filter = ["is_active"]
    search_fields = ["name", "slug", "web_url"]
    prepopulated_fields = {"slug": ("name",)}


@admin.register(models.MemberProfile)
class MemberProfileAdmin(UserLinkMixin, admin.ModelAdmin):
    list_display = ["__str__", "user_link", "organization", "membership_status", "registration_requested_at"]
    list_filter = ["membership_status", "organization"]
    search_fields = ["user__email", "user__first_name", "user__last_name", "phone"]
    list_select_related = ["user", "organization"]
    inlines = [FamilyMemberInline]
    readonly_fields = [
        "membership_status",
        "invited_at",
        "registration_requested_at",
        "approved_at",
        "denied_at",
        "activated_at",
        "inactivated_at",
    ]

    def has_add_permission(self, request: t.Any) -> bool:
        return False


@admin.register(models.FamilyMember)
class FamilyMemberAdmin(admin.ModelAdmin):
    list_display = ["full_name", "member", "relationship", "organization", "is_active"]
    list_filter = ["relationship", "is_active", "organization"]
    search_fields = ["first_name", "last_name", "member__user__email"]


@admin.register(models.Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ["title", "organization", "starts_at", "capacity", "max_capacity", "is_active"]
    list_filter = ["is_active", "requires_approval", "waitlist_enabled", "organization"]
    search_fields = ["title", "location"]
    date_hierarchy = "starts_at"


@admin.register(models.Registration)
class RegistrationAdmin(admin.ModelAdmin):
    list_display = ["__str__", "event", "status", "registered_at", "checked_in"]
    list_filter = ["status", "checked_in", "organization"]
    search_fields = ["event__title", "member__user__email", "family_member__first_name", "family_member__last_name"]
    list_select_related = ["event", "member__user", "family_member"]
    # Status changes must go through the capacity checks of the API.
    readonly_fields = ["status", "checked_in", "checked_in_at", "checked_in_by", "registered_by"]

    def has_add_permission(self, request: t.Any) -> bool:
        return False


@admin.register(models.AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ["action", "target_type", "target_id", "actor", "organization", "created_at"]
    list_filter = ["action", "organization"]
    search_fields = ["target_id"]

    def has_add_permission(self, request: t.Any) -> bool:
        return False

    def has_change_permission(self, request: t.Any, obj: t.Any = None) -> bool:
        return False
