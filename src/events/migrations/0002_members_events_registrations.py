import uuid

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

import accounts.validators

TIMESTAMPS = [
    ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
    ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
    ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
]


class Migration(migrations.Migration):
    dependencies = [
        ("events", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="MemberProfile",
            fields=[
                *TIMESTAMPS,
                (
                    "membership_status",
                    models.CharField(
                        choices=[
                            ("invited", "Invited"),
                            ("pending_approval", "Pending approval"),
                            ("active", "Active"),
                            ("inactive", "Inactive"),
                        ],
                        db_index=True,
                        default="pending_approval",
                        max_length=20,
                    ),
                ),
                (
                    "phone",
                    models.CharField(
                        blank=True, max_length=32, validators=[accounts.validators.validate_phone_number]
                    ),
                ),
                (
                    "zip_code",
                    models.CharField(blank=True, max_length=10, validators=[accounts.validators.validate_zip_code]),
                ),
                ("address", models.TextField(blank=True)),
                ("date_of_birth", models.DateField(blank=True, null=True)),
                ("gender", models.CharField(blank=True, max_length=32)),
                ("emergency_contact_name", models.CharField(blank=True, max_length=200)),
                (
                    "emergency_contact_phone",
                    models.CharField(
                        blank=True, max_length=32, validators=[accounts.validators.validate_phone_number]
                    ),
                ),
                ("allergies", models.TextField(blank=True)),
                ("notes", models.TextField(blank=True)),
                ("invited_at", models.DateTimeField(blank=True, null=True)),
                ("registration_requested_at", models.DateTimeField(blank=True, db_index=True, null=True)),
                ("registration_message", models.TextField(blank=True, max_length=1000)),
                ("approved_at", models.DateTimeField(blank=True, null=True)),
                ("denied_at", models.DateTimeField(blank=True, null=True)),
                ("denial_reason", models.TextField(blank=True, max_length=500)),
                ("decision_message", models.TextField(blank=True, max_length=1000)),
                ("activated_at", models.DateTimeField(blank=True, null=True)),
                ("inactivated_at", models.DateTimeField(blank=True, null=True)),
                ("inactivated_reason", models.TextField(blank=True, max_length=500)),
                (
                    "organization",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="members", to="events.organization"
                    ),
                ),
                (
                    "user",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="member_profile",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="FamilyMember",
            fields=[
                *TIMESTAMPS,
                ("first_name", models.CharField(max_length=100)),
                ("last_name", models.CharField(max_length=100)),
                ("date_of_birth", models.DateField(blank=True, null=True)),
                (
                    "relationship",
                    models.CharField(
                        choices=[
                            ("spouse", "Spouse"),
                            ("partner", "Partner"),
                            ("child", "Child"),
                            ("parent", "Parent"),
                            ("sibling", "Sibling"),
                            ("other", "Other"),
                        ],
                        default="other",
                        max_length=20,
                    ),
                ),
                ("gender", models.CharField(blank=True, max_length=32)),
                ("allergies", models.TextField(blank=True)),
                ("notes", models.TextField(blank=True)),
                ("is_active", models.BooleanField(db_index=True, default=True)),
                (
                    "member",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="family_members",
                        to="events.memberprofile",
                    ),
                ),
                (
                    "organization",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="family_members",
                        to="events.organization",
                    ),
                ),
            ],
            options={
                "ordering": ["first_name", "last_name"],
            },
        ),
        migrations.CreateModel(
            name="Event",
            fields=[
                *TIMESTAMPS,
                ("title", models.CharField(db_index=True, max_length=255)),
                ("description", models.TextField(blank=True)),
                ("location", models.CharField(blank=True, max_length=255)),
                ("starts_at", models.DateTimeField(db_index=True)),
                ("ends_at", models.DateTimeField(blank=True, null=True)),
                (
                    "capacity",
                    models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)]),
                ),
                ("max_capacity", models.PositiveIntegerField(blank=True, null=True)),
                ("waitlist_enabled", models.BooleanField(default=True)),
                ("requires_approval", models.BooleanField(default=False)),
                ("is_public", models.BooleanField(default=False)),
                ("is_active", models.BooleanField(db_index=True, default=True)),
                (
                    "custom_fields",
                    models.JSONField(blank=True, default=list, help_text="Extra fields collected at registration."),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="created_events",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "organization",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="events", to="events.organization"
                    ),
                ),
            ],
            options={
                "ordering": ["starts_at"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(max_capacity__isnull=True)
                        | models.Q(max_capacity__gte=models.F("capacity")),
                        name="event_max_capacity_gte_capacity",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(ends_at__isnull=True) | models.Q(ends_at__gt=models.F("starts_at")),
                        name="event_ends_after_start",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Registration",
            fields=[
                *TIMESTAMPS,
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("confirmed", "Confirmed"),
                            ("waitlisted", "Waitlisted"),
                            ("cancelled", "Cancelled"),
                        ],
                        db_index=True,
                        max_length=20,
                    ),
                ),
                ("registered_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("custom_data", models.JSONField(blank=True, default=dict)),
                ("notes", models.TextField(blank=True)),
                ("checked_in", models.BooleanField(default=False)),
                ("checked_in_at", models.DateTimeField(blank=True, null=True)),
                (
                    "checked_in_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="registrations", to="events.event"
                    ),
                ),
                (
                    "family_member",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="registrations",
                        to="events.familymember",
                    ),
                ),
                (
                    "member",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="registrations",
                        to="events.memberprofile",
                    ),
                ),
                (
                    "organization",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="registrations",
                        to="events.organization",
                    ),
                ),
                (
                    "registered_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["registered_at"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(member__isnull=False, family_member__isnull=True)
                        | models.Q(member__isnull=True, family_member__isnull=False),
                        name="registration_exactly_one_registrant",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(checked_in=False) | models.Q(status="confirmed"),
                        name="registration_check_in_requires_confirmed",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(member__isnull=False) & ~models.Q(status="cancelled"),
                        fields=("event", "member"),
                        name="unique_active_member_registration",
                        violation_error_message="This member is already registered for the event.",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(family_member__isnull=False) & ~models.Q(status="cancelled"),
                        fields=("event", "family_member"),
                        name="unique_active_family_member_registration",
                        violation_error_message="This family member is already registered for the event.",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="AuditLog",
            fields=[
                *TIMESTAMPS,
                (
                    "action",
                    models.CharField(
                        choices=[
                            ("invite_sent", "Invite sent"),
                            ("invite_accepted", "Invite accepted"),
                            ("registration_requested", "Registration requested"),
                            ("member_approved", "Member approved"),
                            ("member_denied", "Member denied"),
                            ("member_inactivated", "Member inactivated"),
                            ("member_activated", "Member activated"),
                            ("registration_updated", "Registration updated"),
                            ("attendees_checked_in", "Attendees checked in"),
                        ],
                        db_index=True,
                        max_length=40,
                    ),
                ),
                ("target_type", models.CharField(max_length=64)),
                ("target_id", models.UUIDField(db_index=True)),
                ("payload", models.JSONField(blank=True, default=dict)),
                (
                    "actor",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="audit_logs",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "organization",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="audit_logs",
                        to="events.organization",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
    ]
