import typing as t
import uuid

from django.contrib.auth.models import AbstractUser, UserManager
from django.db import models

if t.TYPE_CHECKING:
    from events.models import Organization


class KinshipUserQuerySet(models.QuerySet["KinshipUser"]):
    """Queryset for KinshipUser."""

    def org_admins(self, organization: "Organization") -> t.Self:
        """Enabled administrators of an organization."""
        return self.filter(organization=organization, role=KinshipUser.Role.ORG_ADMIN, is_active=True)


class KinshipUserManager(UserManager.from_queryset(KinshipUserQuerySet)):  # type: ignore[misc]
    """User manager exposing the ``KinshipUserQuerySet`` filters, e.g. ``KinshipUser.objects.org_admins(org)``."""

    def create_org_user(
        self,
        organization: "Organization",
        email: str,
        password: str | None = None,
        **extra_fields: t.Any,
    ) -> "KinshipUser":
        """Create a user scoped to an organization.

        The username is internal: the same email may exist once per organization,
        so it cannot double as the login identifier.
        """
        return self.create_user(
            username=uuid.uuid4().hex,
            email=email,
            password=password,
            organization=organization,
            **extra_fields,
        )


class KinshipUser(AbstractUser):
    class Role(models.TextChoices):
        ORG_ADMIN = "org_admin", "Organization admin"
        EVENT_STAFF = "event_staff", "Event staff"
        MEMBER = "member", "Member"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organization = models.ForeignKey(
        "events.Organization",
        on_delete=models.CASCADE,
        related_name="users",
        null=True,
        blank=True,
        help_text="Tenant this account belongs to. Empty for platform superusers.",
    )
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.MEMBER, db_index=True)
    email_verified = models.BooleanField(default=False)
    email_verified_at = models.DateTimeField(null=True, blank=True)

    objects = KinshipUserManager()  # type: ignore[misc]

    class Meta:
        ordering = ["email"]
        constraints = [
            models.UniqueConstraint(fields=["organization", "email"], name="unique_user_email_per_organization"),
        ]

    def save(self, *args: t.Any, **kwargs: t.Any) -> None:
        """Store emails lowercased so the per-organization uniqueness is case-insensitive."""
        if self.email:
            self.email = self.email.strip().lower()
        super().save(*args, **kwargs)

    @property
    def is_org_admin(self) -> bool:
        return self.role == self.Role.ORG_ADMIN

    @property
    def display_name(self) -> str:
        """Full name, falling back to the local part of the email."""
        return self.get_full_name() or self.email.split("@")[0]
