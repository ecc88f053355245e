import typing as t

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from accounts.validators import validate_phone_number, validate_zip_code
from common.models import TimeStampedModel

from .organization import Organization


class MemberProfileQuerySet(models.QuerySet["MemberProfile"]):
    def for_organization(self, organization: Organization) -> t.Self:
        """Profiles of an organization, with the account joined in."""
        return self.filter(organization=organization).select_related("user")

    def with_status(self, status: "MemberProfile.MembershipStatus") -> t.Self:
        return self.filter(membership_status=status)


class MemberProfile(TimeStampedModel):
    """The membership record of a user within an organization.

    ``membership_status`` moves only through ``events.service.membership_service``,
    which keeps the status timestamps and the account-enabled flag in sync.
    """

    class MembershipStatus(models.TextChoices):
        INVITED = "invited", "Invited"
        PENDING_APPROVAL = "pending_approval", "Pending approval"
        ACTIVE = "active", "Active"
        INACTIVE = "inactive", "Inactive"

    # The timestamp that must be set while the profile is in a given status.
    STATUS_TIMESTAMPS: t.ClassVar[dict[str, tuple[str, ...]]] = {
        "invited": ("invited_at",),
        "pending_approval": ("registration_requested_at",),
        "active": ("activated_at",),
        "inactive": ("inactivated_at", "denied_at"),
    }

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="member_profile")
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name="members")
    membership_status = models.CharField(
        max_length=20, choices=MembershipStatus.choices, default=MembershipStatus.PENDING_APPROVAL, db_index=True
    )

    phone = models.CharField(max_length=32, blank=True, validators=[validate_phone_number])
    zip_code = models.CharField(max_length=10, blank=True, validators=[validate_zip_code])
    address = models.TextField(blank=True)
    date_of_birth = models.DateField(null=True, blank=True)
    gender = models.CharField(max_length=32, blank=True)
    emergency_contact_name = models.CharField(max_length=200, blank=True)
    emergency_contact_phone = models.CharField(max_length=32, blank=True, validators=[validate_phone_number])
    allergies = models.TextField(blank=True)
    notes = models.TextField(blank=True)

    invited_at = models.DateTimeField(null=True, blank=True)
    registration_requested_at = models.DateTimeField(null=True, blank=True, db_index=True)
    registration_message = models.TextField(max_length=1000, blank=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    denied_at = models.DateTimeField(null=True, blank=True)
    denial_reason = models.TextField(max_length=500, blank=True)
    decision_message = models.TextField(max_length=1000, blank=True)
    activated_at = models.DateTimeField(null=True, blank=True)
    inactivated_at = models.DateTimeField(null=True, blank=True)
    inactivated_reason = models.TextField(max_length=500, blank=True)

    objects = MemberProfileQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]

    def clean(self) -> None:
        """The timestamp of the current status must be populated."""
        fields = self.STATUS_TIMESTAMPS.get(str(self.membership_status), ())
        if fields and not any(getattr(self, f) for f in fields):
            raise ValidationError(
                {"membership_status": f"Status {self.membership_status} requires {' or '.join(fields)} to be set."}
            )

    @property
    def email(self) -> str:
        return self.user.email

    @property
    def full_name(self) -> str:
        return self.user.get_full_name()

    def __str__(self) -> str:
        return f"{self.user.email} ({self.membership_status})"


class FamilyMemberQuerySet(models.QuerySet["FamilyMember"]):
    def active(self) -> t.Self:
        return self.filter(is_active=True)


class FamilyMember(TimeStampedModel):
    class Relationship(models.TextChoices):
        SPOUSE = "spouse", "Spouse"
        PARTNER = "partner", "Partner"
        CHILD = "child", "Child"
        PARENT = "parent", "Parent"
        SIBLING = "sibling", "Sibling"
        OTHER = "other", "Other"

    member = models.ForeignKey(MemberProfile, on_delete=models.CASCADE, related_name="family_members")
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name="family_members")
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    date_of_birth = models.DateField(null=True, blank=True)
    relationship = models.CharField(max_length=20, choices=Relationship.choices, default=Relationship.OTHER)
    gender = models.CharField(max_length=32, blank=True)
    allergies = models.TextField(blank=True)
    notes = models.TextField(blank=True)
    is_active = models.BooleanField(default=True, db_index=True)

    objects = FamilyMemberQuerySet.as_manager()

    class Meta:
        ordering = ["first_name", "last_name"]

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __str__(self) -> str:
        return self.full_name
