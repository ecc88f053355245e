import pytest
from django.db import IntegrityError

from accounts.models import KinshipUser
from events.models import Organization

pytestmark = pytest.mark.django_db


def test_email_is_stored_lowercased(organization: Organization) -> None:
    user = KinshipUser.objects.create_org_user(organization, "  Ann.Lee@Sample.ORG ", password="Str0ng-pass!")

    assert user.email == "ann.lee@sample.org"
    assert len(user.username) == 32


def test_email_is_unique_per_organization(organization: Organization) -> None:
    KinshipUser.objects.create_org_user(organization, "ann@sample.org")

    with pytest.raises(IntegrityError):
        KinshipUser.objects.create_org_user(organization, "ANN@sample.org")


def test_same_email_in_another_organization(organization: Organization, other_organization: Organization) -> None:
    KinshipUser.objects.create_org_user(organization, "ann@sample.org")
    KinshipUser.objects.create_org_user(other_organization, "ann@sample.org")

    assert KinshipUser.objects.filter(email="ann@sample.org").count() == 2


def test_display_name(organization: Organization) -> None:
    named = KinshipUser.objects.create_org_user(organization, "ann@sample.org", first_name="Ann", last_name="Lee")
    anonymous = KinshipUser.objects.create_org_user(organization, "bob@sample.org")

    assert named.display_name == "Ann Lee"
    assert anonymous.display_name == "bob"


def test_org_admins(org_admin: KinshipUser, event_staff: KinshipUser, foreign_admin: KinshipUser) -> None:
    disabled = KinshipUser.objects.create_org_user(
        org_admin.organization, "old.admin@sample.org", role=KinshipUser.Role.ORG_ADMIN, is_active=False
    )

    admins = KinshipUser.objects.org_admins(org_admin.organization)

    assert list(admins) == [org_admin]
    assert disabled not in admins
    assert org_admin.is_org_admin
    assert not event_staff.is_org_admin
