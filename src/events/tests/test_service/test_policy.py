import pytest
from django.contrib.auth.models import AnonymousUser

from accounts.models import KinshipUser
from events.exceptions import PermissionDeniedError
from events.service import policy
from events.service.policy import Capability

pytestmark = pytest.mark.django_db


@pytest.mark.parametrize(
    ("capability", "admin", "staff", "member"),
    [
        (Capability.MANAGE_MEMBERS, True, False, False),
        (Capability.VIEW_MEMBERS, True, True, False),
        (Capability.MANAGE_USERS, True, False, False),
        (Capability.MANAGE_EVENTS, True, False, False),
        (Capability.VIEW_EVENTS, True, True, True),
        (Capability.REGISTER, True, False, True),
        (Capability.REGISTER_ANYONE, True, False, False),
        (Capability.MANAGE_REGISTRATIONS, True, False, False),
        (Capability.VIEW_REGISTRATIONS, True, True, False),
        (Capability.CHECK_IN, True, True, False),
        (Capability.VIEW_REPORTS, True, True, False),
        (Capability.MANAGE_FAMILY, True, False, True),
        (Capability.MANAGE_ANY_FAMILY, True, False, False),
    ],
)
def test_role_capabilities(
    capability: Capability,
    admin: bool,
    staff: bool,
    member: bool,
    org_admin: KinshipUser,
    event_staff: KinshipUser,
    member_user: KinshipUser,
) -> None:
    assert policy.allows(org_admin, capability) is admin
    assert policy.allows(event_staff, capability) is staff
    assert policy.allows(member_user, capability) is member


def test_anonymous_and_inactive_users_have_no_capabilities(org_admin: KinshipUser) -> None:
    assert policy.allows(AnonymousUser(), Capability.VIEW_EVENTS) is False
    org_admin.is_active = False
    assert policy.allows(org_admin, Capability.VIEW_EVENTS) is False


def test_user_without_organization_has_no_capabilities(django_user_model: type[KinshipUser]) -> None:
    superuser = django_user_model.objects.create_superuser(username="root", email="root@example.com", password="pass")

    assert policy.allows(superuser, Capability.MANAGE_EVENTS) is False
    with pytest.raises(PermissionDeniedError):
        policy.require(superuser, Capability.MANAGE_EVENTS)

