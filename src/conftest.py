import typing as t
from datetime import timedelta

import pytest
from django.test.client import Client
from django.utils import timezone
from faker import Faker
from ninja_jwt.tokens import RefreshToken
from pytest import MonkeyPatch

from accounts.models import KinshipUser
from events.models import Event, FamilyMember, MemberProfile, Organization
from kinship.celery import app as celery_app

fake = Faker()

Role = KinshipUser.Role


@pytest.fixture(autouse=True)
def increase_rate_limit(monkeypatch: MonkeyPatch) -> None:
    """Increase the rate limits so tests are never throttled."""
    monkeypatch.setattr("common.throttling.AuthThrottle.rate", "1000/min")
    monkeypatch.setattr("common.throttling.PublicRegistrationThrottle.rate", "1000/min")
    monkeypatch.setattr("common.throttling.AnonDefaultThrottle.rate", "1000/min")
    monkeypatch.setattr("common.throttling.UserDefaultThrottle.rate", "1000/min")
    monkeypatch.setattr("common.throttling.WriteThrottle.rate", "1000/min")


@pytest.fixture(autouse=True)
def enable_celery_eager_mode(settings: t.Any) -> None:
    """Run Celery tasks synchronously so their side effects can be asserted."""
    settings.CELERY_TASK_ALWAYS_EAGER = True
    settings.CELERY_TASK_EAGER_PROPAGATES = True
    celery_app.conf.task_always_eager = True
    celery_app.conf.task_eager_propagates = True


@pytest.fixture(autouse=True)
def locmem_email_backend(settings: t.Any) -> None:
    settings.EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"


def make_member(
    organization: Organization,
    *,
    email: str | None = None,
    role: str = Role.MEMBER,
    status: str = MemberProfile.MembershipStatus.ACTIVE,
    password: str = "Str0ng-pass!",
) -> MemberProfile:
    """Create an account with a membership record in the given status."""
    now = timezone.now()
    timestamps: dict[str, t.Any] = {
        "invited": {"invited_at": now},
        "pending_approval": {"registration_requested_at": now},
        "active": {"activated_at": now},
        "inactive": {"inactivated_at": now},
    }[str(status)]
    user = KinshipUser.objects.create_org_user(
        organization,
        email or fake.unique.email(),
        password=password,
        first_name=fake.first_name(),
        last_name=fake.last_name(),
        role=role,
        is_active=str(status) == "active",
    )
    return MemberProfile.objects.create(user=user, organization=organization, membership_status=status, **timestamps)


def auth_client(user: KinshipUser) -> Client:
    refresh = RefreshToken.for_user(user)
    return Client(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")  # type: ignore[attr-defined]


@pytest.fixture
def organization() -> Organization:
    return Organization.objects.create(
        name="Sample Charity", slug="sample-charity", web_url="sample-charity.org", contact_email="hello@sample.org"
    )


@pytest.fixture
def other_organization() -> Organization:
    return Organization.objects.create(name="Other Charity", slug="other-charity")


@pytest.fixture
def org_admin(organization: Organization) -> KinshipUser:
    return make_member(organization, email="admin@sample.org", role=Role.ORG_ADMIN).user


@pytest.fixture
def event_staff(organization: Organization) -> KinshipUser:
    return make_member(organization, email="staff@sample.org", role=Role.EVENT_STAFF).user


@pytest.fixture
def member_profile(organization: Organization) -> MemberProfile:
    return make_member(organization, email="member@sample.org")


@pytest.fixture
def member_user(member_profile: MemberProfile) -> KinshipUser:
    return member_profile.user


@pytest.fixture
def other_member_profile(organization: Organization) -> MemberProfile:
    return make_member(organization, email="other.member@sample.org")


@pytest.fixture
def foreign_admin(other_organization: Organization) -> KinshipUser:
    return make_member(other_organization, email="admin@other.org", role=Role.ORG_ADMIN).user


@pytest.fixture
def family_member(member_profile: MemberProfile) -> FamilyMember:
    return FamilyMember.objects.create(
        member=member_profile,
        organization=member_profile.organization,
        first_name="Kid",
        last_name="Member",
        relationship=FamilyMember.Relationship.CHILD,
    )


@pytest.fixture
def event_factory(organization: Organization, org_admin: KinshipUser) -> t.Callable[..., Event]:
    def _create(**kwargs: t.Any) -> Event:
        defaults: dict[str, t.Any] = {
            "organization": organization,
            "title": fake.sentence(nb_words=3),
            "starts_at": timezone.now() + timedelta(days=7),
            "ends_at": timezone.now() + timedelta(days=7, hours=3),
            "capacity": 10,
            "created_by": org_admin,
        }
        defaults.update(kwargs)
        return Event.objects.create(**defaults)

    return _create


@pytest.fixture
def event(event_factory: t.Callable[..., Event]) -> Event:
    return event_factory(title="Community Picnic", capacity=2, max_capacity=4)


@pytest.fixture
def org_admin_client(org_admin: KinshipUser) -> Client:
    return auth_client(org_admin)


@pytest.fixture
def staff_client(event_staff: KinshipUser) -> Client:
    return auth_client(event_staff)


@pytest.fixture
def member_client(member_user: KinshipUser) -> Client:
    return auth_client(member_user)


@pytest.fixture
def member_factory(organization: Organization) -> t.Callable[..., MemberProfile]:
    """Create memberships; pass ``organization=`` to create them elsewhere."""

    def _create(**kwargs: t.Any) -> MemberProfile:
        return make_member(kwargs.pop("organization", organization), **kwargs)

    return _create


@pytest.fixture
def client_for() -> t.Callable[[KinshipUser], Client]:
    return auth_client
