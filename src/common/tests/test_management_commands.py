"""Tests for the bootstrap and get_jwt management commands."""

from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError
from ninja_jwt.tokens import AccessToken

from accounts.models import KinshipUser
from events.models import MemberProfile, Organization

pytestmark = pytest.mark.django_db


class TestBootstrap:
    def test_creates_organization_and_admin(self) -> None:
        out = StringIO()

        call_command(
            "bootstrap",
            name="Harbour Trust",
            web_url="harbour.org",
            admin_email="Boss@Harbour.org",
            admin_password="Str0ng-pass!",
            stdout=out,
        )

        organization = Organization.objects.get(slug="harbour-trust")
        assert organization.web_url == "harbour.org"
        admin = KinshipUser.objects.get(organization=organization)
        assert admin.email == "boss@harbour.org"
        assert admin.role == KinshipUser.Role.ORG_ADMIN
        assert admin.check_password("Str0ng-pass!")
        assert admin.member_profile.membership_status == MemberProfile.MembershipStatus.ACTIVE
        assert "Administrator 'boss@harbour.org' created." in out.getvalue()

    def test_is_idempotent(self) -> None:
        call_command("bootstrap", name="Harbour Trust", admin_email="boss@harbour.org", stdout=StringIO())
        out = StringIO()

        call_command("bootstrap", name="Harbour Trust", admin_email="boss@harbour.org", stdout=out)

        assert Organization.objects.filter(slug="harbour-trust").count() == 1
        assert KinshipUser.objects.filter(email="boss@harbour.org").count() == 1
        assert "already exists" in out.getvalue()

    def test_default_password_warning(self) -> None:
        out = StringIO()

        call_command("bootstrap", name="Harbour Trust", admin_email="boss@harbour.org", stdout=out)

        assert "default password" in out.getvalue()


class TestGetJwt:
    def test_prints_tokens(self, member_user: KinshipUser) -> None:
        out = StringIO()

        call_command("get_jwt", "member@sample.org", stdout=out)

        lines = out.getvalue().splitlines()
        access = lines[lines.index("Access Token:") + 1]
        assert str(AccessToken(access)["user_id"]) == str(member_user.id)

    def test_unknown_email(self) -> None:
        with pytest.raises(CommandError, match="does not exist"):
            call_command("get_jwt", "nobody@sample.org", stdout=StringIO())

    def test_email_in_several_organizations(
        self, member_user: KinshipUser, other_organization: Organization
    ) -> None:
        KinshipUser.objects.create_org_user(other_organization, "member@sample.org", password="Str0ng-pass!")

        with pytest.raises(CommandError, match="--organization"):
            call_command("get_jwt", "member@sample.org", stdout=StringIO())

        out = StringIO()
        call_command("get_jwt", "member@sample.org", organization="sample-charity", stdout=out)
        assert str(member_user.id) in out.getvalue()
