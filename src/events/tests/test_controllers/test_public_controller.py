import typing as t

import orjson
import pytest
from django.core import mail
from django.test.client import Client
from django.urls import reverse

from accounts.models import KinshipUser
from events.models import MemberProfile, Organization

pytestmark = pytest.mark.django_db


def _post(client: Client, url: str, payload: dict[str, t.Any]) -> t.Any:
    return client.post(url, data=orjson.dumps(payload), content_type="application/json")


REQUEST = {
    "web_url": "sample-charity.org",
    "email": "walk.in@example.com",
    "first_name": "Walk",
    "last_name": "In",
    "message": "I heard about you at the farmers market.",
}


class TestPublicEndpoints:
    def test_organization_lookup(self, client: Client, organization: Organization) -> None:
        response = client.get(reverse("api:public_organization", kwargs={"identifier": "sample-charity"}))

        assert response.status_code == 200
        assert response.json()["name"] == "Sample Charity"
        assert response.json()["web_url"] == "sample-charity.org"

    def test_unknown_organization(self, client: Client) -> None:
        response = client.get(reverse("api:public_organization", kwargs={"identifier": "nope"}))

        assert response.status_code == 404

    def test_membership_request(
        self,
        client: Client,
        organization: Organization,
        org_admin: KinshipUser,
        django_capture_on_commit_callbacks: t.Any,
    ) -> None:
        with django_capture_on_commit_callbacks(execute=True):
            response = _post(client, reverse("api:request_membership"), REQUEST)

        assert response.status_code == 201
        assert response.json()["organization_name"] == "Sample Charity"
        profile = MemberProfile.objects.get(user__email="walk.in@example.com")
        assert profile.membership_status == MemberProfile.MembershipStatus.PENDING_APPROVAL
        assert len(mail.outbox) == 2

        again = _post(client, reverse("api:request_membership"), REQUEST)
        assert again.status_code == 409

    def test_request_needs_an_organization(self, client: Client) -> None:
        payload = {k: v for k, v in REQUEST.items() if k != "web_url"}

        response = _post(client, reverse("api:request_membership"), payload)

        assert response.status_code == 422

    def test_request_message_too_short(self, client: Client, organization: Organization) -> None:
        response = _post(client, reverse("api:request_membership"), {**REQUEST, "message": "hi"})

        assert response.status_code == 422

    def test_validate_phone(self, client: Client) -> None:
        response = _post(client, reverse("api:validate_phone"), {"phone": "555-234-5678"})

        assert response.json() == {"valid": True, "formatted": "(555) 234-5678", "e164": "+15552345678"}

    def test_validate_zip_code(self, client: Client) -> None:
        assert _post(client, reverse("api:validate_zip_code"), {"zip_code": "12345"}).json()["valid"] is True
        assert _post(client, reverse("api:validate_zip_code"), {"zip_code": "ABCDE"}).json() == {
            "valid": False,
            "formatted": None,
        }
