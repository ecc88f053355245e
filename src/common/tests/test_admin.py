"""Smoke tests for the Django admin."""

import pytest
from django.test.client import Client
from django.urls import reverse

from events.models import Event, MemberProfile

pytestmark = pytest.mark.django_db


@pytest.mark.parametrize(
    "url_name",
    [
        "admin:accounts_kinshipuser_changelist",
        "admin:common_emaillog_changelist",
        "admin:events_organization_changelist",
        "admin:events_memberprofile_changelist",
        "admin:events_event_changelist",
        "admin:events_registration_changelist",
    ],
)
def test_changelists_render(admin_client: Client, member_profile: MemberProfile, event: Event, url_name: str) -> None:
    response = admin_client.get(reverse(url_name))

    assert response.status_code == 200
