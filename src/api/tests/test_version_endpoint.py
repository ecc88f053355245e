"""Tests for the /version and /healthcheck endpoints."""

import typing as t

import pytest
from django.conf import settings
from django.test.client import Client
from django.urls import reverse

pytestmark = pytest.mark.django_db


def test_version(client: Client) -> None:
    response = client.get(reverse("api:version"))

    assert response.status_code == 200
    assert response.json() == {"version": settings.VERSION}


def test_healthcheck(client: Client) -> None:
    response = client.get(reverse("api:healthcheck"))

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_request_id_header(client: Client, settings: t.Any) -> None:
    settings.ENABLE_OBSERVABILITY = True

    response = client.get(reverse("api:healthcheck"), HTTP_X_REQUEST_ID="req-123")

    assert response["X-Request-ID"] == "req-123"
