import typing as t
from unittest.mock import MagicMock

import pytest

from events.service.notification_service import dispatch

pytestmark = pytest.mark.django_db


def test_dispatch_waits_for_commit(django_capture_on_commit_callbacks: t.Any) -> None:
    task = MagicMock(name="task")

    with django_capture_on_commit_callbacks() as callbacks:
        dispatch(task, member_id="abc")
        task.delay.assert_not_called()

    assert len(callbacks) == 1
    callbacks[0]()
    task.delay.assert_called_once_with(member_id="abc")


def test_broker_failure_does_not_propagate(django_capture_on_commit_callbacks: t.Any) -> None:
    task = MagicMock(name="task")
    task.delay.side_effect = ConnectionError("broker down")

    with django_capture_on_commit_callbacks(execute=True):
        dispatch(task, member_id="abc", token="secret")

    task.delay.assert_called_once()
