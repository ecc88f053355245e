"""Hand notifications to the task queue once the triggering transaction commits.

A notification that cannot be queued is logged and dropped: it must never undo
or fail the state change that triggered it.
"""

import typing as t

import structlog
from celery import Task
from django.db import transaction

logger = structlog.get_logger(__name__)


def _enqueue(task: Task, kwargs: dict[str, t.Any]) -> None:
    try:
        task.delay(**kwargs)
    except Exception:
        logger.exception("notification_dispatch_failed", task=task.name, arguments=sorted(kwargs))
    else:
        logger.info("notification_dispatched", task=task.name)


def dispatch(task: Task, **kwargs: t.Any) -> None:
    """Queue ``task`` with ``kwargs`` after the current transaction commits."""
    transaction.on_commit(lambda: _enqueue(task, kwargs))
