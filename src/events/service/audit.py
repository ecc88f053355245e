import typing as t

import structlog

from accounts.models import KinshipUser
from events.models import AuditLog, Organization

logger = structlog.get_logger(__name__)


def record(
    *,
    organization: Organization,
    actor: KinshipUser | None,
    action: AuditLog.Action,
    target: t.Any,
    **payload: t.Any,
) -> AuditLog:
    """Write an audit entry in the caller's transaction."""
    entry = AuditLog.objects.create(
        organization=organization,
        actor=actor,
        action=action,
        target_type=target.__class__.__name__,
        target_id=target.pk,
        payload=payload,
    )
    logger.info(
        "audit_recorded",
        action=str(action),
        target_type=entry.target_type,
        target_id=str(entry.target_id),
        actor_id=str(actor.id) if actor else None,
    )
    return entry
