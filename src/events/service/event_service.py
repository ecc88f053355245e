"""Event management for administrators, and event listings for everyone in the organization."""

import uuid

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Count, Q, QuerySet
from django.utils import timezone

from accounts.models import KinshipUser
from events.exceptions import NotFoundError
from events.models import Event, Registration
from events.schema import EventCreateSchema, EventUpdateSchema
from events.service import policy
from events.service.policy import Capability

logger = structlog.get_logger(__name__)


def _get_event(actor: KinshipUser, event_id: uuid.UUID, *, include_inactive: bool = False) -> Event:
    qs = Event.objects.filter(id=event_id, organization_id=actor.organization_id)
    if not include_inactive:
        qs = qs.active()
    event = qs.first()
    if event is None:
        raise NotFoundError("Event not found.")
    return event


@transaction.atomic
def create_event(actor: KinshipUser, payload: EventCreateSchema) -> Event:
    """Create an event. It must start in the future."""
    policy.require(actor, Capability.MANAGE_EVENTS)
    if payload.starts_at <= timezone.now():
        raise ValidationError({"starts_at": ["Start date must be in the future."]})
    event = Event.objects.create(organization_id=actor.organization_id, created_by=actor, **payload.model_dump())
    logger.info("event_created", event_id=str(event.id), organization_id=str(event.organization_id))
    return event


@transaction.atomic
def update_event(actor: KinshipUser, event_id: uuid.UUID, payload: EventUpdateSchema) -> Event:
    """Update an event. The merged values are validated like a new event.

    The event row is locked, so a capacity change and a registration batch are
    never decided against each other's stale counts.
    """
    policy.require(actor, Capability.MANAGE_EVENTS)
    event = _get_event(actor, event_id, include_inactive=True)
    event = Event.objects.select_for_update().get(pk=event.pk)
    data = payload.model_dump(exclude_unset=True)
    if "starts_at" in data and data["starts_at"] != event.starts_at and data["starts_at"] <= timezone.now():
        raise ValidationError({"starts_at": ["Start date must be in the future."]})
    for key, value in data.items():
        setattr(event, key, value)
    if "capacity" in data:
        confirmed = event.registrations.filter(status=Registration.Status.CONFIRMED).count()
        if event.capacity < confirmed:
            raise ValidationError(
                {"capacity": [f"Capacity cannot be lower than the {confirmed} confirmed registrations."]}
            )
    event.save()
    logger.info("event_updated", event_id=str(event.id), fields=sorted(data))
    return event


@transaction.atomic
def deactivate_event(actor: KinshipUser, event_id: uuid.UUID) -> Event:
    """Hide an event and close it for registration. Registrations are kept."""
    policy.require(actor, Capability.MANAGE_EVENTS)
    event = _get_event(actor, event_id, include_inactive=True)
    event = Event.objects.select_for_update().get(pk=event.pk)
    event.is_active = False
    event.save()
    logger.info("event_deactivated", event_id=str(event.id))
    return event


def list_events(
    actor: KinshipUser,
    *,
    include_inactive: bool = False,
    upcoming_only: bool = False,
    search: str | None = None,
) -> QuerySet[Event]:
    """Events of the actor's organization. Only event managers and staff may see inactive ones."""
    policy.require(actor, Capability.VIEW_EVENTS)
    qs = Event.objects.filter(organization_id=actor.organization_id)
    if not (include_inactive and policy.allows(actor, Capability.VIEW_EVENT_STATS)):
        qs = qs.active()
    if upcoming_only:
        qs = qs.upcoming()
    if search:
        qs = qs.filter(Q(title__icontains=search) | Q(description__icontains=search) | Q(location__icontains=search))
    return qs.order_by("starts_at")


def get_event(actor: KinshipUser, event_id: uuid.UUID) -> Event:
    policy.require(actor, Capability.VIEW_EVENTS)
    return _get_event(actor, event_id, include_inactive=policy.allows(actor, Capability.VIEW_EVENT_STATS))


def event_stats(actor: KinshipUser) -> dict[str, int]:
    policy.require(actor, Capability.VIEW_EVENT_STATS)
    now = timezone.now()
    return Event.objects.filter(organization_id=actor.organization_id).aggregate(
        total=Count("id"),
        active=Count("id", filter=Q(is_active=True)),
        inactive=Count("id", filter=Q(is_active=False)),
        upcoming=Count("id", filter=Q(is_active=True, starts_at__gt=now)),
        past=Count("id", filter=Q(starts_at__lte=now)),
    )
