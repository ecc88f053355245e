"""RegistrationManager for registration batches, admin overrides and check-in."""

import typing as t
import uuid
from collections.abc import Sequence

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Case, Count, IntegerField, Q, QuerySet, Value, When
from django.utils import timezone

from accounts.models import KinshipUser
from events.exceptions import (
    CapacityExceededError,
    DuplicateRegistrationError,
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
)
from events.models import AuditLog, Event, FamilyMember, MemberProfile, RegistrantKind, RegistrantRef, Registration
from events.service import audit, policy
from events.service.policy import Capability

from .decision import decide_status
from .types import CapacitySnapshot, CheckInResult, EventRegistrations, RegistrationEntry, RegistrationSummary

logger = structlog.get_logger(__name__)

STATUS_ORDER = Case(
    When(status=Registration.Status.CONFIRMED, then=Value(0)),
    When(status=Registration.Status.PENDING, then=Value(1)),
    When(status=Registration.Status.WAITLISTED, then=Value(2)),
    default=Value(3),
    output_field=IntegerField(),
)


class RegistrationManager:
    """The Registration Manager Class.

    It is responsible for creating registrations and changing their status without
    ever overbooking an event. Every write that can change an event's occupancy
    first locks the event row, so concurrent batches for the same event are
    decided one after the other.
    """

    def __init__(self, actor: KinshipUser) -> None:
        """Initialize the RegistrationManager."""
        self.actor = actor

    # ---- Registering ----

    @transaction.atomic
    def register(self, event_id: uuid.UUID, entries: Sequence[RegistrationEntry]) -> list[Registration]:
        """Register a batch of registrants for an event.

        All registrants get the same status and the same registration time. Any
        failing precondition aborts the whole batch.

        Returns:
            The created registrations, in the order of ``entries``.

        Raises:
            NotFoundError: the event or a registrant does not exist in the organization.
            InvalidStateError: the event is inactive or has already started.
            PermissionDeniedError: a non-admin submitted someone else's registrant.
            DuplicateRegistrationError: a registrant is already registered or listed twice.
            CapacityExceededError: neither capacity nor waitlist can take the batch.
        """
        policy.require(self.actor, Capability.REGISTER)
        if not entries:
            raise ValidationError({"registrants": ["At least one registrant is required."]})

        event = self._lock_event(event_id)
        self._assert_open_for_registration(event)
        refs = [entry.registrant for entry in entries]
        names = self._resolve_registrants(refs)
        self._assert_no_duplicates(event, refs, names)

        counts = self._counts(event)
        try:
            status = decide_status(
                capacity=event.capacity,
                max_capacity=event.max_capacity,
                waitlist_enabled=event.waitlist_enabled,
                requires_approval=event.requires_approval,
                occupancy=counts["occupancy"],
                waitlisted=counts["waitlisted"],
                batch_size=len(entries),
            )
        except CapacityExceededError:
            logger.info(
                "registration_batch_rejected",
                event_id=str(event.id),
                batch_size=len(entries),
                occupancy=counts["occupancy"],
                waitlisted=counts["waitlisted"],
            )
            raise

        registered_at = timezone.now()
        registrations: list[Registration] = []
        for entry in entries:
            registration = Registration(
                event=event,
                organization_id=event.organization_id,
                status=status,
                registered_at=registered_at,
                registered_by=self.actor,
                custom_data=entry.custom_data,
                notes=entry.notes,
                **entry.registrant.as_lookup(),
            )
            registration.save()
            registrations.append(registration)

        logger.info(
            "registration_batch_created",
            event_id=str(event.id),
            status=str(status),
            batch_size=len(registrations),
            registered_by=str(self.actor.id),
        )
        return registrations

    # ---- Reading ----

    def capacity(self, event_id: uuid.UUID) -> CapacitySnapshot:
        """Current occupancy and what a new registration would get."""
        policy.require(self.actor, Capability.VIEW_EVENTS)
        event = self._get_event(event_id)
        counts = self._counts(event)
        occupancy, waitlisted = counts["occupancy"], counts["waitlisted"]
        available_spots = max(event.capacity - occupancy, 0)
        waitlist_spots = 0
        if event.waitlist_enabled and event.max_capacity is not None:
            waitlist_spots = max(event.max_capacity - occupancy - waitlisted, 0)
        is_open = event.is_active and not event.has_started
        return CapacitySnapshot(
            event_id=event.id,
            capacity=event.capacity,
            max_capacity=event.max_capacity,
            waitlist_enabled=event.waitlist_enabled,
            requires_approval=event.requires_approval,
            occupancy=occupancy,
            waitlisted=waitlisted,
            available_spots=available_spots,
            waitlist_spots=waitlist_spots,
            can_register=is_open and (event.requires_approval or available_spots > 0),
            can_waitlist=is_open and waitlist_spots > 0,
        )

    def event_registrations(self, event_id: uuid.UUID) -> EventRegistrations:
        """All registrations of an event, grouped by status, with a summary."""
        policy.require(self.actor, Capability.VIEW_REGISTRATIONS)
        event = self._get_event(event_id)
        registrations = list(
            event.registrations.with_registrants()
            .annotate(status_order=STATUS_ORDER)
            .order_by("status_order", "registered_at")
        )
        return EventRegistrations(
            registrations=registrations,
            summary=RegistrationSummary.from_registrations(registrations),
        )

    def my_registrations(self) -> QuerySet[Registration]:
        """Registrations of the caller's member record and active family members."""
        policy.require(self.actor, Capability.VIEW_EVENTS)
        return (
            Registration.objects.filter(organization_id=self.actor.organization_id)
            .filter(
                Q(member__user=self.actor)
                | Q(family_member__member__user=self.actor, family_member__is_active=True)
            )
            .with_registrants()
            .order_by("-registered_at")
        )

    # ---- Admin overrides ----

    @transaction.atomic
    def update_registration(
        self,
        registration_id: uuid.UUID,
        *,
        status: Registration.Status | None = None,
        notes: str | None = None,
        custom_data: dict[str, t.Any] | None = None,
    ) -> Registration:
        """Override a registration's status or annotate it.

        Confirming requires a free confirmed seat. Re-activating a cancelled
        registration must not give the registrant a second active registration.
        Leaving CONFIRMED clears the check-in.
        """
        policy.require(self.actor, Capability.MANAGE_REGISTRATIONS)
        found = Registration.objects.filter(id=registration_id, organization_id=self.actor.organization_id).first()
        if found is None:
            raise NotFoundError("Registration not found.")
        event = Event.objects.select_for_update().get(pk=found.event_id)
        registration = Registration.objects.select_for_update().get(pk=found.pk)

        previous_status = registration.status
        if status is not None and status != previous_status:
            if status == Registration.Status.CONFIRMED:
                confirmed = event.registrations.filter(status=Registration.Status.CONFIRMED).count()
                if confirmed >= event.capacity:
                    raise CapacityExceededError("Event is at capacity.")
            if previous_status == Registration.Status.CANCELLED:
                clash = (
                    event.registrations.active()
                    .for_registrant(registration.registrant)
                    .exclude(pk=registration.pk)
                    .exists()
                )
                if clash:
                    raise DuplicateRegistrationError(
                        [_describe(registration.registrant, registration.registrant_name)],
                        message="The registrant already holds an active registration for this event.",
                    )
            if status != Registration.Status.CONFIRMED:
                registration.checked_in = False
                registration.checked_in_at = None
                registration.checked_in_by = None
            registration.status = status
        if notes is not None:
            registration.notes = notes
        if custom_data is not None:
            registration.custom_data = custom_data
        registration.save()

        audit.record(
            organization=event.organization,
            actor=self.actor,
            action=AuditLog.Action.REGISTRATION_UPDATED,
            target=registration,
            previous_status=str(previous_status),
            new_status=str(registration.status),
        )
        logger.info(
            "registration_updated",
            registration_id=str(registration.id),
            previous_status=str(previous_status),
            new_status=str(registration.status),
        )
        return registration

    @transaction.atomic
    def check_in(self, event_id: uuid.UUID, registration_ids: Sequence[uuid.UUID]) -> CheckInResult:
        """Mark confirmed registrations of an event as attended.

        Every id must be a CONFIRMED registration of this event, otherwise nothing
        changes. Registrations already checked in keep their original check-in.
        """
        policy.require(self.actor, Capability.CHECK_IN)
        ids = list(dict.fromkeys(registration_ids))
        if not ids:
            raise ValidationError({"registration_ids": ["At least one registration is required."]})

        event = self._lock_event(event_id)
        registrations = list(
            event.registrations.select_for_update().filter(id__in=ids, status=Registration.Status.CONFIRMED)
        )
        if len(registrations) != len(ids):
            found = {r.id for r in registrations}
            raise InvalidStateError(
                "Some registrations not found or not confirmed.",
                registration_ids=[str(i) for i in ids if i not in found],
            )

        now = timezone.now()
        already = [r.id for r in registrations if r.checked_in]
        to_check_in = [r.id for r in registrations if not r.checked_in]
        Registration.objects.filter(id__in=to_check_in).update(
            checked_in=True, checked_in_at=now, checked_in_by=self.actor, updated_at=now
        )

        audit.record(
            organization=event.organization,
            actor=self.actor,
            action=AuditLog.Action.ATTENDEES_CHECKED_IN,
            target=event,
            registration_ids=[str(i) for i in to_check_in],
        )
        logger.info(
            "attendees_checked_in",
            event_id=str(event.id),
            checked_in=len(to_check_in),
            already_checked_in=len(already),
        )
        return CheckInResult(checked_in=to_check_in, already_checked_in=already)

    # ---- Helpers ----

    def _get_event(self, event_id: uuid.UUID) -> Event:
        event = Event.objects.filter(id=event_id, organization_id=self.actor.organization_id).first()
        if event is None:
            raise NotFoundError("Event not found.")
        return event

    def _lock_event(self, event_id: uuid.UUID) -> Event:
        event = (
            Event.objects.select_for_update()
            .filter(id=event_id, organization_id=self.actor.organization_id)
            .first()
        )
        if event is None:
            raise NotFoundError("Event not found.")
        return event

    @staticmethod
    def _assert_open_for_registration(event: Event) -> None:
        if not event.is_active:
            raise InvalidStateError("Event is not active.")
        if event.has_started:
            raise InvalidStateError("Cannot register for past events.")

    @staticmethod
    def _counts(event: Event) -> dict[str, int]:
        return event.registrations.aggregate(
            occupancy=Count("id", filter=Q(status__in=Registration.OCCUPYING_STATUSES)),
            waitlisted=Count("id", filter=Q(status=Registration.Status.WAITLISTED)),
        )

    def _resolve_registrants(self, refs: list[RegistrantRef]) -> dict[RegistrantRef, str]:
        """Load the registrants and check the caller may register them.

        Returns:
            The display name of each registrant.
        """
        can_register_anyone = policy.allows(self.actor, Capability.REGISTER_ANYONE)
        own_profile_id = MemberProfile.objects.filter(user=self.actor).values_list("id", flat=True).first()
        organization_id = self.actor.organization_id

        members = {
            m.id: m
            for m in MemberProfile.objects.filter(
                organization_id=organization_id,
                id__in=[r.id for r in refs if r.kind == RegistrantKind.MEMBER],
            ).select_related("user")
        }
        family_members = {
            f.id: f
            for f in FamilyMember.objects.active().filter(
                organization_id=organization_id,
                id__in=[r.id for r in refs if r.kind == RegistrantKind.FAMILY_MEMBER],
            )
        }

        names: dict[RegistrantRef, str] = {}
        for ref in refs:
            if ref.kind == RegistrantKind.MEMBER:
                member = members.get(ref.id)
                if member is None:
                    raise NotFoundError("Member not found.", registrant=_describe(ref))
                if not can_register_anyone and member.id != own_profile_id:
                    raise PermissionDeniedError("You can only register yourself and your family members.")
                if member.membership_status != MemberProfile.MembershipStatus.ACTIVE:
                    raise InvalidStateError("Only active members can be registered.", registrant=_describe(ref))
                names[ref] = member.full_name or member.email
            else:
                family_member = family_members.get(ref.id)
                if family_member is None:
                    raise NotFoundError("Family member not found.", registrant=_describe(ref))
                if not can_register_anyone and family_member.member_id != own_profile_id:
                    raise PermissionDeniedError("You can only register yourself and your family members.")
                names[ref] = family_member.full_name
        return names

    @staticmethod
    def _assert_no_duplicates(event: Event, refs: list[RegistrantRef], names: dict[RegistrantRef, str]) -> None:
        conflicts: list[RegistrantRef] = []
        seen: set[RegistrantRef] = set()
        for ref in refs:
            if ref in seen and ref not in conflicts:
                conflicts.append(ref)
            seen.add(ref)

        lookup = Q()
        for ref in seen:
            lookup |= Q(**ref.as_lookup())
        for registration in event.registrations.active().filter(lookup):
            if registration.registrant not in conflicts:
                conflicts.append(registration.registrant)

        if conflicts:
            described = [_describe(ref, names.get(ref)) for ref in conflicts]
            raise DuplicateRegistrationError(
                described,
                message="Already registered for this event: " + ", ".join(d["name"] or d["id"] for d in described),
            )


def _describe(ref: RegistrantRef, name: str | None = None) -> dict[str, str]:
    return {"type": ref.kind.value, "id": str(ref.id), "name": name or ""}
