import typing as t
from uuid import UUID

from django.db.models import QuerySet
from ninja_extra import api_controller, route
from ninja_extra.pagination import PageNumberPaginationExtra, PaginatedResponseSchema, paginate

from common.authentication import ContextJWTAuth
from common.throttling import WriteThrottle
from events import models, schema
from events.service import event_service
from events.service.policy import Capability
from events.service.registration_manager import CapacitySnapshot, EventRegistrations, RegistrationManager

from .permissions import HasCapability
from .user_aware_controller import UserAwareController

STATUS_MESSAGES: dict[str, str] = {
    "confirmed": "Registration confirmed.",
    "pending": "Registration submitted and awaiting approval.",
    "waitlisted": "The event is full. You have been added to the waitlist.",
}


@api_controller("/events", auth=ContextJWTAuth(), tags=["Events"])
class EventController(UserAwareController):
    def manager(self) -> RegistrationManager:
        return RegistrationManager(self.user())

    @route.get("/", url_name="list_events", response=PaginatedResponseSchema[schema.EventSchema])
    @paginate(PageNumberPaginationExtra, page_size=20)
    def list_events(
        self, include_inactive: bool = False, upcoming_only: bool = False, search: str | None = None
    ) -> QuerySet[models.Event]:
        """List the events of your organization, soonest first.

        Only administrators and staff may include inactive events.
        """
        return event_service.list_events(
            self.user(), include_inactive=include_inactive, upcoming_only=upcoming_only, search=search
        )

    @route.post(
        "/",
        url_name="create_event",
        response={201: schema.EventSchema},
        permissions=[HasCapability(Capability.MANAGE_EVENTS)],
        throttle=WriteThrottle(),
    )
    def create_event(self, payload: schema.EventCreateSchema) -> tuple[int, models.Event]:
        """Create an event. It must start in the future and end after it starts."""
        return 201, event_service.create_event(self.user(), payload)

    @route.get(
        "/stats",
        url_name="event_stats",
        response=schema.EventStatsSchema,
        permissions=[HasCapability(Capability.VIEW_EVENT_STATS)],
    )
    def stats(self) -> dict[str, int]:
        return event_service.event_stats(self.user())

    @route.get("/{event_id}", url_name="get_event", response=schema.EventSchema)
    def get_event(self, event_id: UUID) -> models.Event:
        return event_service.get_event(self.user(), event_id)

    @route.patch(
        "/{event_id}",
        url_name="update_event",
        response=schema.EventSchema,
        permissions=[HasCapability(Capability.MANAGE_EVENTS)],
    )
    def update_event(self, event_id: UUID, payload: schema.EventUpdateSchema) -> models.Event:
        """Update an event. Capacity cannot drop below the confirmed registrations."""
        return event_service.update_event(self.user(), event_id, payload)

    @route.delete(
        "/{event_id}",
        url_name="deactivate_event",
        response={204: None},
        permissions=[HasCapability(Capability.MANAGE_EVENTS)],
    )
    def deactivate_event(self, event_id: UUID) -> tuple[int, None]:
        """Deactivate an event. Its registrations are kept."""
        event_service.deactivate_event(self.user(), event_id)
        return 204, None

    @route.get("/{event_id}/capacity", url_name="event_capacity", response=schema.CapacitySchema)
    def capacity(self, event_id: UUID) -> CapacitySnapshot:
        """Current occupancy, free spots and whether new registrations are accepted."""
        return self.manager().capacity(event_id)

    @route.post(
        "/{event_id}/registrations",
        url_name="register_for_event",
        response={201: schema.RegistrationBatchResponseSchema},
        permissions=[HasCapability(Capability.REGISTER)],
        throttle=WriteThrottle(),
    )
    def register(self, event_id: UUID, payload: schema.RegistrationCreateSchema) -> tuple[int, dict[str, t.Any]]:
        """Register yourself and/or your family members for an event.

        All registrants of one request get the same status: confirmed while seats are
        left, pending when the event requires approval, waitlisted when the event is
        full but its waitlist is not. A request that fits nowhere is rejected as a whole.
        """
        registrations = self.manager().register(event_id, [r.to_entry() for r in payload.registrants])
        status = str(registrations[0].status)
        return 201, {"message": STATUS_MESSAGES[status], "status": status, "registrations": registrations}

    @route.get(
        "/{event_id}/registrations",
        url_name="event_registrations",
        response=schema.EventRegistrationsSchema,
        permissions=[HasCapability(Capability.VIEW_REGISTRATIONS)],
    )
    def registrations(self, event_id: UUID) -> EventRegistrations:
        """All registrations of an event by status, with a summary."""
        return self.manager().event_registrations(event_id)

    @route.post(
        "/{event_id}/check-in",
        url_name="check_in_attendees",
        response=schema.CheckInResponseSchema,
        permissions=[HasCapability(Capability.CHECK_IN)],
    )
    def check_in(self, event_id: UUID, payload: schema.CheckInSchema) -> dict[str, t.Any]:
        """Check in confirmed registrations. Nothing changes if any of them is not confirmed."""
        result = self.manager().check_in(event_id, payload.registration_ids)
        return {
            "message": result.message,
            "checked_in": result.checked_in,
            "already_checked_in": result.already_checked_in,
        }
