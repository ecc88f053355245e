from uuid import UUID

from django.db.models import QuerySet
from ninja_extra import api_controller, route

from common.authentication import ContextJWTAuth
from events import models, schema
from events.service.policy import Capability
from events.service.registration_manager import RegistrationManager

from .permissions import HasCapability
from .user_aware_controller import UserAwareController


@api_controller("/registrations", auth=ContextJWTAuth(), tags=["Registrations"])
class RegistrationController(UserAwareController):
    @route.get("/me", url_name="my_registrations", response=list[schema.RegistrationSchema])
    def my_registrations(self) -> QuerySet[models.Registration]:
        """Your registrations and those of your family members, newest first."""
        return RegistrationManager(self.user()).my_registrations()

    @route.patch(
        "/{registration_id}",
        url_name="update_registration",
        response=schema.RegistrationSchema,
        permissions=[HasCapability(Capability.MANAGE_REGISTRATIONS)],
    )
    def update_registration(
        self, registration_id: UUID, payload: schema.RegistrationUpdateSchema
    ) -> models.Registration:
        """Change a registration's status, notes or answers.

        Confirming needs a free seat. Leaving the confirmed status clears the check-in.
        """
        return RegistrationManager(self.user()).update_registration(
            registration_id, status=payload.status, notes=payload.notes, custom_data=payload.custom_data
        )
