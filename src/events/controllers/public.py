import typing as t

from ninja_extra import ControllerBase, api_controller, route

from common.throttling import PublicRegistrationThrottle
from events import models, schema
from events.service import public_service


@api_controller("/public", tags=["Public"])
class PublicController(ControllerBase):
    @route.get(
        "/organizations/{identifier}",
        url_name="public_organization",
        response=schema.PublicOrganizationSchema,
    )
    def get_organization(self, identifier: str) -> models.Organization:
        """Look up an active organization by slug, web address or id."""
        return public_service.get_public_organization(identifier)

    @route.post(
        "/membership-requests",
        url_name="request_membership",
        response={201: schema.MembershipRequestResponseSchema},
        throttle=PublicRegistrationThrottle(),
    )
    def request_membership(self, payload: schema.MembershipRequestSchema) -> tuple[int, dict[str, t.Any]]:
        """Ask to become a member of an organization.

        An administrator reviews the request; the applicant is notified by email of the decision.
        """
        profile = public_service.request_membership(payload)
        return 201, {
            "message": "Your membership request has been submitted and is awaiting approval.",
            "organization_name": profile.organization.name,
        }

    @route.post("/validate/phone", url_name="validate_phone", response=schema.PhoneValidationResponseSchema)
    def validate_phone(self, payload: schema.PhoneValidationSchema) -> dict[str, t.Any]:
        valid, formatted, e164 = public_service.validate_phone(payload.phone)
        return {"valid": valid, "formatted": formatted, "e164": e164}

    @route.post("/validate/zip-code", url_name="validate_zip_code", response=schema.ZipCodeValidationResponseSchema)
    def validate_zip_code(self, payload: schema.ZipCodeValidationSchema) -> dict[str, t.Any]:
        valid, formatted = public_service.validate_zip_code(payload.zip_code)
        return {"valid": valid, "formatted": formatted}
