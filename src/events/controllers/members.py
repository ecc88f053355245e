import typing as t
from uuid import UUID

from django.db.models import QuerySet
from ninja_extra import api_controller, route
from ninja_extra.pagination import PageNumberPaginationExtra, PaginatedResponseSchema, paginate

from common.authentication import ContextJWTAuth
from common.throttling import WriteThrottle
from events import models, schema
from events.service import family_service, invitation_service, membership_service
from events.service.policy import Capability

from .permissions import HasCapability
from .user_aware_controller import UserAwareController


@api_controller("/members", auth=ContextJWTAuth(), tags=["Members"])
class MemberController(UserAwareController):
    @route.get(
        "/",
        url_name="list_members",
        response=PaginatedResponseSchema[schema.MemberProfileSchema],
        permissions=[HasCapability(Capability.VIEW_MEMBERS)],
    )
    @paginate(PageNumberPaginationExtra, page_size=20)
    def list_members(
        self, status: models.MemberProfile.MembershipStatus | None = None, search: str | None = None
    ) -> QuerySet[models.MemberProfile]:
        """List the members of your organization, optionally filtered by status or a search term."""
        return membership_service.list_members(self.user(), status=status, search=search)

    @route.get("/me", url_name="my_member_profile", response=schema.MemberProfileSchema)
    def my_profile(self) -> models.MemberProfile:
        """Get your own membership record."""
        return membership_service.get_own_profile(self.user())

    @route.get(
        "/stats",
        url_name="member_stats",
        response=schema.MemberStatsSchema,
        permissions=[HasCapability(Capability.VIEW_MEMBERS)],
    )
    def stats(self) -> dict[str, int]:
        """Member counts by status, plus active family members."""
        return membership_service.member_stats(self.user())

    @route.get(
        "/pending",
        url_name="pending_members",
        response=PaginatedResponseSchema[schema.MemberProfileSchema],
        permissions=[HasCapability(Capability.MANAGE_MEMBERS)],
    )
    @paginate(PageNumberPaginationExtra, page_size=20)
    def pending(self) -> QuerySet[models.MemberProfile]:
        """Membership requests waiting for a decision, newest first."""
        return membership_service.pending_approvals(self.user())

    @route.post(
        "/invite",
        url_name="invite_member",
        response={201: schema.MemberInviteResponseSchema},
        permissions=[HasCapability(Capability.MANAGE_MEMBERS)],
        throttle=WriteThrottle(),
    )
    def invite(self, payload: schema.MemberInviteSchema) -> tuple[int, dict[str, t.Any]]:
        """Invite someone by email. They receive a link to set their password."""
        profile = invitation_service.invite_member(
            self.user(), email=payload.email, first_name=payload.first_name, last_name=payload.last_name
        )
        return 201, {"message": f"Invitation sent to {profile.email}.", "member": profile}

    @route.post(
        "/{member_id}/resend-invite",
        url_name="resend_member_invite",
        response=schema.MemberProfileSchema,
        permissions=[HasCapability(Capability.MANAGE_MEMBERS)],
        throttle=WriteThrottle(),
    )
    def resend_invite(self, member_id: UUID) -> models.MemberProfile:
        """Send a new invitation link to a member who has not accepted yet."""
        return invitation_service.resend_invite(self.user(), member_id)

    @route.get("/{member_id}", url_name="get_member", response=schema.MemberProfileSchema)
    def get_member(self, member_id: UUID) -> models.MemberProfile:
        """Get a member. Members can only read their own record."""
        return membership_service.get_member(self.user(), member_id)

    @route.patch("/{member_id}", url_name="update_member", response=schema.MemberProfileSchema)
    def update_member(self, member_id: UUID, payload: schema.MemberProfileUpdateSchema) -> models.MemberProfile:
        """Update contact and personal details. Members can only update their own."""
        return membership_service.update_member_profile(self.user(), member_id, payload)

    @route.post(
        "/{member_id}/decision",
        url_name="decide_membership",
        response=schema.MemberProfileSchema,
        permissions=[HasCapability(Capability.MANAGE_MEMBERS)],
    )
    def decide(self, member_id: UUID, payload: schema.MembershipDecisionSchema) -> models.MemberProfile:
        """Approve or deny a pending membership request. Denying requires a reason."""
        return membership_service.decide_membership(
            self.user(),
            member_id,
            approve=payload.approve,
            message=payload.message,
            denial_reason=payload.denial_reason,
        )

    @route.post(
        "/{member_id}/inactivate",
        url_name="inactivate_member",
        response=schema.MemberProfileSchema,
        permissions=[HasCapability(Capability.MANAGE_MEMBERS)],
    )
    def inactivate(self, member_id: UUID, payload: schema.MemberInactivateSchema) -> models.MemberProfile:
        """Deactivate a member. They can no longer log in."""
        return membership_service.inactivate_member(self.user(), member_id, payload.reason)

    @route.post(
        "/{member_id}/activate",
        url_name="activate_member",
        response=schema.MemberProfileSchema,
        permissions=[HasCapability(Capability.MANAGE_MEMBERS)],
    )
    def activate(self, member_id: UUID) -> models.MemberProfile:
        """Reactivate a deactivated or denied member."""
        return membership_service.activate_member(self.user(), member_id)

    @route.get("/{member_id}/family", url_name="list_family_members", response=list[schema.FamilyMemberSchema])
    def list_family(self, member_id: UUID) -> QuerySet[models.FamilyMember]:
        """Active family members of a member."""
        return family_service.list_family_members(self.user(), member_id)

    @route.post(
        "/{member_id}/family",
        url_name="add_family_member",
        response={201: schema.FamilyMemberSchema},
        permissions=[HasCapability(Capability.MANAGE_FAMILY)],
    )
    def add_family_member(
        self, member_id: UUID, payload: schema.FamilyMemberCreateSchema
    ) -> tuple[int, models.FamilyMember]:
        """Add a family member who can then be registered for events."""
        return 201, family_service.add_family_member(self.user(), member_id, payload)
