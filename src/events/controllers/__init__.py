from .events import EventController
from .family import FamilyMemberController
from .invites import InviteController
from .members import MemberController
from .public import PublicController
from .registrations import RegistrationController
from .reports import ReportController

EVENT_CONTROLLERS = [
    MemberController,
    FamilyMemberController,
    InviteController,
    EventController,
    RegistrationController,
    ReportController,
    PublicController,
]
