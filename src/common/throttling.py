"""Request rate limits. Each rate can be overridden from the environment."""

from decouple import config
from ninja_extra.throttling import AnonRateThrottle, UserRateThrottle


class AnonDefaultThrottle(AnonRateThrottle):
    rate = config("THROTTLE_ANON_RATE", default="60/min")


class UserDefaultThrottle(UserRateThrottle):
    rate = config("THROTTLE_USER_RATE", default="100/min")


class AuthThrottle(AnonRateThrottle):
    """Login, token refresh and invite acceptance."""

    rate = config("THROTTLE_AUTH_RATE", default="30/min")


class PublicRegistrationThrottle(AnonRateThrottle):
    """Membership requests from the public registration form."""

    rate = config("THROTTLE_PUBLIC_REGISTRATION_RATE", default="20/hour")


class WriteThrottle(UserRateThrottle):
    rate = config("THROTTLE_WRITE_RATE", default="100/min")
