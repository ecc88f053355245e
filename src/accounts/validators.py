import re

from django.core.exceptions import ValidationError
from django.utils.translation import gettext_lazy as _

PHONE_REGEX = re.compile(r"^\+?[1-9]?[\d\s\-\(\)\.]{7,20}$")
US_PHONE_DIGITS_REGEX = re.compile(r"^1?([2-9]\d{2})([2-9]\d{2})(\d{4})$")
ZIP_CODE_REGEX = re.compile(r"^\d{5}(-\d{4})?$")


def validate_phone_number(value: str | None) -> None:
    """Validate phone number.

    Accepts the common US notations: (555) 123-4567, 555-123-4567, +1-555-123-4567.

    Args:
        value (str): phone number.
    """
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ValidationError(_("Phone number must be a string."))
    if not PHONE_REGEX.fullmatch(value.strip()):
        raise ValidationError(
            _("Phone number must be a valid format (e.g., (555) 123-4567, 555-123-4567, +1-555-123-4567).")
        )
    return None


def validate_zip_code(value: str | None) -> None:
    """Validate a US ZIP code (12345 or 12345-6789)."""
    if value is None or value == "":
        return None
    if not ZIP_CODE_REGEX.fullmatch(value.strip()):
        raise ValidationError(_("ZIP code must be 5 digits (12345) or 9 digits (12345-6789)."))
    return None


def normalize_phone_number(value: str) -> str:
    """Normalize phone number.

    Args:
        value (str): phone number.

    Returns:
        str: normalized phone number.
    """
    return re.sub(r"[ \-().]", "", value)


def format_us_phone_number(value: str) -> tuple[str, str] | None:
    """Return the E.164 and national formats of a US number, or None if it is not one."""
    digits = re.sub(r"\D", "", value)
    match = US_PHONE_DIGITS_REGEX.fullmatch(digits)
    if not match:
        return None
    area, exchange, line = match.groups()
    return f"+1{area}{exchange}{line}", f"({area}) {exchange}-{line}"
