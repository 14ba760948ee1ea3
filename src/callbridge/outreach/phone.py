"""Phone number normalization for dialing and SMS."""
from __future__ import annotations

import re
from typing import Iterable, Optional

import phonenumbers
from phonenumbers import NumberParseException

from callbridge.core.config import get_settings
from callbridge.core.exceptions import InvalidPhoneNumberError
from callbridge.core.logging_config import get_logger

LOGGER = get_logger(__name__)

NON_DIGITS = re.compile(r"\D")

DOMESTIC_LENGTH = 10
DOMESTIC_COUNTRY_CODE = "1"
# E.164 caps the full number at 15 digits
MAX_E164_DIGITS = 15


def normalize_phone_number(
    value: Optional[str],
    foreign_prefixes: Optional[Iterable[str]] = None,
) -> Optional[str]:
    """
    Normalize a user-supplied phone number to "+<countrycode><digits>".

    Every non-digit character is stripped first, then:
    - exactly 10 digits is a domestic (NANP) number and gets "+1";
    - 11 to 15 digits starting with "1" gets "+";
    - 11 to 15 digits starting with a known foreign prefix gets "+".

    Args:
        value: Raw phone number string.
        foreign_prefixes: Recognized foreign calling codes (defaults to
            PHONE_FOREIGN_PREFIXES).

    Returns:
        The normalized number, or None when the input is rejected.
    """
    if not value:
        return None

    digits = NON_DIGITS.sub("", str(value))
    if not digits:
        return None

    if len(digits) == DOMESTIC_LENGTH:
        return f"+{DOMESTIC_COUNTRY_CODE}{digits}"

    if len(digits) < DOMESTIC_LENGTH + 1 or len(digits) > MAX_E164_DIGITS:
        return None

    if digits.startswith(DOMESTIC_COUNTRY_CODE):
        return f"+{digits}"

    if foreign_prefixes is None:
        foreign_prefixes = get_settings().foreign_prefixes
    if any(digits.startswith(prefix) for prefix in foreign_prefixes):
        return f"+{digits}"

    return None


def require_phone_number(
    value: Optional[str],
    foreign_prefixes: Optional[Iterable[str]] = None,
) -> str:
    """
    Normalize a phone number or raise.

    Raises:
        InvalidPhoneNumberError: If the number cannot be normalized.
    """
    normalized = normalize_phone_number(value, foreign_prefixes)
    if normalized is None:
        raise InvalidPhoneNumberError("Invalid phone number format.")
    return normalized


def phone_region(e164: str) -> Optional[str]:
    """
    ISO 3166-1 region for a normalized number, for log metadata only.

    Returns None when the number does not map to a single region.
    """
    try:
        parsed = phonenumbers.parse(e164, None)
    except NumberParseException:
        return None
    region = phonenumbers.region_code_for_country_code(parsed.country_code)
    return None if region == "ZZ" else region


__all__ = [
    "normalize_phone_number",
    "require_phone_number",
    "phone_region",
]
