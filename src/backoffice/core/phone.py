"""Phone identity normalization.

Every phone number entering the system is reduced to one canonical form
(``+7XXXXXXXXXX``) before it is stored, compared or looked up. Lookups by any
other form would silently miss records.
"""

import re
from typing import Annotated

from pydantic import AfterValidator

COUNTRY_CODE = "7"
TRUNK_PREFIX = "8"
SUBSCRIBER_DIGITS = 10

_NON_DIGITS = re.compile(r"[^0-9]")
_CANONICAL_PHONE = re.compile(rf"^\+{COUNTRY_CODE}[0-9]{{{SUBSCRIBER_DIGITS}}}$")


def normalize_phone(raw: str) -> str:
    """Canonicalize a phone number. Total and idempotent, never raises.

    Non-digits are stripped. A leading trunk prefix ``8`` becomes the country
    code, a leading ``7`` is kept, and anything else gets ``7`` prepended.

    >>> normalize_phone("8 (999) 123-45-67")
    '+79991234567'
    >>> normalize_phone("+7 999 123 45 67")
    '+79991234567'
    >>> normalize_phone("9991234567")
    '+79991234567'
    """
    digits = _NON_DIGITS.sub("", raw)
    if digits.startswith(TRUNK_PREFIX):
        return f"+{COUNTRY_CODE}{digits[len(TRUNK_PREFIX):]}"
    if digits.startswith(COUNTRY_CODE):
        return f"+{digits}"
    return f"+{COUNTRY_CODE}{digits}"


def is_canonical_phone(phone: str) -> bool:
    return _CANONICAL_PHONE.match(phone) is not None


def validate_phone(raw: str) -> str:
    """Normalize and require a full subscriber number.

    Raises:
        ValueError: If the normalized number is not ``+7`` followed by ten digits.
    """
    phone = normalize_phone(raw)
    if not is_canonical_phone(phone):
        raise ValueError("Phone number must contain a country code and 10 digits")
    return phone


PhoneNumber = Annotated[str, AfterValidator(validate_phone)]
