from __future__ import annotations

import re
import unicodedata

# Regional (India) dialing rules for numbers typed without a country code.
COUNTRY_CODE = "91"
MOBILE_PREFIX_PATTERN = re.compile(r"^[6789]")
MIN_DIGITS = 10
MAX_DIGITS = 15


def _ascii_digits(phone: str | int) -> str:
    # Full-width and other script digits are folded to 0-9; everything else is dropped.
    return "".join(str(unicodedata.decimal(char)) for char in str(phone) if char.isdecimal())


def normalize_phone(phone: str | int | None) -> str | None:
    """Return the number in international digit-only form, or None if invalid.

    Ten-digit numbers starting with 6-9 are Indian mobiles and get the 91
    prefix; an eleven-digit number with a trunk zero is treated the same
    way. Any other number longer than ten digits is assumed to carry its
    country code already. Remaining ten-digit numbers are returned bare.
    """
    if phone is None or phone == "":
        return None
    digits = _ascii_digits(phone)
    if len(digits) < MIN_DIGITS or len(digits) > MAX_DIGITS:
        return None
    if len(digits) == 11 and digits.startswith("0"):
        return COUNTRY_CODE + digits[1:]
    if len(digits) > MIN_DIGITS:
        return digits
    if MOBILE_PREFIX_PATTERN.match(digits):
        return COUNTRY_CODE + digits
    return digits


def mask_phone(phone: str | int | None) -> str | None:
    if phone is None:
        return None
    digits = _ascii_digits(phone)
    if len(digits) < 7:
        return "****"
    prefix = digits[:3]
    suffix = digits[-4:]
    return f"{prefix}****{suffix}"
