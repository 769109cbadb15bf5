"""Phone number normalization."""

import re

MIN_DIGITS = 10
MAX_DIGITS = 15

_FORMATTING = re.compile(r"[\s\-\.\(\)/]")
_ASCII_DIGITS = re.compile(r"[0-9]+")


def normalize_phone(phone_str: str, country_code: str = "256") -> str:
    """Normalize a phone number to canonical international form.

    Examples (country code 256):
    - "+256 701 234 567" -> "+256701234567"
    - "00256701234567"   -> "+256701234567"
    - "0701234567"       -> "+256701234567"
    - "256701234567"     -> "+256701234567"

    Args:
        phone_str: Phone number in any common format
        country_code: Digits prepended to local numbers starting with a single 0

    Returns:
        Phone number as "+" followed by digits

    Raises:
        ValueError: If the number has too few or too many digits, or
            contains characters other than digits and formatting
    """
    if not phone_str or not phone_str.strip():
        raise ValueError("Empty phone number")

    cleaned = _FORMATTING.sub("", phone_str.strip())

    if cleaned.startswith("+"):
        digits = cleaned[1:]
    elif cleaned.startswith("00"):
        digits = cleaned[2:]
    elif cleaned.startswith("0"):
        digits = country_code + cleaned[1:]
    else:
        digits = cleaned

    if not _ASCII_DIGITS.fullmatch(digits):
        raise ValueError(f"Phone number '{phone_str}' contains invalid characters")

    if len(digits) < MIN_DIGITS:
        raise ValueError(
            f"Phone number '{phone_str}' has fewer than {MIN_DIGITS} digits"
        )
    if len(digits) > MAX_DIGITS:
        raise ValueError(
            f"Phone number '{phone_str}' has more than {MAX_DIGITS} digits"
        )

    return f"+{digits}"
