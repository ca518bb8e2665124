"""
Phone number normalization for North American numbers.

Numbers are stored in E.164 form (``+1NXXNXXXXXX``). International numbers
already prefixed with ``+`` are kept as entered when they have 1-15 digits.
"""

import re
from typing import Optional

_NON_DIGIT_PLUS = re.compile(r"[^\d+]")


def _valid_nanp(digits: str) -> bool:
    # Area code and exchange code must both start with 2-9
    return len(digits) == 10 and digits[0] in "23456789" and digits[3] in "23456789"


def normalize_phone_number(phone: Optional[str]) -> Optional[str]:
    if not phone:
        return None
    cleaned = _NON_DIGIT_PLUS.sub("", phone.strip())
    if not cleaned:
        return None

    if cleaned.startswith("+"):
        digits = cleaned[1:]
        if not digits.isdigit() or not 1 <= len(digits) <= 15:
            return None
        if len(digits) == 10:
            return f"+1{digits}"
        return cleaned

    digits = cleaned.replace("+", "")
    if len(digits) == 11 and digits.startswith("1"):
        return f"+{digits}"
    if _valid_nanp(digits):
        return f"+1{digits}"
    return None


def is_valid_north_american_phone(phone: Optional[str]) -> bool:
    normalized = normalize_phone_number(phone)
    if not normalized or not normalized.startswith("+1") or len(normalized) != 12:
        return False
    return _valid_nanp(normalized[2:])


def validate_and_normalize_phone(phone: Optional[str]) -> Optional[str]:
    """Return the E.164 form of a valid North American number, else None."""
    normalized = normalize_phone_number(phone)
    if normalized and is_valid_north_american_phone(normalized):
        return normalized
    return None
