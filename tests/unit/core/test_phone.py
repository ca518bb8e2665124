import pytest

from localcooks.core.phone import (
    is_valid_north_american_phone,
    normalize_phone_number,
    validate_and_normalize_phone,
)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("(416) 123-4567", None),  # exchange code cannot start with 1
        ("(416) 555-0199", "+14165550199"),
        ("416.555.0199", "+14165550199"),
        ("1-709-555-0134", "+17095550134"),
        ("+17095550134", "+17095550134"),
        ("+1 709 555 0134", "+17095550134"),
        ("555-0134", None),
        ("(116) 555-0134", None),
        ("", None),
        (None, None),
    ],
)
def test_validate_and_normalize_phone(raw, expected):
    assert validate_and_normalize_phone(raw) == expected


def test_ten_digits_after_plus_get_country_code():
    assert normalize_phone_number("+7095550134") == "+17095550134"


def test_international_numbers_normalize_but_are_not_north_american():
    assert normalize_phone_number("+442071838750") == "+442071838750"
    assert not is_valid_north_american_phone("+442071838750")
