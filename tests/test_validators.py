import pytest

from bloodconnect.models import DonationCenter, parse_time_to_minutes
from bloodconnect.shared.validators import (
    parse_blood_type_param,
    validate_blood_type,
    validate_coordinates,
    validate_email,
    validate_phone,
    validate_slot_time,
)
from bloodconnect.utils.sanitization import validate_and_sanitize_input


def test_blood_type_is_normalized():
    assert validate_blood_type(" ab- ") == "AB-"
    with pytest.raises(ValueError):
        validate_blood_type("AB")


@pytest.mark.parametrize(
    "raw, expected",
    [("A ", "A+"), ("AB ", "AB+"), ("o-", "O-"), ("B+", "B+"), ("", None), (None, None)],
)
def test_blood_type_query_param(raw, expected):
    assert parse_blood_type_param(raw) == expected


@pytest.mark.parametrize(
    "raw, expected",
    [("98765 43210", "9876543210"), ("+91 (22) 3456-7890", "+912234567890"), (None, None)],
)
def test_phone_normalization(raw, expected):
    assert validate_phone(raw) == expected


@pytest.mark.parametrize("raw", ["12345", "call me", "+1 234 567 890 123 456 78"])
def test_invalid_phone(raw):
    with pytest.raises(ValueError):
        validate_phone(raw)


def test_email():
    assert validate_email(" Donor@Example.ORG ") == "donor@example.org"
    with pytest.raises(ValueError, match="Please include a valid email"):
        validate_email("donor@")


@pytest.mark.parametrize(
    "raw, expected", [("9:00", "09:00"), ("9:30 am", "09:30"), ("12:00 PM", "12:00"), ("12:15 AM", "00:15")]
)
def test_slot_time(raw, expected):
    assert validate_slot_time(raw) == expected


@pytest.mark.parametrize("raw", ["25:00", "13:00 PM", "noon"])
def test_invalid_slot_time(raw):
    with pytest.raises(ValueError):
        validate_slot_time(raw)


def test_coordinates_are_longitude_first():
    assert validate_coordinates([72.8777, 19.0760]) == [72.8777, 19.076]
    with pytest.raises(ValueError):
        validate_coordinates([19.0, 200.0])
    with pytest.raises(ValueError):
        validate_coordinates([1.0])


def test_sanitize_input():
    assert validate_and_sanitize_input("  <script>x</script> ") == "&lt;script&gt;x&lt;/script&gt;"
    with pytest.raises(ValueError):
        validate_and_sanitize_input("x" * 11, max_length=10)


def test_center_is_open_accepts_both_clock_formats():
    center = DonationCenter(operating_hours={"monday": {"open": "8:00 AM", "close": "20:00"}, "sunday": {}})

    assert center.is_open("Monday", "08:00")
    assert center.is_open("monday", "7:59 PM")
    assert not center.is_open("monday", "20:00")
    assert not center.is_open("sunday", "10:00")
    assert not center.is_open("tuesday", "10:00")
    assert parse_time_to_minutes("8:00 PM") == 20 * 60
