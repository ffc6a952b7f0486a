"""Shared validation utilities"""

import re
from typing import Optional

from ..models import BLOOD_TYPES, parse_time_to_minutes


def validate_blood_type(value: Optional[str]) -> Optional[str]:
    """
    Validate and normalize a blood type (e.g. "ab+" -> "AB+").

    Raises:
        ValueError: If the value is not one of the eight ABO/Rh types
    """
    if value is None:
        return value

    normalized = value.strip().upper()
    if normalized not in BLOOD_TYPES:
        raise ValueError("Valid blood type is required")
    return normalized


def validate_phone(phone: Optional[str]) -> Optional[str]:
    """
    Validate a mobile phone number and normalize it to +<digits>.

    Accepts local numbers (10 digits) and numbers with a country code
    (up to 15 digits, E.164). Spaces, dashes, dots and brackets are ignored.

    Raises:
        ValueError: If phone number is invalid
    """
    if not phone:
        return phone

    stripped = phone.strip()
    if not re.fullmatch(r"\+?[\d\s().-]+", stripped):
        raise ValueError("Valid phone number is required")

    digits = re.sub(r"\D", "", stripped)
    if not 10 <= len(digits) <= 15:
        raise ValueError("Valid phone number is required")

    return f"+{digits}" if stripped.startswith("+") else digits


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    email_pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
    if not re.match(email_pattern, email):
        raise ValueError("Please include a valid email")

    return email


def validate_slot_time(value: str) -> str:
    """
    Normalize a slot time to 24-hour "HH:MM".

    Raises:
        ValueError: If the time cannot be parsed
    """
    try:
        minutes = parse_time_to_minutes(value)
    except (ValueError, AttributeError) as e:
        raise ValueError("Time slot must look like HH:MM") from e
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def validate_coordinates(coordinates: Optional[list[float]]) -> Optional[list[float]]:
    """
    Validate a GeoJSON [longitude, latitude] pair.

    Raises:
        ValueError: If the pair is malformed or out of range
    """
    if coordinates is None:
        return coordinates
    if len(coordinates) != 2:
        raise ValueError("Coordinates must be [longitude, latitude]")

    longitude, latitude = coordinates
    if not -180 <= longitude <= 180 or not -90 <= latitude <= 90:
        raise ValueError("Coordinates are out of range")
    return [float(longitude), float(latitude)]


def parse_blood_type_param(value: Optional[str]) -> Optional[str]:
    """
    Validate a blood type taken from a query string.

    An unencoded "+" decodes to a space, so "A+" may arrive as "A ".
    """
    if not value:
        return None
    stripped = value.strip()
    if value != value.rstrip() and not stripped.endswith(("+", "-")):
        stripped += "+"
    return validate_blood_type(stripped)
