"""Donation center domain schemas and response formatting"""

from datetime import date, datetime, timedelta
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...models import WEEKDAYS
from ...shared.validators import (
    validate_coordinates,
    validate_email,
    validate_phone,
    validate_slot_time,
)
from ...utils.geo import distance_between
from ...utils.sanitization import validate_and_sanitize_input

AVAILABILITY_DAYS = 7

# Hour ranges [start, end) for the timeSlot filter
TIME_RANGES = {
    "morning": (6, 12),
    "afternoon": (12, 17),
    "evening": (17, 22),
}


def _date_only(value):
    """Accept full ISO timestamps ("2026-01-05T00:00:00.000Z") where a date is expected"""
    if isinstance(value, str) and "T" in value:
        return value.split("T", 1)[0]
    return value


class OperatingHoursDay(BaseModel):
    open: str
    close: str

    @field_validator("open", "close")
    @classmethod
    def validate_time(cls, v):
        return validate_slot_time(v)


class CenterCreate(BaseModel):
    """Schema for creating a donation center"""

    name: str = Field(min_length=1, max_length=255)
    address: str = Field(min_length=1, max_length=500)
    city: str = Field(min_length=1, max_length=100)
    state: str = Field(min_length=1, max_length=100)
    country: Optional[str] = Field(default=None, max_length=100)
    phone: str
    email: Optional[str] = None
    website: Optional[str] = Field(default=None, max_length=500)
    coordinates: Optional[list[float]] = None
    operatingHours: Optional[dict[str, OperatingHoursDay]] = None
    facilities: list[str] = Field(default_factory=list)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        if not v:
            raise ValueError("Valid phone number is required")
        return validate_phone(v)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return validate_email(v)

    @field_validator("coordinates")
    @classmethod
    def validate_coordinates(cls, v):
        return validate_coordinates(v)

    @field_validator("operatingHours")
    @classmethod
    def validate_weekdays(cls, v):
        if v is None:
            return v
        normalized = {}
        for day, hours in v.items():
            key = day.strip().lower()
            if key not in WEEKDAYS:
                raise ValueError(f"Unknown weekday: {day}")
            normalized[key] = hours
        return normalized

    @field_validator("facilities")
    @classmethod
    def validate_facilities(cls, v):
        return [validate_and_sanitize_input(item, max_length=100) for item in v if item and item.strip()]


class SlotsCreate(BaseModel):
    """Schema for adding bookable slots to a center"""

    date: date
    times: list[str] = Field(min_length=1)
    capacity: int = Field(default=5, ge=1, le=100)

    @field_validator("date", mode="before")
    @classmethod
    def validate_date(cls, v):
        return _date_only(v)

    @field_validator("times")
    @classmethod
    def validate_times(cls, v):
        # Normalized and de-duplicated, order kept
        return list(dict.fromkeys(validate_slot_time(t) for t in v))


class AppointmentCreate(BaseModel):
    """Schema for booking an appointment"""

    donationCenter: int
    date: date
    timeSlot: str
    notes: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def validate_date(cls, v):
        return _date_only(v)

    @field_validator("timeSlot")
    @classmethod
    def validate_time_slot(cls, v):
        return validate_slot_time(v)

    @field_validator("notes")
    @classmethod
    def validate_notes(cls, v):
        return validate_and_sanitize_input(v, max_length=1000)


class DaySlots(BaseModel):
    date: str
    slots: list[str]


class CenterResponse(BaseModel):
    """Schema for donation center response"""

    id: int
    name: str
    address: str
    city: str
    state: str
    country: Optional[str] = None
    phone: str
    email: Optional[str] = None
    website: Optional[str] = None
    hours: str
    distance: Optional[float] = None
    availableSlots: list[DaySlots]
    facilities: list[str]


class AppointmentCenter(BaseModel):
    id: int
    name: str
    address: str
    city: str
    state: Optional[str] = None
    phone: Optional[str] = None


class AppointmentResponse(BaseModel):
    id: int
    date: date
    timeSlot: str
    status: str
    notes: Optional[str] = None
    center: AppointmentCenter
    canCancel: bool


def format_operating_hours(hours: Optional[dict]) -> str:
    """'Monday: 08:00 - 20:00, ..., Sunday: Closed'"""
    if not hours:
        return "Hours not available"

    formatted = []
    for day in WEEKDAYS:
        day_hours = hours.get(day) or {}
        if day_hours.get("open") and day_hours.get("close"):
            formatted.append(f"{day.capitalize()}: {day_hours['open']} - {day_hours['close']}")
        else:
            formatted.append(f"{day.capitalize()}: Closed")
    return ", ".join(formatted)


def available_slots(center, start: date, days: int = AVAILABILITY_DAYS) -> list[DaySlots]:
    """Open slot times for each of the next `days` days that has any"""
    result = []
    for offset in range(days):
        day = start + timedelta(days=offset)
        slots = center.open_slots_for(day)
        if slots:
            result.append(DaySlots(date=day.isoformat(), slots=[s.time for s in slots]))
    return result


def slots_in_range(center, day: date, time_range: tuple[int, int]) -> bool:
    start, end = time_range
    return any(start <= slot.hour < end for slot in center.open_slots_for(day))


def center_response(
    center, user=None, today: Optional[date] = None, distance: Optional[float] = None
) -> CenterResponse:
    if distance is None:
        distance = distance_between(user, center)

    return CenterResponse(
        id=center.id,
        name=center.name,
        address=center.address,
        city=center.city,
        state=center.state,
        country=center.country,
        phone=center.phone,
        email=center.email,
        website=center.website,
        hours=format_operating_hours(center.operating_hours),
        distance=round(distance, 1) if distance is not None else None,
        availableSlots=available_slots(center, today or datetime.utcnow().date()),
        facilities=center.facilities or [],
    )


def appointment_response(appointment, now: Optional[datetime] = None) -> AppointmentResponse:
    center = appointment.center
    return AppointmentResponse(
        id=appointment.id,
        date=appointment.date,
        timeSlot=appointment.time_slot,
        status=appointment.status,
        notes=appointment.notes,
        center=AppointmentCenter(
            id=center.id,
            name=center.name,
            address=center.address,
            city=center.city,
            state=center.state,
            phone=center.phone,
        ),
        canCancel=appointment.can_cancel(now),
    )
