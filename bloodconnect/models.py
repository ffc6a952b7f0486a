from datetime import datetime, timedelta

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base

BLOOD_TYPES = ("A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-")
URGENCY_LEVELS = ("low", "medium", "high", "critical")
REQUEST_STATUSES = ("pending", "in-progress", "fulfilled", "cancelled")
OPEN_REQUEST_STATUSES = ("pending", "in-progress")
MATCH_STATUSES = ("matched", "contacted", "confirmed", "donated", "cancelled")
APPOINTMENT_STATUSES = ("scheduled", "completed", "cancelled", "no-show")
WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

DONATION_INTERVAL_DAYS = 90
REQUEST_EXPIRY_DAYS = 30
CANCELLATION_NOTICE_HOURS = 24


def parse_time_to_minutes(value: str) -> int:
    """
    Convert "HH:MM" or "H:MM AM/PM" to minutes after midnight.

    Raises:
        ValueError: If the string is not a recognised time
    """
    text = value.strip().upper()
    suffix = None
    if text.endswith("AM") or text.endswith("PM"):
        suffix = text[-2:]
        text = text[:-2].strip()

    hours_str, _, minutes_str = text.partition(":")
    hours = int(hours_str)
    minutes = int(minutes_str or 0)

    if suffix:
        if not 1 <= hours <= 12:
            raise ValueError(f"Invalid 12-hour time: {value}")
        hours = hours % 12 + (12 if suffix == "PM" else 0)

    if not (0 <= hours < 24 and 0 <= minutes < 60):
        raise ValueError(f"Invalid time: {value}")
    return hours * 60 + minutes


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    firebase_uid = Column(String(255), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    blood_type = Column(String(3), nullable=False, index=True)
    # Location
    city = Column(String(100), nullable=True, index=True)
    state = Column(String(100), nullable=True)
    country = Column(String(100), default="India", nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    # Donor status
    is_donor = Column(Boolean, default=True, nullable=False)
    last_donation = Column(DateTime, nullable=True)
    donation_count = Column(Integer, default=0, nullable=False)
    # Medical info
    weight = Column(Float, nullable=True)  # kg
    height = Column(Float, nullable=True)  # cm
    has_medical_conditions = Column(Boolean, nullable=True)
    medical_conditions_details = Column(Text, nullable=True)
    profile_picture = Column(String(500), nullable=True)
    profile_complete = Column(Boolean, default=False, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)
    is_admin = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    requests = relationship("BloodRequest", back_populates="requester")
    donations = relationship("Donation", back_populates="donor")
    appointments = relationship("Appointment", back_populates="user")

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def eligible_on(self, moment: datetime) -> bool:
        """A donor may give blood again once 90 days have passed since the last donation"""
        if not self.is_donor:
            return False
        if self.last_donation is None:
            return True
        return self.last_donation <= moment - timedelta(days=DONATION_INTERVAL_DAYS)

    @property
    def is_eligible_to_donate(self) -> bool:
        return self.eligible_on(datetime.utcnow())

    def record_donation(self, units: int = 1, donated_at: datetime | None = None) -> None:
        donated_at = donated_at or datetime.utcnow()
        self.donation_count = (self.donation_count or 0) + units
        # A backdated record never moves the last donation date backwards
        if self.last_donation is None or donated_at > self.last_donation:
            self.last_donation = donated_at

    def refresh_profile_complete(self) -> bool:
        self.profile_complete = all([self.name, self.phone, self.blood_type, self.city, self.state])
        return self.profile_complete


class BloodRequest(Base):
    __tablename__ = "blood_requests"

    id = Column(Integer, primary_key=True, index=True)
    requester_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    # Patient
    patient_name = Column(String(255), nullable=False)
    patient_age = Column(Integer, nullable=False)
    patient_gender = Column(String(10), nullable=False)
    patient_blood_type = Column(String(3), nullable=False, index=True)
    # Hospital
    hospital_name = Column(String(255), nullable=False)
    hospital_address = Column(String(500), nullable=False)
    hospital_city = Column(String(100), nullable=False, index=True)
    hospital_state = Column(String(100), nullable=False)
    hospital_latitude = Column(Float, nullable=True)
    hospital_longitude = Column(Float, nullable=True)
    units_needed = Column(Integer, nullable=False)
    units_received = Column(Integer, default=0, nullable=False)
    urgency = Column(String(20), default="medium", nullable=False)
    status = Column(String(20), default="pending", nullable=False, index=True)
    description = Column(Text, nullable=True)
    expires_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    requester = relationship("User", back_populates="requests")
    matches = relationship(
        "RequestMatch",
        back_populates="request",
        cascade="all, delete-orphan",
        order_by="RequestMatch.id",
    )
    donations = relationship("Donation", back_populates="request")

    @property
    def has_coordinates(self) -> bool:
        return self.hospital_latitude is not None and self.hospital_longitude is not None

    def find_match(self, donor_id: int):
        return next((m for m in self.matches if m.donor_id == donor_id), None)

    def add_matched_donor(self, donor_id: int) -> "RequestMatch":
        """Attach a donor once; the first match moves a pending request to in-progress"""
        match = self.find_match(donor_id)
        if match:
            return match

        match = RequestMatch(donor_id=donor_id, status="matched", matched_at=datetime.utcnow())
        self.matches.append(match)
        if self.status == "pending":
            self.status = "in-progress"
        return match

    def update_donor_status(self, donor_id: int, status: str) -> "RequestMatch":
        """
        Set a matched donor's status. Moving a donor to "donated" counts one unit.

        Raises:
            LookupError: If the donor is not matched to this request
        """
        match = self.find_match(donor_id)
        if match is None:
            raise LookupError("Donor not found in matched donors")

        previous = match.status
        match.status = status
        if status == "donated" and previous != "donated":
            self.receive_units(1)
        return match

    def receive_units(self, units: int) -> None:
        self.units_received = (self.units_received or 0) + units
        if self.units_received >= self.units_needed:
            self.status = "fulfilled"
        elif self.status == "pending":
            self.status = "in-progress"


class RequestMatch(Base):
    __tablename__ = "request_matches"
    __table_args__ = (UniqueConstraint("request_id", "donor_id", name="uq_request_donor"),)

    id = Column(Integer, primary_key=True, index=True)
    request_id = Column(
        Integer, ForeignKey("blood_requests.id", ondelete="CASCADE"), nullable=False, index=True
    )
    donor_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(String(20), default="matched", nullable=False)
    matched_at = Column(DateTime, server_default=func.now())

    request = relationship("BloodRequest", back_populates="matches")
    donor = relationship("User")


class Donation(Base):
    __tablename__ = "donations"

    id = Column(Integer, primary_key=True, index=True)
    donor_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    request_id = Column(
        Integer, ForeignKey("blood_requests.id", ondelete="SET NULL"), nullable=True, index=True
    )
    hospital_name = Column(String(255), nullable=False)
    hospital_address = Column(String(500), nullable=True)
    hospital_city = Column(String(100), nullable=False)
    hospital_state = Column(String(100), nullable=False)
    blood_type = Column(String(3), nullable=False)
    units = Column(Integer, default=1, nullable=False)
    donation_date = Column(DateTime, nullable=False, default=datetime.utcnow)
    verified = Column(Boolean, default=False, nullable=False)
    # Certificate
    certificate_issued = Column(Boolean, default=False, nullable=False)
    certificate_url = Column(String(500), nullable=True)
    certificate_issued_at = Column(DateTime, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    donor = relationship("User", back_populates="donations")
    request = relationship("BloodRequest", back_populates="donations")


class DonationCenter(Base):
    __tablename__ = "donation_centers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    address = Column(String(500), nullable=False)
    city = Column(String(100), nullable=False, index=True)
    state = Column(String(100), nullable=False)
    country = Column(String(100), default="India", nullable=False)
    phone = Column(String(50), nullable=False)
    email = Column(String(255), nullable=True)
    website = Column(String(500), nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    # {"monday": {"open": "08:00", "close": "20:00"}, ...}
    operating_hours = Column(JSON, default=dict, nullable=True)
    facilities = Column(JSON, default=list, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    slots = relationship(
        "CenterSlot",
        back_populates="center",
        cascade="all, delete-orphan",
        order_by="[CenterSlot.date, CenterSlot.time]",
    )
    appointments = relationship("Appointment", back_populates="center")

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def is_open(self, day: str, time: str) -> bool:
        """Check whether the center is open on a weekday at a given time"""
        hours = (self.operating_hours or {}).get(day.lower())
        if not hours or not hours.get("open") or not hours.get("close"):
            return False

        try:
            opens = parse_time_to_minutes(hours["open"])
            closes = parse_time_to_minutes(hours["close"])
            current = parse_time_to_minutes(time)
        except ValueError:
            return False
        return opens <= current < closes

    def open_slots_for(self, day) -> list["CenterSlot"]:
        """Slots on the given date that still have capacity"""
        return [s for s in self.slots if s.date == day and s.booked < s.capacity]


class CenterSlot(Base):
    __tablename__ = "center_slots"
    __table_args__ = (UniqueConstraint("center_id", "date", "time", name="uq_center_slot"),)

    id = Column(Integer, primary_key=True, index=True)
    center_id = Column(
        Integer, ForeignKey("donation_centers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    date = Column(Date, nullable=False, index=True)
    time = Column(String(10), nullable=False)  # "HH:MM"
    capacity = Column(Integer, default=5, nullable=False)
    booked = Column(Integer, default=0, nullable=False)

    center = relationship("DonationCenter", back_populates="slots")

    @property
    def hour(self) -> int:
        return parse_time_to_minutes(self.time) // 60


class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    center_id = Column(Integer, ForeignKey("donation_centers.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    time_slot = Column(String(10), nullable=False)
    status = Column(String(20), default="scheduled", nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="appointments")
    center = relationship("DonationCenter", back_populates="appointments")

    @property
    def starts_at(self) -> datetime:
        minutes = parse_time_to_minutes(self.time_slot)
        return datetime.combine(self.date, datetime.min.time()) + timedelta(minutes=minutes)

    def can_cancel(self, now: datetime | None = None) -> bool:
        """Scheduled appointments can be cancelled up to 24 hours before they start"""
        if self.status != "scheduled":
            return False
        now = now or datetime.utcnow()
        return self.starts_at - now >= timedelta(hours=CANCELLATION_NOTICE_HOURS)


class ContactMessage(Base):
    __tablename__ = "contact_messages"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    subject = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    status = Column(String(20), default="unread", nullable=False)  # unread, read, replied
    created_at = Column(DateTime, server_default=func.now())
