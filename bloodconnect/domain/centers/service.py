"""Donation center service - center search, slot management and appointments"""

import logging
from datetime import date, datetime
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ... import email_service
from ...models import WEEKDAYS, Appointment, DonationCenter, User
from ...security_logger import log_security_event
from ...utils.geo import coordinates_to_lat_lng, distance_between
from .repository import CenterRepository
from .schemas import TIME_RANGES, AppointmentCreate, CenterCreate, SlotsCreate, slots_in_range

logger = logging.getLogger(__name__)

DEFAULT_NEARBY_KM = 10


def _today() -> date:
    return datetime.utcnow().date()


class CenterService:
    """Service layer for donation centers"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = CenterRepository()

    # ------------------------------------------------------------------
    # Centers
    # ------------------------------------------------------------------

    def list_cities(self) -> list[str]:
        return self.repo.list_cities(self.db)

    def list_centers(
        self,
        city: Optional[str] = None,
        state: Optional[str] = None,
        on_date: Optional[date] = None,
        time_slot: Optional[str] = None,
    ) -> list[DonationCenter]:
        """
        Active centers, optionally only those with an open slot on `on_date`,
        and with one inside the morning/afternoon/evening range of `time_slot`
        (checked on `on_date`, or today).
        """
        centers = self.repo.list_active_centers(self.db, city, state)

        if on_date:
            centers = [c for c in centers if c.open_slots_for(on_date)]

        if time_slot:
            time_range = TIME_RANGES.get(time_slot.strip().lower())
            if time_range is None:
                raise HTTPException(
                    status_code=400, detail="timeSlot must be one of morning, afternoon, evening"
                )
            day = on_date or _today()
            centers = [c for c in centers if slots_in_range(c, day, time_range)]

        return centers

    def nearby_centers(self, user: User, max_distance: float = DEFAULT_NEARBY_KM) -> list[tuple[DonationCenter, float]]:
        """Active centers within max_distance km of the user, nearest first"""
        if not user.has_coordinates:
            raise HTTPException(status_code=400, detail="User location not available")

        nearby = []
        for center in self.repo.list_active_centers(self.db):
            distance = distance_between(user, center)
            if distance is not None and distance <= max_distance:
                nearby.append((center, distance))

        nearby.sort(key=lambda pair: pair[1])
        return nearby

    def get_center(self, center_id: int) -> DonationCenter:
        center = self.repo.get_center(self.db, center_id)
        if not center:
            raise HTTPException(status_code=404, detail="Donation center not found")
        return center

    def get_open_slot_times(self, center_id: int, on_date: Optional[date]) -> list[str]:
        if on_date is None:
            raise HTTPException(status_code=400, detail="Date parameter is required")
        center = self.get_center(center_id)
        return [slot.time for slot in center.open_slots_for(on_date)]

    def create_center(self, data: CenterCreate, admin: User) -> DonationCenter:
        latitude, longitude = coordinates_to_lat_lng(data.coordinates)
        center_data = {
            "name": data.name.strip(),
            "address": data.address.strip(),
            "city": data.city.strip(),
            "state": data.state.strip(),
            "phone": data.phone,
            "email": data.email,
            "website": data.website,
            "latitude": latitude,
            "longitude": longitude,
            "operating_hours": {
                day: hours.model_dump() for day, hours in (data.operatingHours or {}).items()
            },
            "facilities": data.facilities,
            "is_active": True,
        }
        if data.country:
            center_data["country"] = data.country.strip()

        center = self.repo.create_center(self.db, **center_data)
        logger.info(f"🏥 Donation center {center.id} ({center.name}) created by admin {admin.id}")
        return center

    def add_slots(self, center_id: int, data: SlotsCreate, admin: User) -> dict:
        """
        Add bookable slots for one date. When the center publishes operating
        hours, every time must fall inside that weekday's hours.
        """
        center = self.get_center(center_id)

        if center.operating_hours:
            weekday = WEEKDAYS[data.date.weekday()]
            outside = [t for t in data.times if not center.is_open(weekday, t)]
            if outside:
                raise HTTPException(
                    status_code=400,
                    detail=f"Slots outside operating hours on {weekday.capitalize()}: {', '.join(outside)}",
                )

        existing = self.repo.existing_slot_times(self.db, center.id, data.date)
        new_times = [t for t in data.times if t not in existing]
        if new_times:
            self.repo.add_slots(self.db, center.id, data.date, new_times, data.capacity)

        logger.info(
            f"🗓️ Center {center.id}: {len(new_times)} slot(s) added for {data.date} by admin {admin.id}"
        )
        return {
            "message": f"Added {len(new_times)} slot(s)",
            "date": data.date.isoformat(),
            "added": new_times,
            "skipped": [t for t in data.times if t in existing],
        }

    # ------------------------------------------------------------------
    # Appointments
    # ------------------------------------------------------------------

    async def book_appointment(self, data: AppointmentCreate, user: User) -> Appointment:
        if not user.is_eligible_to_donate:
            raise HTTPException(
                status_code=400,
                detail="You are not eligible to donate at this time. "
                "Please wait at least 3 months between donations.",
            )

        center = self.repo.get_active_center(self.db, data.donationCenter)
        if not center:
            raise HTTPException(status_code=404, detail="Donation center not found")

        if data.date < _today():
            raise HTTPException(status_code=400, detail="Appointment date cannot be in the past")

        if self.repo.find_scheduled(self.db, user.id, center.id, data.date, data.timeSlot):
            raise HTTPException(
                status_code=400, detail="You already have an appointment booked for this time slot"
            )

        if not self.repo.reserve_slot(self.db, center.id, data.date, data.timeSlot):
            self.db.rollback()
            raise HTTPException(status_code=400, detail="The selected time slot is not available")

        appointment = Appointment(
            user_id=user.id,
            center_id=center.id,
            date=data.date,
            time_slot=data.timeSlot,
            status="scheduled",
            notes=data.notes,
        )
        self.db.add(appointment)
        self.db.commit()
        self.db.refresh(appointment)
        logger.info(
            f"📅 Appointment {appointment.id} booked: user {user.id} at center {center.id} "
            f"on {data.date} {data.timeSlot}"
        )

        try:
            await email_service.send_appointment_confirmation_email(user, appointment, center)
        except Exception as e:
            logger.error(f"❌ Failed to send appointment confirmation to {user.email}: {e}")

        return appointment

    def list_user_appointments(self, user: User) -> list[Appointment]:
        return self.repo.list_user_appointments(self.db, user.id)

    def get_appointment(self, appointment_id: int) -> Appointment:
        appointment = self.repo.get_appointment(self.db, appointment_id)
        if not appointment:
            raise HTTPException(status_code=404, detail="Appointment not found")
        return appointment

    def cancel_appointment(self, appointment_id: int, user: User, now: Optional[datetime] = None) -> Appointment:
        appointment = self.get_appointment(appointment_id)

        if appointment.user_id != user.id:
            log_security_event(
                "forbidden", user_id=user.id, appointment_id=appointment_id, action="cancel"
            )
            raise HTTPException(status_code=403, detail="Not authorized to cancel this appointment")

        if not appointment.can_cancel(now):
            raise HTTPException(
                status_code=400,
                detail="This appointment cannot be cancelled. "
                "Appointments must be cancelled at least 24 hours in advance.",
            )

        appointment.status = "cancelled"
        if not self.repo.release_slot(
            self.db, appointment.center_id, appointment.date, appointment.time_slot
        ):
            logger.warning(f"⚠️ No booked place to release for appointment {appointment.id}")
        self.db.commit()
        self.db.refresh(appointment)

        logger.info(f"🚫 Appointment {appointment.id} cancelled by user {user.id}")
        return appointment

    def complete_appointment(self, appointment_id: int, admin: User) -> Appointment:
        """Mark an appointment completed and count it as a donation for the user"""
        appointment = self.get_appointment(appointment_id)

        if appointment.status != "scheduled":
            raise HTTPException(
                status_code=400,
                detail=f"Only scheduled appointments can be completed (status: {appointment.status})",
            )

        appointment.status = "completed"
        appointment.user.record_donation(1)
        self.db.commit()
        self.db.refresh(appointment)

        logger.info(f"✅ Appointment {appointment.id} completed by admin {admin.id}")
        return appointment
