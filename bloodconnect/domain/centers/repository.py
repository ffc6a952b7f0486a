"""Donation center repository - centers, slots and appointments"""

from datetime import date
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ...models import Appointment, CenterSlot, DonationCenter


class CenterRepository:
    """Repository for donation center database operations"""

    @staticmethod
    def get_center(db: Session, center_id: int) -> Optional[DonationCenter]:
        return db.query(DonationCenter).filter(DonationCenter.id == center_id).first()

    @staticmethod
    def get_active_center(db: Session, center_id: int) -> Optional[DonationCenter]:
        return (
            db.query(DonationCenter)
            .filter(DonationCenter.id == center_id, DonationCenter.is_active.is_(True))
            .first()
        )

    @staticmethod
    def list_active_centers(
        db: Session, city: Optional[str] = None, state: Optional[str] = None
    ) -> list[DonationCenter]:
        query = db.query(DonationCenter).filter(DonationCenter.is_active.is_(True))
        if city:
            query = query.filter(func.lower(DonationCenter.city) == city.strip().lower())
        if state:
            query = query.filter(func.lower(DonationCenter.state) == state.strip().lower())
        return query.order_by(DonationCenter.name, DonationCenter.id).all()

    @staticmethod
    def list_cities(db: Session) -> list[str]:
        rows = (
            db.query(DonationCenter.city)
            .filter(DonationCenter.is_active.is_(True))
            .distinct()
            .order_by(DonationCenter.city)
            .all()
        )
        return [row[0] for row in rows]

    @staticmethod
    def create_center(db: Session, **center_data) -> DonationCenter:
        center = DonationCenter(**center_data)
        db.add(center)
        db.commit()
        db.refresh(center)
        return center

    # Slot Methods
    @staticmethod
    def existing_slot_times(db: Session, center_id: int, day: date) -> set[str]:
        rows = (
            db.query(CenterSlot.time)
            .filter(CenterSlot.center_id == center_id, CenterSlot.date == day)
            .all()
        )
        return {row[0] for row in rows}

    @staticmethod
    def add_slots(db: Session, center_id: int, day: date, times: list[str], capacity: int) -> list[CenterSlot]:
        slots = [CenterSlot(center_id=center_id, date=day, time=t, capacity=capacity, booked=0) for t in times]
        db.add_all(slots)
        db.commit()
        return slots

    @staticmethod
    def get_slot(db: Session, center_id: int, day: date, time: str) -> Optional[CenterSlot]:
        return (
            db.query(CenterSlot)
            .filter(CenterSlot.center_id == center_id, CenterSlot.date == day, CenterSlot.time == time)
            .first()
        )

    @staticmethod
    def reserve_slot(db: Session, center_id: int, day: date, time: str) -> bool:
        """
        Take one place in a slot if it has room. A single conditional UPDATE,
        so concurrent bookings can never push booked past capacity. Not committed.
        """
        updated = (
            db.query(CenterSlot)
            .filter(
                CenterSlot.center_id == center_id,
                CenterSlot.date == day,
                CenterSlot.time == time,
                CenterSlot.booked < CenterSlot.capacity,
            )
            .update({CenterSlot.booked: CenterSlot.booked + 1}, synchronize_session=False)
        )
        return updated == 1

    @staticmethod
    def release_slot(db: Session, center_id: int, day: date, time: str) -> bool:
        """Give back one place in a slot, never going below zero. Not committed."""
        updated = (
            db.query(CenterSlot)
            .filter(
                CenterSlot.center_id == center_id,
                CenterSlot.date == day,
                CenterSlot.time == time,
                CenterSlot.booked > 0,
            )
            .update({CenterSlot.booked: CenterSlot.booked - 1}, synchronize_session=False)
        )
        return updated == 1

    # Appointment Methods
    @staticmethod
    def get_appointment(db: Session, appointment_id: int) -> Optional[Appointment]:
        return db.query(Appointment).filter(Appointment.id == appointment_id).first()

    @staticmethod
    def list_user_appointments(db: Session, user_id: int) -> list[Appointment]:
        return (
            db.query(Appointment)
            .options(joinedload(Appointment.center))
            .filter(Appointment.user_id == user_id)
            .order_by(Appointment.date, Appointment.time_slot, Appointment.id)
            .all()
        )

    @staticmethod
    def find_scheduled(db: Session, user_id: int, center_id: int, day: date, time: str) -> Optional[Appointment]:
        return (
            db.query(Appointment)
            .filter(
                Appointment.user_id == user_id,
                Appointment.center_id == center_id,
                Appointment.date == day,
                Appointment.time_slot == time,
                Appointment.status == "scheduled",
            )
            .first()
        )
