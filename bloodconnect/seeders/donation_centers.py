"""
Seed sample donation centers with bookable slots
Usage: python -m bloodconnect.seeders.donation_centers [--keep]

Existing centers (and their slots and appointments) are removed first unless --keep is given.
"""

import logging
import sys
from datetime import date, datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from ..database import Base, SessionLocal, engine
from ..models import Appointment, CenterSlot, DonationCenter

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)

SLOT_DAYS = 30
SLOT_TIMES = [f"{hour:02d}:00" for hour in range(8, 18)]
SLOT_CAPACITY = 5


def _weekly_hours(weekday: tuple, saturday: Optional[tuple], sunday: Optional[tuple]) -> dict:
    hours = {
        day: {"open": weekday[0], "close": weekday[1]}
        for day in ("monday", "tuesday", "wednesday", "thursday", "friday")
    }
    hours["saturday"] = {"open": saturday[0], "close": saturday[1]} if saturday else {}
    hours["sunday"] = {"open": sunday[0], "close": sunday[1]} if sunday else {}
    return hours


SAMPLE_CENTERS = [
    {
        "name": "City Blood Bank",
        "address": "123 Main Street",
        "city": "New Delhi",
        "state": "Delhi",
        "latitude": 28.6139,
        "longitude": 77.2090,
        "phone": "+91 11-2345-6789",
        "email": "info@citybloodbank.org",
        "website": "www.citybloodbank.org",
        "operating_hours": _weekly_hours(("08:00", "20:00"), ("09:00", "17:00"), ("10:00", "14:00")),
        "facilities": ["Free Parking", "Refreshments", "WiFi"],
    },
    {
        "name": "Apollo Blood Center",
        "address": "456 Hospital Road",
        "city": "Mumbai",
        "state": "Maharashtra",
        "latitude": 19.0760,
        "longitude": 72.8777,
        "phone": "+91 22-3456-7890",
        "email": "blood@apollohospital.com",
        "website": "www.apollohospital.com/blood-center",
        "operating_hours": _weekly_hours(("09:00", "18:00"), ("09:00", "16:00"), None),
        "facilities": ["Air Conditioning", "TV", "Medical Consultation"],
    },
    {
        "name": "Red Cross Donation Center",
        "address": "789 Charity Lane",
        "city": "Bangalore",
        "state": "Karnataka",
        "latitude": 12.9716,
        "longitude": 77.5946,
        "phone": "+91 80-4567-8901",
        "email": "bangalore@redcross.org",
        "website": "www.redcross.org/bangalore",
        "operating_hours": _weekly_hours(("08:00", "19:00"), ("08:00", "19:00"), ("09:00", "13:00")),
        "facilities": ["Parking", "Refreshments"],
    },
    {
        "name": "National Blood Bank",
        "address": "555 Government Road",
        "city": "Kolkata",
        "state": "West Bengal",
        "latitude": 22.5726,
        "longitude": 88.3639,
        "phone": "+91 33-6789-0123",
        "email": "kolkata@nationalbloodbank.gov.in",
        "website": "www.nationalbloodbank.gov.in",
        "operating_hours": _weekly_hours(("08:00", "18:00"), ("09:00", "15:00"), None),
        "facilities": ["Government ID Required", "Free Testing", "Medical Consultation"],
    },
]


def build_slots(center: DonationCenter, start: date, days: int = SLOT_DAYS) -> list[CenterSlot]:
    """Hourly 08:00-17:00 slots for each of the next `days` days"""
    return [
        CenterSlot(center=center, date=start + timedelta(days=offset), time=t, capacity=SLOT_CAPACITY, booked=0)
        for offset in range(days)
        for t in SLOT_TIMES
    ]


def seed_donation_centers(db: Session, start: Optional[date] = None, clear: bool = True) -> list[DonationCenter]:
    start = start or datetime.utcnow().date()

    if clear:
        db.query(Appointment).delete()
        db.query(CenterSlot).delete()
        deleted = db.query(DonationCenter).delete()
        logger.info(f"Cleared {deleted} existing donation center(s)")

    centers = []
    for data in SAMPLE_CENTERS:
        center = DonationCenter(country="India", is_active=True, **data)
        db.add(center)
        db.add_all(build_slots(center, start))
        centers.append(center)

    db.commit()
    logger.info(f"✅ Seeded {len(centers)} donation centers with {SLOT_DAYS} days of slots")
    return centers


if __name__ == "__main__":
    Base.metadata.create_all(bind=engine, checkfirst=True)
    db = SessionLocal()
    try:
        seed_donation_centers(db, clear="--keep" not in sys.argv[1:])
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Seeding donation centers failed: {e}")
        sys.exit(1)
    finally:
        db.close()
