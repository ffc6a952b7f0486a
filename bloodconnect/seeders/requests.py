"""
Seed sample blood requests owned by an existing user
Usage: python -m bloodconnect.seeders.requests <requester_email>
"""

import logging
import sys
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from ..database import Base, SessionLocal, engine
from ..models import REQUEST_EXPIRY_DAYS, BloodRequest, User

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)

SAMPLE_REQUESTS = [
    {
        "patient": ("John Doe", 45, "male", "A+"),
        "hospital": ("City Hospital", "123 Main Street, New Delhi", "New Delhi", "Delhi"),
        "units_needed": 2,
        "urgency": "high",
        "status": "pending",
        "description": "Urgent need for surgery scheduled tomorrow morning",
    },
    {
        "patient": ("Priya Sharma", 28, "female", "O-"),
        "hospital": ("Apollo Hospital", "456 Hospital Road, Mumbai", "Mumbai", "Maharashtra"),
        "units_needed": 3,
        "urgency": "critical",
        "status": "pending",
        "description": "Accident victim needs immediate blood transfusion",
    },
    {
        "patient": ("Rajesh Kumar", 62, "male", "B+"),
        "hospital": ("AIIMS", "AIIMS Campus, Ansari Nagar, New Delhi", "Delhi", "Delhi"),
        "units_needed": 1,
        "urgency": "medium",
        "status": "pending",
        "description": "Scheduled for heart surgery next week",
    },
    {
        "patient": ("Ananya Patel", 35, "female", "AB+"),
        "hospital": ("Fortis Hospital", "154 Richmond Road, Bangalore", "Bangalore", "Karnataka"),
        "units_needed": 2,
        "urgency": "high",
        "status": "in-progress",
        "description": "Cancer patient needs blood for chemotherapy treatment",
    },
    {
        "patient": ("Vikram Singh", 50, "male", "O+"),
        "hospital": ("Max Hospital", "789 Hospital Avenue, Chandigarh", "Chandigarh", "Punjab"),
        "units_needed": 2,
        "urgency": "low",
        "status": "pending",
        "description": "Scheduled for knee replacement surgery",
    },
]


def seed_requests(db: Session, requester_email: str) -> list[BloodRequest]:
    """
    Insert the sample requests with the given user as requester.

    Raises:
        LookupError: If no user has that email
    """
    user = db.query(User).filter(User.email == requester_email.strip().lower()).first()
    if not user:
        raise LookupError(f"No user found with email {requester_email}")

    expires_at = datetime.utcnow() + timedelta(days=REQUEST_EXPIRY_DAYS)
    requests = []
    for sample in SAMPLE_REQUESTS:
        patient_name, age, gender, blood_type = sample["patient"]
        hospital_name, address, city, state = sample["hospital"]
        requests.append(
            BloodRequest(
                requester_id=user.id,
                patient_name=patient_name,
                patient_age=age,
                patient_gender=gender,
                patient_blood_type=blood_type,
                hospital_name=hospital_name,
                hospital_address=address,
                hospital_city=city,
                hospital_state=state,
                units_needed=sample["units_needed"],
                units_received=0,
                urgency=sample["urgency"],
                status=sample["status"],
                description=sample["description"],
                expires_at=expires_at,
            )
        )

    db.add_all(requests)
    db.commit()
    logger.info(f"✅ {len(requests)} sample requests inserted for {user.email}")
    return requests


if __name__ == "__main__":
    if len(sys.argv) < 2:
        logger.error("Usage: python -m bloodconnect.seeders.requests <requester_email>")
        sys.exit(1)

    Base.metadata.create_all(bind=engine, checkfirst=True)
    db = SessionLocal()
    try:
        seed_requests(db, sys.argv[1])
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Seeding requests failed: {e}")
        sys.exit(1)
    finally:
        db.close()
