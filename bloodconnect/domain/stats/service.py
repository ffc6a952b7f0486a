"""Stats service - platform-wide counters"""

import logging

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ...models import OPEN_REQUEST_STATUSES, BloodRequest, Donation, User
from ..donations.schemas import donation_response
from ..requests.schemas import request_response

logger = logging.getLogger(__name__)

RECENT_LIMIT = 5


class StatsService:
    def __init__(self, db: Session):
        self.db = db

    def get_stats(self) -> dict:
        db = self.db

        blood_type_rows = (
            db.query(User.blood_type, func.count(User.id))
            .group_by(User.blood_type)
            .order_by(User.blood_type)
            .all()
        )

        recent_donations = (
            db.query(Donation)
            .options(joinedload(Donation.donor))
            .order_by(Donation.donation_date.desc(), Donation.id.desc())
            .limit(RECENT_LIMIT)
            .all()
        )

        urgent_requests = (
            db.query(BloodRequest)
            .filter(
                BloodRequest.urgency.in_(("high", "critical")),
                BloodRequest.status.in_(OPEN_REQUEST_STATUSES),
            )
            .order_by(BloodRequest.created_at.desc(), BloodRequest.id.desc())
            .limit(RECENT_LIMIT)
            .all()
        )

        return {
            "userCount": db.query(func.count(User.id)).scalar(),
            "donorCount": db.query(func.count(User.id)).filter(User.is_donor.is_(True)).scalar(),
            "requestCount": db.query(func.count(BloodRequest.id)).scalar(),
            "donationCount": db.query(func.count(Donation.id)).scalar(),
            "fulfilledRequestCount": db.query(func.count(BloodRequest.id))
            .filter(BloodRequest.status == "fulfilled")
            .scalar(),
            "bloodTypeStats": [
                {"bloodType": blood_type, "count": count} for blood_type, count in blood_type_rows
            ],
            "recentDonations": [
                donation_response(d, include_donor_name=True) for d in recent_donations
            ],
            "urgentRequests": [request_response(r, with_requester=False) for r in urgent_requests],
        }
