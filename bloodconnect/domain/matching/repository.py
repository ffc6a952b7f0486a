"""Matching repository - donor lookups"""

from datetime import datetime, timedelta
from typing import Optional, Sequence

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ...models import DONATION_INTERVAL_DAYS, User


class MatchRepository:
    """Repository for donor candidate queries"""

    @staticmethod
    def find_eligible_donors(
        db: Session,
        blood_types: Sequence[str],
        exclude_user_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> list[User]:
        """Donors with one of the blood types who have not donated in the last 90 days"""
        if not blood_types:
            return []

        cutoff = (now or datetime.utcnow()) - timedelta(days=DONATION_INTERVAL_DAYS)
        query = db.query(User).filter(
            User.is_donor.is_(True),
            User.blood_type.in_(blood_types),
            or_(User.last_donation.is_(None), User.last_donation <= cutoff),
        )
        if exclude_user_id is not None:
            query = query.filter(User.id != exclude_user_id)

        return query.order_by(User.id).all()
