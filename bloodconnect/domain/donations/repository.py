"""Donation repository - Database operations for donations"""

from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Donation


class DonationRepository:
    """Repository for donation database operations"""

    @staticmethod
    def get_by_id(db: Session, donation_id: int) -> Optional[Donation]:
        return (
            db.query(Donation)
            .options(joinedload(Donation.donor), joinedload(Donation.request))
            .filter(Donation.id == donation_id)
            .first()
        )

    @staticmethod
    def list_for_donor(db: Session, donor_id: int) -> list[Donation]:
        return (
            db.query(Donation)
            .filter(Donation.donor_id == donor_id)
            .order_by(Donation.donation_date.desc(), Donation.id.desc())
            .all()
        )

    @staticmethod
    def has_donation_within(db: Session, donor_id: int, moment: datetime, days: int) -> bool:
        """Whether the donor already has a donation less than `days` days either side of `moment`"""
        window = timedelta(days=days)
        return (
            db.query(Donation.id)
            .filter(
                Donation.donor_id == donor_id,
                Donation.donation_date > moment - window,
                Donation.donation_date < moment + window,
            )
            .first()
            is not None
        )

    @staticmethod
    def add_donation(db: Session, donation: Donation) -> Donation:
        """Persist a donation together with any pending donor/request changes"""
        db.add(donation)
        db.commit()
        db.refresh(donation)
        return donation

    @staticmethod
    def save(db: Session, donation: Donation) -> Donation:
        db.commit()
        db.refresh(donation)
        return donation
