"""Donation service - Business logic for recording and verifying donations"""

import logging
from datetime import datetime, timezone

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ... import email_service
from ...config import FRONTEND_URL
from ...models import DONATION_INTERVAL_DAYS, Donation, User
from ...security_logger import log_security_event
from ..requests.repository import RequestRepository
from .repository import DonationRepository
from .schemas import DonationCreate

logger = logging.getLogger(__name__)


def _as_naive_utc(value: datetime) -> datetime:
    """Timestamps are stored as naive UTC"""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class DonationService:
    """Service layer for donation business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = DonationRepository()

    async def create_donation(self, data: DonationCreate, user: User) -> Donation:
        """
        Record a donation for the current user.

        The donor's count and last donation date move forward, and a linked
        request gets the donor marked as donated and its received units raised,
        all in one commit.
        """
        logger.info(f"📥 Recording donation for user_id: {user.id}")

        if not user.is_eligible_to_donate:
            raise HTTPException(
                status_code=400,
                detail="You are not eligible to donate at this time. "
                "Please wait at least 3 months between donations.",
            )

        request = None
        if data.requestId is not None:
            request = RequestRepository.get_by_id(self.db, data.requestId)
            if not request:
                raise HTTPException(status_code=404, detail="Request not found")

        donation_date = _as_naive_utc(data.donationDate) if data.donationDate else datetime.utcnow()
        if donation_date > datetime.utcnow():
            raise HTTPException(status_code=400, detail="Donation date cannot be in the future")
        if self.repo.has_donation_within(self.db, user.id, donation_date, DONATION_INTERVAL_DAYS):
            raise HTTPException(
                status_code=400,
                detail="Another donation is already recorded within 3 months of this date",
            )

        donation = Donation(
            donor_id=user.id,
            request_id=request.id if request else None,
            hospital_name=data.hospital.name,
            hospital_address=data.hospital.address,
            hospital_city=data.hospital.city,
            hospital_state=data.hospital.state,
            blood_type=data.bloodType or user.blood_type,
            units=data.units,
            donation_date=donation_date,
            notes=data.notes,
        )

        user.record_donation(data.units, donation_date)

        if request is not None:
            match = request.add_matched_donor(user.id)
            match.status = "donated"
            request.receive_units(data.units)

        donation = self.repo.add_donation(self.db, donation)
        logger.info(
            f"✅ Donation {donation.id} recorded: {donation.units} unit(s) of {donation.blood_type}"
            + (f" for request {request.id} ({request.status})" if request is not None else "")
        )

        try:
            await email_service.send_donation_confirmation_email(user, donation)
        except Exception as e:
            logger.error(f"❌ Failed to send donation confirmation to {user.email}: {e}")

        return donation

    def list_user_donations(self, user: User) -> list[Donation]:
        return self.repo.list_for_donor(self.db, user.id)

    def get_donation(self, donation_id: int) -> Donation:
        donation = self.repo.get_by_id(self.db, donation_id)
        if not donation:
            raise HTTPException(status_code=404, detail="Donation not found")
        return donation

    def get_visible_donation(self, donation_id: int, user: User) -> Donation:
        """Only the donor and the requester of the linked request may view a donation"""
        donation = self.get_donation(donation_id)

        is_donor = donation.donor_id == user.id
        is_requester = donation.request is not None and donation.request.requester_id == user.id
        if not is_donor and not is_requester:
            log_security_event("forbidden", user_id=user.id, donation_id=donation_id, action="view")
            raise HTTPException(status_code=403, detail="Not authorized to view this donation")
        return donation

    def verify_donation(self, donation_id: int, admin: User) -> Donation:
        """Mark a donation verified and issue its certificate"""
        donation = self.get_donation(donation_id)

        donation.verified = True
        if not donation.certificate_issued:
            donation.certificate_issued = True
            donation.certificate_issued_at = datetime.utcnow()
            donation.certificate_url = f"{FRONTEND_URL}/certificates/{donation.id}"

        donation = self.repo.save(self.db, donation)
        logger.info(f"🏅 Donation {donation.id} verified by admin {admin.id}")
        return donation
