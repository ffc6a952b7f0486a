"""Matching service - donor search and volunteering"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ... import email_service
from ...models import OPEN_REQUEST_STATUSES, BloodRequest, User
from ..requests.repository import RequestRepository
from ..requests.service import RequestService
from .compatibility import can_donate_to, compatible_donor_types, filter_by_city, rank_by_distance
from .repository import MatchRepository

logger = logging.getLogger(__name__)


class MatchService:
    """Service layer for donor matching"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = MatchRepository()
        self.requests = RequestService(db)

    def find_matching_donors(self, request_id: int, user: User) -> tuple[BloodRequest, list[tuple[User, Optional[float]]]]:
        """
        Compatible, eligible donors for a request, local ones first.

        Matches are not stored until a donor volunteers or donates.
        """
        request = self.requests.get_owned_request(request_id, user, "find matches for")

        donor_types = compatible_donor_types(request.patient_blood_type)
        candidates = self.repo.find_eligible_donors(
            self.db, donor_types, exclude_user_id=request.requester_id
        )
        candidates = filter_by_city(candidates, request.hospital_city)
        ranked = rank_by_distance(candidates, request.hospital_latitude, request.hospital_longitude)

        logger.info(f"🔎 Request {request.id} ({request.patient_blood_type}): {len(ranked)} donors found")

        return request, ranked

    async def notify_donors(self, donors: list[User], request: BloodRequest) -> None:
        """Email each matched donor about the request"""
        for donor in donors:
            try:
                await email_service.send_donor_match_email(donor, request)
            except Exception as e:
                logger.error(f"❌ Failed to send match email to {donor.email}: {e}")

    async def volunteer(self, request_id: int, user: User) -> BloodRequest:
        request = self.requests.get_request(request_id)

        if request.status not in OPEN_REQUEST_STATUSES:
            raise HTTPException(status_code=400, detail="This request is no longer accepting donors")

        if not user.is_eligible_to_donate:
            raise HTTPException(
                status_code=400,
                detail="You are not eligible to donate at this time. "
                "Please wait at least 3 months between donations.",
            )

        if not can_donate_to(user.blood_type, request.patient_blood_type):
            raise HTTPException(
                status_code=400,
                detail=f"Your blood type ({user.blood_type}) is not compatible with "
                f"the requested blood type ({request.patient_blood_type})",
            )

        request.add_matched_donor(user.id)
        request = RequestRepository.save(self.db, request)
        logger.info(f"🙋 User {user.id} volunteered for request {request.id}")

        if request.requester and request.requester_id != user.id:
            try:
                await email_service.send_volunteer_notification_email(request.requester, user, request)
            except Exception as e:
                logger.error(f"❌ Failed to notify requester {request.requester.email}: {e}")

        return request
