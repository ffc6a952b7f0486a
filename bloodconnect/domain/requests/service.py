"""Blood request service - Business logic for request lifecycle"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ... import email_service
from ...models import (
    OPEN_REQUEST_STATUSES,
    REQUEST_EXPIRY_DAYS,
    REQUEST_STATUSES,
    URGENCY_LEVELS,
    BloodRequest,
    User,
)
from ...security_logger import log_security_event
from ...shared.validators import parse_blood_type_param
from ...utils.geo import coordinates_to_lat_lng
from .repository import RequestRepository
from .schemas import HospitalIn, PatientIn, RequestCreate, RequestUpdate

logger = logging.getLogger(__name__)


def _patient_columns(patient: PatientIn) -> dict:
    return {
        "patient_name": patient.name,
        "patient_age": patient.age,
        "patient_gender": patient.gender,
        "patient_blood_type": patient.bloodType,
    }


def _hospital_columns(hospital: HospitalIn) -> dict:
    latitude, longitude = coordinates_to_lat_lng(hospital.coordinates)
    return {
        "hospital_name": hospital.name,
        "hospital_address": hospital.address,
        "hospital_city": hospital.city,
        "hospital_state": hospital.state,
        "hospital_latitude": latitude,
        "hospital_longitude": longitude,
    }


class RequestService:
    """Service layer for blood request business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = RequestRepository()

    async def create_request(self, data: RequestCreate, user: User) -> BloodRequest:
        logger.info(f"📥 Creating blood request for user_id: {user.id}")

        request_data = {
            **_patient_columns(data.patient),
            **_hospital_columns(data.hospital),
            "units_needed": data.unitsNeeded,
            "units_received": 0,
            "urgency": data.urgency or "medium",
            "status": "pending",
            "description": data.description,
            "expires_at": datetime.utcnow() + timedelta(days=REQUEST_EXPIRY_DAYS),
        }
        request = self.repo.create_request(self.db, user.id, **request_data)
        logger.info(f"✅ Blood request {request.id} created ({request.patient_blood_type})")

        try:
            await email_service.send_request_confirmation_email(user.email, user.name, request)
        except Exception as e:
            logger.error(f"❌ Failed to send request confirmation to {user.email}: {e}")

        return request

    def list_requests(
        self,
        blood_type: Optional[str] = None,
        status: Optional[str] = None,
        urgency: Optional[str] = None,
        location: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[BloodRequest]:
        """Public listing; without a status filter only open requests are shown"""
        try:
            blood_type = parse_blood_type_param(blood_type)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

        if status and status not in REQUEST_STATUSES:
            raise HTTPException(status_code=400, detail="Invalid status filter")
        if urgency and urgency not in URGENCY_LEVELS:
            raise HTTPException(status_code=400, detail="Invalid urgency filter")

        statuses = (status,) if status else OPEN_REQUEST_STATUSES
        return self.repo.list_requests(
            self.db,
            blood_type=blood_type,
            statuses=statuses,
            urgency=urgency,
            location=location.strip() if location else None,
            limit=limit,
        )

    def list_user_requests(self, user: User) -> list[BloodRequest]:
        return self.repo.list_for_requester(self.db, user.id)

    def get_request(self, request_id: int, detailed: bool = False) -> BloodRequest:
        if detailed:
            request = self.repo.get_detail(self.db, request_id)
        else:
            request = self.repo.get_by_id(self.db, request_id)
        if not request:
            raise HTTPException(status_code=404, detail="Request not found")
        return request

    def get_owned_request(self, request_id: int, user: User, action: str) -> BloodRequest:
        """Fetch a request the user created; anyone else gets 403"""
        request = self.get_request(request_id)
        if request.requester_id != user.id:
            log_security_event("forbidden", user_id=user.id, request_id=request_id, action=action)
            raise HTTPException(status_code=403, detail=f"Not authorized to {action} this request")
        return request

    def update_request(self, request_id: int, data: RequestUpdate, user: User) -> BloodRequest:
        request = self.get_owned_request(request_id, user, "update")

        updates = {}
        if data.patient is not None:
            updates.update(_patient_columns(data.patient))
        if data.hospital is not None:
            updates.update(_hospital_columns(data.hospital))
        if data.unitsNeeded is not None:
            updates["units_needed"] = data.unitsNeeded
        if data.urgency is not None:
            updates["urgency"] = data.urgency
        if data.description is not None:
            updates["description"] = data.description
        if data.status is not None:
            updates["status"] = data.status

        logger.info(f"📝 Updating request {request.id}: {sorted(updates)}")
        return self.repo.update_request(self.db, request, **updates)

    def delete_request(self, request_id: int, user: User) -> dict:
        request = self.get_owned_request(request_id, user, "delete")

        if any(match.status == "donated" for match in request.matches):
            raise HTTPException(
                status_code=400,
                detail="Cannot delete request with confirmed donations. Please update status instead.",
            )

        self.repo.delete_request(self.db, request)
        logger.info(f"🗑️ Request {request_id} deleted by user {user.id}")
        return {"message": "Request deleted successfully"}

    def update_donor_status(self, request_id: int, donor_id: int, status: str, user: User) -> BloodRequest:
        """Set a matched donor's status; "donated" counts a unit toward the request"""
        request = self.get_owned_request(request_id, user, "update")

        try:
            request.update_donor_status(donor_id, status)
        except LookupError as e:
            raise HTTPException(status_code=404, detail="Donor not matched to this request") from e

        request = self.repo.save(self.db, request)
        logger.info(
            f"🩸 Request {request.id}: donor {donor_id} -> {status} "
            f"({request.units_received}/{request.units_needed}, {request.status})"
        )
        return request
