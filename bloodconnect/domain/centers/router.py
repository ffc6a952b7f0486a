"""Donation center router - centers, slots and appointment booking"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user, get_optional_user, require_admin
from ...database import get_db
from ...models import User
from ...rate_limiter import api_limiter
from ...shared.schemas import MessageResponse
from .schemas import (
    AppointmentCreate,
    CenterCreate,
    SlotsCreate,
    appointment_response,
    center_response,
)
from .service import DEFAULT_NEARBY_KM, CenterService

router = APIRouter(
    prefix="/donation-centers", tags=["Donation Centers"], dependencies=[Depends(api_limiter)]
)


def get_center_service(db: Session = Depends(get_db)) -> CenterService:
    """Dependency injection for CenterService"""
    return CenterService(db)


@router.get("/cities")
async def list_cities(service: CenterService = Depends(get_center_service)):
    return {"cities": service.list_cities()}


@router.get("")
async def list_centers(
    city: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    on_date: Optional[date] = Query(None, alias="date"),
    timeSlot: Optional[str] = Query(None),
    current_user: Optional[User] = Depends(get_optional_user),
    service: CenterService = Depends(get_center_service),
):
    """Active centers; distance is filled in when the caller is signed in with a location"""
    centers = service.list_centers(city, state, on_date, timeSlot)
    return {"centers": [center_response(c, current_user) for c in centers]}


@router.get("/nearby")
async def nearby_centers(
    distance: float = Query(DEFAULT_NEARBY_KM, gt=0, le=20000),
    current_user: User = Depends(get_current_user),
    service: CenterService = Depends(get_center_service),
):
    nearby = service.nearby_centers(current_user, distance)
    return {"centers": [center_response(c, distance=d) for c, d in nearby]}


@router.post("/appointments", status_code=201)
async def book_appointment(
    data: AppointmentCreate,
    current_user: User = Depends(get_current_user),
    service: CenterService = Depends(get_center_service),
):
    appointment = await service.book_appointment(data, current_user)
    return {
        "message": "Appointment booked successfully",
        "appointment": appointment_response(appointment),
    }


@router.get("/appointments/me")
async def list_my_appointments(
    current_user: User = Depends(get_current_user),
    service: CenterService = Depends(get_center_service),
):
    appointments = service.list_user_appointments(current_user)
    return {"appointments": [appointment_response(a) for a in appointments]}


@router.put("/appointments/{appointment_id}/cancel", response_model=MessageResponse)
async def cancel_appointment(
    appointment_id: int,
    current_user: User = Depends(get_current_user),
    service: CenterService = Depends(get_center_service),
):
    service.cancel_appointment(appointment_id, current_user)
    return MessageResponse(message="Appointment cancelled successfully")


@router.put("/appointments/{appointment_id}/complete", response_model=MessageResponse)
async def complete_appointment(
    appointment_id: int,
    admin: User = Depends(require_admin),
    service: CenterService = Depends(get_center_service),
):
    service.complete_appointment(appointment_id, admin)
    return MessageResponse(message="Appointment marked as completed")


@router.post("", status_code=201)
async def create_center(
    data: CenterCreate,
    admin: User = Depends(require_admin),
    service: CenterService = Depends(get_center_service),
):
    center = service.create_center(data, admin)
    return {"message": "Donation center created successfully", "center": center_response(center)}


@router.get("/{center_id}/slots")
async def get_center_slots(
    center_id: int,
    on_date: Optional[date] = Query(None, alias="date"),
    service: CenterService = Depends(get_center_service),
):
    return {"slots": service.get_open_slot_times(center_id, on_date)}


@router.post("/{center_id}/slots", status_code=201)
async def add_center_slots(
    center_id: int,
    data: SlotsCreate,
    admin: User = Depends(require_admin),
    service: CenterService = Depends(get_center_service),
):
    return service.add_slots(center_id, data, admin)


@router.get("/{center_id}")
async def get_center(
    center_id: int,
    current_user: Optional[User] = Depends(get_optional_user),
    service: CenterService = Depends(get_center_service),
):
    center = service.get_center(center_id)
    return {"center": center_response(center, current_user)}
