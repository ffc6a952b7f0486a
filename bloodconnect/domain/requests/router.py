"""Blood request router - FastAPI endpoints for blood requests"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ...rate_limiter import api_limiter
from ...shared.schemas import MessageResponse
from .schemas import DonorStatusUpdate, RequestCreate, RequestUpdate, request_response
from .service import RequestService

router = APIRouter(prefix="/requests", tags=["Requests"], dependencies=[Depends(api_limiter)])


def get_request_service(db: Session = Depends(get_db)) -> RequestService:
    """Dependency injection for RequestService"""
    return RequestService(db)


@router.post("", status_code=201)
async def create_request(
    data: RequestCreate,
    current_user: User = Depends(get_current_user),
    service: RequestService = Depends(get_request_service),
):
    request = await service.create_request(data, current_user)
    return {"message": "Blood request created successfully", "request": request_response(request)}


@router.get("")
async def list_requests(
    bloodType: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    urgency: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=100),
    service: RequestService = Depends(get_request_service),
):
    """Public list of requests, open ones by default, newest first"""
    requests = service.list_requests(bloodType, status, urgency, location, limit)
    return {"requests": [request_response(r) for r in requests]}


@router.get("/user/me")
async def list_my_requests(
    current_user: User = Depends(get_current_user),
    service: RequestService = Depends(get_request_service),
):
    requests = service.list_user_requests(current_user)
    return {"requests": [request_response(r, with_requester=False) for r in requests]}


@router.get("/{request_id}")
async def get_request(request_id: int, service: RequestService = Depends(get_request_service)):
    """Get a request with requester contact and matched donors"""
    request = service.get_request(request_id, detailed=True)
    return {"request": request_response(request, with_contact=True, with_donors=True)}


@router.put("/{request_id}")
async def update_request(
    request_id: int,
    data: RequestUpdate,
    current_user: User = Depends(get_current_user),
    service: RequestService = Depends(get_request_service),
):
    request = service.update_request(request_id, data, current_user)
    return {"message": "Request updated successfully", "request": request_response(request)}


@router.delete("/{request_id}", response_model=MessageResponse)
async def delete_request(
    request_id: int,
    current_user: User = Depends(get_current_user),
    service: RequestService = Depends(get_request_service),
):
    return service.delete_request(request_id, current_user)


@router.put("/{request_id}/donors/{donor_id}")
async def update_donor_status(
    request_id: int,
    donor_id: int,
    data: DonorStatusUpdate,
    current_user: User = Depends(get_current_user),
    service: RequestService = Depends(get_request_service),
):
    request = service.update_donor_status(request_id, donor_id, data.status, current_user)
    return {
        "message": "Donor status updated successfully",
        "request": request_response(request, with_donors=True),
    }
