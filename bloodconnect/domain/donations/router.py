"""Donation router - FastAPI endpoints for donations"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user, require_admin
from ...database import get_db
from ...models import User
from ...rate_limiter import sensitive_limiter
from .schemas import DonationCreate, donation_response
from .service import DonationService

router = APIRouter(
    prefix="/donations", tags=["Donations"], dependencies=[Depends(sensitive_limiter)]
)


def get_donation_service(db: Session = Depends(get_db)) -> DonationService:
    """Dependency injection for DonationService"""
    return DonationService(db)


@router.post("", status_code=201)
async def create_donation(
    data: DonationCreate,
    current_user: User = Depends(get_current_user),
    service: DonationService = Depends(get_donation_service),
):
    donation = await service.create_donation(data, current_user)
    return {"message": "Donation recorded successfully", "donation": donation_response(donation)}


@router.get("/me")
async def list_my_donations(
    current_user: User = Depends(get_current_user),
    service: DonationService = Depends(get_donation_service),
):
    donations = service.list_user_donations(current_user)
    return {"donations": [donation_response(d) for d in donations]}


@router.get("/{donation_id}")
async def get_donation(
    donation_id: int,
    current_user: User = Depends(get_current_user),
    service: DonationService = Depends(get_donation_service),
):
    donation = service.get_visible_donation(donation_id, current_user)
    return {"donation": donation_response(donation, include_donor_name=True)}


@router.put("/{donation_id}/verify")
async def verify_donation(
    donation_id: int,
    admin: User = Depends(require_admin),
    service: DonationService = Depends(get_donation_service),
):
    donation = service.verify_donation(donation_id, admin)
    return {"message": "Donation verified successfully", "donation": donation_response(donation)}
