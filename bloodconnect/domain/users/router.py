"""User router - FastAPI endpoints for profiles and donors"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ...rate_limiter import api_limiter
from ..donations.schemas import donation_response
from .schemas import ProfileUpdate, profile_response, public_user_response
from .service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"], dependencies=[Depends(api_limiter)])


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    """Dependency injection for UserService"""
    return UserService(db)


def _profile_payload(service: UserService, current_user: User) -> dict:
    user, donations = service.get_profile(current_user)
    return {
        "user": profile_response(user),
        "donations": [donation_response(d) for d in donations],
    }


@router.get("/profile")
async def get_profile(
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    """Get the current user's profile and donation history"""
    return _profile_payload(service, current_user)


@router.get("/me")
async def get_me(
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    """Alias of /profile"""
    return _profile_payload(service, current_user)


@router.put("/profile")
async def update_profile(
    data: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    user = service.update_profile(data, current_user)
    return {"message": "Profile updated successfully", "user": profile_response(user)}


@router.get("/donors")
async def get_donors(
    bloodType: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    service: UserService = Depends(get_user_service),
):
    """Public list of donors with at least one donation"""
    donors = service.get_donors(bloodType, location)
    return {"donors": [public_user_response(d) for d in donors]}


@router.get("/{user_id}")
async def get_user(user_id: int, service: UserService = Depends(get_user_service)):
    return {"user": public_user_response(service.get_user(user_id))}
