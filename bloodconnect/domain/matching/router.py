"""Matching router - donor search and volunteering endpoints"""

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ...rate_limiter import api_limiter
from ..requests.schemas import request_response
from .schemas import donor_candidate
from .service import MatchService

router = APIRouter(prefix="/match", tags=["Matching"], dependencies=[Depends(api_limiter)])


def get_match_service(db: Session = Depends(get_db)) -> MatchService:
    """Dependency injection for MatchService"""
    return MatchService(db)


@router.post("/volunteer/{request_id}")
async def volunteer_for_request(
    request_id: int,
    current_user: User = Depends(get_current_user),
    service: MatchService = Depends(get_match_service),
):
    request = await service.volunteer(request_id, current_user)
    return {
        "message": "You have successfully volunteered for this request",
        "request": request_response(request),
    }


@router.post("/{request_id}")
async def find_matching_donors(
    request_id: int,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    service: MatchService = Depends(get_match_service),
):
    """Find compatible donors for one of the caller's requests"""
    request, ranked = service.find_matching_donors(request_id, current_user)

    # Donor emails go out after the response is sent
    background_tasks.add_task(service.notify_donors, [donor for donor, _ in ranked], request)
    return {
        "message": f"Found {len(ranked)} potential donors",
        "donors": [donor_candidate(donor, distance) for donor, distance in ranked],
    }
