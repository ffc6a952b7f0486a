"""Contact router - stores contact form submissions"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ...rate_limiter import public_limiter
from .schemas import ContactCreate, ContactResponse
from .service import ContactService

router = APIRouter(prefix="/contact", tags=["Contact"], dependencies=[Depends(public_limiter)])


def get_contact_service(db: Session = Depends(get_db)) -> ContactService:
    """Dependency injection for ContactService"""
    return ContactService(db)


@router.post("", response_model=ContactResponse, status_code=201)
async def create_contact(
    data: ContactCreate,
    current_user: User = Depends(get_current_user),
    service: ContactService = Depends(get_contact_service),
):
    contact = service.submit(data, current_user)
    return ContactResponse(message="Contact form submitted successfully", id=contact.id)
