"""Contact service - stores contact form submissions"""

import logging

from sqlalchemy.orm import Session

from ...models import ContactMessage, User
from .repository import ContactRepository
from .schemas import ContactCreate

logger = logging.getLogger(__name__)


class ContactService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ContactRepository()

    def submit(self, data: ContactCreate, user: User) -> ContactMessage:
        contact = self.repo.create(
            self.db,
            user_id=user.id,
            name=data.name,
            email=data.email,
            subject=data.subject,
            message=data.message,
            status="unread",
        )
        logger.info(f"📨 Contact message {contact.id} received from user {user.id}")
        return contact
