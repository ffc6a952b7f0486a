"""Contact repository - Database operations for contact messages"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import ContactMessage


class ContactRepository:
    """Repository for contact message database operations"""

    @staticmethod
    def create(db: Session, **message_data) -> ContactMessage:
        contact = ContactMessage(**message_data)
        db.add(contact)
        db.commit()
        db.refresh(contact)
        return contact

    @staticmethod
    def get_by_id(db: Session, contact_id: int) -> Optional[ContactMessage]:
        return db.query(ContactMessage).filter(ContactMessage.id == contact_id).first()
