"""User repository - Database operations for users"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Donation, User


class UserRepository:
    """Repository for user database operations"""

    @staticmethod
    def get_by_id(db: Session, user_id: int) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def get_by_email(db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(User.email == email.lower()).first()

    @staticmethod
    def get_by_firebase_uid(db: Session, firebase_uid: str) -> Optional[User]:
        return db.query(User).filter(User.firebase_uid == firebase_uid).first()

    @staticmethod
    def create_user(db: Session, **user_data) -> User:
        """Create a new user"""
        user = User(**user_data)
        user.refresh_profile_complete()
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def update_user(db: Session, user: User, **updates) -> User:
        """Apply updates and recompute the profile completeness flag"""
        for key, value in updates.items():
            if hasattr(user, key):
                setattr(user, key, value)

        user.refresh_profile_complete()
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def get_donors(
        db: Session, blood_type: Optional[str] = None, location: Optional[str] = None
    ) -> list[User]:
        """Users with at least one donation, most active first"""
        query = db.query(User).filter(User.donation_count > 0)

        if blood_type:
            query = query.filter(User.blood_type == blood_type)
        if location:
            query = query.filter(User.city.ilike(f"%{location}%"))

        return query.order_by(User.donation_count.desc(), User.id).all()

    @staticmethod
    def get_donations(db: Session, user_id: int) -> list[Donation]:
        return (
            db.query(Donation)
            .filter(Donation.donor_id == user_id)
            .order_by(Donation.donation_date.desc())
            .all()
        )
