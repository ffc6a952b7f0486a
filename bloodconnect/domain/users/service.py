"""User service - Business logic for profiles and donor listings"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Donation, User
from ...shared.validators import parse_blood_type_param
from ...utils.geo import coordinates_to_lat_lng
from .repository import UserRepository
from .schemas import ProfileUpdate

logger = logging.getLogger(__name__)


class UserService:
    """Service layer for user business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = UserRepository()

    def get_profile(self, user: User) -> tuple[User, list[Donation]]:
        """The user together with their donations, newest first"""
        return user, self.repo.get_donations(self.db, user.id)

    def update_profile(self, data: ProfileUpdate, user: User) -> User:
        """Apply a partial profile update"""
        updates = {}
        if data.name is not None:
            updates["name"] = data.name.strip()
        if data.phone is not None:
            updates["phone"] = data.phone
        if data.bloodType is not None:
            updates["blood_type"] = data.bloodType
        if data.profilePicture is not None:
            updates["profile_picture"] = data.profilePicture
        if data.isDonor is not None:
            updates["is_donor"] = data.isDonor

        if data.location is not None:
            latitude, longitude = coordinates_to_lat_lng(data.location.coordinates)
            updates.update(
                city=data.location.city,
                state=data.location.state,
                latitude=latitude,
                longitude=longitude,
            )
            if data.location.country:
                updates["country"] = data.location.country

        if data.medicalInfo is not None:
            medical = data.medicalInfo.model_dump(exclude_unset=True)
            field_map = {
                "weight": "weight",
                "height": "height",
                "hasMedicalConditions": "has_medical_conditions",
                "medicalConditionsDetails": "medical_conditions_details",
            }
            for key, column in field_map.items():
                if key in medical:
                    updates[column] = medical[key]

        logger.info(f"📝 Updating profile for user {user.id}: {sorted(updates)}")
        return self.repo.update_user(self.db, user, **updates)

    def get_donors(self, blood_type: Optional[str] = None, location: Optional[str] = None) -> list[User]:
        if blood_type:
            try:
                blood_type = parse_blood_type_param(blood_type)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e)) from e
        return self.repo.get_donors(self.db, blood_type, location.strip() if location else None)

    def get_user(self, user_id: int) -> User:
        user = self.repo.get_by_id(self.db, user_id)
        if not user:
            raise HTTPException(status_code=404, detail="User not found")
        return user
