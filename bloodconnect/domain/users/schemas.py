"""User domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.schemas import LocationIn, LocationOut, location_of
from ...shared.validators import validate_blood_type, validate_phone
from ...utils.sanitization import validate_and_sanitize_input
from ..donations.schemas import DonationResponse


class MedicalInfo(BaseModel):
    weight: Optional[float] = Field(default=None, gt=0, le=500)
    height: Optional[float] = Field(default=None, gt=0, le=300)
    hasMedicalConditions: Optional[bool] = None
    medicalConditionsDetails: Optional[str] = None

    @field_validator("medicalConditionsDetails")
    @classmethod
    def validate_details(cls, v):
        return validate_and_sanitize_input(v, max_length=1000)


class MedicalInfoOut(BaseModel):
    weight: Optional[float] = None
    height: Optional[float] = None
    hasMedicalConditions: Optional[bool] = None
    medicalConditionsDetails: Optional[str] = None


class ProfileUpdate(BaseModel):
    """Schema for a partial profile update"""

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    phone: Optional[str] = None
    bloodType: Optional[str] = None
    location: Optional[LocationIn] = None
    profilePicture: Optional[str] = Field(default=None, max_length=500)
    isDonor: Optional[bool] = None
    medicalInfo: Optional[MedicalInfo] = None

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return validate_phone(v)

    @field_validator("bloodType")
    @classmethod
    def validate_blood_type(cls, v):
        return validate_blood_type(v)


class UserProfileResponse(BaseModel):
    """Schema for the owner's view of a user"""

    id: int
    email: str
    name: str
    bloodType: str
    phone: Optional[str] = None
    location: LocationOut
    isDonor: bool
    donationCount: int
    lastDonation: Optional[datetime] = None
    isEligible: bool
    profilePicture: Optional[str] = None
    profileComplete: bool
    medicalInfo: MedicalInfoOut
    createdAt: Optional[datetime] = None


class PublicUserResponse(BaseModel):
    """Schema for the public view of a donor"""

    id: int
    name: str
    bloodType: str
    location: LocationOut
    donationCount: int
    lastDonation: Optional[datetime] = None
    profilePicture: Optional[str] = None


class ProfileWithDonations(BaseModel):
    user: UserProfileResponse
    donations: list[DonationResponse]


def profile_response(user) -> UserProfileResponse:
    return UserProfileResponse(
        id=user.id,
        email=user.email,
        name=user.name,
        bloodType=user.blood_type,
        phone=user.phone,
        location=location_of(user),
        isDonor=user.is_donor,
        donationCount=user.donation_count or 0,
        lastDonation=user.last_donation,
        isEligible=user.is_eligible_to_donate,
        profilePicture=user.profile_picture,
        profileComplete=user.profile_complete,
        medicalInfo=MedicalInfoOut(
            weight=user.weight,
            height=user.height,
            hasMedicalConditions=user.has_medical_conditions,
            medicalConditionsDetails=user.medical_conditions_details,
        ),
        createdAt=user.created_at,
    )


def public_user_response(user) -> PublicUserResponse:
    location = location_of(user)
    return PublicUserResponse(
        id=user.id,
        name=user.name,
        bloodType=user.blood_type,
        # Coordinates stay private
        location=LocationOut(city=location.city, state=location.state, country=location.country),
        donationCount=user.donation_count or 0,
        lastDonation=user.last_donation,
        profilePicture=user.profile_picture,
    )
