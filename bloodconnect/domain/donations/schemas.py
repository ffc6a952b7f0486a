"""Donation domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_blood_type
from ...utils.sanitization import validate_and_sanitize_input


class DonationHospitalIn(BaseModel):
    name: str
    address: Optional[str] = None
    city: str
    state: str

    @field_validator("name", "city", "state")
    @classmethod
    def validate_required_text(cls, v):
        if not v or not v.strip():
            raise ValueError("Field is required")
        return v.strip()


class DonationCreate(BaseModel):
    """Schema for recording a donation"""

    requestId: Optional[int] = None
    hospital: DonationHospitalIn
    bloodType: Optional[str] = None
    units: int = Field(default=1, ge=1, le=10)
    donationDate: Optional[datetime] = None
    notes: Optional[str] = None

    @field_validator("bloodType")
    @classmethod
    def validate_blood_type(cls, v):
        return validate_blood_type(v)

    @field_validator("notes")
    @classmethod
    def validate_notes(cls, v):
        return validate_and_sanitize_input(v, max_length=1000)


class DonationHospitalOut(BaseModel):
    name: str
    address: Optional[str] = None
    city: str
    state: str


class CertificateOut(BaseModel):
    issued: bool
    url: Optional[str] = None
    issuedAt: Optional[datetime] = None


class DonationResponse(BaseModel):
    """Schema for donation response"""

    id: int
    donorId: int
    donorName: Optional[str] = None
    requestId: Optional[int] = None
    hospital: DonationHospitalOut
    bloodType: str
    units: int
    donationDate: datetime
    verified: bool
    certificate: CertificateOut
    notes: Optional[str] = None
    createdAt: Optional[datetime] = None


def donation_response(donation, include_donor_name: bool = False) -> DonationResponse:
    return DonationResponse(
        id=donation.id,
        donorId=donation.donor_id,
        donorName=donation.donor.name if include_donor_name and donation.donor else None,
        requestId=donation.request_id,
        hospital=DonationHospitalOut(
            name=donation.hospital_name,
            address=donation.hospital_address,
            city=donation.hospital_city,
            state=donation.hospital_state,
        ),
        bloodType=donation.blood_type,
        units=donation.units,
        donationDate=donation.donation_date,
        verified=donation.verified,
        certificate=CertificateOut(
            issued=donation.certificate_issued,
            url=donation.certificate_url,
            issuedAt=donation.certificate_issued_at,
        ),
        notes=donation.notes,
        createdAt=donation.created_at,
    )
