"""Blood request domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...models import MATCH_STATUSES, REQUEST_STATUSES, URGENCY_LEVELS
from ...shared.validators import validate_blood_type, validate_coordinates
from ...utils.geo import lat_lng_to_coordinates
from ...utils.sanitization import validate_and_sanitize_input

GENDERS = ("male", "female", "other")


def _required_text(v: str) -> str:
    if not v or not v.strip():
        raise ValueError("Field is required")
    return v.strip()


class PatientIn(BaseModel):
    name: str = Field(max_length=255)
    age: int = Field(ge=0, le=120)
    gender: str
    bloodType: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Patient name is required")
        return v.strip()

    @field_validator("gender")
    @classmethod
    def validate_gender(cls, v):
        value = v.strip().lower()
        if value not in GENDERS:
            raise ValueError("Gender must be male, female or other")
        return value

    @field_validator("bloodType")
    @classmethod
    def validate_blood_type(cls, v):
        return validate_blood_type(v)


class HospitalIn(BaseModel):
    name: str = Field(max_length=255)
    address: str = Field(max_length=500)
    city: str = Field(max_length=100)
    state: str = Field(max_length=100)
    coordinates: Optional[list[float]] = None

    @field_validator("name", "address", "city", "state")
    @classmethod
    def validate_required_text(cls, v):
        return _required_text(v)

    @field_validator("coordinates")
    @classmethod
    def validate_coordinates(cls, v):
        return validate_coordinates(v)


def _validate_urgency(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    value = v.strip().lower()
    if value not in URGENCY_LEVELS:
        raise ValueError("Urgency must be one of low, medium, high, critical")
    return value


class RequestCreate(BaseModel):
    """Schema for creating a blood request"""

    patient: PatientIn
    hospital: HospitalIn
    unitsNeeded: int = Field(ge=1, le=100)
    urgency: Optional[str] = None
    description: Optional[str] = None

    @field_validator("urgency")
    @classmethod
    def validate_urgency(cls, v):
        return _validate_urgency(v)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v):
        return validate_and_sanitize_input(v, max_length=2000)


class RequestUpdate(BaseModel):
    """Schema for a partial request update"""

    patient: Optional[PatientIn] = None
    hospital: Optional[HospitalIn] = None
    unitsNeeded: Optional[int] = Field(default=None, ge=1, le=100)
    urgency: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None

    @field_validator("urgency")
    @classmethod
    def validate_urgency(cls, v):
        return _validate_urgency(v)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v):
        return validate_and_sanitize_input(v, max_length=2000)

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        if v is not None and v not in REQUEST_STATUSES:
            raise ValueError("Status must be one of pending, in-progress, fulfilled, cancelled")
        return v


class DonorStatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        if v not in MATCH_STATUSES:
            raise ValueError("Status must be one of " + ", ".join(MATCH_STATUSES))
        return v


class PersonOut(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None


class PatientOut(BaseModel):
    name: str
    age: int
    gender: str
    bloodType: str


class HospitalOut(BaseModel):
    name: str
    address: str
    city: str
    state: str
    coordinates: Optional[list[float]] = None


class MatchedDonorOut(BaseModel):
    donorId: int
    name: Optional[str] = None
    email: Optional[str] = None
    bloodType: Optional[str] = None
    status: str
    matchedAt: Optional[datetime] = None


class RequestResponse(BaseModel):
    """Schema for blood request response"""

    id: int
    requester: Optional[PersonOut] = None
    patient: PatientOut
    hospital: HospitalOut
    unitsNeeded: int
    unitsReceived: int
    urgency: str
    status: str
    description: Optional[str] = None
    matchedDonors: list[MatchedDonorOut]
    expiresAt: Optional[datetime] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


def request_response(
    request, with_requester: bool = True, with_contact: bool = False, with_donors: bool = False
) -> RequestResponse:
    """
    Build the wire representation of a request.

    with_contact adds the requester's phone and with_donors adds each matched
    donor's name, email and blood type; both are for the detail view.
    """
    requester = None
    if with_requester and request.requester:
        requester = PersonOut(
            id=request.requester.id,
            name=request.requester.name,
            email=request.requester.email,
            phone=request.requester.phone if with_contact else None,
        )

    matched = []
    for match in request.matches:
        donor = match.donor if with_donors else None
        matched.append(
            MatchedDonorOut(
                donorId=match.donor_id,
                name=donor.name if donor else None,
                email=donor.email if donor else None,
                bloodType=donor.blood_type if donor else None,
                status=match.status,
                matchedAt=match.matched_at,
            )
        )

    return RequestResponse(
        id=request.id,
        requester=requester,
        patient=PatientOut(
            name=request.patient_name,
            age=request.patient_age,
            gender=request.patient_gender,
            bloodType=request.patient_blood_type,
        ),
        hospital=HospitalOut(
            name=request.hospital_name,
            address=request.hospital_address,
            city=request.hospital_city,
            state=request.hospital_state,
            coordinates=lat_lng_to_coordinates(request.hospital_latitude, request.hospital_longitude),
        ),
        unitsNeeded=request.units_needed,
        unitsReceived=request.units_received or 0,
        urgency=request.urgency,
        status=request.status,
        description=request.description,
        matchedDonors=matched,
        expiresAt=request.expires_at,
        createdAt=request.created_at,
        updatedAt=request.updated_at,
    )
