"""Matching domain schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from ...shared.schemas import LocationOut, location_of


class DonorCandidate(BaseModel):
    """A compatible donor for a request"""

    id: int
    name: str
    email: str
    phone: Optional[str] = None
    bloodType: str
    location: LocationOut
    donationCount: int
    lastDonation: Optional[datetime] = None
    distance: Optional[float] = None


def donor_candidate(donor, distance: Optional[float]) -> DonorCandidate:
    return DonorCandidate(
        id=donor.id,
        name=donor.name,
        email=donor.email,
        phone=donor.phone,
        bloodType=donor.blood_type,
        location=location_of(donor),
        donationCount=donor.donation_count or 0,
        lastDonation=donor.last_donation,
        distance=round(distance, 1) if distance is not None else None,
    )
