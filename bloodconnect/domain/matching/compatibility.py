"""
Blood type compatibility and donor ranking

COMPATIBILITY maps each recipient blood type to the donor types it can safely
receive red cells from.
"""

from typing import Iterable, Optional

from ...models import BLOOD_TYPES
from ...utils.geo import haversine_km

COMPATIBILITY: dict[str, tuple[str, ...]] = {
    "A+": ("A+", "A-", "O+", "O-"),
    "A-": ("A-", "O-"),
    "B+": ("B+", "B-", "O+", "O-"),
    "B-": ("B-", "O-"),
    "AB+": BLOOD_TYPES,
    "AB-": ("A-", "B-", "AB-", "O-"),
    "O+": ("O+", "O-"),
    "O-": ("O-",),
}


def compatible_donor_types(recipient_type: str) -> tuple[str, ...]:
    """Donor blood types a recipient can receive; unknown types match nothing"""
    return COMPATIBILITY.get(recipient_type, ())


def can_donate_to(donor_type: str, recipient_type: str) -> bool:
    return donor_type in compatible_donor_types(recipient_type)


def same_city(a: Optional[str], b: Optional[str]) -> bool:
    if not a or not b:
        return False
    return a.strip().casefold() == b.strip().casefold()


def filter_by_city(donors: Iterable, city: Optional[str]) -> list:
    """
    Donors living in the given city. When nobody does (or no city is given),
    every donor is kept so a request is never left without candidates.
    """
    donors = list(donors)
    if not city:
        return donors
    local = [d for d in donors if same_city(d.city, city)]
    return local or donors


def rank_by_distance(donors: Iterable, latitude: Optional[float], longitude: Optional[float]) -> list[tuple]:
    """
    Pair each donor with their distance in km from a point and sort nearest
    first. Donors (or points) without coordinates get None and sort last.
    """
    ranked = []
    for donor in donors:
        distance = None
        if latitude is not None and longitude is not None and donor.has_coordinates:
            distance = haversine_km(latitude, longitude, donor.latitude, donor.longitude)
        ranked.append((donor, distance))

    # sorted() is stable, so equal distances keep the incoming order
    return sorted(ranked, key=lambda pair: (pair[1] is None, pair[1] or 0.0))
