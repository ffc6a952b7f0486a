import pytest

from bloodconnect.domain.matching.compatibility import (
    can_donate_to,
    compatible_donor_types,
    filter_by_city,
    rank_by_distance,
    same_city,
)
from bloodconnect.models import BLOOD_TYPES, User
from bloodconnect.utils.geo import haversine_km

EXPECTED = {
    "A+": {"A+", "A-", "O+", "O-"},
    "A-": {"A-", "O-"},
    "B+": {"B+", "B-", "O+", "O-"},
    "B-": {"B-", "O-"},
    "AB+": set(BLOOD_TYPES),
    "AB-": {"A-", "B-", "AB-", "O-"},
    "O+": {"O+", "O-"},
    "O-": {"O-"},
}


@pytest.mark.parametrize("recipient", BLOOD_TYPES)
def test_compatibility_table(recipient):
    assert set(compatible_donor_types(recipient)) == EXPECTED[recipient]


@pytest.mark.parametrize("recipient", BLOOD_TYPES)
def test_o_negative_donates_to_everyone(recipient):
    assert can_donate_to("O-", recipient)


def test_ab_positive_only_receives_from_ab_positive():
    assert [r for r in BLOOD_TYPES if can_donate_to("AB+", r)] == ["AB+"]


def test_unknown_recipient_type_has_no_donors():
    assert compatible_donor_types("Z+") == ()


def test_same_city_ignores_case_and_whitespace():
    assert same_city(" Mumbai", "mumbai")
    assert not same_city("Mumbai", None)


def test_filter_by_city_falls_back_to_everyone():
    local = User(name="Local", city="Pune")
    remote = User(name="Remote", city="Nagpur")

    assert filter_by_city([local, remote], "pune") == [local]
    assert filter_by_city([remote], "Pune") == [remote]


def test_rank_by_distance_puts_unknown_distances_last():
    far = User(name="Far", latitude=28.6139, longitude=77.2090)
    near = User(name="Near", latitude=19.0760, longitude=72.8777)
    unknown = User(name="Unknown")

    ranked = rank_by_distance([unknown, far, near], 18.5204, 73.8567)

    assert [donor.name for donor, _ in ranked] == ["Near", "Far", "Unknown"]
    assert ranked[2][1] is None
    assert ranked[0][1] == pytest.approx(120, abs=5)


def test_haversine_known_distance():
    # Mumbai to Delhi is roughly 1150 km in a straight line
    assert haversine_km(19.0760, 72.8777, 28.6139, 77.2090) == pytest.approx(1150, rel=0.02)
