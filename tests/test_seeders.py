from datetime import date

import pytest

from bloodconnect.models import BloodRequest, CenterSlot, DonationCenter
from bloodconnect.seeders.donation_centers import SAMPLE_CENTERS, SLOT_DAYS, SLOT_TIMES, seed_donation_centers
from bloodconnect.seeders.requests import SAMPLE_REQUESTS, seed_requests


def test_seed_donation_centers_replaces_existing(db, make_center):
    make_center(name="Old Center")
    start = date(2026, 3, 2)

    centers = seed_donation_centers(db, start=start)

    assert db.query(DonationCenter).count() == len(SAMPLE_CENTERS) == len(centers)
    assert db.query(DonationCenter).filter(DonationCenter.name == "Old Center").count() == 0
    assert db.query(CenterSlot).count() == len(SAMPLE_CENTERS) * SLOT_DAYS * len(SLOT_TIMES)
    assert SLOT_TIMES[0] == "08:00" and SLOT_TIMES[-1] == "17:00"

    apollo = next(c for c in centers if c.name == "Apollo Blood Center")
    assert apollo.is_open("monday", "17:30")
    assert not apollo.is_open("sunday", "10:00")
    assert len(apollo.open_slots_for(start)) == len(SLOT_TIMES)


def test_seeded_centers_are_listed(client, db):
    seed_donation_centers(db)

    response = client.get("/api/donation-centers/cities")

    assert response.json()["cities"] == ["Bangalore", "Kolkata", "Mumbai", "New Delhi"]


def test_seed_requests_for_user(db, make_user):
    user = make_user(email="seed@example.com")

    seeded = seed_requests(db, "Seed@Example.com")

    assert len(seeded) == len(SAMPLE_REQUESTS)
    assert {r.requester_id for r in db.query(BloodRequest).all()} == {user.id}


def test_seed_requests_needs_existing_user(db):
    with pytest.raises(LookupError):
        seed_requests(db, "missing@example.com")
