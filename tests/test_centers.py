from datetime import date, datetime, timedelta

from conftest import auth_headers

from bloodconnect.domain.centers.repository import CenterRepository
from bloodconnect.models import Appointment, CenterSlot, User


def _slot(db, center, day, time):
    db.expire_all()
    return (
        db.query(CenterSlot)
        .filter(CenterSlot.center_id == center.id, CenterSlot.date == day, CenterSlot.time == time)
        .one()
    )


def _book(client, user, center, day, time="09:00"):
    return client.post(
        "/api/donation-centers/appointments",
        headers=auth_headers(user),
        json={"donationCenter": center.id, "date": day.isoformat(), "timeSlot": time},
    )


def test_list_cities(client, make_center):
    make_center(city="Pune", name="B")
    make_center(city="Delhi", name="A")
    make_center(city="Pune", name="C")
    make_center(city="Agra", name="D", is_active=False)

    assert client.get("/api/donation-centers/cities").json() == {"cities": ["Delhi", "Pune"]}


def test_list_centers_with_filters(client, make_center, future_day):
    with_slots = make_center(name="Alpha", slot_days=[future_day], times=("09:00",))
    evening = make_center(name="Beta", slot_days=[future_day], times=("18:00",))
    make_center(name="Gamma", city="Delhi", state="Delhi")
    make_center(name="Closed", is_active=False)

    names = [c["name"] for c in client.get("/api/donation-centers").json()["centers"]]
    assert names == ["Alpha", "Beta", "Gamma"]

    response = client.get("/api/donation-centers?city=MUMBAI")
    assert [c["name"] for c in response.json()["centers"]] == ["Alpha", "Beta"]

    response = client.get(f"/api/donation-centers?date={future_day.isoformat()}")
    assert [c["id"] for c in response.json()["centers"]] == [with_slots.id, evening.id]

    response = client.get(f"/api/donation-centers?date={future_day.isoformat()}&timeSlot=evening")
    assert [c["id"] for c in response.json()["centers"]] == [evening.id]

    assert client.get("/api/donation-centers?timeSlot=midnight").status_code == 400


def test_center_response_shape(client, make_center, make_user):
    today = datetime.utcnow().date()
    center = make_center(slot_days=[today + timedelta(days=1), today + timedelta(days=20)])
    user = make_user(latitude=19.0800, longitude=72.8800)

    response = client.get(f"/api/donation-centers/{center.id}", headers=auth_headers(user))

    body = response.json()["center"]
    assert body["hours"].startswith("Monday: 08:00 - 18:00")
    assert body["hours"].endswith("Sunday: Closed")
    assert body["distance"] == 0.5
    assert body["availableSlots"] == [
        {"date": (today + timedelta(days=1)).isoformat(), "slots": ["09:00", "14:00"]}
    ]

    anonymous = client.get(f"/api/donation-centers/{center.id}").json()["center"]
    assert anonymous["distance"] is None


def test_unknown_center(client):
    response = client.get("/api/donation-centers/999")

    assert response.status_code == 404
    assert response.json()["message"] == "Donation center not found"


def test_nearby_centers(client, make_center, make_user):
    near = make_center(name="Near", latitude=19.08, longitude=72.88)
    make_center(name="Far", latitude=28.61, longitude=77.21)
    user = make_user(latitude=19.0760, longitude=72.8777)

    response = client.get("/api/donation-centers/nearby", headers=auth_headers(user))

    centers = response.json()["centers"]
    assert [c["id"] for c in centers] == [near.id]
    assert centers[0]["distance"] is not None

    wide = client.get("/api/donation-centers/nearby?distance=2000", headers=auth_headers(user))
    assert [c["name"] for c in wide.json()["centers"]] == ["Near", "Far"]


def test_nearby_requires_user_location(client, make_user):
    response = client.get("/api/donation-centers/nearby", headers=auth_headers(make_user()))

    assert response.status_code == 400
    assert response.json()["message"] == "User location not available"


def test_slots_for_date(client, make_center, future_day):
    center = make_center(slot_days=[future_day])

    response = client.get(f"/api/donation-centers/{center.id}/slots?date={future_day.isoformat()}")
    assert response.json() == {"slots": ["09:00", "14:00"]}

    assert client.get(f"/api/donation-centers/{center.id}/slots").status_code == 400
    assert client.get(f"/api/donation-centers/999/slots?date={future_day.isoformat()}").status_code == 404


def test_admin_creates_center_and_slots(client, admin, make_user):
    payload = {
        "name": "Red Cross Center",
        "address": "789 Charity Lane",
        "city": "Bangalore",
        "state": "Karnataka",
        "phone": "+91 80 4567 8901",
        "coordinates": [77.5946, 12.9716],
        "operatingHours": {"Monday": {"open": "9:00 AM", "close": "5:00 PM"}},
        "facilities": ["Parking"],
    }

    assert client.post("/api/donation-centers", headers=auth_headers(make_user()), json=payload).status_code == 403

    response = client.post("/api/donation-centers", headers=auth_headers(admin), json=payload)
    assert response.status_code == 201
    center = response.json()["center"]
    assert center["hours"].startswith("Monday: 09:00 - 17:00, Tuesday: Closed")

    today = datetime.utcnow().date()
    monday = today + timedelta(days=7 - today.weekday())
    url = f"/api/donation-centers/{center['id']}/slots"

    outside = client.post(
        url, headers=auth_headers(admin), json={"date": monday.isoformat(), "times": ["08:00", "10:00"]}
    )
    assert outside.status_code == 400

    added = client.post(
        url,
        headers=auth_headers(admin),
        json={"date": monday.isoformat(), "times": ["10:00", "2:00 PM", "10:00"], "capacity": 2},
    )
    assert added.status_code == 201
    assert added.json()["added"] == ["10:00", "14:00"]

    repeat = client.post(url, headers=auth_headers(admin), json={"date": monday.isoformat(), "times": ["10:00"]})
    assert repeat.json()["added"] == []
    assert repeat.json()["skipped"] == ["10:00"]


def test_book_appointment(client, db, make_center, make_user, future_day, sent_emails):
    center = make_center(slot_days=[future_day])
    user = make_user()

    response = _book(client, user, center, future_day)

    assert response.status_code == 201
    appointment = response.json()["appointment"]
    assert appointment["status"] == "scheduled"
    assert appointment["center"]["id"] == center.id
    assert appointment["canCancel"] is True
    assert _slot(db, center, future_day, "09:00").booked == 1
    assert [email["to"] for email in sent_emails] == [user.email]


def test_booking_a_full_slot_is_rejected(client, db, make_center, make_user, future_day):
    center = make_center(slot_days=[future_day], capacity=2)
    users = [make_user() for _ in range(3)]

    statuses = [_book(client, user, center, future_day).status_code for user in users]

    assert statuses == [201, 201, 400]
    slot = _slot(db, center, future_day, "09:00")
    assert slot.booked == slot.capacity == 2
    assert db.query(Appointment).count() == 2


def test_booking_rejections(client, make_center, make_user, future_day):
    center = make_center(slot_days=[future_day])
    inactive = make_center(slot_days=[future_day], is_active=False)
    user = make_user()
    recent_donor = make_user(last_donation=datetime.utcnow() - timedelta(days=5))

    assert _book(client, recent_donor, center, future_day).status_code == 400
    assert _book(client, user, inactive, future_day).status_code == 404
    assert _book(client, user, center, date.today() - timedelta(days=1)).status_code == 400
    assert _book(client, user, center, future_day, time="11:00").json()["message"] == (
        "The selected time slot is not available"
    )

    assert _book(client, user, center, future_day).status_code == 201
    duplicate = _book(client, user, center, future_day)
    assert duplicate.status_code == 400
    assert duplicate.json()["message"] == "You already have an appointment booked for this time slot"


def test_my_appointments_ordered_by_date(client, make_center, make_user, future_day):
    later = future_day + timedelta(days=3)
    center = make_center(slot_days=[future_day, later])
    user = make_user()
    _book(client, user, center, later)
    _book(client, user, center, future_day, time="14:00")

    response = client.get("/api/donation-centers/appointments/me", headers=auth_headers(user))

    dates = [a["date"] for a in response.json()["appointments"]]
    assert dates == [future_day.isoformat(), later.isoformat()]


def test_cancel_frees_the_slot(client, db, make_center, make_user, future_day):
    center = make_center(slot_days=[future_day])
    user = make_user()
    appointment_id = _book(client, user, center, future_day).json()["appointment"]["id"]

    response = client.put(
        f"/api/donation-centers/appointments/{appointment_id}/cancel", headers=auth_headers(user)
    )

    assert response.status_code == 200
    assert response.json()["message"] == "Appointment cancelled successfully"
    assert _slot(db, center, future_day, "09:00").booked == 0
    assert db.get(Appointment, appointment_id).status == "cancelled"

    again = client.put(
        f"/api/donation-centers/appointments/{appointment_id}/cancel", headers=auth_headers(user)
    )
    assert again.status_code == 400
    assert _slot(db, center, future_day, "09:00").booked == 0


def test_cancel_within_24_hours_fails(client, db, make_center, make_user):
    soon = datetime.utcnow() + timedelta(hours=3)
    day, time = soon.date(), f"{soon.hour:02d}:00"
    center = make_center(slot_days=[day], times=(time,))
    user = make_user()
    appointment = Appointment(user_id=user.id, center_id=center.id, date=day, time_slot=time, status="scheduled")
    db.add(appointment)
    db.commit()

    response = client.put(
        f"/api/donation-centers/appointments/{appointment.id}/cancel", headers=auth_headers(user)
    )

    assert response.status_code == 400
    assert "at least 24 hours in advance" in response.json()["message"]


def test_only_owner_can_cancel(client, make_center, make_user, future_day):
    center = make_center(slot_days=[future_day])
    owner = make_user()
    appointment_id = _book(client, owner, center, future_day).json()["appointment"]["id"]

    response = client.put(
        f"/api/donation-centers/appointments/{appointment_id}/cancel", headers=auth_headers(make_user())
    )

    assert response.status_code == 403


def test_complete_appointment_counts_donation(client, db, make_center, make_user, admin, future_day):
    center = make_center(slot_days=[future_day])
    user = make_user()
    appointment_id = _book(client, user, center, future_day).json()["appointment"]["id"]
    url = f"/api/donation-centers/appointments/{appointment_id}/complete"

    assert client.put(url, headers=auth_headers(user)).status_code == 403

    response = client.put(url, headers=auth_headers(admin))

    assert response.status_code == 200
    db.expire_all()
    assert db.get(Appointment, appointment_id).status == "completed"
    donor = db.get(User, user.id)
    assert donor.donation_count == 1
    assert donor.last_donation is not None

    assert client.put(url, headers=auth_headers(admin)).status_code == 400


def test_slot_counter_never_leaves_its_bounds(db, make_center, future_day):
    center = make_center(slot_days=[future_day], times=("09:00",), capacity=1)

    assert CenterRepository.reserve_slot(db, center.id, future_day, "09:00") is True
    assert CenterRepository.reserve_slot(db, center.id, future_day, "09:00") is False
    assert CenterRepository.release_slot(db, center.id, future_day, "09:00") is True
    assert CenterRepository.release_slot(db, center.id, future_day, "09:00") is False
    db.commit()

    assert _slot(db, center, future_day, "09:00").booked == 0
