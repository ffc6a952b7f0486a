from datetime import datetime, timedelta

from conftest import auth_headers

from bloodconnect.models import Donation


def test_profile_includes_donations_newest_first(client, db, make_user):
    user = make_user()
    for days_ago in (200, 100):
        db.add(
            Donation(
                donor_id=user.id,
                hospital_name="City Hospital",
                hospital_city="Mumbai",
                hospital_state="Maharashtra",
                blood_type="O+",
                units=1,
                donation_date=datetime.utcnow() - timedelta(days=days_ago),
            )
        )
    db.commit()

    for path in ("/api/users/profile", "/api/users/me"):
        response = client.get(path, headers=auth_headers(user))
        assert response.status_code == 200
        donations = response.json()["donations"]
        assert len(donations) == 2
        assert donations[0]["donationDate"] > donations[1]["donationDate"]


def test_update_profile_recomputes_profile_complete(client, db, make_user):
    user = make_user(city=None, state=None)
    assert user.profile_complete is False

    response = client.put(
        "/api/users/profile",
        headers=auth_headers(user),
        json={
            "name": "Meera",
            "bloodType": "ab-",
            "location": {"city": "Chennai", "state": "Tamil Nadu", "coordinates": [80.27, 13.08]},
            "medicalInfo": {"weight": 58, "hasMedicalConditions": False},
        },
    )

    assert response.status_code == 200
    updated = response.json()["user"]
    assert updated["name"] == "Meera"
    assert updated["bloodType"] == "AB-"
    assert updated["location"]["city"] == "Chennai"
    assert updated["location"]["coordinates"] == [80.27, 13.08]
    assert updated["medicalInfo"]["weight"] == 58
    assert updated["profileComplete"] is True


def test_update_profile_rejects_invalid_blood_type(client, make_user):
    user = make_user()

    response = client.put("/api/users/profile", headers=auth_headers(user), json={"bloodType": "Z"})

    assert response.status_code == 400


def test_donors_lists_only_users_with_donations(client, make_user):
    make_user(name="Never Donated", donation_count=0)
    make_user(name="Regular", donation_count=3, blood_type="A+", city="Mumbai")
    make_user(name="Occasional", donation_count=1, blood_type="A+", city="Navi Mumbai")
    make_user(name="Elsewhere", donation_count=5, blood_type="B+", city="Delhi")

    response = client.get("/api/users/donors")
    assert [d["name"] for d in response.json()["donors"]] == ["Elsewhere", "Regular", "Occasional"]

    # "+" in an unencoded query string arrives as a space
    response = client.get("/api/users/donors?bloodType=A+&location=mumbai")
    donors = response.json()["donors"]
    assert [d["name"] for d in donors] == ["Regular", "Occasional"]
    assert "coordinates" not in donors[0]["location"] or donors[0]["location"]["coordinates"] is None


def test_donors_invalid_blood_type_filter(client):
    assert client.get("/api/users/donors?bloodType=XX").status_code == 400


def test_get_user_public_view(client, make_user):
    user = make_user(name="Public", latitude=19.0, longitude=72.8)

    response = client.get(f"/api/users/{user.id}")

    assert response.status_code == 200
    body = response.json()["user"]
    assert body["name"] == "Public"
    assert "email" not in body
    assert body["location"]["coordinates"] is None


def test_get_unknown_user(client):
    assert client.get("/api/users/9999").status_code == 404
