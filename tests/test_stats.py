from datetime import datetime, timedelta

from bloodconnect.models import Donation


def test_stats(client, db, make_user, make_request):
    alice = make_user(name="Alice", blood_type="A+")
    make_user(blood_type="A+")
    make_user(blood_type="O-", is_donor=False)
    make_request(alice, urgency="critical")
    make_request(alice, urgency="low")
    make_request(alice, urgency="high", status="fulfilled")
    for days_ago in range(7):
        db.add(
            Donation(
                donor_id=alice.id,
                hospital_name="City Hospital",
                hospital_city="Mumbai",
                hospital_state="Maharashtra",
                blood_type="A+",
                units=1,
                donation_date=datetime.utcnow() - timedelta(days=days_ago),
            )
        )
    db.commit()

    response = client.get("/api/stats")

    assert response.status_code == 200
    stats = response.json()
    assert stats["userCount"] == 3
    assert stats["donorCount"] == 2
    assert stats["requestCount"] == 3
    assert stats["donationCount"] == 7
    assert stats["fulfilledRequestCount"] == 1
    assert stats["bloodTypeStats"] == [{"bloodType": "A+", "count": 2}, {"bloodType": "O-", "count": 1}]
    assert len(stats["recentDonations"]) == 5
    assert stats["recentDonations"][0]["donorName"] == "Alice"
    assert [r["urgency"] for r in stats["urgentRequests"]] == ["critical"]


def test_stats_on_empty_database(client):
    stats = client.get("/api/stats").json()

    assert stats["userCount"] == 0
    assert stats["bloodTypeStats"] == []
    assert stats["recentDonations"] == stats["urgentRequests"] == []
