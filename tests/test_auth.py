from conftest import auth_headers

REGISTRATION = {
    "email": "Asha@Example.com",
    "password": "secret123",
    "name": "Asha Rao",
    "bloodType": "b+",
    "phone": "+91 98765 43210",
    "location": {"city": "Pune", "state": "Maharashtra", "coordinates": [73.8567, 18.5204]},
}


def test_register_creates_local_user_and_sends_welcome_email(client, db, sent_emails):
    response = client.post("/api/auth/register", json=REGISTRATION)

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "User registered successfully"
    assert body["user"]["email"] == "asha@example.com"
    assert body["user"]["name"] == "Asha Rao"

    from bloodconnect.models import User

    user = db.query(User).filter(User.email == "asha@example.com").one()
    assert user.firebase_uid == "uid-asha@example.com"
    assert user.blood_type == "B+"
    assert user.phone == "+919876543210"
    assert (user.latitude, user.longitude) == (18.5204, 73.8567)
    assert user.profile_complete is True
    assert [email["to"] for email in sent_emails] == ["asha@example.com"]


def test_register_duplicate_email_fails(client):
    assert client.post("/api/auth/register", json=REGISTRATION).status_code == 201

    response = client.post("/api/auth/register", json=REGISTRATION)

    assert response.status_code == 400
    assert response.json()["message"] == "User already exists"


def test_register_reports_identity_provider_errors(client, identity):
    identity.accounts["asha@example.com"] = ("uid-elsewhere", "x")

    response = client.post("/api/auth/register", json=REGISTRATION)

    assert response.status_code == 400
    assert response.json()["message"] == "User already exists"


def test_register_validation_errors(client):
    response = client.post(
        "/api/auth/register",
        json={**REGISTRATION, "email": "not-an-email", "password": "123", "bloodType": "C+"},
    )

    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Validation failed"
    fields = {error["field"] for error in body["errors"]}
    assert {"email", "password", "bloodType"} <= fields
    email_error = next(e for e in body["errors"] if e["field"] == "email")
    assert email_error["message"] == "Please include a valid email"


def test_register_survives_email_failure(client, monkeypatch):
    from bloodconnect import email_service

    async def broken(*args, **kwargs):
        raise email_service.EmailDeliveryError("Email service not configured")

    monkeypatch.setattr(email_service, "send_email", broken)

    assert client.post("/api/auth/register", json=REGISTRATION).status_code == 201


def test_login_returns_token_and_user(client):
    client.post("/api/auth/register", json=REGISTRATION)

    response = client.post(
        "/api/auth/login", json={"email": "asha@example.com", "password": "secret123"}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["token"] == "token-uid-asha@example.com"
    assert body["user"]["bloodType"] == "B+"


def test_login_with_bad_password_is_unauthorized(client):
    client.post("/api/auth/register", json=REGISTRATION)

    response = client.post("/api/auth/login", json={"email": "asha@example.com", "password": "wrong"})

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid email or password"


def test_login_without_local_user_is_not_found(client, identity):
    identity.accounts["ghost@example.com"] = ("uid-ghost@example.com", "secret123")

    response = client.post(
        "/api/auth/login", json={"email": "ghost@example.com", "password": "secret123"}
    )

    assert response.status_code == 404


def test_forgot_password_does_not_reveal_unknown_accounts(client, identity):
    client.post("/api/auth/register", json=REGISTRATION)

    known = client.post("/api/auth/forgot-password", json={"email": "asha@example.com"})
    unknown = client.post("/api/auth/forgot-password", json={"email": "nobody@example.com"})

    assert known.status_code == unknown.status_code == 200
    assert known.json()["message"] == "Password reset email sent"
    assert identity.password_resets == ["asha@example.com"]


def test_me_requires_bearer_token(client):
    response = client.get("/api/auth/me")

    assert response.status_code == 401
    assert response.json()["message"] == "Authentication required"


def test_me_rejects_invalid_token(client):
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})

    assert response.status_code == 401


def test_me_for_token_without_local_user(client):
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer token-nobody"})

    assert response.status_code == 404


def test_me_returns_profile(client, make_user):
    user = make_user(name="Kiran")

    response = client.get("/api/auth/me", headers=auth_headers(user))

    assert response.status_code == 200
    assert response.json()["user"]["name"] == "Kiran"
    assert response.json()["user"]["isEligible"] is True
