import os

# Settings must be in place before the app modules are imported
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SECURITY_HEADERS_ENABLED"] = "true"
os.environ["FIREBASE_PROJECT_ID"] = "bloodconnect-test"
os.environ["FIREBASE_API_KEY"] = "test-api-key"
os.environ.pop("REDIS_URL", None)
os.environ.pop("REDIS_HOST", None)

from datetime import date, datetime, timedelta  # noqa: E402
from itertools import count  # noqa: E402

import pytest  # noqa: E402
from fastapi import HTTPException  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from bloodconnect import auth, email_service  # noqa: E402
from bloodconnect.database import Base, SessionLocal, engine  # noqa: E402
from bloodconnect.identity import (  # noqa: E402
    IdentityProviderError,
    IdentitySession,
    get_identity_provider,
)
from bloodconnect.main import app  # noqa: E402
from bloodconnect.models import BloodRequest, CenterSlot, DonationCenter, User  # noqa: E402
from bloodconnect.rate_limiter import reset_rate_limits  # noqa: E402

_ids = count(1)


class FakeIdentityProvider:
    """In-memory stand-in for the Firebase Identity Toolkit client"""

    def __init__(self):
        self.accounts = {}
        self.password_resets = []

    async def sign_up(self, email, password, display_name=None):
        if email in self.accounts:
            raise IdentityProviderError("EMAIL_EXISTS")
        uid = f"uid-{email}"
        self.accounts[email] = (uid, password)
        return IdentitySession(
            uid=uid, email=email, id_token=f"token-{uid}", refresh_token="refresh", expires_in=3600
        )

    async def sign_in(self, email, password):
        account = self.accounts.get(email)
        if not account or account[1] != password:
            raise IdentityProviderError("INVALID_LOGIN_CREDENTIALS")
        uid = account[0]
        return IdentitySession(
            uid=uid, email=email, id_token=f"token-{uid}", refresh_token="refresh", expires_in=3600
        )

    async def send_password_reset(self, email):
        if email not in self.accounts:
            raise IdentityProviderError("EMAIL_NOT_FOUND")
        self.password_resets.append(email)


@pytest.fixture(autouse=True)
def database():
    Base.metadata.create_all(bind=engine)
    reset_rate_limits()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def fake_tokens(monkeypatch):
    """Bearer tokens look like "token-<firebase uid>"; anything else is rejected"""

    async def verify(token):
        if not token.startswith("token-"):
            raise HTTPException(status_code=401, detail="Invalid token")
        uid = token.removeprefix("token-")
        return {"sub": uid, "email": uid.removeprefix("uid-") if "@" in uid else None}

    monkeypatch.setattr(auth, "verify_firebase_token", verify)


@pytest.fixture(autouse=True)
def sent_emails(monkeypatch):
    sent = []

    async def fake_send_email(to, subject, mjml_content):
        sent.append({"to": to, "subject": subject})
        return {"id": f"email-{len(sent)}"}

    monkeypatch.setattr(email_service, "send_email", fake_send_email)
    return sent


@pytest.fixture
def identity():
    provider = FakeIdentityProvider()
    app.dependency_overrides[get_identity_provider] = lambda: provider
    yield provider
    app.dependency_overrides.pop(get_identity_provider, None)


@pytest.fixture
def client(identity):
    with TestClient(app) as test_client:
        yield test_client


def auth_headers(user):
    return {"Authorization": f"Bearer token-{user.firebase_uid}"}


@pytest.fixture
def make_user(db):
    def _make_user(**overrides):
        n = next(_ids)
        data = {
            "firebase_uid": f"firebase-{n}",
            "email": f"user{n}@example.com",
            "name": f"User {n}",
            "phone": "9876543210",
            "blood_type": "O+",
            "city": "Mumbai",
            "state": "Maharashtra",
            "is_donor": True,
            "donation_count": 0,
        }
        data.update(overrides)
        user = User(**data)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def admin(make_user):
    return make_user(is_admin=True, name="Admin")


@pytest.fixture
def make_request(db):
    def _make_request(requester, **overrides):
        data = {
            "requester_id": requester.id,
            "patient_name": "Ravi Kumar",
            "patient_age": 40,
            "patient_gender": "male",
            "patient_blood_type": "A+",
            "hospital_name": "City Hospital",
            "hospital_address": "1 Hospital Road",
            "hospital_city": "Mumbai",
            "hospital_state": "Maharashtra",
            "units_needed": 2,
            "units_received": 0,
            "urgency": "high",
            "status": "pending",
            "expires_at": datetime.utcnow() + timedelta(days=30),
        }
        data.update(overrides)
        request = BloodRequest(**data)
        db.add(request)
        db.commit()
        db.refresh(request)
        return request

    return _make_request


@pytest.fixture
def make_center(db):
    def _make_center(slot_days=(), times=("09:00", "14:00"), capacity=5, **overrides):
        data = {
            "name": "City Blood Bank",
            "address": "123 Main Street",
            "city": "Mumbai",
            "state": "Maharashtra",
            "country": "India",
            "phone": "+91 22-3456-7890",
            "latitude": 19.0760,
            "longitude": 72.8777,
            "operating_hours": {
                day: {"open": "08:00", "close": "18:00"}
                for day in ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday")
            },
            "facilities": ["Parking"],
            "is_active": True,
        }
        data.update(overrides)
        center = DonationCenter(**data)
        db.add(center)
        for day in slot_days:
            for t in times:
                db.add(CenterSlot(center=center, date=day, time=t, capacity=capacity, booked=0))
        db.commit()
        db.refresh(center)
        return center

    return _make_center


@pytest.fixture
def future_day():
    return date.today() + timedelta(days=5)
