"""Auth service - registration and sign-in against the identity provider"""

import logging

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ... import email_service
from ...identity import FirebaseIdentityClient, IdentityProviderError, IdentitySession
from ...models import User
from ...security_logger import log_security_event
from ...utils.geo import coordinates_to_lat_lng
from ..users.repository import UserRepository
from .schemas import LoginRequest, RegisterRequest

logger = logging.getLogger(__name__)


class AuthService:
    """Service layer for account lifecycle"""

    def __init__(self, db: Session, identity: FirebaseIdentityClient):
        self.db = db
        self.identity = identity
        self.repo = UserRepository()

    async def register(self, data: RegisterRequest) -> User:
        """Create the provider account, then the local user, then send a welcome email"""
        logger.info(f"📥 Registration attempt for {data.email}")

        if self.repo.get_by_email(self.db, data.email):
            log_security_event("registration_failed", email=data.email, reason="duplicate email")
            raise HTTPException(status_code=400, detail="User already exists")

        try:
            session = await self.identity.sign_up(data.email, data.password, data.name)
        except IdentityProviderError as e:
            log_security_event("registration_failed", email=data.email, reason=e.code)
            raise HTTPException(status_code=400, detail=e.message) from e

        user_data = {
            "firebase_uid": session.uid,
            "email": data.email,
            "name": data.name,
            "blood_type": data.bloodType,
            "phone": data.phone,
        }
        if data.location:
            latitude, longitude = coordinates_to_lat_lng(data.location.coordinates)
            user_data.update(
                city=data.location.city,
                state=data.location.state,
                latitude=latitude,
                longitude=longitude,
            )
            if data.location.country:
                user_data["country"] = data.location.country

        try:
            user = self.repo.create_user(self.db, **user_data)
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"⚠️ Local user for {data.email} already exists: {e.orig}")
            raise HTTPException(status_code=400, detail="User already exists") from e

        logger.info(f"✅ User registered: {user.id} ({user.email})")

        try:
            await email_service.send_welcome_email(user.email, user.name)
        except Exception as e:
            logger.error(f"❌ Failed to send welcome email to {user.email}: {e}")

        return user

    async def login(self, data: LoginRequest) -> tuple[User, IdentitySession]:
        try:
            session = await self.identity.sign_in(data.email, data.password)
        except IdentityProviderError as e:
            log_security_event("login_failed", email=data.email, reason=e.code)
            raise HTTPException(status_code=401, detail=e.message) from e

        user = self.repo.get_by_firebase_uid(self.db, session.uid)
        if not user:
            user = self.repo.get_by_email(self.db, session.email or data.email)
            if user:
                logger.info(f"🔄 Relinking {user.email} to new Firebase UID")
                user = self.repo.update_user(self.db, user, firebase_uid=session.uid)

        if not user:
            raise HTTPException(status_code=404, detail="User not found")

        logger.info(f"✅ Login successful for user {user.id}")
        return user, session

    async def forgot_password(self, email: str) -> None:
        try:
            await self.identity.send_password_reset(email)
        except IdentityProviderError as e:
            if e.code == "EMAIL_NOT_FOUND":
                # Same answer as success so the endpoint can't be used to probe accounts
                logger.info(f"ℹ️ Password reset requested for unknown email {email}")
                return
            raise HTTPException(status_code=400, detail=e.message) from e
