"""
Firebase Authentication REST client

Accounts and passwords live at the identity provider; this module only calls
the Identity Toolkit endpoints for sign up, sign in and password reset emails.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from .config import FIREBASE_API_KEY, FRONTEND_URL

logger = logging.getLogger(__name__)

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1"

# Identity Toolkit error codes -> user-facing messages
ERROR_MESSAGES = {
    "EMAIL_EXISTS": "User already exists",
    "EMAIL_NOT_FOUND": "Invalid email or password",
    "INVALID_PASSWORD": "Invalid email or password",
    "INVALID_LOGIN_CREDENTIALS": "Invalid email or password",
    "USER_DISABLED": "This account has been disabled",
    "INVALID_EMAIL": "Please include a valid email",
    "OPERATION_NOT_ALLOWED": "Password sign-in is disabled",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "Too many attempts. Please try again later.",
}


class IdentityProviderError(Exception):
    """Raised when the identity provider rejects a call"""

    def __init__(self, code: str, message: Optional[str] = None):
        self.code = code
        self.message = message or ERROR_MESSAGES.get(code, code.replace("_", " ").capitalize())
        super().__init__(self.message)


@dataclass
class IdentitySession:
    uid: str
    email: str
    id_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None


class FirebaseIdentityClient:
    """Thin async wrapper around the Identity Toolkit REST API"""

    def __init__(self, api_key: Optional[str] = FIREBASE_API_KEY, timeout: float = 15.0):
        self.api_key = api_key
        self.timeout = timeout

    async def _post(self, endpoint: str, payload: dict) -> dict:
        if not self.api_key:
            logger.error("❌ FIREBASE_API_KEY not configured")
            raise IdentityProviderError("NOT_CONFIGURED", "Authentication service is not configured")

        url = f"{IDENTITY_TOOLKIT_URL}/{endpoint}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(url, params={"key": self.api_key}, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"❌ Identity provider unreachable: {e}")
            raise IdentityProviderError(
                "UNAVAILABLE", "Authentication service temporarily unavailable"
            ) from e

        data = response.json() if response.content else {}
        if response.status_code != 200:
            # Messages look like "WEAK_PASSWORD : Password should be at least 6 characters"
            raw = (data.get("error") or {}).get("message", "UNKNOWN_ERROR")
            code, _, detail = raw.partition(" : ")
            logger.warning(f"⚠️ Identity provider rejected {endpoint}: {code}")
            raise IdentityProviderError(code.strip(), detail.strip() or None)
        return data

    async def sign_up(self, email: str, password: str, display_name: Optional[str] = None) -> IdentitySession:
        data = await self._post(
            "accounts:signUp",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        session = IdentitySession(
            uid=data["localId"],
            email=data.get("email", email),
            id_token=data.get("idToken"),
            refresh_token=data.get("refreshToken"),
            expires_in=int(data["expiresIn"]) if data.get("expiresIn") else None,
        )

        if display_name and session.id_token:
            try:
                await self._post(
                    "accounts:update",
                    {"idToken": session.id_token, "displayName": display_name},
                )
            except IdentityProviderError as e:
                logger.warning(f"⚠️ Could not set display name for {email}: {e.message}")

        logger.info(f"✅ Identity account created for {email}")
        return session

    async def sign_in(self, email: str, password: str) -> IdentitySession:
        data = await self._post(
            "accounts:signInWithPassword",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        return IdentitySession(
            uid=data["localId"],
            email=data.get("email", email),
            id_token=data.get("idToken"),
            refresh_token=data.get("refreshToken"),
            expires_in=int(data["expiresIn"]) if data.get("expiresIn") else None,
        )

    async def send_password_reset(self, email: str) -> None:
        await self._post(
            "accounts:sendOobCode",
            {
                "requestType": "PASSWORD_RESET",
                "email": email,
                "continueUrl": f"{FRONTEND_URL}/reset-password",
            },
        )
        logger.info(f"📧 Password reset email requested for {email}")


_identity_client: Optional[FirebaseIdentityClient] = None


def get_identity_provider() -> FirebaseIdentityClient:
    """Dependency returning the shared identity provider client"""
    global _identity_client
    if _identity_client is None:
        _identity_client = FirebaseIdentityClient()
    return _identity_client
