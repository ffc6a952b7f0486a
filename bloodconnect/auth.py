import base64
import json
import logging
import time
from typing import Optional

import httpx
from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.x509 import load_pem_x509_certificate
from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .config import FIREBASE_PROJECT_ID
from .database import get_db
from .models import User
from .security_logger import log_security_event

logger = logging.getLogger(__name__)

GOOGLE_CERTS_URL = (
    "https://www.googleapis.com/robot/v1/metadata/x509/securetoken@system.gserviceaccount.com"
)
CLOCK_SKEW_SECONDS = 60

security = HTTPBearer(auto_error=False)

# Cache for Google's public keys
_cached_keys = None


async def get_google_public_keys(force_refresh: bool = False):
    """Fetch Google's public keys for Firebase token verification"""
    global _cached_keys
    if _cached_keys and not force_refresh:
        return _cached_keys

    try:
        async with httpx.AsyncClient(timeout=10.0) as client:
            response = await client.get(GOOGLE_CERTS_URL)
        if response.status_code == 200:
            _cached_keys = response.json()
            logger.info(f"✅ Fetched {len(_cached_keys)} Google public keys")
            return _cached_keys
        logger.error(f"❌ Failed to fetch Google public keys: HTTP {response.status_code}")
    except httpx.HTTPError as e:
        logger.error(f"❌ Error fetching Google public keys: {str(e)}")
    return None


def _b64decode_segment(segment: str) -> bytes:
    return base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))


def _check_claims(claims: dict) -> None:
    """Validate audience, issuer and timing claims of a decoded ID token"""
    if claims.get("aud") != FIREBASE_PROJECT_ID:
        raise HTTPException(status_code=401, detail="Invalid token audience")

    if claims.get("iss") != f"https://securetoken.google.com/{FIREBASE_PROJECT_ID}":
        raise HTTPException(status_code=401, detail="Invalid token issuer")

    now = time.time()
    if claims.get("exp", 0) < now:
        raise HTTPException(
            status_code=401,
            detail="Token has expired. Please log in again.",
            headers={"X-Token-Expired": "true"},
        )

    if claims.get("iat", 0) > now + CLOCK_SKEW_SECONDS:
        raise HTTPException(status_code=401, detail="Invalid token")

    if not claims.get("sub"):
        raise HTTPException(status_code=401, detail="Invalid token claims")


async def verify_firebase_token(token: str) -> dict:
    """
    Verify a Firebase ID token and return its claims.

    The RS256 signature is checked against Google's published certificates,
    then audience, issuer, expiry and issued-at claims are validated.
    """
    if not FIREBASE_PROJECT_ID:
        logger.error("❌ FIREBASE_PROJECT_ID not configured")
        raise HTTPException(status_code=500, detail="Authentication is not configured")

    parts = token.split(".")
    if len(parts) != 3:
        raise HTTPException(status_code=401, detail="Invalid token format")
    header_b64, payload_b64, signature_b64 = parts

    try:
        header = json.loads(_b64decode_segment(header_b64))
        claims = json.loads(_b64decode_segment(payload_b64))
        signature = _b64decode_segment(signature_b64)
    except (ValueError, json.JSONDecodeError) as e:
        raise HTTPException(status_code=401, detail="Invalid token encoding") from e

    if header.get("alg") != "RS256" or not header.get("kid"):
        raise HTTPException(status_code=401, detail="Invalid token header")

    kid = header["kid"]
    public_keys = await get_google_public_keys()
    if not public_keys or kid not in public_keys:
        # Keys rotate; refresh once before giving up
        logger.warning(f"⚠️ Key ID {kid} not in cached public keys, refreshing")
        public_keys = await get_google_public_keys(force_refresh=True)
        if not public_keys or kid not in public_keys:
            raise HTTPException(status_code=401, detail="Unable to verify token signature")

    cert = load_pem_x509_certificate(public_keys[kid].encode(), default_backend())
    try:
        cert.public_key().verify(
            signature,
            f"{header_b64}.{payload_b64}".encode(),
            padding.PKCS1v15(),
            hashes.SHA256(),
        )
    except Exception as e:
        raise HTTPException(status_code=401, detail="Invalid token signature") from e

    _check_claims(claims)
    logger.debug(f"✅ Token verified for {claims.get('email')}")
    return claims


async def _user_from_credentials(
    request: Request, credentials: Optional[HTTPAuthorizationCredentials], db: Session
) -> User:
    if not credentials or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        log_security_event("auth_failed", path=request.url.path, reason="missing bearer token")
        raise HTTPException(status_code=401, detail="Authentication required")

    try:
        claims = await verify_firebase_token(credentials.credentials)
    except HTTPException as e:
        if e.status_code == 401:
            event = "token_expired" if e.headers and "X-Token-Expired" in e.headers else "invalid_token"
            log_security_event(event, path=request.url.path, reason=e.detail)
        raise

    firebase_uid = claims["sub"]
    email = (claims.get("email") or "").lower()

    user = db.query(User).filter(User.firebase_uid == firebase_uid).first()
    if not user and email:
        # Account re-created at the provider (e.g. switched sign-in method): relink by email
        user = db.query(User).filter(User.email == email).first()
        if user:
            logger.info(f"🔄 Relinking {email} to new Firebase UID")
            user.firebase_uid = firebase_uid
            db.commit()
            db.refresh(user)

    if not user:
        log_security_event("unknown_user", path=request.url.path, uid=firebase_uid)
        raise HTTPException(status_code=404, detail="User not found")

    request.state.firebase_claims = claims
    return user


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the local user record for the bearer token"""
    return await _user_from_credentials(request, credentials, db)


async def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """Like get_current_user, but anonymous callers get None instead of a 401"""
    if not credentials:
        return None
    try:
        return await _user_from_credentials(request, credentials, db)
    except HTTPException:
        return None


async def require_admin(
    request: Request,
    user: User = Depends(get_current_user),
) -> User:
    if not user.is_admin:
        log_security_event("admin_required", path=request.url.path, user_id=user.id)
        raise HTTPException(status_code=403, detail="Admin access required")
    return user
