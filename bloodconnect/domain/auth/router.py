"""Auth router - registration, login and password reset"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...identity import FirebaseIdentityClient, get_identity_provider
from ...models import User
from ...rate_limiter import api_limiter, auth_limiter
from ...shared.schemas import MessageResponse
from ..users.schemas import profile_response
from .schemas import (
    AuthUser,
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
)
from .service import AuthService

router = APIRouter(prefix="/auth", tags=["Auth"])


def get_auth_service(
    db: Session = Depends(get_db),
    identity: FirebaseIdentityClient = Depends(get_identity_provider),
) -> AuthService:
    """Dependency injection for AuthService"""
    return AuthService(db, identity)


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=201,
    dependencies=[Depends(auth_limiter)],
)
async def register(data: RegisterRequest, service: AuthService = Depends(get_auth_service)):
    user = await service.register(data)
    return RegisterResponse(
        message="User registered successfully",
        user=AuthUser(id=user.id, email=user.email, name=user.name),
    )


@router.post("/login", response_model=LoginResponse, dependencies=[Depends(auth_limiter)])
async def login(data: LoginRequest, service: AuthService = Depends(get_auth_service)):
    user, session = await service.login(data)
    return LoginResponse(
        message="Login successful",
        token=session.id_token,
        refreshToken=session.refresh_token,
        expiresIn=session.expires_in,
        user=AuthUser(id=user.id, email=user.email, name=user.name, bloodType=user.blood_type),
    )


@router.post(
    "/forgot-password", response_model=MessageResponse, dependencies=[Depends(auth_limiter)]
)
async def forgot_password(
    data: ForgotPasswordRequest, service: AuthService = Depends(get_auth_service)
):
    await service.forgot_password(data.email)
    return MessageResponse(message="Password reset email sent")


@router.get("/me", dependencies=[Depends(api_limiter)])
async def get_me(current_user: User = Depends(get_current_user)):
    """Get the authenticated user"""
    return {"user": profile_response(current_user)}
