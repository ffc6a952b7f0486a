"""Auth domain schemas - Pydantic models for validation"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.schemas import LocationIn
from ...shared.validators import validate_blood_type, validate_email, validate_phone


class RegisterRequest(BaseModel):
    """Schema for account registration"""

    email: str
    password: str = Field(min_length=6, max_length=128)
    name: str = Field(min_length=1, max_length=255)
    bloodType: str
    phone: Optional[str] = None
    location: Optional[LocationIn] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return validate_email(v)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError("Name is required")
        return v.strip()

    @field_validator("bloodType")
    @classmethod
    def validate_blood_type(cls, v):
        return validate_blood_type(v)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return validate_phone(v)


class LoginRequest(BaseModel):
    email: str
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return validate_email(v)


class ForgotPasswordRequest(BaseModel):
    email: str

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return validate_email(v)


class AuthUser(BaseModel):
    id: int
    email: str
    name: str
    bloodType: Optional[str] = None


class RegisterResponse(BaseModel):
    message: str
    user: AuthUser


class LoginResponse(BaseModel):
    message: str
    token: Optional[str] = None
    refreshToken: Optional[str] = None
    expiresIn: Optional[int] = None
    user: AuthUser
