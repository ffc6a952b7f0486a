"""Contact domain schemas"""

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_email
from ...utils.sanitization import validate_and_sanitize_input


class ContactCreate(BaseModel):
    """Schema for a contact form submission"""

    name: str
    email: str
    subject: str
    message: str

    @field_validator("name", "subject", "message")
    @classmethod
    def validate_required_text(cls, v, info):
        if not v or not v.strip():
            raise ValueError("All fields are required")
        max_length = 5000 if info.field_name == "message" else 255
        return validate_and_sanitize_input(v, max_length=max_length)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        if not v or not v.strip():
            raise ValueError("All fields are required")
        return validate_email(v)


class ContactResponse(BaseModel):
    message: str
    id: int
