"""
Pydantic schemas for signup, login and user responses.
"""
from pydantic import BaseModel, EmailStr, Field, ConfigDict, field_validator

from taskgate.features.permissions.rbac import Role
from taskgate.features.users.auth import MAX_PASSWORD_BYTES


def check_password_bytes(value: str) -> str:
    if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes when UTF-8 encoded")
    return value


class SignupRequest(BaseModel):
    """Schema for creating a new account."""
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    role: Role | None = Field(None, description="Defaults to viewer")
    organization_id: str | None = Field(None, alias="organizationId")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        return check_password_bytes(value)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        return check_password_bytes(value)


class UserResponse(BaseModel):
    """Schema for user responses."""
    id: str
    email: str
    role: Role
    organization_id: str | None = None

    model_config = ConfigDict(from_attributes=True)


class UserSummary(BaseModel):
    """Minimal user info embedded in other responses."""
    id: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class SignupResponse(TokenResponse):
    user: UserResponse


class SignupOrganization(BaseModel):
    id: str
    name: str
    parent_id: str | None = None

    model_config = ConfigDict(from_attributes=True)
