"""Schemas for authentication endpoints.

Bodies use the camelCase field names of the web client.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from spiritlove.services.auth.password_hasher import MAX_PASSWORD_BYTES

MIN_PASSWORD_LENGTH = 8


def _validate_password_length(v: str) -> str:
    """Shared password validation logic."""
    if len(v) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return v


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class LoginRequest(_CamelModel):
    """Login by account name or email."""

    name: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1)


class SetupPasswordRequest(_CamelModel):
    """First-time password setup for a provisioned account."""

    user_id: str = Field(alias="userId", min_length=1)
    password: str

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _validate_password_length(v)


class ChangePasswordRequest(_CamelModel):
    """Change password while logged in."""

    current_password: str = Field(alias="currentPassword")
    new_password: str = Field(alias="newPassword")

    @field_validator("new_password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _validate_password_length(v)


class SignupRequest(_CamelModel):
    """Register a new account with a password."""

    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name must not be blank")
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _validate_password_length(v)


class PasswordResetRequest(_CamelModel):
    email: EmailStr


class PasswordResetValidateRequest(_CamelModel):
    token: str


class PasswordResetCompleteRequest(_CamelModel):
    token: str
    new_password: str = Field(alias="newPassword")

    @field_validator("new_password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _validate_password_length(v)


class UserInfo(_CamelModel):
    """Schema for user info in auth responses."""

    id: str
    name: str

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class UserResponse(_CamelModel):
    user: UserInfo


class UserMessageResponse(_CamelModel):
    message: str
    user: UserInfo


class MeResponse(_CamelModel):
    id: str
    name: str
    needs_password_setup: bool = Field(alias="needsPasswordSetup")


class CheckSetupResponse(_CamelModel):
    user_id: str = Field(alias="userId")
    needs_setup: bool = Field(alias="needsSetup")


class ResetTokenValidResponse(_CamelModel):
    valid: bool
    user_name: str = Field(alias="userName")


class MessageResponse(_CamelModel):
    """Schema for simple message response."""

    message: str
