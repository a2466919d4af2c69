"""Schemas for the user profile endpoints."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class UserUpdate(BaseModel):
    """Profile fields a user may change.

    ``partnerId`` is accepted by the parser only so that the endpoint can reject
    it explicitly; partner links are never changed through this path.
    """

    name: str | None = Field(None, min_length=1, max_length=100)
    email: EmailStr | None = None
    partner_id: str | None = Field(None, alias="partnerId")

    model_config = ConfigDict(populate_by_name=True)


class UserProfile(BaseModel):
    id: str
    name: str
    email: str | None = None
    partner_id: str | None = Field(None, alias="partnerId")
    needs_password_setup: bool = Field(alias="needsPasswordSetup")

    model_config = ConfigDict(populate_by_name=True)


class PartnerInfo(BaseModel):
    id: str
    name: str

    model_config = ConfigDict(from_attributes=True)
