from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class ProfileOut(BaseModel):
    id: UUID
    name: str
    phone: str
    email: EmailStr
    national_id: str | None = None
    tax_id: str | None = None
    occupation: str | None = None
    organization: str | None = None
    # Encrypted fields that are set but could not be decrypted.
    unreadable_fields: list[str] = Field(default_factory=list)


class ProfileUpdate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    phone: str = Field(min_length=5, max_length=32)
    occupation: str | None = Field(default=None, max_length=255)
    organization: str | None = Field(default=None, max_length=255)


class ChangePasswordRequest(BaseModel):
    old_password: str = Field(min_length=1)
    new_password: str = Field(min_length=1)


class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    phone: str
    email: EmailStr
    occupation: str | None = None
    organization: str | None = None
    status: str
    created_at: datetime | None = None


class UserStatusUpdate(BaseModel):
    status: Literal["active", "blocked"]
