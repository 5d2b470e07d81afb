from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class RegisterRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    phone: str = Field(min_length=5, max_length=32)
    email: EmailStr
    national_id: str = Field(min_length=1, max_length=64)
    tax_id: str = Field(min_length=1, max_length=64)
    occupation: str | None = Field(default=None, max_length=255)
    organization: str | None = Field(default=None, max_length=255)
    password: str = Field(min_length=1)


class LoginRequest(BaseModel):
    email_or_phone: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: EmailStr
    role: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut


class MessageResponse(BaseModel):
    message: str
