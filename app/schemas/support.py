from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class TicketCreate(BaseModel):
    subject: str = Field(min_length=1, max_length=255)
    message: str = Field(min_length=1)


class TicketReplyCreate(BaseModel):
    message: str = Field(min_length=1)


class TicketStatusUpdate(BaseModel):
    status: Literal["open", "closed"]


class TicketSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    subject: str
    status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class AdminTicketSummary(TicketSummary):
    user_name: str


class TicketOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    subject: str
    message: str
    status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class TicketReplyOut(BaseModel):
    message: str
    created_at: datetime | None = None
    replier_name: str
    replier_role: str


class TicketThread(BaseModel):
    ticket: TicketOut
    replies: list[TicketReplyOut]
