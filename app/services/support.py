from __future__ import annotations

from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.support_ticket import SupportTicket, TicketReply
from app.models.user import User
from app.schemas.support import (
    AdminTicketSummary,
    TicketCreate,
    TicketOut,
    TicketReplyOut,
    TicketThread,
)


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Ticket not found or access denied.")


async def create_ticket(db: AsyncSession, user: User, payload: TicketCreate) -> SupportTicket:
    ticket = SupportTicket(user_id=user.id, subject=payload.subject, message=payload.message, status="open")
    db.add(ticket)
    await db.commit()
    await db.refresh(ticket)
    return ticket


async def list_for_user(db: AsyncSession, user: User) -> list[SupportTicket]:
    stmt = (
        select(SupportTicket)
        .where(SupportTicket.user_id == user.id)
        .order_by(SupportTicket.updated_at.desc())
    )
    return list((await db.execute(stmt)).scalars().all())


async def get_visible_ticket(db: AsyncSession, user: User, ticket_id: UUID) -> SupportTicket:
    """Admins see every ticket; borrowers only their own."""
    stmt = select(SupportTicket).where(SupportTicket.id == ticket_id)
    if not user.is_admin:
        stmt = stmt.where(SupportTicket.user_id == user.id)
    ticket = (await db.execute(stmt)).scalar_one_or_none()
    if ticket is None:
        raise _not_found()
    return ticket


async def get_thread(db: AsyncSession, user: User, ticket_id: UUID) -> TicketThread:
    ticket = await get_visible_ticket(db, user, ticket_id)
    stmt = (
        select(TicketReply.message, TicketReply.created_at, User.name, User.role)
        .join(User, User.id == TicketReply.user_id)
        .where(TicketReply.ticket_id == ticket.id)
        .order_by(TicketReply.created_at.asc())
    )
    rows = (await db.execute(stmt)).all()
    replies = [
        TicketReplyOut(message=message, created_at=created_at, replier_name=name, replier_role=role)
        for message, created_at, name, role in rows
    ]
    return TicketThread(ticket=TicketOut.model_validate(ticket), replies=replies)


async def add_reply(db: AsyncSession, user: User, ticket_id: UUID, message: str) -> TicketReply:
    ticket = await get_visible_ticket(db, user, ticket_id)
    reply = TicketReply(ticket_id=ticket.id, user_id=user.id, message=message)
    db.add(reply)
    # A new reply reopens the conversation.
    ticket.status = "open"
    ticket.updated_at = func.now()
    db.add(ticket)
    await db.commit()
    return reply


async def list_for_admin(db: AsyncSession) -> list[AdminTicketSummary]:
    open_first = case((SupportTicket.status == "open", 0), else_=1)
    stmt = (
        select(SupportTicket, User.name)
        .join(User, User.id == SupportTicket.user_id)
        .order_by(open_first, SupportTicket.updated_at.desc())
    )
    rows = (await db.execute(stmt)).all()
    return [
        AdminTicketSummary(
            id=ticket.id,
            subject=ticket.subject,
            status=ticket.status,
            created_at=ticket.created_at,
            updated_at=ticket.updated_at,
            user_name=user_name,
        )
        for ticket, user_name in rows
    ]


async def set_status(db: AsyncSession, ticket_id: UUID, new_status: str) -> tuple[SupportTicket, str]:
    ticket = await db.get(SupportTicket, ticket_id)
    if ticket is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Ticket not found.")
    previous = ticket.status
    ticket.status = new_status
    db.add(ticket)
    return ticket, previous
