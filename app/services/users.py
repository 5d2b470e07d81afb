from __future__ import annotations

import logging
from functools import lru_cache
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import get_password_hash, pwd_context, verify_password
from app.models.loan_application import LoanApplication
from app.models.support_ticket import SupportTicket, TicketReply
from app.models.user import User
from app.schemas.auth import RegisterRequest
from app.schemas.users import ChangePasswordRequest, ProfileOut, ProfileUpdate
from app.services import pii

logger = logging.getLogger(__name__)


# Unknown accounts still pay for one bcrypt verification.
@lru_cache(maxsize=1)
def _placeholder_hash() -> str:
    return pwd_context.hash("placeholder-password")


def _hash_or_400(password: str) -> str:
    try:
        return get_password_hash(password)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


async def find_conflicting_user(
    db: AsyncSession,
    *,
    email: str,
    phone: str,
    exclude_id: UUID | None = None,
) -> User | None:
    stmt = select(User).where(or_(User.email == email, User.phone == phone))
    if exclude_id is not None:
        stmt = stmt.where(User.id != exclude_id)
    result = await db.execute(stmt.limit(1))
    return result.scalars().first()


async def register_user(db: AsyncSession, payload: RegisterRequest, *, role: str = "user") -> User:
    if await find_conflicting_user(db, email=payload.email, phone=payload.phone):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email or phone number already in use.")

    user = User(
        name=payload.name,
        phone=payload.phone,
        email=payload.email,
        national_id_encrypted=pii.seal(payload.national_id),
        tax_id_encrypted=pii.seal(payload.tax_id),
        occupation=payload.occupation,
        organization=payload.organization,
        hashed_password=_hash_or_400(payload.password),
        role=role,
        status="active",
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)
    logger.info("Registered %s account id=%s", role, user.id)
    return user


async def authenticate(db: AsyncSession, *, email_or_phone: str, password: str, role: str) -> User | None:
    stmt = select(User).where(
        or_(User.email == email_or_phone, User.phone == email_or_phone),
        User.role == role,
    )
    user = (await db.execute(stmt)).scalar_one_or_none()
    if user is None:
        verify_password(password, _placeholder_hash())
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


def build_profile(user: User) -> ProfileOut:
    values, unreadable = pii.reveal_fields(
        {
            "national_id": user.national_id_encrypted,
            "tax_id": user.tax_id_encrypted,
        }
    )
    return ProfileOut(
        id=user.id,
        name=user.name,
        phone=user.phone,
        email=user.email,
        occupation=user.occupation,
        organization=user.organization,
        unreadable_fields=unreadable,
        **values,
    )


async def update_profile(db: AsyncSession, user: User, payload: ProfileUpdate) -> User:
    conflict = await find_conflicting_user(db, email=payload.email, phone=payload.phone, exclude_id=user.id)
    if conflict:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email or phone number already in use by another account.",
        )
    user.name = payload.name
    user.email = payload.email
    user.phone = payload.phone
    user.occupation = payload.occupation
    user.organization = payload.organization
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def change_password(db: AsyncSession, user: User, payload: ChangePasswordRequest) -> None:
    if not verify_password(payload.old_password, user.hashed_password):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Incorrect old password.")
    user.hashed_password = _hash_or_400(payload.new_password)
    db.add(user)
    await db.commit()


async def list_users(db: AsyncSession, *, role: str = "user", search: str | None = None) -> list[User]:
    stmt = select(User).where(User.role == role)
    if search:
        pattern = f"%{search.strip()}%"
        stmt = stmt.where(
            or_(User.name.ilike(pattern), User.email.ilike(pattern), User.phone.ilike(pattern))
        )
    stmt = stmt.order_by(User.created_at.desc())
    return list((await db.execute(stmt)).scalars().all())


async def get_user(db: AsyncSession, user_id: UUID) -> User | None:
    return await db.get(User, user_id)


async def delete_user_cascade(db: AsyncSession, user: User) -> None:
    """Remove a user along with their applications, tickets and replies.

    Runs inside the caller's transaction; the caller commits.
    """
    ticket_ids = select(SupportTicket.id).where(SupportTicket.user_id == user.id)
    try:
        await db.execute(delete(TicketReply).where(TicketReply.ticket_id.in_(ticket_ids)))
        await db.execute(delete(TicketReply).where(TicketReply.user_id == user.id))
        await db.execute(delete(SupportTicket).where(SupportTicket.user_id == user.id))
        await db.execute(delete(LoanApplication).where(LoanApplication.user_id == user.id))
        await db.execute(delete(User).where(User.id == user.id))
    except Exception:
        await db.rollback()
        raise
