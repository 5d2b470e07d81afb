from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.db.session import get_db
from app.models import User
from app.schemas.admin import AdminStats, AppSettingsPayload
from app.schemas.auth import MessageResponse, RegisterRequest
from app.schemas.loan import (
    LoanApplicationDetail,
    LoanApplicationStatus,
    LoanApplicationStatusUpdate,
    LoanApplicationSummary,
    LoanProductCreate,
    LoanProductOut,
    LoanProductUpdate,
)
from app.schemas.support import AdminTicketSummary, TicketStatusUpdate
from app.schemas.users import UserStatusUpdate, UserSummary
from app.services import app_settings, loan_applications, loan_catalog
from app.services import support as support_service
from app.services import users as users_service
from app.services.audit import model_snapshot, record_audit_log

router = APIRouter(prefix="/admin", tags=["admin"])


async def _get_user_or_404(db: AsyncSession, user_id: UUID) -> User:
    user = await users_service.get_user(db, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found.")
    return user


async def _get_loan_or_404(db: AsyncSession, loan_id: UUID):
    loan = await loan_catalog.get_loan(db, loan_id)
    if loan is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Loan not found.")
    return loan


@router.get("/stats", response_model=AdminStats)
async def get_stats(
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(get_db),
) -> AdminStats:
    return await loan_applications.collect_stats(db)


# Users


@router.get("/users", response_model=list[UserSummary])
async def list_users(
    search: str | None = Query(default=None, max_length=255),
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(get_db),
) -> list[UserSummary]:
    users = await users_service.list_users(db, role="user", search=search)
    return [UserSummary.model_validate(user) for user in users]


@router.put("/users/{user_id}/status", response_model=MessageResponse)
async def update_user_status(
    user_id: UUID,
    payload: UserStatusUpdate,
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    user = await _get_user_or_404(db, user_id)
    if user.id == current_user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot change your own status.")
    previous = user.status
    user.status = payload.status
    db.add(user)
    record_audit_log(
        db,
        actor_id=current_user.id,
        action="user.status_changed",
        resource_type="user",
        resource_id=str(user.id),
        old_value={"status": previous},
        new_value={"status": payload.status},
    )
    await db.commit()
    return MessageResponse(message=f"User status updated to {payload.status}.")


@router.delete("/users/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: UUID,
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    user = await _get_user_or_404(db, user_id)
    if user.id == current_user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot delete your own account.")
    old_snapshot = model_snapshot(user)
    await users_service.delete_user_cascade(db, user)
    record_audit_log(
        db,
        actor_id=current_user.id,
        action="user.deleted",
        resource_type="user",
        resource_id=str(user_id),
        old_value=old_snapshot,
        new_value=None,
    )
    await db.commit()
    return MessageResponse(message="User and all associated data deleted.")


@router.get("/admins", response_model=list[UserSummary])
async def list_admins(
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(get_db),
) -> list[UserSummary]:
    admins = await users_service.list_users(db, role="admin")
    return [UserSummary.model_validate(admin) for admin in admins]


@router.post("/add-admin", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def add_admin(
    payload: RegisterRequest,
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    admin = await users_service.register_user(db, payload, role="admin")
    record_audit_log(
        db,
        actor_id=current_user.id,
        action="user.admin_created",
        resource_type="user",
        resource_id=str(admin.id),
        old_value=None,
        new_value=model_snapshot(admin),
    )
    await db.commit()
    return MessageResponse(message="New admin added successfully.")


# Loan products


@router.get("/loans", response_model=list[LoanProductOut])
async def list_loans(
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(get_db),
) -> list[LoanProductOut]:
    loans = await loan_catalog.list_loans(db, newest_first=True)
    return [LoanProductOut.model_validate(loan) for loan in loans]


@router.post("/add-loan", response_model=LoanProductOut, status_code=status.HTTP_201_CREATED)
async def add_loan(
    payload: LoanProductCreate,
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(get_db),
) -> LoanProductOut:
    loan = await loan_catalog.create_loan(db, payload)
    record_audit_log(
        db,
        actor_id=current_user.id,
        action="loan.created",
        resource_type="loan",
        resource_id=str(loan.id),
        old_value=None,
        new_value=model_snapshot(loan),
    )
    await db.commit()
    return LoanProductOut.model_validate(loan)


@router.get("/loans/{loan_id}", response_model=LoanProductOut)
async def get_loan(
    loan_id: UUID,
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(get_db),
) -> LoanProductOut:
    loan = await _get_loan_or_404(db, loan_id)
    return LoanProductOut.model_validate(loan)


@router.put("/loans/{loan_id}", response_model=LoanProductOut)
async def update_loan(
    loan_id: UUID,
    payload: LoanProductUpdate,
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(get_db),
) -> LoanProductOut:
    loan = await _get_loan_or_404(db, loan_id)
    old_snapshot = model_snapshot(loan)
    loan = await loan_catalog.update_loan(db, loan, payload)
    record_audit_log(
        db,
        actor_id=current_user.id,
        action="loan.updated",
        resource_type="loan",
        resource_id=str(loan.id),
        old_value=old_snapshot,
        new_value=model_snapshot(loan),
    )
    await db.commit()
    return LoanProductOut.model_validate(loan)


@router.delete("/loans/{loan_id}", response_model=MessageResponse)
async def delete_loan(
    loan_id: UUID,
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    loan = await _get_loan_or_404(db, loan_id)
    old_snapshot = model_snapshot(loan)
    await loan_catalog.delete_loan(db, loan)
    record_audit_log(
        db,
        actor_id=current_user.id,
        action="loan.deleted",
        resource_type="loan",
        resource_id=str(loan_id),
        old_value=old_snapshot,
        new_value=None,
    )
    await db.commit()
    return MessageResponse(message="Loan deleted successfully.")


# Applications


@router.get("/applications", response_model=list[LoanApplicationSummary])
async def list_applications(
    status_filter: LoanApplicationStatus | None = Query(default=None, alias="status"),
    search: str | None = Query(default=None, max_length=255),
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(get_db),
) -> list[LoanApplicationSummary]:
    return await loan_applications.list_for_admin(db, status_filter=status_filter, search=search)


@router.get("/applications/{application_id}", response_model=LoanApplicationDetail)
async def get_application(
    application_id: UUID,
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(get_db),
) -> LoanApplicationDetail:
    return await loan_applications.get_detail_for_admin(db, application_id)


@router.put("/applications/{application_id}", response_model=MessageResponse)
async def update_application_status(
    application_id: UUID,
    payload: LoanApplicationStatusUpdate,
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    application, previous = await loan_applications.update_status(db, application_id, payload)
    record_audit_log(
        db,
        actor_id=current_user.id,
        action="loan_application.status_changed",
        resource_type="loan_application",
        resource_id=str(application.id),
        old_value=previous,
        new_value={"status": application.status, "note": application.note},
    )
    await db.commit()
    return MessageResponse(message="Application status updated.")


# Support tickets


@router.get("/tickets", response_model=list[AdminTicketSummary])
async def list_tickets(
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(get_db),
) -> list[AdminTicketSummary]:
    return await support_service.list_for_admin(db)


@router.put("/tickets/{ticket_id}/status", response_model=MessageResponse)
async def update_ticket_status(
    ticket_id: UUID,
    payload: TicketStatusUpdate,
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    ticket, previous = await support_service.set_status(db, ticket_id, payload.status)
    record_audit_log(
        db,
        actor_id=current_user.id,
        action="support_ticket.status_changed",
        resource_type="support_ticket",
        resource_id=str(ticket.id),
        old_value={"status": previous},
        new_value={"status": ticket.status},
    )
    await db.commit()
    return MessageResponse(message=f"Ticket marked as {payload.status}.")


# Site settings


@router.get("/settings", response_model=AppSettingsPayload)
async def get_settings(
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(get_db),
) -> AppSettingsPayload:
    return AppSettingsPayload(settings=await app_settings.get_all(db))


@router.put("/settings", response_model=MessageResponse)
async def update_settings(
    payload: AppSettingsPayload,
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    previous = await app_settings.get_all(db)
    await app_settings.upsert_many(db, payload.settings)
    record_audit_log(
        db,
        actor_id=current_user.id,
        action="settings.updated",
        resource_type="app_settings",
        resource_id="site",
        old_value={key: previous.get(key) for key in payload.settings},
        new_value=payload.settings,
    )
    await db.commit()
    return MessageResponse(message="Settings updated successfully.")
