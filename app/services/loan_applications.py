from __future__ import annotations

import logging
from decimal import Decimal
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import case, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.loan import Loan
from app.models.loan_application import LoanApplication
from app.models.user import User
from app.schemas.admin import AdminStats
from app.schemas.loan import (
    LoanApplicationCreate,
    LoanApplicationDetail,
    LoanApplicationStatus,
    LoanApplicationStatusUpdate,
    LoanApplicationSummary,
    MyLoanApplicationOut,
    RepaymentScheduleEntry,
    RepaymentScheduleResponse,
)
from app.services import amortization, pii
from app.services.loan_catalog import get_loan

logger = logging.getLogger(__name__)


async def submit_application(
    db: AsyncSession,
    user: User,
    payload: LoanApplicationCreate,
) -> LoanApplication:
    loan = await get_loan(db, payload.loan_id)
    if loan is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Loan not found")
    amount = payload.amount_required
    if amount < Decimal(loan.min_amount) or amount > Decimal(loan.max_amount):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Amount must be between {loan.min_amount} and {loan.max_amount}",
        )

    application = LoanApplication(
        user_id=user.id,
        loan_id=loan.id,
        amount_required=amount,
        account_holder_name=payload.account_holder_name,
        account_number_encrypted=pii.seal(payload.account_number),
        routing_code_encrypted=pii.seal(payload.routing_code),
        status=LoanApplicationStatus.PENDING.value,
    )
    db.add(application)
    await db.commit()
    await db.refresh(application)
    logger.info("Loan application submitted id=%s loan_id=%s", application.id, loan.id)
    return application


async def list_for_user(db: AsyncSession, user: User) -> list[MyLoanApplicationOut]:
    stmt = (
        select(LoanApplication, Loan.loan_name)
        .join(Loan, Loan.id == LoanApplication.loan_id)
        .where(LoanApplication.user_id == user.id)
        .order_by(LoanApplication.created_at.desc())
    )
    rows = (await db.execute(stmt)).all()
    return [
        MyLoanApplicationOut(
            id=application.id,
            loan_name=loan_name,
            amount_required=application.amount_required,
            status=application.status,
            note=application.note,
            created_at=application.created_at,
            updated_at=application.updated_at,
        )
        for application, loan_name in rows
    ]


async def get_owned_with_loan(
    db: AsyncSession,
    user: User,
    application_id: UUID,
) -> tuple[LoanApplication, Loan]:
    stmt = (
        select(LoanApplication, Loan)
        .join(Loan, Loan.id == LoanApplication.loan_id)
        .where(LoanApplication.id == application_id, LoanApplication.user_id == user.id)
    )
    row = (await db.execute(stmt)).first()
    if row is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Application not found or access denied.",
        )
    return row[0], row[1]


def build_repayment_schedule(application: LoanApplication, loan: Loan) -> RepaymentScheduleResponse:
    if application.status != LoanApplicationStatus.ACCEPTED_DISBURSED.value:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Repayment schedule is only available for disbursed loans.",
        )
    schedule = amortization.compute_schedule(
        application.amount_required,
        loan.interest_rate,
        int(loan.tenure_months),
    )
    return RepaymentScheduleResponse(
        application_id=application.id,
        principal=schedule.principal,
        annual_rate_percent=schedule.annual_rate_percent,
        tenure_months=schedule.tenure_months,
        emi=schedule.installment_amount,
        total_payment=schedule.total_payment,
        total_interest=schedule.total_interest,
        schedule=[
            RepaymentScheduleEntry(
                month=entry.month_index,
                principal_payment=entry.principal_component,
                interest_payment=entry.interest_component,
                installment=entry.installment_amount,
                balance=entry.remaining_balance,
            )
            for entry in schedule.entries
        ],
    )


async def list_for_admin(
    db: AsyncSession,
    *,
    status_filter: LoanApplicationStatus | None = None,
    search: str | None = None,
) -> list[LoanApplicationSummary]:
    stmt = (
        select(LoanApplication, User.name, User.email, Loan.loan_name)
        .join(User, User.id == LoanApplication.user_id)
        .join(Loan, Loan.id == LoanApplication.loan_id)
    )
    if status_filter is not None:
        stmt = stmt.where(LoanApplication.status == status_filter.value)
    if search:
        pattern = f"%{search.strip()}%"
        stmt = stmt.where(
            or_(User.name.ilike(pattern), User.email.ilike(pattern), Loan.loan_name.ilike(pattern))
        )
    pending_first = case((LoanApplication.status == LoanApplicationStatus.PENDING.value, 0), else_=1)
    stmt = stmt.order_by(pending_first, LoanApplication.created_at.desc())
    rows = (await db.execute(stmt)).all()
    return [
        LoanApplicationSummary(
            id=application.id,
            amount_required=application.amount_required,
            status=application.status,
            note=application.note,
            created_at=application.created_at,
            user_name=user_name,
            user_email=user_email,
            loan_name=loan_name,
        )
        for application, user_name, user_email, loan_name in rows
    ]


async def get_detail_for_admin(db: AsyncSession, application_id: UUID) -> LoanApplicationDetail:
    stmt = (
        select(LoanApplication, User, Loan.loan_name)
        .join(User, User.id == LoanApplication.user_id)
        .join(Loan, Loan.id == LoanApplication.loan_id)
        .where(LoanApplication.id == application_id)
    )
    row = (await db.execute(stmt)).first()
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Application not found.")
    application, applicant, loan_name = row
    values, unreadable = pii.reveal_fields(
        {
            "national_id": applicant.national_id_encrypted,
            "tax_id": applicant.tax_id_encrypted,
            "account_number": application.account_number_encrypted,
            "routing_code": application.routing_code_encrypted,
        }
    )
    return LoanApplicationDetail(
        id=application.id,
        user_id=application.user_id,
        loan_id=application.loan_id,
        loan_name=loan_name,
        amount_required=application.amount_required,
        status=application.status,
        note=application.note,
        created_at=application.created_at,
        updated_at=application.updated_at,
        name=applicant.name,
        email=applicant.email,
        phone=applicant.phone,
        account_holder_name=application.account_holder_name,
        unreadable_fields=unreadable,
        **values,
    )


async def update_status(
    db: AsyncSession,
    application_id: UUID,
    payload: LoanApplicationStatusUpdate,
) -> tuple[LoanApplication, dict]:
    application = await db.get(LoanApplication, application_id)
    if application is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Application not found.")
    previous = {"status": application.status, "note": application.note}
    application.status = payload.status.value
    application.note = payload.note or None
    db.add(application)
    return application, previous


async def collect_stats(db: AsyncSession) -> AdminStats:
    def _count_status(value: LoanApplicationStatus):
        return func.count(case((LoanApplication.status == value.value, 1)))

    counts_stmt = select(
        select(func.count(User.id)).where(User.role == "user").scalar_subquery().label("total_users"),
        select(func.count(Loan.id)).scalar_subquery().label("total_loan_types"),
    )
    counts = (await db.execute(counts_stmt)).mappings().one()

    app_stmt = select(
        func.count(LoanApplication.id).label("total_applications"),
        func.coalesce(func.sum(LoanApplication.amount_required), 0).label("total_amount_requested"),
        _count_status(LoanApplicationStatus.PENDING).label("pending"),
        _count_status(LoanApplicationStatus.PROCESSING).label("processing"),
        _count_status(LoanApplicationStatus.ACCEPTED_NOT_DISBURSED).label("accepted"),
        _count_status(LoanApplicationStatus.ACCEPTED_DISBURSED).label("disbursed"),
        _count_status(LoanApplicationStatus.REJECTED).label("rejected"),
    )
    app_counts = (await db.execute(app_stmt)).mappings().one()
    return AdminStats(**dict(counts), **dict(app_counts))
