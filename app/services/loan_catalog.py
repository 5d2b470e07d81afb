from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.loan import Loan
from app.schemas.loan import LoanProductCreate, LoanProductUpdate


async def list_loans(db: AsyncSession, *, newest_first: bool = False) -> list[Loan]:
    order = Loan.created_at.desc() if newest_first else Loan.loan_name.asc()
    result = await db.execute(select(Loan).order_by(order))
    return list(result.scalars().all())


async def get_loan(db: AsyncSession, loan_id: UUID) -> Loan | None:
    return await db.get(Loan, loan_id)


async def create_loan(db: AsyncSession, payload: LoanProductCreate) -> Loan:
    loan = Loan(**payload.model_dump())
    db.add(loan)
    await db.flush()
    await db.refresh(loan)
    return loan


async def update_loan(db: AsyncSession, loan: Loan, payload: LoanProductUpdate) -> Loan:
    for field, value in payload.model_dump().items():
        setattr(loan, field, value)
    db.add(loan)
    await db.flush()
    await db.refresh(loan)
    return loan


async def delete_loan(db: AsyncSession, loan: Loan) -> None:
    await db.delete(loan)
    await db.flush()
