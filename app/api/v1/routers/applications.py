from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.db.session import get_db
from app.models import User
from app.schemas.auth import MessageResponse
from app.schemas.loan import LoanApplicationCreate, MyLoanApplicationOut, RepaymentScheduleResponse
from app.services import loan_applications

router = APIRouter(prefix="/applications", tags=["applications"])


@router.get("/my-applications", response_model=list[MyLoanApplicationOut])
async def list_my_applications(
    current_user: User = Depends(deps.require_authenticated_user),
    db: AsyncSession = Depends(get_db),
) -> list[MyLoanApplicationOut]:
    return await loan_applications.list_for_user(db, current_user)


@router.post("/apply", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def apply_for_loan(
    payload: LoanApplicationCreate,
    current_user: User = Depends(deps.require_authenticated_user),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    await loan_applications.submit_application(db, current_user, payload)
    return MessageResponse(message="Application submitted successfully!")


@router.get(
    "/my-applications/{application_id}/schedule",
    response_model=RepaymentScheduleResponse,
    summary="Repayment schedule of a disbursed loan",
)
async def get_repayment_schedule(
    application_id: UUID,
    current_user: User = Depends(deps.require_authenticated_user),
    db: AsyncSession = Depends(get_db),
) -> RepaymentScheduleResponse:
    application, loan = await loan_applications.get_owned_with_loan(db, current_user, application_id)
    return loan_applications.build_repayment_schedule(application, loan)
