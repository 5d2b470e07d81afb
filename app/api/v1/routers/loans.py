from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.db.session import get_db
from app.schemas.loan import LoanProductOut
from app.services import loan_catalog

router = APIRouter(prefix="/loans", tags=["loans"])


@router.get("", response_model=list[LoanProductOut], summary="Loan catalog")
async def list_loans(
    current_user=Depends(deps.require_authenticated_user),
    db: AsyncSession = Depends(get_db),
) -> list[LoanProductOut]:
    loans = await loan_catalog.list_loans(db)
    return [LoanProductOut.model_validate(loan) for loan in loans]
