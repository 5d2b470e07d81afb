from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.db.session import get_db
from app.models import User
from app.schemas.auth import MessageResponse
from app.schemas.support import TicketCreate, TicketReplyCreate, TicketSummary, TicketThread
from app.services import support as support_service

router = APIRouter(prefix="/support", tags=["support"])


@router.post("/create", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def create_ticket(
    payload: TicketCreate,
    current_user: User = Depends(deps.require_authenticated_user),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    await support_service.create_ticket(db, current_user, payload)
    return MessageResponse(message="Support ticket created successfully.")


@router.get("/my-tickets", response_model=list[TicketSummary])
async def list_my_tickets(
    current_user: User = Depends(deps.require_authenticated_user),
    db: AsyncSession = Depends(get_db),
) -> list[TicketSummary]:
    tickets = await support_service.list_for_user(db, current_user)
    return [TicketSummary.model_validate(ticket) for ticket in tickets]


@router.get("/tickets/{ticket_id}", response_model=TicketThread)
async def get_ticket(
    ticket_id: UUID,
    current_user: User = Depends(deps.require_authenticated_user),
    db: AsyncSession = Depends(get_db),
) -> TicketThread:
    return await support_service.get_thread(db, current_user, ticket_id)


@router.post("/tickets/{ticket_id}/reply", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def reply_to_ticket(
    ticket_id: UUID,
    payload: TicketReplyCreate,
    current_user: User = Depends(deps.require_authenticated_user),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    await support_service.add_reply(db, current_user, ticket_id, payload.message)
    return MessageResponse(message="Reply posted.")
