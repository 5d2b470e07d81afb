from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.db.session import get_db
from app.models import User
from app.schemas.auth import MessageResponse
from app.schemas.users import ChangePasswordRequest, ProfileOut, ProfileUpdate
from app.services import users as users_service

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/profile", response_model=ProfileOut, summary="Current user's profile with decrypted PII")
async def read_profile(current_user: User = Depends(deps.require_authenticated_user)) -> ProfileOut:
    return users_service.build_profile(current_user)


@router.put("/profile", response_model=MessageResponse)
async def update_profile(
    payload: ProfileUpdate,
    current_user: User = Depends(deps.require_authenticated_user),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    await users_service.update_profile(db, current_user, payload)
    return MessageResponse(message="Profile updated successfully.")


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    payload: ChangePasswordRequest,
    current_user: User = Depends(deps.require_authenticated_user),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    await users_service.change_password(db, current_user, payload)
    return MessageResponse(message="Password changed successfully.")
