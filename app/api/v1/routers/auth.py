from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.limiter import limiter, login_limit
from app.core.security import create_access_token
from app.db.session import get_db
from app.models import User
from app.schemas.auth import LoginRequest, MessageResponse, RegisterRequest, TokenResponse, UserOut
from app.services import users as users_service

router = APIRouter(prefix="/auth", tags=["auth"])


def _issue_token(user: User) -> TokenResponse:
    token = create_access_token(str(user.id), role=user.role)
    return TokenResponse(access_token=token, user=UserOut.model_validate(user))


async def _login(db: AsyncSession, credentials: LoginRequest, *, role: str, failure_detail: str) -> TokenResponse:
    user = await users_service.authenticate(
        db,
        email_or_phone=credentials.email_or_phone,
        password=credentials.password,
        role=role,
    )
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=failure_detail)
    if user.is_blocked:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is blocked")
    return _issue_token(user)


@router.post("/register", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, db: AsyncSession = Depends(get_db)) -> MessageResponse:
    await users_service.register_user(db, payload, role="user")
    await db.commit()
    return MessageResponse(message="User registered successfully!")


@router.post("/login", response_model=TokenResponse)
@limiter.limit(login_limit)
async def login(
    credentials: LoginRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> TokenResponse:
    return await _login(db, credentials, role="user", failure_detail="Invalid credentials.")


@router.post("/admin/login", response_model=TokenResponse)
@limiter.limit(login_limit)
async def admin_login(
    credentials: LoginRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> TokenResponse:
    return await _login(db, credentials, role="admin", failure_detail="Invalid credentials or not an admin.")
