from fastapi import APIRouter

from app.api.v1.routers import (
    admin,
    applications,
    auth,
    health,
    loans,
    support,
    users,
)

api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(loans.router)
api_router.include_router(applications.router)
api_router.include_router(support.router)
api_router.include_router(admin.router)

__all__ = ["api_router"]
