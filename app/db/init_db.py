import asyncio
import logging

from sqlalchemy import select

from app.core.security import get_password_hash
from app.core.settings import settings
from app.db.base import Base
from app.db.session import AsyncSessionLocal, engine
from app.models import User

logger = logging.getLogger(__name__)


async def create_tables() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def seed_admin() -> None:
    """Create the bootstrap admin account when SEED_ADMIN_PASSWORD is set."""
    if not settings.seed_admin_password:
        logger.info("SEED_ADMIN_PASSWORD not set; skipping admin seed")
        return
    async with AsyncSessionLocal() as session:
        stmt = select(User).where(User.email == settings.seed_admin_email)
        user = (await session.execute(stmt)).scalar_one_or_none()
        if user:
            logger.info("Seed admin already exists")
            return
        session.add(
            User(
                name=settings.seed_admin_name,
                email=settings.seed_admin_email,
                phone=settings.seed_admin_phone,
                hashed_password=get_password_hash(settings.seed_admin_password),
                role="admin",
                status="active",
            )
        )
        await session.commit()
        logger.info("Seed admin created email=%s", settings.seed_admin_email)


async def init_db() -> None:
    await create_tables()
    await seed_admin()


if __name__ == "__main__":
    asyncio.run(init_db())
