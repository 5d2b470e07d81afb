from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.app_setting import AppSetting


async def get_all(db: AsyncSession) -> dict[str, str | None]:
    result = await db.execute(select(AppSetting).order_by(AppSetting.setting_key))
    return {row.setting_key: row.setting_value for row in result.scalars().all()}


async def upsert_many(db: AsyncSession, values: dict[str, str | None]) -> None:
    """Insert or overwrite every key; the caller commits."""
    try:
        for key, value in values.items():
            stmt = insert(AppSetting).values(setting_key=key, setting_value=value)
            stmt = stmt.on_conflict_do_update(
                index_elements=[AppSetting.setting_key],
                set_={"setting_value": stmt.excluded.setting_value},
            )
            await db.execute(stmt)
        await db.flush()
    except Exception:
        await db.rollback()
        raise
