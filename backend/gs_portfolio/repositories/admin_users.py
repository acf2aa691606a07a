from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from gs_portfolio.core.security import utcnow
from gs_portfolio.models.admin_user import AdminUser


class AdminUserRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_username(self, username: str) -> Optional[AdminUser]:
        """Active user with its password hash, for credential checks."""
        res = await self.db.execute(
            select(AdminUser).where(AdminUser.username == username, AdminUser.is_active == True)
        )
        return res.scalars().first()

    async def find_by_id(self, user_id: int) -> Optional[AdminUser]:
        """Active user; callers serialise it through AdminUserOut, which omits password_hash."""
        res = await self.db.execute(
            select(AdminUser).where(AdminUser.id == user_id, AdminUser.is_active == True)
        )
        return res.scalars().first()

    async def update_last_login(self, user_id: int) -> None:
        await self.db.execute(update(AdminUser).where(AdminUser.id == user_id).values(last_login=utcnow()))
        await self.db.commit()
