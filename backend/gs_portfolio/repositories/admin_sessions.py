from datetime import datetime
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from gs_portfolio.core.security import utcnow
from gs_portfolio.models.admin_session import AdminSession


class AdminSessionRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, user_id: int, session_token: str, expires_at: datetime) -> AdminSession:
        session = AdminSession(user_id=user_id, session_token=session_token, expires_at=expires_at)
        self.db.add(session)
        await self.db.commit()
        await self.db.refresh(session)
        return session

    async def find_by_token(self, session_token: str, now: Optional[datetime] = None) -> Optional[AdminSession]:
        res = await self.db.execute(
            select(AdminSession).where(
                AdminSession.session_token == session_token,
                AdminSession.expires_at > (now or utcnow()),
            )
        )
        return res.scalars().first()

    async def delete(self, session_token: str) -> bool:
        res = await self.db.execute(delete(AdminSession).where(AdminSession.session_token == session_token))
        await self.db.commit()
        return res.rowcount > 0

    async def delete_expired(self, now: Optional[datetime] = None) -> int:
        res = await self.db.execute(delete(AdminSession).where(AdminSession.expires_at <= (now or utcnow())))
        await self.db.commit()
        return res.rowcount
