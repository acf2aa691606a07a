from __future__ import annotations

import math
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from gs_portfolio.core.security import utcnow
from gs_portfolio.models.gs_file import GSFile
from gs_portfolio.schemas.common import Pagination


class GSFileRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_all(self, page: int = 1, limit: int = 20) -> tuple[list[GSFile], Pagination]:
        """Active files, newest upload first, plus pagination derived from the total count."""
        offset = (page - 1) * limit

        total = (
            await self.db.execute(select(func.count()).select_from(GSFile).where(GSFile.is_active == True))
        ).scalar_one()

        pagination = Pagination(page=page, limit=limit, total=total, total_pages=math.ceil(total / limit))
        # past the last row; also keeps huge offsets out of the SQL bind
        if offset >= total:
            return [], pagination

        query = (
            select(GSFile)
            .where(GSFile.is_active == True)
            .order_by(GSFile.upload_date.desc(), GSFile.id.desc())
            .offset(offset)
            .limit(limit)
        )
        rows = (await self.db.execute(query)).scalars().all()
        return list(rows), pagination

    async def find_by_id(self, file_id: int) -> Optional[GSFile]:
        res = await self.db.execute(select(GSFile).where(GSFile.id == file_id, GSFile.is_active == True))
        return res.scalars().first()

    async def create(
        self,
        *,
        filename: str,
        display_name: str,
        file_size: int,
        mime_type: str,
        file_path: str,
        description: Optional[str] = None,
        thumbnail_path: Optional[str] = None,
    ) -> GSFile:
        now = utcnow()
        gs_file = GSFile(
            filename=filename,
            display_name=display_name,
            description=description or None,
            file_size=file_size,
            file_path=file_path,
            thumbnail_path=thumbnail_path,
            mime_type=mime_type,
            upload_date=now,
            updated_date=now,
            is_active=True,
        )
        self.db.add(gs_file)
        await self.db.commit()
        await self.db.refresh(gs_file)
        return gs_file

    async def update(
        self,
        file_id: int,
        display_name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Optional[GSFile]:
        # Empty values keep the stored ones, same as COALESCE(NULLIF(?, ''), col).
        gs_file = await self.find_by_id(file_id)
        if gs_file is None:
            return None
        if display_name:
            gs_file.display_name = display_name
        if description:
            gs_file.description = description
        gs_file.updated_date = utcnow()
        await self.db.commit()
        await self.db.refresh(gs_file)
        return gs_file

    async def delete(self, file_id: int) -> bool:
        res = await self.db.execute(
            update(GSFile)
            .where(GSFile.id == file_id, GSFile.is_active == True)
            .values(is_active=False, updated_date=utcnow())
        )
        await self.db.commit()
        return res.rowcount > 0
