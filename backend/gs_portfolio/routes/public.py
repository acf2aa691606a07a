from __future__ import annotations

import logging
import urllib.parse

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from gs_portfolio.core.config import settings
from gs_portfolio.core.database import get_db
from gs_portfolio.core.storage import BlobStorage, get_storage
from gs_portfolio.repositories import GSFileRepository
from gs_portfolio.schemas import GSFileOut, GSFilePage, envelope

logger = logging.getLogger("gs-portfolio")

router = APIRouter(prefix="/gs-files", tags=["GS Files"])

FILE_NOT_FOUND = "File not found"


def _rfc5987_filename(value: str) -> str:
    # Build a robust Content-Disposition filename / filename* pair
    quoted = urllib.parse.quote(value, safe="")
    fallback = value.encode("ascii", "ignore").decode("ascii").replace('"', "")
    return f'filename="{fallback}"; filename*=UTF-8\'\'{quoted}'


async def _get_active_file(db: AsyncSession, file_id: int):
    gs_file = await GSFileRepository(db).find_by_id(file_id)
    if gs_file is None:
        raise HTTPException(status_code=404, detail=FILE_NOT_FOUND)
    return gs_file


@router.get("")
async def list_gs_files(
    page: int = Query(1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE),
    db: AsyncSession = Depends(get_db),
):
    if page < 1 or limit < 1 or limit > settings.MAX_PAGE_SIZE:
        raise HTTPException(
            status_code=400,
            detail=f"page must be at least 1 and limit must be between 1 and {settings.MAX_PAGE_SIZE}",
        )

    rows, pagination = await GSFileRepository(db).find_all(page=page, limit=limit)
    result = GSFilePage(data=[GSFileOut.model_validate(r) for r in rows], pagination=pagination)
    return envelope(result.model_dump(mode="json", by_alias=True))


@router.get("/{file_id}")
async def get_gs_file(file_id: int, db: AsyncSession = Depends(get_db)):
    gs_file = await _get_active_file(db, file_id)
    return envelope(GSFileOut.model_validate(gs_file).model_dump(mode="json"))


@router.get("/{file_id}/file")
async def download_gs_file(
    file_id: int,
    db: AsyncSession = Depends(get_db),
    storage: BlobStorage = Depends(get_storage),
):
    gs_file = await _get_active_file(db, file_id)

    obj = await storage.get_file(gs_file.file_path)
    if obj is None:
        logger.warning("Blob missing for file %s at %s", gs_file.id, gs_file.file_path)
        raise HTTPException(status_code=404, detail="File data not found")

    headers = {
        "Content-Disposition": f"attachment; {_rfc5987_filename(gs_file.filename)}",
        "Content-Length": str(gs_file.file_size),
    }
    return StreamingResponse(obj.iter_chunks(), media_type=gs_file.mime_type, headers=headers)


@router.get("/{file_id}/thumbnail")
async def get_gs_file_thumbnail(
    file_id: int,
    db: AsyncSession = Depends(get_db),
    storage: BlobStorage = Depends(get_storage),
):
    gs_file = await _get_active_file(db, file_id)
    if not gs_file.thumbnail_path:
        raise HTTPException(status_code=404, detail="No thumbnail has been set")

    obj = await storage.get_file(gs_file.thumbnail_path)
    if obj is None:
        raise HTTPException(status_code=404, detail="Thumbnail data not found")

    headers = {"Cache-Control": "public, max-age=3600"}
    if obj.size:
        headers["Content-Length"] = str(obj.size)
    return StreamingResponse(obj.iter_chunks(), media_type=obj.content_type or "image/jpeg", headers=headers)
