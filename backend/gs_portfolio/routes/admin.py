from __future__ import annotations

import logging
from typing import Callable, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from gs_portfolio.core.config import settings
from gs_portfolio.core.database import get_db
from gs_portfolio.core.security import (
    clear_cookie,
    create_secure_cookie,
    generate_jwt,
    generate_session_token,
    get_session_expiry,
    verify_password,
)
from gs_portfolio.core.storage import BlobStorage, get_storage
from gs_portfolio.dependencies.auth import AdminContext, get_current_admin
from gs_portfolio.monitoring.setup import report_delete, report_login, report_upload
from gs_portfolio.repositories import AdminSessionRepository, AdminUserRepository, GSFileRepository
from gs_portfolio.schemas import AdminUserOut, GSFileOut, GSFileUpdate, LoginRequest, envelope
from gs_portfolio.utils.validators import (
    FileValidationError,
    generate_file_path,
    validate_gs_file,
    validate_thumbnail,
)

logger = logging.getLogger("gs-portfolio")

router = APIRouter(prefix="/admin", tags=["Admin"])

SESSION_MAX_AGE = settings.SESSION_TTL_HOURS * 3600


async def _read_checked(upload: UploadFile, limit: int, check: Callable[[int], None]) -> bytes:
    """Run ``check`` on the declared size before reading, then on what was read.

    At most ``limit + 1`` bytes are buffered, enough for ``check`` to see an oversized body.
    """
    if upload.size is not None:
        check(upload.size)
    data = await upload.read(limit + 1)
    check(len(data))
    return data


@router.post("/login")
async def login(credentials: LoginRequest, db: AsyncSession = Depends(get_db)):
    if not credentials.username or not credentials.password:
        raise HTTPException(status_code=400, detail="Username and password are required")

    users = AdminUserRepository(db)
    user = await users.find_by_username(credentials.username)
    if user is None or not verify_password(credentials.password, user.password_hash):
        report_login(False)
        logger.info("Failed login for username=%s", credentials.username)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Incorrect username or password")

    token = generate_session_token()
    await AdminSessionRepository(db).create(user.id, token, get_session_expiry())
    await users.update_last_login(user.id)
    await db.refresh(user)
    report_login(True)
    logger.info("Admin %s logged in", user.username)

    data = {"user": AdminUserOut.model_validate(user).model_dump(mode="json")}
    if settings.ENABLE_JWT_AUTH:
        data["token"] = generate_jwt(user)

    response = JSONResponse(content=envelope(data))
    response.headers.append(
        "set-cookie", create_secure_cookie(settings.SESSION_COOKIE_NAME, token, SESSION_MAX_AGE)
    )
    return response


@router.post("/logout")
async def logout(ctx: AdminContext = Depends(get_current_admin), db: AsyncSession = Depends(get_db)):
    if ctx.session is not None:
        await AdminSessionRepository(db).delete(ctx.session.session_token)
    logger.info("Admin %s logged out", ctx.user.username)

    response = JSONResponse(content=envelope(message="Logged out"))
    response.headers.append("set-cookie", clear_cookie(settings.SESSION_COOKIE_NAME))
    return response


@router.get("/me")
async def me(ctx: AdminContext = Depends(get_current_admin)):
    return envelope({"user": AdminUserOut.model_validate(ctx.user).model_dump(mode="json")})


@router.post("/gs-files", status_code=status.HTTP_201_CREATED)
async def upload_gs_file(
    file: Optional[UploadFile] = File(None),
    thumbnail: Optional[UploadFile] = File(None),
    display_name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    ctx: AdminContext = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
    storage: BlobStorage = Depends(get_storage),
):
    if file is None or not file.filename or not display_name:
        raise HTTPException(status_code=400, detail="A file and a display name are required")

    content_type = file.content_type or "application/octet-stream"
    if thumbnail is not None and not thumbnail.filename:
        thumbnail = None

    try:
        data = await _read_checked(
            file, settings.MAX_GS_FILE_SIZE, lambda n: validate_gs_file(file.filename, content_type, n)
        )
        thumb_data = b""
        if thumbnail is not None:
            thumb_data = await _read_checked(
                thumbnail, settings.MAX_THUMBNAIL_SIZE, lambda n: validate_thumbnail(thumbnail.content_type, n)
            )
    except FileValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)

    # Blob writes and the row insert are not transactional; a failed insert
    # leaves the stored objects orphaned.
    file_path = generate_file_path(file.filename)
    await storage.upload_file(file_path, data, content_type)

    thumbnail_path = None
    if thumbnail is not None:
        thumbnail_path = generate_file_path(thumbnail.filename, prefix="thumbnails")
        await storage.upload_file(thumbnail_path, thumb_data, thumbnail.content_type)

    saved = await GSFileRepository(db).create(
        filename=file.filename,
        display_name=display_name,
        description=description,
        file_size=len(data),
        mime_type=content_type,
        file_path=file_path,
        thumbnail_path=thumbnail_path,
    )
    report_upload(len(data), len(thumb_data))
    logger.info("Admin %s uploaded %s as file %s", ctx.user.username, file.filename, saved.id)

    return envelope(GSFileOut.model_validate(saved).model_dump(mode="json"), message="File uploaded")


@router.put("/gs-files/{file_id}")
async def update_gs_file(
    file_id: int,
    payload: GSFileUpdate,
    ctx: AdminContext = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    updated = await GSFileRepository(db).update(
        file_id, display_name=payload.display_name, description=payload.description
    )
    if updated is None:
        raise HTTPException(status_code=404, detail="File not found")

    logger.info("Admin %s updated file %s", ctx.user.username, file_id)
    return envelope(GSFileOut.model_validate(updated).model_dump(mode="json"), message="File updated")


@router.delete("/gs-files/{file_id}")
async def delete_gs_file(
    file_id: int,
    ctx: AdminContext = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
    storage: BlobStorage = Depends(get_storage),
):
    files = GSFileRepository(db)
    gs_file = await files.find_by_id(file_id)
    if gs_file is None:
        raise HTTPException(status_code=404, detail="File not found")

    # A storage failure propagates as a 500 and the row stays active.
    await storage.delete_file(gs_file.file_path)
    if gs_file.thumbnail_path:
        await storage.delete_file(gs_file.thumbnail_path)

    if not await files.delete(file_id):
        raise HTTPException(status_code=500, detail="Failed to delete file")

    report_delete()
    logger.info("Admin %s deleted file %s", ctx.user.username, file_id)
    return envelope(message="File deleted")
