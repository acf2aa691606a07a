from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from gs_portfolio.core.config import settings
from gs_portfolio.core.database import get_db
from gs_portfolio.core.security import extract_token_from_cookie, verify_jwt
from gs_portfolio.models.admin_session import AdminSession
from gs_portfolio.models.admin_user import AdminUser
from gs_portfolio.repositories import AdminSessionRepository, AdminUserRepository

logger = logging.getLogger("gs-portfolio")

AUTH_REQUIRED = "Authentication required"


@dataclass
class AdminContext:
    user: AdminUser
    session: Optional[AdminSession] = None


def _bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("authorization") or ""
    scheme, _, token = header.partition(" ")
    if scheme.lower() == "bearer" and token:
        return token.strip()
    return None


async def resolve_admin(request: Request, db: AsyncSession) -> Optional[AdminContext]:
    token = extract_token_from_cookie(request.headers.get("cookie"), settings.SESSION_COOKIE_NAME)
    if token:
        session = await AdminSessionRepository(db).find_by_token(token)
        if session is None:
            return None
        user = await AdminUserRepository(db).find_by_id(session.user_id)
        if user is None:
            return None
        return AdminContext(user=user, session=session)

    if settings.ENABLE_JWT_AUTH:
        bearer = _bearer_token(request)
        claims = verify_jwt(bearer) if bearer else None
        if claims and isinstance(claims.get("userId"), int):
            user = await AdminUserRepository(db).find_by_id(claims["userId"])
            if user is not None:
                return AdminContext(user=user)
    return None


async def get_current_admin(request: Request, db: AsyncSession = Depends(get_db)) -> AdminContext:
    ctx = await resolve_admin(request, db)
    if ctx is None:
        # one message for every failure so callers cannot tell which check failed
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=AUTH_REQUIRED)
    request.state.admin = ctx
    return ctx


async def get_optional_admin(request: Request, db: AsyncSession = Depends(get_db)) -> Optional[AdminContext]:
    return await resolve_admin(request, db)
