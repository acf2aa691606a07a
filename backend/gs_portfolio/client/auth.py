from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional, Union

from .api import ApiClient, ApiError

logger = logging.getLogger("gs-portfolio")


@dataclass
class AuthUser:
    id: int
    username: str

    @classmethod
    def from_payload(cls, payload: dict) -> "AuthUser":
        return cls(id=payload["id"], username=payload["username"])


@dataclass
class LoginResult:
    success: bool
    error: Optional[str] = None


class AuthSession:
    """Client-side view of the admin login.

    Holds the cached user explicitly instead of reading it from ambient
    storage. ``check_auth`` reconciles the cache with ``/admin/me``: a server
    rejection clears it, a network failure keeps it.
    """

    def __init__(self, api: ApiClient, cache_path: Optional[Union[str, Path]] = None):
        self.api = api
        self.cache_path = Path(cache_path) if cache_path else None
        self.user: Optional[AuthUser] = None
        self.loading = True

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def _restore(self) -> bool:
        if self.user is not None:
            return True
        if self.cache_path is None or not self.cache_path.exists():
            return False
        try:
            self.user = AuthUser(**json.loads(self.cache_path.read_text())["user"])
            return True
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning("Discarding unreadable auth cache %s: %s", self.cache_path, e)
            self._clear()
            return False

    def _save(self, user: AuthUser) -> None:
        self.user = user
        if self.cache_path is not None:
            self.cache_path.write_text(json.dumps({"user": asdict(user)}))

    def _clear(self) -> None:
        self.user = None
        if self.cache_path is not None:
            self.cache_path.unlink(missing_ok=True)

    async def login(self, username: str, password: str) -> LoginResult:
        self.loading = True
        try:
            data = await self.api.post("/admin/login", {"username": username, "password": password})
        except ApiError as e:
            return LoginResult(success=False, error=e.message)
        finally:
            self.loading = False

        if not data or not data.get("user"):
            return LoginResult(success=False, error="Login failed")
        self._save(AuthUser.from_payload(data["user"]))
        return LoginResult(success=True)

    async def logout(self) -> None:
        self.loading = True
        try:
            await self.api.post("/admin/logout", {})
        except ApiError as e:
            logger.warning("Logout request failed: %s", e.message)
        finally:
            self._clear()
            self.loading = False

    async def check_auth(self) -> bool:
        self.loading = True
        try:
            if not self._restore():
                return False
            try:
                data = await self.api.get("/admin/me")
            except ApiError as e:
                if e.code == "NETWORK_ERROR":
                    # keep the cached user; the server may just be unreachable
                    return self.is_authenticated
                self._clear()
                return False

            if data and data.get("user"):
                self._save(AuthUser.from_payload(data["user"]))
            else:
                self._clear()
            return self.is_authenticated
        finally:
            self.loading = False
