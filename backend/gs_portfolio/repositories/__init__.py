from .admin_sessions import AdminSessionRepository
from .admin_users import AdminUserRepository
from .gs_files import GSFileRepository

__all__ = ["AdminSessionRepository", "AdminUserRepository", "GSFileRepository"]
