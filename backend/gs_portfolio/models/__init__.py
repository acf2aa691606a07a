from .admin_session import AdminSession
from .admin_user import AdminUser
from .gs_file import GSFile

__all__ = ["AdminSession", "AdminUser", "GSFile"]
