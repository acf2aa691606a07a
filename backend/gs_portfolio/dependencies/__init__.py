from .auth import AdminContext, get_current_admin, get_optional_admin

__all__ = ["AdminContext", "get_current_admin", "get_optional_admin"]
