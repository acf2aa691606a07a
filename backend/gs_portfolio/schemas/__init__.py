from .admin import AdminUserOut, LoginRequest
from .common import Pagination, envelope, error_envelope
from .gs_file import GSFileOut, GSFilePage, GSFileUpdate

__all__ = [
    "AdminUserOut",
    "GSFileOut",
    "GSFilePage",
    "GSFileUpdate",
    "LoginRequest",
    "Pagination",
    "envelope",
    "error_envelope",
]
