"""Async HTTP client for the portfolio API, used by scripts and integrations."""
from .api import NETWORK_ERROR_MESSAGE, ApiClient, ApiError
from .auth import AuthSession, AuthUser, LoginResult

__all__ = ["ApiClient", "ApiError", "AuthSession", "AuthUser", "LoginResult", "NETWORK_ERROR_MESSAGE"]
