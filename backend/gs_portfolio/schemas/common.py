from typing import Any, Optional

from pydantic import BaseModel, Field


def envelope(data: Any = None, message: Optional[str] = None) -> dict:
    body: dict = {"success": True}
    if data is not None:
        body["data"] = data
    if message is not None:
        body["message"] = message
    return body


def error_envelope(error: str, message: Optional[str] = None) -> dict:
    body: dict = {"success": False, "error": error}
    if message is not None:
        body["message"] = message
    return body


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int = Field(serialization_alias="totalPages")
