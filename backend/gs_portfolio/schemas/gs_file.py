from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .common import Pagination


class GSFileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    filename: str
    display_name: str
    description: Optional[str] = None
    file_size: int
    file_path: str
    thumbnail_path: Optional[str] = None
    mime_type: str
    upload_date: datetime
    updated_date: datetime
    is_active: bool


class GSFileUpdate(BaseModel):
    display_name: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None


class GSFilePage(BaseModel):
    data: list[GSFileOut]
    pagination: Pagination
