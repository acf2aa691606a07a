from __future__ import annotations

from typing import Optional

from .api import ApiClient


async def get_gs_files(api: ApiClient, page: int = 1, limit: int = 20) -> dict:
    return await api.get("/gs-files", page=page, limit=limit)


async def get_gs_file(api: ApiClient, file_id: int) -> dict:
    return await api.get(f"/gs-files/{file_id}")


def gs_file_download_url(api: ApiClient, file_id: int) -> str:
    return api.url(f"/gs-files/{file_id}/file")


def gs_file_thumbnail_url(api: ApiClient, file_id: int) -> str:
    return api.url(f"/gs-files/{file_id}/thumbnail")


async def upload_gs_file(
    api: ApiClient,
    filename: str,
    content: bytes,
    display_name: str,
    description: Optional[str] = None,
    content_type: str = "application/octet-stream",
    thumbnail: Optional[tuple] = None,
) -> dict:
    """``thumbnail`` is a ``(filename, bytes, content_type)`` tuple."""
    files = {"file": (filename, content, content_type)}
    if thumbnail is not None:
        files["thumbnail"] = thumbnail
    data = {"display_name": display_name}
    if description:
        data["description"] = description
    return await api.upload_file("/admin/gs-files", files=files, data=data)


async def update_gs_file(
    api: ApiClient, file_id: int, display_name: Optional[str] = None, description: Optional[str] = None
) -> dict:
    return await api.put(f"/admin/gs-files/{file_id}", {"display_name": display_name, "description": description})


async def delete_gs_file(api: ApiClient, file_id: int) -> None:
    await api.delete(f"/admin/gs-files/{file_id}")
