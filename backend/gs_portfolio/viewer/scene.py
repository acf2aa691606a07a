"""Placeholder scene for the splat viewer.

Splat decoding and rendering are not part of this project: the scene is
a static box lit by one directional and one ambient light, framed by an
orbit camera.
"""
from __future__ import annotations

from typing import Any, Optional
from urllib.parse import urlparse

from .orbit import OrbitCamera

SUPPORTED_EXTENSIONS = ("splat", "ply")
UNSUPPORTED_FORMAT = "Unsupported file format. Only .splat and .ply files are supported."


def validate_file_format(file_url: str, filename: Optional[str] = None) -> bool:
    if not file_url:
        return False
    # a known filename wins over the URL, which may be an API path without extension
    name = filename or urlparse(file_url).path
    extension = name.lower().rsplit(".", 1)[-1] if "." in name else ""
    return extension in SUPPORTED_EXTENSIONS


def build_scene(file_url: str, gs_file: Any = None, camera: Optional[OrbitCamera] = None) -> dict:
    filename = getattr(gs_file, "filename", None)
    if not file_url:
        return {"ready": False, "error": "Splat file URL is required"}
    if not validate_file_format(file_url, filename):
        return {"ready": False, "error": UNSUPPORTED_FORMAT}

    camera = camera or OrbitCamera()
    return {
        "ready": True,
        "error": None,
        "fileUrl": file_url,
        "camera": {**camera.to_dict(), "clearColor": [25, 25, 25]},
        "lights": [
            {"name": "directional-light", "type": "directional", "rotation": [45, 30, 0],
             "color": [255, 255, 255], "intensity": 1.0},
            {"name": "ambient-light", "type": "omni", "position": [0, 10, 0],
             "color": [76, 76, 76], "intensity": 0.5},
        ],
        "entities": [
            {"name": "placeholder-box", "render": "box", "position": [0, 0, 0], "scale": [2, 2, 2]},
        ],
    }
