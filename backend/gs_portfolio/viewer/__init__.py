from .orbit import OrbitCamera
from .scene import UNSUPPORTED_FORMAT, build_scene, validate_file_format

__all__ = ["OrbitCamera", "UNSUPPORTED_FORMAT", "build_scene", "validate_file_format"]
