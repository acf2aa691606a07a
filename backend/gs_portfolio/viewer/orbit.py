"""Orbit camera for the splat viewer.

The camera circles a target point. Its state is kept in spherical form
(yaw and pitch in degrees, distance in scene units) and converted to a
Cartesian eye position on demand. Yaw 0 / pitch 0 looks down the -Z axis
from +Z, which puts the default camera at (0, 0, 5).
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field

MIN_PITCH = -89.0
MAX_PITCH = 89.0


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


@dataclass
class OrbitCamera:
    target: tuple = (0.0, 0.0, 0.0)
    yaw: float = 0.0
    pitch: float = 0.0
    distance: float = 5.0
    fov: float = 45.0
    near_clip: float = 0.1
    far_clip: float = 1000.0
    min_distance: float = 0.5
    max_distance: float = 100.0
    rotate_speed: float = 0.3
    zoom_speed: float = 0.1
    pan_speed: float = 0.002
    _home: tuple = field(default=(), init=False, repr=False)

    def __post_init__(self):
        self.target = tuple(float(c) for c in self.target)
        self.pitch = _clamp(self.pitch, MIN_PITCH, MAX_PITCH)
        self.distance = _clamp(self.distance, self.min_distance, self.max_distance)
        self._home = (self.target, self.yaw, self.pitch, self.distance)

    def position(self) -> tuple:
        yaw = math.radians(self.yaw)
        pitch = math.radians(self.pitch)
        tx, ty, tz = self.target
        return (
            tx + self.distance * math.cos(pitch) * math.sin(yaw),
            ty + self.distance * math.sin(pitch),
            tz + self.distance * math.cos(pitch) * math.cos(yaw),
        )

    def basis(self) -> tuple:
        """Right and up unit vectors of the camera, used for panning."""
        yaw = math.radians(self.yaw)
        pitch = math.radians(self.pitch)
        right = (math.cos(yaw), 0.0, -math.sin(yaw))
        up = (
            -math.sin(pitch) * math.sin(yaw),
            math.cos(pitch),
            -math.sin(pitch) * math.cos(yaw),
        )
        return right, up

    def rotate(self, dx: float, dy: float) -> None:
        """Left-drag: dx/dy are pointer deltas in pixels."""
        self.yaw = (self.yaw - dx * self.rotate_speed) % 360.0
        self.pitch = _clamp(self.pitch + dy * self.rotate_speed, MIN_PITCH, MAX_PITCH)

    def pan(self, dx: float, dy: float) -> None:
        """Right-drag: moves the target in the camera plane, scaled by distance."""
        right, up = self.basis()
        scale = self.pan_speed * self.distance
        self.target = tuple(
            t - r * dx * scale + u * dy * scale for t, r, u in zip(self.target, right, up)
        )

    def zoom(self, wheel_delta: float) -> None:
        """Wheel: positive deltas move away from the target."""
        factor = 1.0 + self.zoom_speed * (1 if wheel_delta > 0 else -1 if wheel_delta < 0 else 0)
        self.distance = _clamp(self.distance * factor, self.min_distance, self.max_distance)

    def reset(self) -> None:
        self.target, self.yaw, self.pitch, self.distance = self._home

    def to_dict(self) -> dict:
        return {
            "position": [round(c, 6) for c in self.position()],
            "target": list(self.target),
            "yaw": self.yaw,
            "pitch": self.pitch,
            "distance": self.distance,
            "fov": self.fov,
            "nearClip": self.near_clip,
            "farClip": self.far_clip,
        }
