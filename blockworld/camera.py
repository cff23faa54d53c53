"""First-person camera, its view-projection matrix and keyboard/mouse control."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

PITCH_LIMIT = 89.9
ZOOM_FOV_SCALE = 0.25
_UNIT_Y = np.array([0.0, 1.0, 0.0])


def _vector(values: Sequence[float]) -> np.ndarray:
    return np.asarray(values, dtype=np.float64)


def _normalize(vector: np.ndarray) -> np.ndarray:
    with np.errstate(invalid="ignore", divide="ignore"):
        return vector / np.linalg.norm(vector)


def look_at(eye: Sequence[float], target: Sequence[float], up: Sequence[float]) -> np.ndarray:
    """Right-handed view matrix looking from ``eye`` towards ``target``."""
    eye = _vector(eye)
    f = _normalize(_vector(target) - eye)
    s = _normalize(np.cross(f, _vector(up)))
    u = np.cross(s, f)
    return np.array(
        [
            [s[0], s[1], s[2], -eye.dot(s)],
            [u[0], u[1], u[2], -eye.dot(u)],
            [-f[0], -f[1], -f[2], eye.dot(f)],
            [0.0, 0.0, 0.0, 1.0],
        ]
    )


def perspective(fovy: float, aspect: float, znear: float, zfar: float) -> np.ndarray:
    """Perspective projection to clip space with depth in [-1, 1]; ``fovy`` in radians."""
    f = 1.0 / math.tan(fovy / 2.0)
    return np.array(
        [
            [f / aspect, 0.0, 0.0, 0.0],
            [0.0, f, 0.0, 0.0],
            [0.0, 0.0, (zfar + znear) / (znear - zfar), 2.0 * zfar * znear / (znear - zfar)],
            [0.0, 0.0, -1.0, 0.0],
        ]
    )


def _frustum_planes(matrix: np.ndarray) -> list[tuple[np.ndarray, float]]:
    r0, r1, r2, r3 = matrix
    planes = []
    for row in (r3 + r0, r3 - r0, r3 + r1, r3 - r1, r3 + r2, r3 - r2):
        normal, offset = row[:3], row[3]
        length = np.linalg.norm(normal)
        if not length or not np.isfinite(length):
            raise ValueError("view-projection matrix does not define a frustum")
        planes.append((normal / length, offset / length))
    return planes


@dataclass(eq=False)
class Camera:
    """Camera position, orientation (pitch, yaw in degrees) and projection settings."""

    up: np.ndarray = field(default_factory=lambda: _vector((0.0, 1.0, 0.0)))
    front: np.ndarray = field(default_factory=lambda: _vector((0.0, 0.0, 1.0)))
    right: np.ndarray = field(default_factory=lambda: _vector((1.0, 0.0, 0.0)))
    position: np.ndarray = field(default_factory=lambda: _vector((0.0, 0.0, 0.0)))
    orientation: np.ndarray = field(default_factory=lambda: _vector((0.0, 0.0)))
    aspect: float = 1280.0 / 720.0
    fovy: float = 80.0
    znear: float = 0.01
    zfar: float = 1000.0
    vp: np.ndarray = field(default_factory=lambda: np.eye(4))
    fov_scale: float = 1.0

    def update_vectors(self) -> None:
        """Recompute front, right and up from the pitch and yaw."""
        pitch, yaw = (math.radians(a) for a in self.orientation)
        front = _vector(
            (
                -math.cos(pitch) * math.sin(yaw),
                -math.sin(pitch),
                math.cos(pitch) * math.cos(yaw),
            )
        )
        self.front = _normalize(front)
        self.right = _normalize(np.cross(self.front, _UNIT_Y))
        self.up = _normalize(np.cross(self.right, self.front))

    def build_view_projection_matrix(self) -> np.ndarray:
        """Update the direction vectors, store and return projection @ view."""
        self.update_vectors()
        position = _vector(self.position)
        view = look_at(position, position + self.front, self.up)
        proj = perspective(
            math.radians(self.fovy) * self.fov_scale, self.aspect, self.znear, self.zfar
        )
        self.vp = proj @ view
        return self.vp

    def is_in_frustum(self, aabb_min: Sequence[float], aabb_max: Sequence[float]) -> bool:
        """Whether an axis-aligned box is at least partly inside the view frustum."""
        low, high = _vector(aabb_min), _vector(aabb_max)
        for normal, offset in _frustum_planes(self.vp):
            farthest = np.where(normal >= 0, high, low)
            if normal.dot(farthest) + offset < 0:
                return False
        return True


@dataclass(eq=False)
class CameraUniform:
    """View-projection matrix laid out column by column as the shaders expect."""

    view_proj: np.ndarray = field(default_factory=lambda: np.zeros((4, 4), dtype=np.float32))

    def update_view_proj(self, camera: Camera) -> None:
        self.view_proj = camera.build_view_projection_matrix().T.astype(np.float32)


class Key(enum.Enum):
    W = enum.auto()
    A = enum.auto()
    S = enum.auto()
    D = enum.auto()
    C = enum.auto()
    LSHIFT = enum.auto()
    RSHIFT = enum.auto()
    SPACE = enum.auto()
    ESCAPE = enum.auto()


class CameraController:
    """Turns key state and mouse motion into camera movement."""

    def __init__(self, speed: float) -> None:
        self.speed = speed
        self._forward = False
        self._backward = False
        self._left = False
        self._right = False
        self._shift = False
        self._zoomed = False
        self.velocity = np.zeros(3)

    def process_key(self, key: Key, pressed: bool) -> bool:
        """Record a key press or release; return whether the key is handled."""
        if key is Key.W:
            self._forward = pressed
        elif key is Key.A:
            self._left = pressed
        elif key is Key.S:
            self._backward = pressed
        elif key is Key.D:
            self._right = pressed
        elif key is Key.C:
            self._zoomed = pressed
        elif key in (Key.LSHIFT, Key.RSHIFT):
            self._shift = pressed
        else:
            return False
        return True

    def process_mouse(self, camera: Camera, delta: tuple[float, float]) -> None:
        """Turn the camera by a mouse motion of (dx, dy)."""
        dx, dy = delta
        offset = _vector((dy * 0.8, dx)) * 0.15
        if self._zoomed:
            offset *= 0.25
        camera.orientation = _vector(camera.orientation) + offset

    def update_camera(self, camera: Camera, delta: float) -> None:
        """Compute the velocity for a frame of ``delta`` seconds and apply zoom and pitch limits."""
        speed = delta * self.speed * (2.0 if self._shift else 1.0)
        velocity = np.zeros(3)
        if self._forward:
            velocity = velocity + camera.front * speed
        if self._backward:
            velocity = velocity - camera.front * speed
        if self._right:
            velocity = velocity + camera.right * speed
        if self._left:
            velocity = velocity - camera.right * speed
        self.velocity = velocity

        camera.fov_scale = ZOOM_FOV_SCALE if self._zoomed else 1.0
        orientation = _vector(camera.orientation).copy()
        orientation[0] = min(max(orientation[0], -PITCH_LIMIT), PITCH_LIMIT)
        camera.orientation = orientation