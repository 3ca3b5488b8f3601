"""Cameras: view and projection matrices, picking rays, shake and ordering.

Matrices are 4x4 numpy arrays for column vectors (``clip = P @ V @ p``).
Rotations are quaternions stored as ``(x, y, z, w)``; a camera with the
identity rotation looks along ``+z`` with ``+y`` up.
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field
from typing import Iterator, List, Sequence, Tuple

import numpy as np

IDENTITY_QUAT = (0.0, 0.0, 0.0, 1.0)

_FORWARD = np.array([0.0, 0.0, 1.0])
_UP = np.array([0.0, 1.0, 0.0])
_RIGHT = np.array([1.0, 0.0, 0.0])


class ClearFlags(enum.Flag):
    """Buffers a camera clears before drawing."""

    NONE = 0
    COLOR = enum.auto()
    DEPTH = enum.auto()


def _normalized(v: np.ndarray) -> np.ndarray:
    length = float(np.linalg.norm(v))
    return v / length if length > 0.0 else np.zeros_like(v)


def _rotate(q: Sequence[float], v: np.ndarray) -> np.ndarray:
    u = np.asarray(q[:3], dtype=float)
    w = float(q[3])
    t = 2.0 * np.cross(u, v)
    return v + w * t + np.cross(u, t)


def look_at(eye, target, up) -> np.ndarray:
    """Right-handed view matrix placing ``eye`` at the origin looking down ``-z``."""
    eye = np.asarray(eye, dtype=float)
    f = _normalized(np.asarray(target, dtype=float) - eye)
    s = _normalized(np.cross(f, np.asarray(up, dtype=float)))
    u = np.cross(s, f)
    m = np.identity(4)
    m[0, :3] = s
    m[1, :3] = u
    m[2, :3] = -f
    m[0, 3] = -float(np.dot(s, eye))
    m[1, 3] = -float(np.dot(u, eye))
    m[2, 3] = float(np.dot(f, eye))
    return m


def perspective(fov: float, aspect: float, near: float, far: float) -> np.ndarray:
    """Perspective projection; ``fov`` is the vertical field of view in radians."""
    f = 1.0 / math.tan(fov * 0.5)
    m = np.zeros((4, 4))
    m[0, 0] = f / aspect
    m[1, 1] = f
    m[2, 2] = (far + near) / (near - far)
    m[2, 3] = 2.0 * far * near / (near - far)
    m[3, 2] = -1.0
    return m


def _transform_point(m: np.ndarray, p: Sequence[float]) -> np.ndarray:
    v = m @ np.array([p[0], p[1], p[2], 1.0])
    return v[:3] / v[3]


@dataclass
class Ray:
    """A half line starting at ``origin`` along the unit vector ``direction``."""

    origin: np.ndarray
    direction: np.ndarray

    def at(self, distance: float) -> np.ndarray:
        """Point ``distance`` units along the ray."""
        return self.origin + self.direction * distance


@dataclass(eq=False)
class Camera:
    """A perspective camera; ``fov`` is in degrees, ``viewport`` is ``(x, y, w, h)``."""

    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    rotation: Tuple[float, float, float, float] = IDENTITY_QUAT
    fov: float = 65.0
    near: float = 0.1
    far: float = 500.0
    viewport: Tuple[float, float, float, float] = (0.0, 0.0, 1.0, 1.0)
    clear_mode: ClearFlags = ClearFlags.COLOR | ClearFlags.DEPTH
    clear_color: Tuple[float, float, float, float] = (0.4, 0.4, 0.8, 1.0)
    priority: int = 0
    is_active: bool = True

    shake_amplitude: float = 0.0
    shake_frequency: float = 0.0
    shake_start_time: float = 0.0
    shake_duration: float = 0.0
    shake_in_time: float = 0.0
    shake_out_time: float = 0.0

    def __lt__(self, other: "Camera") -> bool:
        return self.priority < other.priority

    @property
    def forward(self) -> np.ndarray:
        return _rotate(self.rotation, _FORWARD)

    @property
    def up(self) -> np.ndarray:
        return _rotate(self.rotation, _UP)

    @property
    def right(self) -> np.ndarray:
        return _rotate(self.rotation, _RIGHT)

    def view_matrix(self) -> np.ndarray:
        position = np.asarray(self.position, dtype=float)
        return look_at(position, position + self.forward, self.up)

    def projection_matrix(self) -> np.ndarray:
        _, _, w, h = self.viewport
        return perspective(math.radians(self.fov), w / h, self.near, self.far)

    def get_ray(self, screen_position: Sequence[float]) -> Ray:
        """Ray from the camera through a pixel of the viewport (y grows downwards)."""
        _, _, w, h = self.viewport
        nx = (2.0 * screen_position[0]) / w - 1.0
        ny = 1.0 - (2.0 * screen_position[1]) / h
        inverse = np.linalg.inv(self.projection_matrix() @ self.view_matrix())
        near_point = _transform_point(inverse, (nx, ny, 0.0))
        far_point = _transform_point(inverse, (nx, ny, 1.0))
        direction = _normalized(far_point - near_point)
        return Ray(np.asarray(self.position, dtype=float).copy(), direction)

    def shake(
        self,
        amplitude: float,
        frequency: float,
        duration: float,
        in_time: float,
        out_time: float,
        now: float,
    ) -> None:
        """Start a shake: fade in over ``in_time``, hold ``duration``, fade out over ``out_time``."""
        self.shake_amplitude = amplitude
        self.shake_frequency = frequency
        self.shake_in_time = in_time
        self.shake_out_time = out_time
        self.shake_duration = duration
        self.shake_start_time = now

    def _shake_weight(self, now: float) -> float:
        elapsed = now - self.shake_start_time
        fade_in_end = self.shake_in_time
        hold_end = fade_in_end + self.shake_duration
        fade_out_end = hold_end + self.shake_out_time
        if elapsed < fade_in_end:
            return elapsed / self.shake_in_time if self.shake_in_time > 0.0 else 0.0
        if elapsed < hold_end:
            return 1.0
        if elapsed < fade_out_end:
            return 1.0 - (elapsed - hold_end) / self.shake_out_time
        return 0.0

    def shaked_transform(self, now: float) -> Tuple[np.ndarray, Tuple[float, float, float, float]]:
        """Position and rotation with the current shake offset applied."""
        k = self._shake_weight(now)
        amplitude = self.shake_amplitude
        right = self.right * math.cos(now * self.shake_frequency * 1.1) * amplitude
        up = _UP * math.sin(now * self.shake_frequency) * amplitude
        position = np.asarray(self.position, dtype=float) + (right + up) * k
        return position, tuple(self.rotation)


class CameraList:
    """The cameras to render; falls back to ``default`` whenever it would be empty."""

    def __init__(self, default: Camera) -> None:
        self.default = default
        self.cameras: List[Camera] = [default]

    def __iter__(self) -> Iterator[Camera]:
        return iter(self.cameras)

    def __len__(self) -> int:
        return len(self.cameras)

    def create(self) -> Camera:
        """Add a new camera sized like the default; it replaces the default if that is alone."""
        camera = Camera(viewport=tuple(self.default.viewport))
        if len(self.cameras) == 1 and self.cameras[0] is self.default:
            self.cameras.pop()
        self.cameras.append(camera)
        return camera

    def remove(self, camera: Camera) -> None:
        """Remove ``camera`` if present, restoring the default when none are left."""
        for index, existing in enumerate(self.cameras):
            if existing is camera:
                self.cameras[index] = self.cameras[-1]
                self.cameras.pop()
                if not self.cameras:
                    self.cameras.append(self.default)
                return

    def remove_all(self) -> None:
        self.cameras = [self.default]

    def sorted(self) -> List[Camera]:
        """Sort the cameras by priority, lowest first, and return a copy of the list."""
        self.cameras.sort(key=lambda c: c.priority)
        return list(self.cameras)