"""Deferred draw commands plus the CPU-side geometry of lines, rings and sprites.

Draw calls are recorded into a :class:`RenderQueue` and replayed once per
camera.  Opaque work is ordered by material queue and transparent work
follows it.  The geometry helpers return plain numpy arrays that a GPU
backend can upload as they are.
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple

import numpy as np

RING_SEGMENTS = 32


class RenderMode(enum.IntEnum):
    """How a material is blended and written to depth."""

    OPAQUE = 0
    CUTOUT = 1
    TRANSPARENT = 2
    DEPTH_MASK = 3


class CommandType(enum.Enum):
    """Kind of work a :class:`RenderCommand` describes."""

    DRAW_MESH = enum.auto()
    DRAW_MESH_INSTANCE = enum.auto()
    DRAW_MESH_LINES = enum.auto()
    DRAW_MODEL = enum.auto()
    DRAW_MODEL_INSTANCE = enum.auto()


@dataclass
class RenderCommand:
    """One recorded draw call.

    ``material`` must expose ``queue`` and ``render_mode``.
    """

    type: CommandType
    material: Any
    mesh: Any = None
    model: Any = None
    transform: Optional[np.ndarray] = None
    transforms: Tuple[np.ndarray, ...] = ()

    @property
    def count(self) -> int:
        """Number of instances drawn by an instanced command."""
        return len(self.transforms)


def _matrix(value: Any) -> np.ndarray:
    if value is None:
        return np.identity(4)
    return np.array(value, dtype=float).reshape(4, 4)


class RenderQueue:
    """Collects draw commands until they are flushed for a camera."""

    def __init__(self) -> None:
        self.commands: List[RenderCommand] = []

    def __len__(self) -> int:
        return len(self.commands)

    def draw_mesh(self, mesh: Any, material: Any, transform: Any = None) -> None:
        """Queue a single mesh; ignored when the mesh or material is missing."""
        if mesh is None or material is None:
            return
        self.commands.append(
            RenderCommand(CommandType.DRAW_MESH, material, mesh=mesh, transform=_matrix(transform))
        )

    def draw_mesh_instanced(self, mesh: Any, material: Any, transforms: Sequence[Any]) -> None:
        """Queue a mesh drawn once per transform; the transforms are copied."""
        if mesh is None or material is None:
            return
        self.commands.append(
            RenderCommand(
                CommandType.DRAW_MESH_INSTANCE,
                material,
                mesh=mesh,
                transforms=tuple(_matrix(t) for t in transforms),
            )
        )

    def draw_mesh_lines(self, mesh: Any, material: Any, transform: Any = None) -> None:
        """Queue a mesh drawn as wireframe lines."""
        if mesh is None or material is None:
            return
        self.commands.append(
            RenderCommand(CommandType.DRAW_MESH_LINES, material, mesh=mesh, transform=_matrix(transform))
        )

    def draw_model(self, model: Any, material: Any, transform: Any = None) -> None:
        """Queue a model; ``material`` is the one that orders it in the queue."""
        if model is None or material is None:
            return
        self.commands.append(
            RenderCommand(CommandType.DRAW_MODEL, material, model=model, transform=_matrix(transform))
        )

    def draw_model_instanced(self, model: Any, material: Any, transforms: Sequence[Any]) -> None:
        """Queue a model drawn once per transform; the transforms are copied."""
        if model is None or material is None:
            return
        self.commands.append(
            RenderCommand(
                CommandType.DRAW_MODEL_INSTANCE,
                material,
                model=model,
                transforms=tuple(_matrix(t) for t in transforms),
            )
        )

    def ordered(self) -> List[RenderCommand]:
        """Commands in drawing order: by material queue, transparent ones last."""
        by_queue = sorted(self.commands, key=lambda c: c.material.queue)
        early = [c for c in by_queue if c.material.render_mode != RenderMode.TRANSPARENT]
        late = [c for c in by_queue if c.material.render_mode == RenderMode.TRANSPARENT]
        return early + late

    def flush(self) -> List[RenderCommand]:
        """Return the commands in drawing order and empty the queue."""
        result = self.ordered()
        self.commands.clear()
        return result


@dataclass
class LinePoint:
    """A point of a line strip; ``scale`` multiplies the line thickness there."""

    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    scale: float = 1.0


@dataclass
class LineData:
    """A camera-facing line strip."""

    points: List[LinePoint] = field(default_factory=list)
    thickness: float = 0.1


def _normalized(v: np.ndarray) -> np.ndarray:
    length = float(np.linalg.norm(v))
    return v / length if length > 0.0 else np.zeros_like(v)


def line_strip_geometry(data: LineData, camera_position: Sequence[float]) -> Tuple[np.ndarray, List[int]]:
    """Triangle strip geometry of a line that faces ``camera_position``.

    Returns ``(positions, indices)``: two vertices per point and two
    triangles per segment.  Fewer than two points give empty geometry.
    """
    points = data.points
    if len(points) < 2:
        return np.zeros((0, 3)), []

    camera = np.asarray(camera_position, dtype=float)
    vertices: List[np.ndarray] = []
    last = len(points) - 1
    for index, (p1, p2) in enumerate(zip(points, points[1:]), start=1):
        a = np.asarray(p1.position, dtype=float)
        b = np.asarray(p2.position, dtype=float)
        direction = _normalized(b - a)
        foot = a + direction * float(np.dot(camera - a, direction))
        normal = _normalized(camera - foot)
        side = np.cross(direction, normal) * data.thickness * p1.scale
        vertices.append(a + side)
        vertices.append(a - side)
        if index == last:
            vertices.append(b + side)
            vertices.append(b - side)

    indices: List[int] = []
    for segment in range(len(points) - 1):
        base = segment * 2
        indices.extend((base, base + 1, base + 2, base + 2, base + 1, base + 3))
    return np.array(vertices), indices


def ring_geometry(
    center: Sequence[float],
    start_angle: float,
    angle: float,
    inner_radius: float,
    outer_radius: float,
) -> Tuple[np.ndarray, List[int]]:
    """Screen-space ring or arc; angles in degrees, 0 pointing up (negative y).

    Returns ``(positions, indices)`` with an inner and an outer vertex for
    each of the ``RING_SEGMENTS + 1`` steps.
    """
    cx, cy = float(center[0]), float(center[1])
    step = angle / RING_SEGMENTS
    vertices = []
    for i in range(RING_SEGMENTS + 1):
        theta = math.radians(start_angle + step * i)
        direction = (math.sin(theta), -math.cos(theta))
        for radius in (inner_radius, outer_radius):
            vertices.append((direction[0] * radius + cx, direction[1] * radius + cy, 0.0))

    indices: List[int] = []
    for i in range(RING_SEGMENTS):
        base = i * 2
        indices.extend((base + 1, base, base + 3, base, base + 2, base + 3))
    return np.array(vertices), indices


def sprite_quad(
    texture_size: Sequence[float],
    src: Sequence[float],
    dest: Sequence[float],
    viewport_size: Sequence[float],
) -> Tuple[np.ndarray, np.ndarray]:
    """Quad that maps pixel rect ``src`` of a texture onto pixel rect ``dest``.

    Returns ``(positions, uvs)`` in normalized device coordinates, vertices
    ordered top-left, bottom-left, bottom-right, top-right.
    """
    tw, th = float(texture_size[0]), float(texture_size[1])
    sx, sy, sw, sh = (float(v) for v in src)
    dx, dy, dw, dh = (float(v) for v in dest)
    vw, vh = float(viewport_size[0]), float(viewport_size[1])

    u0 = sx / tw
    v0 = 1.0 - sy / th
    u1 = (sx + sw) / tw
    v1 = 1.0 - (sy + sh) / th

    left = (dx / vw) * 2.0 - 1.0
    right = ((dx + dw) / vw) * 2.0 - 1.0
    top = ((vh - dy) / vh) * 2.0 - 1.0
    bottom = ((vh - dy - dh) / vh) * 2.0 - 1.0

    positions = np.array(
        [
            (left, top, 0.0),
            (left, bottom, 0.0),
            (right, bottom, 0.0),
            (right, top, 0.0),
        ]
    )
    uvs = np.array([(u0, v0), (u0, v1), (u1, v1), (u1, v0)])
    return positions, uvs