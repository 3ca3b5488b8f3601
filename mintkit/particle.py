"""CPU particle emitters.

Vectors are numpy float arrays; rotations are quaternions stored as
``(x, y, z, w)``.  Times are in seconds and are supplied by the caller.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

IDENTITY_QUAT = (0.0, 0.0, 0.0, 1.0)


class EmitterShape(enum.IntEnum):
    """Volume particles are spawned from."""

    POINT = 0
    SPHERE = 1
    HEMISPHERE = 2
    CONE = 3


def _vec(value: Any, n: int) -> np.ndarray:
    return np.asarray(value, dtype=float).reshape(n).copy()


def _zeros(n: int):
    return lambda: np.zeros(n)


def _normalized(v: np.ndarray) -> np.ndarray:
    length = float(np.linalg.norm(v))
    return v / length if length > 0.0 else np.zeros_like(v)


def _rotate(q: Sequence[float], v: np.ndarray) -> np.ndarray:
    u = np.asarray(q[:3], dtype=float)
    w = float(q[3])
    t = 2.0 * np.cross(u, v)
    return v + w * t + np.cross(u, t)


def _rand_range(rng: np.random.Generator, bounds: np.ndarray) -> float:
    low, high = float(bounds[0]), float(bounds[1])
    return low + (high - low) * float(rng.random())


def _rand_in_sphere(rng: np.random.Generator, radius: float = 1.0) -> np.ndarray:
    direction = _normalized(rng.normal(size=3))
    return direction * radius * float(rng.random()) ** (1.0 / 3.0)


def _rand_in_circle(rng: np.random.Generator) -> np.ndarray:
    angle = float(rng.random()) * 2.0 * np.pi
    r = float(rng.random()) ** 0.5
    return np.array([np.cos(angle) * r, np.sin(angle) * r])


@dataclass
class Particle:
    """A single live particle."""

    position: np.ndarray = field(default_factory=_zeros(3))
    velocity: np.ndarray = field(default_factory=_zeros(3))
    color: np.ndarray = field(default_factory=_zeros(4))
    rotation: float = 0.0
    rotation_speed: float = 0.0
    size: float = 0.0
    life_time: float = 0.0
    """Absolute time at which the particle dies."""


@dataclass
class EmitterDesc:
    """Emitter parameters; two-element ranges are ``(min, max)``."""

    max_particles: int = 0
    start_size: np.ndarray = field(default_factory=_zeros(2))
    start_speed: np.ndarray = field(default_factory=_zeros(2))
    start_rotation: np.ndarray = field(default_factory=_zeros(2))
    start_rotation_speed: np.ndarray = field(default_factory=_zeros(2))
    life_time: np.ndarray = field(default_factory=_zeros(2))
    color: np.ndarray = field(default_factory=_zeros(4))
    gravity: np.ndarray = field(default_factory=_zeros(3))
    emission_rate: float = 0.0
    """Emission bursts per second."""
    emission_count: int = 0
    """Particles per burst."""
    shape_type: Union[EmitterShape, int] = EmitterShape.POINT
    shape_radius: float = 0.0
    shape_angle: float = 0.0
    material: Optional[str] = None
    active: bool = True

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "EmitterDesc":
        """Build a description from a parsed emitter file."""

        def vec(key: str, n: int, default=None) -> np.ndarray:
            value = data.get(key)
            if value is None:
                return np.zeros(n) if default is None else _vec(default, n)
            return _vec(value, n)

        shape = int(data.get("shape_type", 0))
        try:
            shape_type: Union[EmitterShape, int] = EmitterShape(shape)
        except ValueError:
            shape_type = shape

        return cls(
            max_particles=int(data.get("max_particles", 0)),
            start_size=vec("start_size", 2),
            start_rotation=vec("start_rotation", 2),
            start_rotation_speed=vec("start_rotation_speed", 2),
            start_speed=vec("start_speed", 2),
            life_time=vec("life_time", 2),
            color=vec("color", 4, (1.0, 1.0, 1.0, 1.0)),
            gravity=vec("gravity", 3),
            emission_rate=float(data.get("emission_rate", 0.0)),
            emission_count=int(data.get("emission_count", 0)),
            shape_type=shape_type,
            shape_radius=float(data.get("shape_radius", 0.0)),
            shape_angle=float(data.get("shape_angle", 0.0)),
            material=str(data.get("material", "_white")),
            active=int(data.get("active", 1)) == 1,
        )


@dataclass(eq=False)
class ParticleEmitter:
    """Spawns, moves and expires particles.

    ``clock`` is the time of the last :meth:`update`; particles emitted in
    between use it as their birth time.
    """

    desc: EmitterDesc = field(default_factory=EmitterDesc)
    position: np.ndarray = field(default_factory=_zeros(3))
    rotation: Tuple[float, float, float, float] = IDENTITY_QUAT
    is_active: bool = True
    elapsed_time: float = 0.0
    material: Optional[str] = None
    particles: List[Particle] = field(default_factory=list)
    rng: np.random.Generator = field(default_factory=np.random.default_rng)
    clock: float = 0.0

    def _spawn(self, position: np.ndarray, rotation: Sequence[float]) -> Tuple[np.ndarray, np.ndarray]:
        desc, rng = self.desc, self.rng
        shape = desc.shape_type
        if shape == EmitterShape.SPHERE:
            offset = _rand_in_sphere(rng, desc.shape_radius)
            return position + offset, _normalized(offset) * _rand_range(rng, desc.start_speed)
        if shape == EmitterShape.HEMISPHERE:
            offset = _rand_in_sphere(rng, desc.shape_radius)
            offset[2] = abs(offset[2])
            velocity = _normalized(offset) * _rand_range(rng, desc.start_speed)
            return position + _rotate(rotation, offset), _rotate(rotation, velocity)
        if shape == EmitterShape.CONE:
            c = _rand_in_circle(rng)
            offset = np.array([c[0], c[1], 0.0])
            forward = np.array([0.0, 0.0, 1.0])
            t = (desc.shape_angle / 90.0) * float(np.linalg.norm(c))
            direction = forward + (_normalized(offset) - forward) * t
            return (
                position + _rotate(rotation, offset * desc.shape_radius),
                _rotate(rotation, direction * _rand_range(rng, desc.start_speed)),
            )
        # point, and any unknown shape
        return position.copy(), _rand_in_sphere(rng) * _rand_range(rng, desc.start_speed)

    def emit(self, count: int = 0, position=None, rotation=None) -> None:
        """Spawn ``count`` particles (``emission_count`` when 0), up to ``max_particles``.

        ``position`` and ``rotation`` override the emitter's own for this call.
        """
        desc, rng = self.desc, self.rng
        count = count or desc.emission_count
        origin = self.position if position is None else _vec(position, 3)
        orientation = self.rotation if rotation is None else tuple(rotation)
        for _ in range(count):
            if len(self.particles) >= desc.max_particles:
                break
            pos, vel = self._spawn(np.asarray(origin, dtype=float), orientation)
            sign = 1.0 if float(rng.random()) >= 0.5 else -1.0
            size = _rand_range(rng, desc.start_size)
            rotation_speed = _rand_range(rng, desc.start_rotation_speed) * sign
            angle = _rand_range(rng, desc.start_rotation) * sign
            life_time = self.clock + _rand_range(rng, desc.life_time)
            self.particles.append(Particle(
                position=pos,
                velocity=vel,
                color=np.array(desc.color, dtype=float),
                rotation=angle,
                rotation_speed=rotation_speed,
                size=size,
                life_time=life_time,
            ))

    def emit_particle(self, particle: Particle) -> None:
        """Add a fully specified particle, bypassing the particle limit."""
        self.particles.append(particle)

    def update(self, now: float, dt: float) -> None:
        """Expire dead particles, integrate the rest and emit at the emission rate."""
        self.clock = now
        particles = self.particles
        gravity = np.asarray(self.desc.gravity, dtype=float)
        i = 0
        while i < len(particles):
            p = particles[i]
            if p.life_time <= now:
                particles[i] = particles[-1]
                particles.pop()
                continue
            p.velocity = p.velocity + gravity * dt
            p.position = p.position + p.velocity * dt
            p.rotation += p.rotation_speed * dt
            i += 1

        rate = self.desc.emission_rate
        if not self.is_active or rate <= 0.0:
            return
        self.elapsed_time += dt
        interval = 1.0 / rate
        bursts = 0
        while self.elapsed_time >= interval:
            self.elapsed_time -= interval
            bursts += 1
        for _ in range(bursts):
            self.emit()

    def transforms(self) -> List[np.ndarray]:
        """Per-particle 4x4 model matrices (column vectors): translate, spin about z, scale."""
        result = []
        for p in self.particles:
            c, s = np.cos(p.rotation), np.sin(p.rotation)
            m = np.identity(4)
            m[:3, :3] = np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]]) * p.size
            m[:3, 3] = p.position
            result.append(m)
        return result


class ParticleSystem:
    """Keeps every emitter and advances them together."""

    def __init__(self, rng: Optional[np.random.Generator] = None) -> None:
        self.rng = rng if rng is not None else np.random.default_rng()
        self.emitters: List[ParticleEmitter] = []

    def create(self, desc: EmitterDesc) -> ParticleEmitter:
        """Create and register an emitter for ``desc``."""
        emitter = ParticleEmitter(desc=desc, is_active=desc.active, material=desc.material, rng=self.rng)
        self.emitters.append(emitter)
        return emitter

    def update(self, now: float, dt: float) -> None:
        for emitter in self.emitters:
            emitter.update(now, dt)

    def instances(self) -> Iterator[Tuple[ParticleEmitter, List[np.ndarray]]]:
        """Yield each emitter that has particles together with its transforms."""
        for emitter in self.emitters:
            if emitter.particles:
                yield emitter, emitter.transforms()

    def clear(self) -> None:
        self.emitters.clear()