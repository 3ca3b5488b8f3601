"""Named caches of textures, shaders, materials and other resources.

Materials are described in a resource configuration mapping (the parsed
resource file) under its ``materials`` key.  Loading of image and shader
files is delegated to the callables given to :class:`ResourceManager`.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from mintkit.render_queue import RenderMode

WHITE_TEXTURE_NAME = "_white"

_MODES = {
    "cutout": (RenderMode.CUTOUT, True),
    "transparent": (RenderMode.TRANSPARENT, False),
    "depthmask": (RenderMode.DEPTH_MASK, True),
}


class ResourceKind(enum.Enum):
    """Separate namespaces for registered resources."""

    TEXTURE = enum.auto()
    MESH = enum.auto()
    SHADER = enum.auto()
    MATERIAL = enum.auto()
    MODEL = enum.auto()
    FONT = enum.auto()
    PARTICLE_EMITTER = enum.auto()


@dataclass(frozen=True)
class SolidTexture:
    """A texture filled with one RGBA8 colour."""

    width: int = 1
    height: int = 1
    rgba: Tuple[int, int, int, int] = (255, 255, 255, 255)


@dataclass
class MaterialSpec:
    """Material settings; ``type`` names the shader family, e.g. ``unlit``."""

    type: str = "unlit"
    texture: Any = None
    render_mode: RenderMode = RenderMode.OPAQUE
    zwrite: bool = True
    queue: int = 0
    color: Tuple[float, float, float, float] = (1.0, 1.0, 1.0, 1.0)


def _to_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "yes", "on", "1"):
            return True
        if lowered in ("false", "no", "off", "0"):
            return False
        return default
    return bool(value)


def _to_color(value: Any) -> Tuple[float, float, float, float]:
    if value is None:
        return (1.0, 1.0, 1.0, 1.0)
    parts = tuple(float(v) for v in value)
    if len(parts) != 4:
        raise ValueError(f"colour needs 4 components, got {len(parts)}")
    return parts  # type: ignore[return-value]


class ResourceManager:
    """Loads resources once and hands out the cached instance afterwards.

    ``texture_loader(filename)`` returns an object with ``width`` and
    ``height`` (or ``None`` on failure); ``shader_loader(vs, fs)`` returns a
    shader or ``None``.
    """

    def __init__(
        self,
        config: Optional[Mapping[str, Any]] = None,
        texture_loader: Optional[Callable[[str], Any]] = None,
        shader_loader: Optional[Callable[[str, str], Any]] = None,
    ) -> None:
        self.config = config
        self.texture_loader = texture_loader
        self.shader_loader = shader_loader
        self._registry: Dict[ResourceKind, Dict[str, Any]] = {kind: {} for kind in ResourceKind}
        self.white_texture: Optional[SolidTexture] = SolidTexture()
        self.register(ResourceKind.TEXTURE, WHITE_TEXTURE_NAME, self.white_texture)

    def register(self, kind: ResourceKind, name: str, resource: Any) -> None:
        """Store ``resource`` under ``name``, replacing any earlier one."""
        self._registry[kind][name] = resource

    def get(self, kind: ResourceKind, name: str) -> Any:
        """Return the resource registered under ``name``, or ``None``."""
        return self._registry[kind].get(name)

    def clear(self) -> None:
        """Forget every resource, the white texture included."""
        for table in self._registry.values():
            table.clear()
        self.white_texture = None

    def load_texture(self, filename: str) -> Any:
        """Load and cache a texture; an unusable file yields the white texture."""
        texture = self.get(ResourceKind.TEXTURE, filename)
        if texture is not None:
            return texture
        loaded = self.texture_loader(filename) if self.texture_loader is not None else None
        if loaded is not None and loaded.width != 0 and loaded.height != 0:
            self.register(ResourceKind.TEXTURE, filename, loaded)
            return loaded
        return self.white_texture

    def load_shader(self, vs_filename: str, fs_filename: str) -> Any:
        """Load and cache a shader pair; failures are returned as ``None`` and not cached."""
        key = vs_filename + fs_filename
        shader = self.get(ResourceKind.SHADER, key)
        if shader is None and self.shader_loader is not None:
            shader = self.shader_loader(vs_filename, fs_filename)
            if shader is not None:
                self.register(ResourceKind.SHADER, key, shader)
        return shader

    def load_material(self, name: str) -> Optional[MaterialSpec]:
        """Build a material from the ``materials`` table, or return the cached one.

        Returns ``None`` when there is no configuration or no such entry.
        """
        material = self.get(ResourceKind.MATERIAL, name)
        if material is not None:
            return material
        if not isinstance(self.config, Mapping):
            return None
        entry = (self.config.get("materials") or {}).get(name)
        if entry is None:
            return None

        texture_name = entry.get("texture") or ""
        render_mode, zwrite = _MODES.get(str(entry.get("mode") or ""), (RenderMode.OPAQUE, True))
        material = MaterialSpec(
            type=str(entry.get("type") or "unlit"),
            texture=self.load_texture(texture_name) if texture_name else self.white_texture,
            render_mode=render_mode,
            queue=int(entry.get("queue", 0) or 0),
            color=_to_color(entry.get("color")),
            zwrite=_to_bool(entry.get("zwrite"), zwrite),
        )
        self.register(ResourceKind.MATERIAL, name, material)
        return material