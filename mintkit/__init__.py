"""Backend-independent building blocks for small 3D games: rectangle packing,
UI layout, particles, cameras, render queues and resource caching."""

__version__ = "0.1.0"
__all__ = ["camera", "particle", "rectpack", "render_queue", "resources", "ui"]