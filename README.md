# mintkit

Building blocks for small 3D games that depend on no window system or
graphics API. Everything works on plain Python data and `numpy` arrays,
so the same logic can feed an OpenGL renderer, a software rasterizer or a
test suite.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

### `mintkit.rectpack`

A skyline rectangle packer for texture atlases. `RectPacker(width, height,
num_nodes)` places `PackRect` objects in place with `pack_rects(rects)`,
which returns `True` when every rectangle fitted. Rectangles that did not
fit get `was_packed = False` and both coordinates set to `MAXVAL`; empty
rectangles land at the origin. `setup_heuristic()` picks between
`Heuristic.SKYLINE_BL_SORT_HEIGHT` (bottom-left, the default) and
`Heuristic.SKYLINE_BF_SORT_HEIGHT` (best fit); `setup_allow_out_of_mem(True)`
stops widths being rounded up to fit within `num_nodes` skyline segments.

```python
from mintkit.rectpack import RectPacker, PackRect

packer = RectPacker(256, 256, num_nodes=256)
rects = [PackRect(id=i, w=32, h=16) for i in range(10)]
all_packed = packer.pack_rects(rects)
for r in rects:
    print(r.id, r.x, r.y, r.was_packed)
```

### `mintkit.ui`

A widget tree laid out with per-axis `Constraint`s (`pixel`, `pixel_back`,
`relative`, `relative_back`, `centering_relative`, `center`, `aspect`, or
any `ConstraintType`). `Widget.get_rect(screen_size)` returns
`(x, y, w, h)` relative to the parent, or to the screen for a widget with
no parent. `set_parent`, `add_child` and `free` edit the tree.

`RectWidget`, `Ring`, `Text` and `Image` draw through a *canvas* you
provide, following the `Canvas` protocol: `draw_rect`, `draw_ring`,
`draw_text`, `draw_texture` and a `default_font` attribute. A `Text`
widget needs a font with `calc_text_size(size, text)` and scales its text
to fill the widget's width; an `Image` needs a texture with `width` and
`height`, and draws a plain rectangle when it has none. `UIRoot` holds a
root covering the whole screen; `add`, `draw` (active widgets, parents
before children) and `clear`.

```python
from mintkit.ui import UIRoot, RectWidget, Constraint, Constraints

ui = UIRoot()
panel = ui.add(RectWidget(
    color=(0.0, 0.0, 0.0, 0.5),
    constraint=Constraints(
        x=Constraint.center(), y=Constraint.pixel(10),
        w=Constraint.relative(0.5), h=Constraint.pixel(40),
    ),
))
print(panel.get_rect((800, 600)))  # (200.0, 10.0, 400.0, 40.0)
```

### `mintkit.particle`

Particle emitters with `EmitterShape.POINT`, `SPHERE`, `HEMISPHERE` and
`CONE` spawn volumes. `EmitterDesc.from_mapping()` builds a description
from a parsed emitter file; `ParticleSystem.create(desc)` registers an
emitter and `ParticleSystem.update(now, dt)` expires, moves and emits
particles for all of them. `ParticleEmitter.emit()` spawns a burst
(optionally at another position and rotation), `emit_particle()` adds a
ready-made `Particle`, and `transforms()` gives one 4x4 matrix per
particle. `ParticleSystem.instances()` yields each emitter that has
particles together with its transforms.

```python
from mintkit.particle import EmitterDesc, ParticleSystem

system = ParticleSystem()
emitter = system.create(EmitterDesc.from_mapping({
    "max_particles": 100,
    "emission_rate": 20,
    "emission_count": 1,
    "life_time": [1.0, 2.0],
    "start_speed": [1.0, 3.0],
    "start_size": [0.1, 0.3],
}))

now = 0.0
for _ in range(60):
    now += 1 / 60
    system.update(now, 1 / 60)

for transform in emitter.transforms():
    ...  # hand to your renderer
```

### `mintkit.camera`

`look_at()` and `perspective()` build column-vector matrices. `Camera`
gives `view_matrix()`, `projection_matrix()`, `get_ray(screen_position)`
returning a `Ray`, and a screen shake started with `shake(...)` and read
back with `shaked_transform(now)`. `CameraList` keeps the cameras to
render and falls back to its default camera whenever it would be empty;
`sorted()` orders them by priority.

```python
from mintkit.camera import Camera

camera = Camera(viewport=(0.0, 0.0, 800.0, 600.0))
ray = camera.get_ray((400, 300))
clip_from_world = camera.projection_matrix() @ camera.view_matrix()
```

### `mintkit.render_queue`

`RenderQueue` records draw commands (`draw_mesh`, `draw_mesh_instanced`,
`draw_mesh_lines`, `draw_model`, `draw_model_instanced`); `ordered()` and
`flush()` return them sorted by the material's `queue`, with
`RenderMode.TRANSPARENT` materials last. The geometry helpers
`line_strip_geometry()` (a camera-facing strip from `LineData` /
`LinePoint`), `ring_geometry()` and `sprite_quad()` return arrays ready for
upload.

### `mintkit.resources`

`ResourceManager` caches resources by `ResourceKind` and name
(`register`, `get`, `clear`). `load_texture` and `load_shader` call the
loader functions you pass in and cache what they return; a texture that
fails to load is replaced by a 1x1 white `SolidTexture`. `load_material`
builds a `MaterialSpec` from the `materials` table of a configuration
mapping (`type`, `texture`, `mode`, `queue`, `color`, `zwrite`).

## What this package does not do

mintkit draws nothing itself: there is no window, GPU backend, shader
compiler, post-processing, font rasteriser or audio. The UI draws only
through the canvas you supply, the render queue only orders commands, and
the resource manager loads textures and shaders only through your loader
functions. Meshes, models, fonts and particle emitters can be registered
and looked up, but the package has no loaders for them, and it does not
parse resource or emitter files: it takes their contents as mappings.