from dataclasses import dataclass

import pytest

from mintkit.render_queue import RenderMode
from mintkit.resources import (
    WHITE_TEXTURE_NAME,
    MaterialSpec,
    ResourceKind,
    ResourceManager,
)


@dataclass
class Tex:
    name: str
    width: int = 16
    height: int = 16


class CountingLoader:
    def __init__(self, result_for=None):
        self.calls = []
        self.result_for = result_for or (lambda name: Tex(name))

    def __call__(self, *args):
        self.calls.append(args)
        return self.result_for(*args)


def make_manager(materials=None, textures=None, shaders=None):
    config = {"materials": materials or {}}
    return ResourceManager(config, textures or CountingLoader(), shaders or CountingLoader(lambda v, f: (v, f)))


def test_register_and_get_round_trip():
    rm = make_manager()
    rm.register(ResourceKind.MESH, "cube", "mesh-object")
    assert rm.get(ResourceKind.MESH, "cube") == "mesh-object"
    assert rm.get(ResourceKind.MODEL, "cube") is None
    assert rm.get(ResourceKind.MESH, "missing") is None


def test_white_texture_is_registered():
    rm = make_manager()
    white = rm.get(ResourceKind.TEXTURE, WHITE_TEXTURE_NAME)
    assert white is rm.white_texture
    assert (white.width, white.height) == (1, 1)
    assert white.rgba == (255, 255, 255, 255)


def test_load_texture_is_cached():
    loader = CountingLoader()
    rm = make_manager(textures=loader)
    first = rm.load_texture("a.png")
    second = rm.load_texture("a.png")
    assert first is second
    assert first.name == "a.png"
    assert loader.calls == [("a.png",)]


@pytest.mark.parametrize("result", [None, Tex("x", 0, 4), Tex("x", 4, 0)])
def test_unusable_texture_falls_back_to_white(result):
    loader = CountingLoader(lambda name: result)
    rm = make_manager(textures=loader)
    assert rm.load_texture("bad.png") is rm.white_texture
    assert rm.get(ResourceKind.TEXTURE, "bad.png") is None


def test_load_shader_caches_by_joined_names():
    shaders = CountingLoader(lambda v, f: (v, f))
    rm = make_manager(shaders=shaders)
    s = rm.load_shader("a.vs", "b.fs")
    assert s == ("a.vs", "b.fs")
    assert rm.load_shader("a.vs", "b.fs") is s
    assert rm.get(ResourceKind.SHADER, "a.vsb.fs") is s
    assert len(shaders.calls) == 1


def test_failed_shader_is_not_cached():
    shaders = CountingLoader(lambda v, f: None)
    rm = make_manager(shaders=shaders)
    assert rm.load_shader("a", "b") is None
    assert rm.load_shader("a", "b") is None
    assert len(shaders.calls) == 2


@pytest.mark.parametrize(
    "mode, expected_mode, expected_zwrite",
    [
        ("cutout", RenderMode.CUTOUT, True),
        ("transparent", RenderMode.TRANSPARENT, False),
        ("depthmask", RenderMode.DEPTH_MASK, True),
        ("opaque", RenderMode.OPAQUE, True),
        (None, RenderMode.OPAQUE, True),
    ],
)
def test_material_modes(mode, expected_mode, expected_zwrite):
    rm = make_manager({"m": {"mode": mode}})
    mat = rm.load_material("m")
    assert mat.render_mode is expected_mode
    assert mat.zwrite is expected_zwrite


def test_material_defaults_and_fields():
    rm = make_manager({"plain": {}, "full": {"type": "lit", "queue": 3, "color": [0.5, 0.25, 1, 1]}})
    plain = rm.load_material("plain")
    assert plain == MaterialSpec(texture=rm.white_texture)
    full = rm.load_material("full")
    assert full.type == "lit"
    assert full.queue == 3
    assert full.color == (0.5, 0.25, 1.0, 1.0)


def test_material_zwrite_override_and_texture():
    textures = CountingLoader()
    rm = make_manager({"m": {"mode": "transparent", "zwrite": True, "texture": "t.png"}}, textures=textures)
    mat = rm.load_material("m")
    assert mat.zwrite is True
    assert mat.texture is rm.get(ResourceKind.TEXTURE, "t.png")
    assert textures.calls == [("t.png",)]


def test_material_is_cached():
    rm = make_manager({"m": {}})
    assert rm.load_material("m") is rm.load_material("m")
    assert rm.get(ResourceKind.MATERIAL, "m") is rm.load_material("m")


def test_missing_material_or_config_gives_none():
    rm = make_manager({"m": {}})
    assert rm.load_material("other") is None
    bare = ResourceManager(None)
    assert bare.load_material("m") is None


def test_bad_color_raises():
    rm = make_manager({"m": {"color": [1, 2]}})
    with pytest.raises(ValueError):
        rm.load_material("m")


def test_clear_forgets_everything():
    rm = make_manager({"m": {}})
    rm.load_material("m")
    rm.load_texture("a.png")
    rm.clear()
    assert rm.get(ResourceKind.MATERIAL, "m") is None
    assert rm.get(ResourceKind.TEXTURE, "a.png") is None
    assert rm.get(ResourceKind.TEXTURE, WHITE_TEXTURE_NAME) is None
    assert rm.white_texture is None