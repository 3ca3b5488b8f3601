import pytest

from mintkit.ui import (
    Alignment,
    Constraint,
    Constraints,
    ConstraintType,
    Image,
    RectWidget,
    Ring,
    Text,
    UIRoot,
    Widget,
)

SCREEN = (800.0, 600.0)


class FakeFont:
    def __init__(self, width):
        self.width = width

    def calc_text_size(self, size, text):
        return (self.width, size)


class FakeTexture:
    width = 32
    height = 16


class RecordingCanvas:
    def __init__(self, default_font=None):
        self.default_font = default_font
        self.calls = []

    def draw_rect(self, rect, color):
        self.calls.append(("rect", rect, color))

    def draw_ring(self, center, start_angle, angle, inner_radius, outer_radius, color):
        self.calls.append(("ring", center, start_angle, angle, inner_radius, outer_radius, color))

    def draw_text(self, position, size, text, font):
        self.calls.append(("text", position, size, text, font))

    def draw_texture(self, texture, src, dest):
        self.calls.append(("texture", texture, src, dest))


def test_unconstrained_widget_fills_screen():
    assert Widget().get_rect(SCREEN) == (0.0, 0.0, SCREEN[0], SCREEN[1])


def test_pixel_constraints():
    w = Widget(constraint=Constraints(
        x=Constraint.pixel(10), y=Constraint.pixel(20), w=Constraint.pixel(100), h=Constraint.pixel(50)))
    assert w.get_rect(SCREEN) == (10, 20, 100, 50)


def test_pixel_back_constraints():
    w = Widget(constraint=Constraints(
        x=Constraint.pixel_back(10), y=Constraint.pixel_back(20), w=Constraint.pixel(100), h=Constraint.pixel(50)))
    x, y, width, height = w.get_rect(SCREEN)
    assert x + width + 10 == SCREEN[0]
    assert y + height + 20 == SCREEN[1]


def test_relative_size_is_fraction_of_parent():
    w = Widget(constraint=Constraints(w=Constraint.relative(0.5), h=Constraint.relative(0.25)))
    _, _, width, height = w.get_rect(SCREEN)
    assert width == SCREEN[0] * 0.5
    assert height == SCREEN[1] * 0.25


def test_aspect_width_uses_height():
    w = Widget(constraint=Constraints(w=Constraint.aspect(2.0), h=Constraint.pixel(50)))
    _, _, width, height = w.get_rect(SCREEN)
    assert height == 50
    assert width == height * 2.0


def test_aspect_height_uses_width():
    w = Widget(constraint=Constraints(w=Constraint.pixel(40), h=Constraint.aspect(0.5)))
    assert w.get_rect(SCREEN)[3] == 20


def test_center_constraint_centers_in_parent():
    w = Widget(constraint=Constraints(
        x=Constraint.center(), y=Constraint.center(), w=Constraint.pixel(100), h=Constraint.pixel(60)))
    x, y, width, height = w.get_rect(SCREEN)
    assert x + width / 2 == SCREEN[0] / 2
    assert y + height / 2 == SCREEN[1] / 2


def test_centering_pixel_x_subtracts_full_width():
    w = Widget(constraint=Constraints(
        x=Constraint(ConstraintType.CENTERING_PIXEL, 300), y=Constraint(ConstraintType.CENTERING_PIXEL, 300),
        w=Constraint.pixel(100), h=Constraint.pixel(60)))
    x, y, _, _ = w.get_rect(SCREEN)
    assert x == 300 - 100
    assert y == 300 - 30


def test_child_rect_is_offset_by_parent():
    parent = Widget(constraint=Constraints(
        x=Constraint.pixel(50), y=Constraint.pixel(40), w=Constraint.pixel(200), h=Constraint.pixel(100)))
    child = Widget(constraint=Constraints(x=Constraint.pixel(5), y=Constraint.relative_back(0.0),
                                          w=Constraint.pixel(10), h=Constraint.pixel(10)))
    parent.add_child(child)
    x, y, _, _ = child.get_rect(SCREEN)
    assert x == 55
    assert y == 40 + 100 - 10


def test_add_child_moves_between_parents():
    a, b, c = Widget(), Widget(), Widget()
    a.add_child(c)
    b.add_child(c)
    assert c.parent is b
    assert a.children == []
    assert b.children == [c]


def test_add_child_ignores_self_and_none():
    a = Widget()
    a.add_child(a)
    a.add_child(None)
    assert a.children == []
    assert a.parent is None


def test_set_parent_to_self_is_ignored():
    a = Widget()
    a.set_parent(a)
    assert a.parent is None


def test_detach_swaps_last_child_into_place():
    parent = Widget()
    a, b, c = Widget(name="a"), Widget(name="b"), Widget(name="c")
    for w in (a, b, c):
        w.set_parent(parent)
    a.set_parent(None)
    assert [w.name for w in parent.children] == ["c", "b"]


def test_free_releases_descendants():
    parent, child, grandchild = Widget(), Widget(), Widget()
    parent.add_child(child)
    child.add_child(grandchild)
    child.free()
    assert child.parent is None
    assert child.children == []
    assert grandchild.parent is None
    assert parent.children == []


def test_rect_widget_draws_its_rect():
    canvas = RecordingCanvas()
    w = RectWidget(color=(1, 0, 0, 1), constraint=Constraints(w=Constraint.pixel(10), h=Constraint.pixel(20)))
    w.draw(canvas, SCREEN)
    assert canvas.calls == [("rect", (0.0, 0.0, 10, 20), (1, 0, 0, 1))]


def test_ring_uses_larger_side_as_radius():
    canvas = RecordingCanvas()
    ring = Ring(thickness=0.5, constraint=Constraints(
        x=Constraint.pixel(10), y=Constraint.pixel(10), w=Constraint.pixel(40), h=Constraint.pixel(20)))
    ring.draw(canvas, SCREEN)
    kind, center, start, angle, inner, outer, _ = canvas.calls[0]
    assert kind == "ring"
    assert center == (30.0, 20.0)
    assert (start, angle) == (0.0, 360.0)
    assert outer == 40
    assert inner == outer * 0.5


def test_text_scales_to_rect_width():
    canvas = RecordingCanvas(default_font=FakeFont(width=50))
    text = Text(text="hi", constraint=Constraints(w=Constraint.pixel(100), h=Constraint.pixel(20)))
    text.draw(canvas, SCREEN)
    _, position, size, value, font = canvas.calls[0]
    assert position == (0.0, 0.0)
    assert size == text.size * 100 / 50
    assert value == "hi"
    assert font is canvas.default_font
    assert text.alignment is Alignment.TOP_LEFT


def test_text_with_zero_width_keeps_size():
    own = FakeFont(width=0)
    canvas = RecordingCanvas(default_font=FakeFont(width=10))
    Text(text="", font=own).draw(canvas, SCREEN)
    assert canvas.calls[0][2] == 12.0
    assert canvas.calls[0][4] is own


def test_image_draws_texture_or_rect():
    canvas = RecordingCanvas()
    tex = FakeTexture()
    Image(texture=tex).draw(canvas, SCREEN)
    Image().draw(canvas, SCREEN)
    assert canvas.calls[0] == ("texture", tex, (0.0, 0.0, 32.0, 16.0), (0.0, 0.0, SCREEN[0], SCREEN[1]))
    assert canvas.calls[1][0] == "rect"


def test_root_draws_active_tree_in_order():
    ui = UIRoot()
    canvas = RecordingCanvas()
    first = ui.add(RectWidget(color=(1, 0, 0, 1)))
    hidden = ui.add(RectWidget(color=(0, 1, 0, 1), is_active=False))
    hidden.add_child(RectWidget(color=(0, 0, 1, 1)))
    first.add_child(RectWidget(color=(1, 1, 0, 1)))
    ui.draw(canvas, SCREEN)
    assert [call[2] for call in canvas.calls] == [(1, 0, 0, 1), (1, 1, 0, 1)]


def test_root_clear_detaches_widgets():
    ui = UIRoot()
    w = ui.add(Widget())
    assert w.parent is ui.root
    ui.clear()
    assert w.parent is None
    assert ui.root.children == []
    assert ui.root.get_rect(SCREEN) == (0.0, 0.0, SCREEN[0], SCREEN[1])