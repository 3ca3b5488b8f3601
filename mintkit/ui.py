"""Constraint-based widget tree for 2D overlays.

Widgets are laid out relative to their parent (or the screen) using a
per-axis :class:`Constraint`.  Drawing goes through a *canvas* object that
provides the primitive operations; see :class:`Canvas`.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, List, Optional, Protocol, Sequence, Tuple

RectTuple = Tuple[float, float, float, float]
Color = Tuple[float, float, float, float]


class Canvas(Protocol):
    """Drawing surface used by widgets."""

    default_font: Any

    def draw_rect(self, rect: RectTuple, color: Color) -> None: ...

    def draw_ring(
        self,
        center: Tuple[float, float],
        start_angle: float,
        angle: float,
        inner_radius: float,
        outer_radius: float,
        color: Color,
    ) -> None: ...

    def draw_text(self, position: Tuple[float, float], size: float, text: str, font: Any) -> None: ...

    def draw_texture(self, texture: Any, src: RectTuple, dest: RectTuple) -> None: ...


class ConstraintType(enum.Enum):
    """How a constraint value is interpreted."""

    NONE = enum.auto()
    PIXEL = enum.auto()
    PIXEL_BACK = enum.auto()
    RELATIVE = enum.auto()
    RELATIVE_BACK = enum.auto()
    ASPECT = enum.auto()
    CENTERING_PIXEL = enum.auto()
    CENTERING_PIXEL_BACK = enum.auto()
    CENTERING_RELATIVE = enum.auto()
    CENTERING_RELATIVE_BACK = enum.auto()


class Alignment(enum.Enum):
    """Text alignment inside a widget's rectangle."""

    TOP_LEFT = enum.auto()
    TOP_CENTER = enum.auto()
    TOP_RIGHT = enum.auto()
    MIDDLE_LEFT = enum.auto()
    MIDDLE_CENTER = enum.auto()
    MIDDLE_RIGHT = enum.auto()
    BOTTOM_LEFT = enum.auto()
    BOTTOM_CENTER = enum.auto()
    BOTTOM_RIGHT = enum.auto()


@dataclass(frozen=True)
class Constraint:
    """A single-axis layout rule."""

    type: ConstraintType = ConstraintType.NONE
    value: float = 0.0

    @classmethod
    def pixel(cls, value: float) -> "Constraint":
        return cls(ConstraintType.PIXEL, value)

    @classmethod
    def pixel_back(cls, value: float) -> "Constraint":
        return cls(ConstraintType.PIXEL_BACK, value)

    @classmethod
    def relative(cls, value: float) -> "Constraint":
        return cls(ConstraintType.RELATIVE, value)

    @classmethod
    def relative_back(cls, value: float) -> "Constraint":
        return cls(ConstraintType.RELATIVE_BACK, value)

    @classmethod
    def centering_relative(cls, value: float) -> "Constraint":
        return cls(ConstraintType.CENTERING_RELATIVE, value)

    @classmethod
    def center(cls) -> "Constraint":
        return cls(ConstraintType.CENTERING_RELATIVE, 0.5)

    @classmethod
    def aspect(cls, value: float) -> "Constraint":
        return cls(ConstraintType.ASPECT, value)


@dataclass
class Constraints:
    """Layout rules for position (``x``, ``y``) and size (``w``, ``h``)."""

    x: Constraint = field(default_factory=Constraint)
    y: Constraint = field(default_factory=Constraint)
    w: Constraint = field(default_factory=Constraint)
    h: Constraint = field(default_factory=Constraint)


def _position(c: Constraint, start: float, length: float, size: float, default: float) -> float:
    end = start + length
    t = c.type
    if t is ConstraintType.PIXEL:
        return start + c.value
    if t is ConstraintType.PIXEL_BACK:
        return end - size - c.value
    if t is ConstraintType.RELATIVE:
        return start + length * c.value
    if t is ConstraintType.RELATIVE_BACK:
        return end - size - length * c.value
    if t is ConstraintType.CENTERING_PIXEL_BACK:
        return end - size * 0.5 - c.value
    if t is ConstraintType.CENTERING_RELATIVE:
        return start + length * c.value - size * 0.5
    if t is ConstraintType.CENTERING_RELATIVE_BACK:
        return end - size * 0.5 - length * c.value
    return default


def _remove_swap(children: List["Widget"], widget: "Widget") -> None:
    """Remove ``widget`` by moving the last child into its slot."""
    for index, child in enumerate(children):
        if child is widget:
            children[index] = children[-1]
            children.pop()
            return


@dataclass(eq=False)
class Widget:
    """Base widget: a node in the UI tree that draws nothing itself."""

    color: Color = (1.0, 1.0, 1.0, 1.0)
    name: str = ""
    is_active: bool = True
    constraint: Constraints = field(default_factory=Constraints)
    parent: Optional["Widget"] = field(default=None, repr=False)
    children: List["Widget"] = field(default_factory=list, repr=False)

    def set_parent(self, widget: Optional["Widget"]) -> None:
        """Attach to ``widget``; detaching (``None``) also frees all descendants."""
        if widget is self or self.parent is self:
            return
        if self.parent is not None:
            _remove_swap(self.parent.children, self)

        self.parent = widget
        if widget is not None:
            widget.children.append(self)
        else:
            while self.children:
                self.children[0].set_parent(None)

    def add_child(self, widget: Optional["Widget"]) -> None:
        """Move ``widget`` under this widget."""
        if widget is None or widget is self or widget.parent is self:
            return
        if widget.parent is not None:
            _remove_swap(widget.parent.children, widget)
        widget.parent = self
        self.children.append(widget)

    def get_rect(self, screen_size: Sequence[float]) -> RectTuple:
        """Return ``(x, y, w, h)`` in screen pixels."""
        if self.parent is not None:
            px, py, pw, ph = self.parent.get_rect(screen_size)
        else:
            px, py, pw, ph = 0.0, 0.0, float(screen_size[0]), float(screen_size[1])

        c = self.constraint
        if c.w.type is ConstraintType.PIXEL:
            w = c.w.value
        elif c.w.type is ConstraintType.RELATIVE:
            w = pw * c.w.value
        else:
            w = pw

        if c.h.type is ConstraintType.PIXEL:
            h = c.h.value
        elif c.h.type is ConstraintType.RELATIVE:
            h = ph * c.h.value
        elif c.h.type is ConstraintType.ASPECT:
            h = w * c.h.value
        else:
            h = ph

        # aspect width is evaluated after the height is known
        if c.w.type is ConstraintType.ASPECT:
            w = h * c.w.value

        if c.x.type is ConstraintType.CENTERING_PIXEL:
            x = px + c.x.value - w
        else:
            x = _position(c.x, px, pw, w, px)

        if c.y.type is ConstraintType.CENTERING_PIXEL:
            y = py + c.y.value - h * 0.5
        else:
            y = _position(c.y, py, ph, h, py)

        return (x, y, w, h)

    def free(self) -> None:
        """Detach from the tree, releasing every descendant."""
        self.set_parent(None)

    def draw(self, canvas: Canvas, screen_size: Sequence[float]) -> None:
        """Draw this widget only (children are drawn by the tree walk)."""


@dataclass(eq=False)
class RectWidget(Widget):
    """A filled rectangle."""

    def draw(self, canvas: Canvas, screen_size: Sequence[float]) -> None:
        canvas.draw_rect(self.get_rect(screen_size), self.color)


@dataclass(eq=False)
class Ring(Widget):
    """A ring or arc; angles are in degrees, thickness is a fraction of the radius."""

    start_angle: float = 0.0
    angle: float = 360.0
    thickness: float = 0.2

    def draw(self, canvas: Canvas, screen_size: Sequence[float]) -> None:
        x, y, w, h = self.get_rect(screen_size)
        radius = max(w, h)
        center = (x + w * 0.5, y + h * 0.5)
        canvas.draw_ring(
            center, self.start_angle, self.angle, radius * (1.0 - self.thickness), radius, self.color
        )


@dataclass(eq=False)
class Text(Widget):
    """Text scaled so that its width fills the widget's rectangle."""

    text: str = ""
    font: Any = None
    size: float = 12.0
    alignment: Alignment = Alignment.TOP_LEFT

    def draw(self, canvas: Canvas, screen_size: Sequence[float]) -> None:
        font = self.font if self.font is not None else getattr(canvas, "default_font", None)
        if font is None:
            return
        x, y, w, _ = self.get_rect(screen_size)
        text_width = font.calc_text_size(self.size, self.text)[0]
        scale = 1.0 if text_width == 0 else w / text_width
        canvas.draw_text((x, y), self.size * scale, self.text, font)


@dataclass(eq=False)
class Image(Widget):
    """A texture stretched over the widget; a plain rectangle when there is none."""

    texture: Any = None

    def draw(self, canvas: Canvas, screen_size: Sequence[float]) -> None:
        rect = self.get_rect(screen_size)
        if self.texture is not None:
            src = (0.0, 0.0, float(self.texture.width), float(self.texture.height))
            canvas.draw_texture(self.texture, src, rect)
        else:
            canvas.draw_rect(rect, self.color)


def _make_root() -> Widget:
    return Widget(
        color=(1.0, 1.0, 1.0, 0.0),
        constraint=Constraints(
            x=Constraint.relative(0.0),
            y=Constraint.relative(0.0),
            w=Constraint.relative(1.0),
            h=Constraint.relative(1.0),
        ),
    )


class UIRoot:
    """Owns the root widget covering the whole screen."""

    def __init__(self) -> None:
        self.root = _make_root()

    def add(self, widget: Widget) -> Widget:
        """Attach ``widget`` to the root and return it."""
        self.root.add_child(widget)
        return widget

    def draw(self, canvas: Canvas, screen_size: Sequence[float]) -> None:
        """Draw active widgets depth-first, parents before children."""
        self._draw_widget(self.root, canvas, screen_size)

    def _draw_widget(self, widget: Widget, canvas: Canvas, screen_size: Sequence[float]) -> None:
        if not widget.is_active:
            return
        widget.draw(canvas, screen_size)
        for child in list(widget.children):
            self._draw_widget(child, canvas, screen_size)

    def clear(self) -> None:
        """Release every widget and start with a fresh root."""
        self.root.free()
        self.root = _make_root()