"""Skyline rectangle packer for building texture atlases.

Rectangles are placed bottom-left first (or best-fit) along a skyline that
tracks the lowest free height across the target's width.  Rotation is not
attempted.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

MAXVAL = 0x7FFFFFFF
"""Coordinate given to rectangles that could not be packed."""

_SENTINEL_HEIGHT = 1 << 30


class Heuristic(enum.IntEnum):
    """Placement strategy used by :class:`RectPacker`."""

    SKYLINE_BL_SORT_HEIGHT = 0
    SKYLINE_BF_SORT_HEIGHT = 1

    DEFAULT = 0


@dataclass
class PackRect:
    """A rectangle to pack; ``x``, ``y`` and ``was_packed`` are outputs."""

    w: int
    h: int
    id: int = 0
    x: int = 0
    y: int = 0
    was_packed: bool = False


@dataclass
class _Node:
    x: int
    y: int


class RectPacker:
    """Packs rectangles into a fixed ``width`` x ``height`` target.

    ``num_nodes`` bounds the number of skyline segments; unless out-of-memory
    packing is allowed, widths are rounded up so that this bound is never hit.
    """

    def __init__(self, width: int, height: int, num_nodes: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("target width and height must be positive")
        if num_nodes < 1:
            raise ValueError("num_nodes must be at least 1")
        self.width = width
        self.height = height
        self.num_nodes = num_nodes
        self.heuristic = Heuristic.DEFAULT
        self._free = num_nodes
        # first node spans the full width; the last is a sentinel at x == width
        self._skyline: List[_Node] = [_Node(0, 0), _Node(width, _SENTINEL_HEIGHT)]
        self.align = 1
        self.setup_allow_out_of_mem(False)

    def setup_allow_out_of_mem(self, allow: bool) -> None:
        """Choose between exact widths (may run out of nodes) and quantized widths."""
        if allow:
            self.align = 1
        else:
            self.align = (self.width + self.num_nodes - 1) // self.num_nodes

    def setup_heuristic(self, heuristic: "Heuristic | int") -> None:
        """Select the placement heuristic."""
        try:
            self.heuristic = Heuristic(heuristic)
        except ValueError:
            raise ValueError(f"unknown packing heuristic: {heuristic!r}") from None

    def _find_min_y(self, first: int, x0: int, width: int) -> Tuple[int, int]:
        nodes = self._skyline
        x1 = x0 + width
        min_y = 0
        waste = 0
        visited = 0
        i = first
        while nodes[i].x < x1:
            node, nxt = nodes[i], nodes[i + 1]
            if node.y > min_y:
                waste += visited * (node.y - min_y)
                min_y = node.y
                if node.x < x0:
                    visited += nxt.x - x0
                else:
                    visited += nxt.x - node.x
            else:
                under = nxt.x - node.x
                if under + visited > width:
                    under = width - visited
                waste += under * (min_y - node.y)
                visited += under
            i += 1
        return min_y, waste

    def _find_best_pos(self, width: int, height: int) -> Tuple[Optional[int], int, int]:
        width += self.align - 1
        width -= width % self.align
        if width > self.width or height > self.height:
            return None, 0, 0

        nodes = self._skyline
        best: Optional[int] = None
        best_y = _SENTINEL_HEIGHT
        best_waste = _SENTINEL_HEIGHT

        i = 0
        while nodes[i].x + width <= self.width:
            y, waste = self._find_min_y(i, nodes[i].x, width)
            if self.heuristic == Heuristic.SKYLINE_BL_SORT_HEIGHT:
                if y < best_y:
                    best_y = y
                    best = i
            elif y + height <= self.height:
                if y < best_y or (y == best_y and waste < best_waste):
                    best_y = y
                    best_waste = waste
                    best = i
            i += 1

        best_x = 0 if best is None else nodes[best].x

        if self.heuristic == Heuristic.SKYLINE_BF_SORT_HEIGHT:
            tail = 0
            node = 0
            while nodes[tail].x < width:
                tail += 1
            for t in range(tail, len(nodes)):
                xpos = nodes[t].x - width
                while nodes[node + 1].x <= xpos:
                    node += 1
                y, waste = self._find_min_y(node, xpos, width)
                if y + height <= self.height and y <= best_y:
                    if y < best_y or waste < best_waste or (waste == best_waste and xpos < best_x):
                        best_x = xpos
                        best_y = y
                        best_waste = waste
                        best = node

        return best, best_x, best_y

    def _pack_one(self, width: int, height: int) -> Optional[Tuple[int, int]]:
        best, x, y = self._find_best_pos(width, height)
        if best is None or y + height > self.height or self._free == 0:
            return None

        nodes = self._skyline
        new_node = _Node(x, y + height)
        self._free -= 1

        insert_at = best + 1 if nodes[best].x < x else best
        cur = insert_at
        while cur + 1 < len(nodes) and nodes[cur + 1].x <= x + width:
            cur += 1
        self._free += cur - insert_at

        rest = nodes[cur:]
        if rest[0].x < x + width:
            rest[0].x = x + width
        self._skyline = nodes[:insert_at] + [new_node] + rest
        return x, y

    def pack_rects(self, rects: Iterable[PackRect]) -> bool:
        """Assign positions to ``rects`` in place; return True if all were packed.

        Unpacked rectangles get ``was_packed`` False and both coordinates set to
        :data:`MAXVAL`.  Empty rectangles need no space and land at the origin.
        """
        rects = list(rects)
        for rect in sorted(rects, key=lambda r: (-r.h, -r.w)):
            if rect.w == 0 or rect.h == 0:
                rect.x = rect.y = 0
                continue
            placed = self._pack_one(rect.w, rect.h)
            if placed is None:
                rect.x = rect.y = MAXVAL
            else:
                rect.x, rect.y = placed

        all_packed = True
        for rect in rects:
            rect.was_packed = not (rect.x == MAXVAL and rect.y == MAXVAL)
            if not rect.was_packed:
                all_packed = False
        return all_packed