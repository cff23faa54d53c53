"""Vertex data for debug overlays: chunk boundary lines and a unit cube."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Iterable

Point = tuple[float, float, float]
Color = tuple[float, float, float]

YELLOW: Color = (1.0, 1.0, 0.0)
RED: Color = (1.0, 0.0, 0.0)
BLUE: Color = (0.247, 0.247, 1.0)
CYAN: Color = (0.0, 0.6, 0.6)

LINE_BOTTOM = -64.0
LINE_TOP = 320.0

# Vertical markers at the corners of the surrounding chunks, as (x, z).
_OUTSIDE_CORNERS = (
    (-16, -16), (0, -16), (16, -16), (32, -16),
    (-16, 0), (32, 0), (-16, 16), (32, 16),
    (-16, 32), (0, 32), (16, 32), (32, 32),
)

_CUBE_VERTICES: tuple[Point, ...] = (
    (-0.5, -0.5, 0.5),  # left, first strip
    (-0.5, 0.5, 0.5),
    (-0.5, -0.5, -0.5),
    (-0.5, 0.5, -0.5),
    (0.5, -0.5, -0.5),  # back
    (0.5, 0.5, -0.5),
    (0.5, -0.5, 0.5),  # right
    (0.5, 0.5, 0.5),
    (0.5, 0.5, -0.5),  # top, second strip
    (-0.5, 0.5, -0.5),
    (0.5, 0.5, 0.5),
    (-0.5, 0.5, 0.5),
    (0.5, -0.5, 0.5),  # front
    (-0.5, -0.5, 0.5),
    (0.5, -0.5, -0.5),  # bottom
    (-0.5, -0.5, -0.5),
)

_LINE_VERTEX = struct.Struct("<6f")
LINE_VERTEX_STRIDE = _LINE_VERTEX.size


@dataclass(frozen=True)
class DebugLineVertex:
    """One end of a coloured debug line."""

    pos: Point
    col: Color


def _point(x: float, y: float, z: float) -> Point:
    return float(x), float(y), float(z)


def _horizontal_color(y: int) -> Color:
    if y % 16 == 0:
        return BLUE
    if y % 8 == 0:
        return CYAN
    return YELLOW


def _vertical_color(i: int) -> Color:
    if i % 16 == 0:
        return BLUE
    if i % 4 == 0:
        return CYAN
    return YELLOW


def chunk_lines() -> list[DebugLineVertex]:
    """Line-list vertices outlining the current chunk and marking its neighbours."""
    vertices: list[DebugLineVertex] = []

    def line(a: Point, b: Point, color: Color) -> None:
        vertices.append(DebugLineVertex(a, color))
        vertices.append(DebugLineVertex(b, color))

    for x, z in _OUTSIDE_CORNERS:
        line(_point(x, LINE_BOTTOM, z), _point(x, LINE_TOP, z), RED)

    for y in range(int(LINE_BOTTOM), int(LINE_TOP), 2):
        color = _horizontal_color(y)
        line(_point(0, y, 0), _point(16, y, 0), color)
        line(_point(16, y, 0), _point(16, y, 16), color)
        line(_point(0, y, 0), _point(0, y, 16), color)
        line(_point(0, y, 16), _point(16, y, 16), color)

    for i in range(0, 16, 2):
        color = _vertical_color(i)
        line(_point(i, LINE_BOTTOM, 0), _point(i, LINE_TOP, 0), color)
        line(_point(16, LINE_BOTTOM, i), _point(16, LINE_TOP, i), color)
        line(_point(0, LINE_BOTTOM, 16 - i), _point(0, LINE_TOP, 16 - i), color)
        line(_point(16 - i, LINE_BOTTOM, 16), _point(16 - i, LINE_TOP, 16), color)

    return vertices


def cube_vertices() -> tuple[Point, ...]:
    """Two triangle strips covering a unit cube centred on the origin."""
    return _CUBE_VERTICES


def pack_line_vertices(vertices: Iterable[DebugLineVertex]) -> bytes:
    """Pack line vertices as six little-endian 32-bit floats each (position, colour)."""
    return b"".join(_LINE_VERTEX.pack(*vertex.pos, *vertex.col) for vertex in vertices)