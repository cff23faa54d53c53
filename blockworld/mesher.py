"""Face-culled, ambient-occluded meshing of a single 16x16x16 chunk section."""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import product
from typing import Optional, Sequence

import numpy as np

from .world import ChunkManager

CONTEXT_SIZE = 18
SECTION_EDGE = 16
LEAVES = 18

Neighbors = tuple[bool, bool, bool, bool, bool, bool]
Offset = tuple[int, int, int]

_TRANSPARENT = frozenset(
    {
        0, 6, 8, 9, 10, 11, 18, 20, 26, 27, 28, 29, 30, 31, 32, 33, 36, 37,
        38, 39, 40, 43, 44, 50, 51, 52, 53, 54, 55, 59, 60, 61, 62, 63, 64,
        65, 66, 67, 68, 69, 70, 71, 72, 73, 74, 75, 76, 77, 78, 79, 81, 83,
        85, 86, 89, 90, 91, 92, 93, 94, 95, 96, 101, 102, 103, 104, 105, 106,
        107, 108, 109, 111, 113, 114, 115, 116, 117, 118, 119, 120, 122, 123,
        124, 125, 126, 127, 128, 130, 131, 132, 134, 135, 136, 138, 139, 141,
        142, 143, 144, 145, 146, 147, 148, 149, 150, 151, 152, 154, 156, 157,
        160, 161, 163, 164, 166, 167, 171, 175,
    }
)

# Up, down, left, right, front, back
_NEIGHBOR_OFFSETS = ((0, 1, 0), (0, -1, 0), (-1, 0, 0), (1, 0, 0), (0, 0, -1), (0, 0, 1))


def is_opaque(block_id: int) -> bool:
    """Whether a block id fully hides the faces behind it."""
    return block_id not in _TRANSPARENT


def vertex_ao(side1: bool, side2: bool, corner: bool) -> int:
    """Ambient occlusion level of a vertex, from 0 (dark) to 3 (open)."""
    if side1 and side2:
        return 0
    return 3 - (int(side1) + int(side2) + int(corner))


@dataclass(frozen=True)
class _Face:
    ao_samples: tuple[tuple[Offset, Offset, Offset], ...]
    corners: tuple[Offset, Offset, Offset, Offset]
    light_from: Offset


_FACES = (
    _Face(  # up
        (
            ((-1, 1, 0), (-1, 1, -1), (0, 1, -1)),
            ((-1, 1, 0), (-1, 1, 1), (0, 1, 1)),
            ((1, 1, 0), (1, 1, 1), (0, 1, 1)),
            ((1, 1, 0), (1, 1, -1), (0, 1, -1)),
        ),
        ((0, 1, 0), (0, 1, 1), (1, 1, 1), (1, 1, 0)),
        (0, 1, 0),
    ),
    _Face(  # down
        (
            ((1, -1, 0), (1, -1, -1), (0, -1, -1)),
            ((1, -1, 0), (1, -1, 1), (0, -1, 1)),
            ((-1, -1, 0), (-1, -1, 1), (0, -1, 1)),
            ((-1, -1, 0), (-1, -1, -1), (0, -1, -1)),
        ),
        ((1, 0, 0), (1, 0, 1), (0, 0, 1), (0, 0, 0)),
        (0, -1, 0),
    ),
    _Face(  # left
        (
            ((-1, 0, 1), (-1, -1, 1), (-1, -1, 0)),
            ((-1, 0, 1), (-1, 1, 1), (-1, 1, 0)),
            ((-1, 0, -1), (-1, 1, -1), (-1, 1, 0)),
            ((-1, 0, -1), (-1, -1, -1), (-1, -1, 0)),
        ),
        ((0, 0, 1), (0, 1, 1), (0, 1, 0), (0, 0, 0)),
        (-1, 0, 0),
    ),
    _Face(  # right
        (
            ((1, 0, -1), (1, -1, -1), (1, -1, 0)),
            ((1, 0, -1), (1, 1, -1), (1, 1, 0)),
            ((1, 0, 1), (1, 1, 1), (1, 1, 0)),
            ((1, 0, 1), (1, -1, 1), (1, -1, 0)),
        ),
        ((1, 0, 0), (1, 1, 0), (1, 1, 1), (1, 0, 1)),
        (1, 0, 0),
    ),
    _Face(  # front
        (
            ((-1, 0, -1), (-1, -1, -1), (0, -1, -1)),
            ((-1, 0, -1), (-1, 1, -1), (0, 1, -1)),
            ((1, 0, -1), (1, 1, -1), (0, 1, -1)),
            ((1, 0, -1), (1, -1, -1), (0, -1, -1)),
        ),
        ((0, 0, 0), (0, 1, 0), (1, 1, 0), (1, 0, 0)),
        (0, 0, -1),
    ),
    _Face(  # back
        (
            ((1, 0, 1), (1, -1, 1), (0, -1, 1)),
            ((1, 0, 1), (1, 1, 1), (0, 1, 1)),
            ((-1, 0, 1), (-1, 1, 1), (0, 1, 1)),
            ((-1, 0, 1), (-1, -1, 1), (0, -1, 1)),
        ),
        ((1, 0, 1), (1, 1, 1), (0, 1, 1), (0, 0, 1)),
        (0, 0, 1),
    ),
)


def _context_index(x: int, y: int, z: int) -> Optional[int]:
    """Flat index into the 18^3 context, or None for coordinates outside it."""
    coords = (x, y, z)
    if any(c < -1 or c > 17 for c in coords):
        return None
    if any(c == 17 for c in coords):
        raise IndexError(f"coordinate {coords} lies past the section context")
    return ((y + 1) * CONTEXT_SIZE + (x + 1)) * CONTEXT_SIZE + (z + 1)


def _empty_volume() -> bytearray:
    return bytearray(CONTEXT_SIZE**3)


@dataclass(eq=False)
class ChunkSectionContext:
    """A section's blocks and light together with a one-block border around it."""

    blocks: bytearray = field(default_factory=_empty_volume)
    light: bytearray = field(default_factory=_empty_volume)

    @classmethod
    def from_world(
        cls, manager: ChunkManager, position: Sequence[int]
    ) -> ChunkSectionContext:
        """Gather the section at chunk ``position`` (x, y, z) and its border from the world."""
        px, py, pz = position
        bx, by, bz = px * 16 - 1, py * 16 - 1, pz * 16 - 1
        blocks, light = bytearray(), bytearray()
        for y, x, z in product(range(CONTEXT_SIZE), repeat=3):
            wx, wy, wz = bx + x, by + y, bz + z
            blocks.append(manager.get_block(wx, wy, wz) & 0xFF)
            block_light, sky_light = manager.get_block_light(wx, wy, wz)
            light.append(((sky_light & 0x0F) << 4) | (block_light & 0x0F))
        return cls(blocks, light)

    def get_block(self, x: int, y: int, z: int) -> int:
        """Block id at section-relative coordinates; air outside the context."""
        index = _context_index(x, y, z)
        return 0 if index is None else self.blocks[index]

    def get_block_light(self, x: int, y: int, z: int) -> tuple[int, int]:
        """Return (block light, sky light) at section-relative coordinates."""
        index = _context_index(x, y, z)
        if index is None:
            return 0, 0
        packed = self.light[index]
        return packed & 0x0F, (packed >> 4) & 0x0F

    def get_neighbors_merged_opaques(self, x: int, y: int, z: int) -> Neighbors:
        """Which of (up, down, left, right, front, back) hide the block's face.

        A face is hidden by an opaque neighbour or by a neighbour of the same
        kind, except for leaves.
        """
        center = self.get_block(x, y, z)

        def hides(dx: int, dy: int, dz: int) -> bool:
            block = self.get_block(x + dx, y + dy, z + dz)
            return is_opaque(block) or (block == center and block != LEAVES)

        return tuple(hides(*offset) for offset in _NEIGHBOR_OFFSETS)  # type: ignore[return-value]


def _vertex_data(x: int, y: int, z: int, block: int, ao: int, light: int) -> int:
    position = (z << 10) | (y << 5) | x
    attributes = block | ((ao & 0b11) << 8) | ((light & 0b1111) << 10)
    return (position | (attributes << 15)) & 0xFFFFFFFF


def mesh_chunk(context: ChunkSectionContext) -> tuple[list[int], list[int]]:
    """Build the vertex data words and triangle indices for a section."""
    vertices: list[int] = []
    indices: list[int] = []

    def opaque_at(x: int, y: int, z: int, offset: Offset) -> bool:
        return is_opaque(context.get_block(x + offset[0], y + offset[1], z + offset[2]))

    for x, z, y in product(range(SECTION_EDGE), repeat=3):
        block = context.get_block(x, y, z)
        if block == 0:
            continue
        hidden = context.get_neighbors_merged_opaques(x, y, z)
        for face, is_hidden in zip(_FACES, hidden):
            if is_hidden:
                continue
            ao = [
                vertex_ao(opaque_at(x, y, z, a), opaque_at(x, y, z, b), opaque_at(x, y, z, c))
                for a, b, c in face.ao_samples
            ]
            lx, ly, lz = face.light_from
            light = max(context.get_block_light(x + lx, y + ly, z + lz))

            first = len(vertices)
            for (cx, cy, cz), level in zip(face.corners, ao):
                vertices.append(_vertex_data(x + cx, y + cy, z + cz, block, level, light))
            i0, i1, i2, i3 = ((first + k) & 0xFFFF for k in range(4))

            if ao[0] + ao[2] > ao[1] + ao[3]:
                indices.extend((i0, i1, i3, i1, i2, i3))
            else:
                indices.extend((i0, i1, i2, i2, i3, i0))

    return vertices, indices


def pack_mesh(vertices: Sequence[int], indices: Sequence[int]) -> tuple[bytes, bytes]:
    """Pack vertex words as little-endian u32 and indices as little-endian u16."""
    vertex_bytes = np.asarray(vertices, dtype=np.uint64).astype("<u4").tobytes()
    index_bytes = np.asarray(indices, dtype=np.uint64).astype("<u2").tobytes()
    return vertex_bytes, index_bytes