"""Chunk storage: columns of 16x16x16 block sections keyed by chunk coordinates."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import Iterator, Optional

CHUNK_SECTION_SIZE = 16 * 16 * 16
CHUNK_SIZE = CHUNK_SECTION_SIZE * 16
CHUNK_SIZE_2D = 16 * 16
SECTIONS_PER_COLUMN = 16
NIBBLE_ARRAY_SIZE = CHUNK_SECTION_SIZE // 2

Neighbors = tuple[bool, bool, bool, bool, bool, bool]

# Up, down, left, right, front, back
_NEIGHBOR_OFFSETS = ((0, 1, 0), (0, -1, 0), (-1, 0, 0), (1, 0, 0), (0, 0, -1), (0, 0, 1))
_SHORT_BLOCKS = struct.Struct(f"<{CHUNK_SECTION_SIZE}H")


def _block_index(x: int, y: int, z: int) -> int:
    return ((y & 0x0F) << 8) | ((z & 0x0F) << 4) | (x & 0x0F)


def _chunk_coord(x: int, y: int, z: int) -> tuple[int, int, int]:
    return x >> 4, y >> 4, z >> 4


def _truncated_rem16(value: int) -> int:
    """Remainder by 16 that keeps the sign of ``value``."""
    rem = abs(value) % 16
    return -rem if value < 0 else rem


def _valid_section_y(y: int) -> bool:
    return 0 <= y < SECTIONS_PER_COLUMN


def _set_bits(mask: int) -> Iterator[int]:
    return (bit for bit in range(SECTIONS_PER_COLUMN) if mask & (1 << bit))


class _Cursor:
    def __init__(self, data: bytes) -> None:
        self._data = memoryview(bytes(data))
        self.position = 0

    def read(self, size: int) -> memoryview:
        end = self.position + size
        if end > len(self._data):
            raise EOFError(
                f"chunk data ended at byte {len(self._data)}, needed {end}"
            )
        chunk = self._data[self.position:end]
        self.position = end
        return chunk


@dataclass(eq=False)
class ChunkSection:
    """A 16x16x16 cube of block ids with block and sky light nibbles."""

    dirty: bool = True
    blocks: bytearray = field(default_factory=lambda: bytearray(CHUNK_SECTION_SIZE))
    light: bytearray = field(default_factory=lambda: bytearray(NIBBLE_ARRAY_SIZE))
    skylight: bytearray = field(default_factory=lambda: bytearray(NIBBLE_ARRAY_SIZE))

    def get_block(self, x: int, y: int, z: int) -> int:
        """Block id at the coordinates, taken modulo 16; air below y=0."""
        if y < 0:
            return 0
        return self.blocks[_block_index(x, y, z)]

    def set_block(self, x: int, y: int, z: int, block: int) -> None:
        if y < 0:
            return
        self.blocks[_block_index(x, y, z)] = block
        self.dirty = True

    def get_block_light(self, x: int, y: int, z: int) -> tuple[int, int]:
        """Return (block light, sky light) at the coordinates."""
        if y < 0:
            return 0, 0
        index = _block_index(x, y, z)
        light, sky = self.light[index // 2], self.skylight[index // 2]
        if index % 2:
            return (light >> 4) & 0x0F, (sky >> 4) & 0x0F
        return light & 0x0F, sky & 0x0F

    def get_neighbors(self, x: int, y: int, z: int) -> Neighbors:
        """Which of (up, down, left, right, front, back) hold a block inside this section."""

        def occupied(dx: int, dy: int, dz: int) -> bool:
            tx, ty, tz = x + dx, y + dy, z + dz
            if not (0 <= tx <= 15 and 0 <= ty <= 15 and 0 <= tz <= 15):
                return False
            return self.get_block(tx, ty, tz) != 0

        return tuple(occupied(*offset) for offset in _NEIGHBOR_OFFSETS)  # type: ignore[return-value]


@dataclass(eq=False)
class ChunkColumn:
    """Sixteen optional sections stacked vertically, plus the column's biomes."""

    sections: list[Optional[ChunkSection]] = field(
        default_factory=lambda: [None] * SECTIONS_PER_COLUMN
    )
    biomes: bytearray = field(default_factory=lambda: bytearray(CHUNK_SIZE_2D))

    @staticmethod
    def _check_y(y: int) -> None:
        if not _valid_section_y(y):
            raise IndexError(f"section index {y} out of range 0..{SECTIONS_PER_COLUMN - 1}")

    def get_section(self, y: int) -> Optional[ChunkSection]:
        self._check_y(y)
        return self.sections[y]

    def get_section_or_insert(self, y: int) -> ChunkSection:
        self._check_y(y)
        section = self.sections[y]
        if section is None:
            section = self.sections[y] = ChunkSection()
        return section


class ChunkManager:
    """All loaded chunk columns, keyed by (chunk x, chunk z)."""

    def __init__(self) -> None:
        self.chunks: dict[tuple[int, int], ChunkColumn] = {}

    def _column(self, coords: tuple[int, int]) -> ChunkColumn:
        return self.chunks.setdefault(coords, ChunkColumn())

    def load_chunk_5(
        self,
        coords: tuple[int, int],
        bitmask: int,
        bitmask_add: int,
        skylight: bool,
        ground_up_continuous: bool,
        data: bytes,
    ) -> int:
        """Load chunk data in the protocol 5 layout; return the number of bytes consumed."""
        coords = tuple(coords)
        if ground_up_continuous and bitmask == 0:
            self.chunks.pop(coords, None)
            return 0

        column = self._column(coords)
        cursor = _Cursor(data)
        present = list(_set_bits(bitmask))

        for y in present:
            blocks = cursor.read(CHUNK_SECTION_SIZE)
            section = column.get_section_or_insert(y)
            section.dirty = True
            section.blocks[:] = blocks

        for _ in present:
            cursor.read(NIBBLE_ARRAY_SIZE)  # block metadata, not stored

        for y in present:
            section = column.get_section_or_insert(y)
            section.dirty = True
            section.light[:] = cursor.read(NIBBLE_ARRAY_SIZE)

        if skylight:
            for y in present:
                section = column.get_section_or_insert(y)
                section.dirty = True
                section.skylight[:] = cursor.read(NIBBLE_ARRAY_SIZE)

        for _ in _set_bits(bitmask_add):
            cursor.read(NIBBLE_ARRAY_SIZE)  # block id extension, not stored

        if ground_up_continuous:
            column.biomes[:] = cursor.read(CHUNK_SIZE_2D)

        return cursor.position

    def load_chunk_47(
        self,
        coords: tuple[int, int],
        bitmask: int,
        skylight: bool,
        ground_up_continuous: bool,
        data: bytes,
    ) -> int:
        """Load chunk data in the protocol 47 layout; return the number of bytes consumed.

        Block ids are stored as 16-bit little-endian values and truncated to 8 bits.
        """
        coords = tuple(coords)
        if ground_up_continuous and bitmask == 0:
            self.chunks.pop(coords, None)
            return 0

        column = self._column(coords)
        cursor = _Cursor(data)
        present = list(_set_bits(bitmask))

        for y in present:
            values = _SHORT_BLOCKS.unpack(cursor.read(_SHORT_BLOCKS.size))
            section = column.get_section_or_insert(y)
            section.dirty = True
            section.blocks[:] = bytes((value >> 4) & 0xFF for value in values)

        for y in present:
            section = column.get_section_or_insert(y)
            section.dirty = True
            section.light[:] = cursor.read(NIBBLE_ARRAY_SIZE)

        if skylight:
            for y in present:
                section = column.get_section_or_insert(y)
                section.dirty = True
                section.skylight[:] = cursor.read(NIBBLE_ARRAY_SIZE)

        if ground_up_continuous:
            column.biomes[:] = cursor.read(CHUNK_SIZE_2D)

        return cursor.position

    def get(self, coords: tuple[int, int]) -> Optional[ChunkColumn]:
        return self.chunks.get(tuple(coords))

    def _section_at(self, x: int, y: int, z: int) -> Optional[ChunkSection]:
        cx, cy, cz = _chunk_coord(x, y, z)
        column = self.chunks.get((cx, cz))
        if column is None or not _valid_section_y(cy):
            return None
        return column.sections[cy]

    def get_block(self, bx: int, by: int, bz: int) -> int:
        """Block id at world coordinates; air where nothing is loaded."""
        section = self._section_at(bx, by, bz)
        return section.get_block(bx, by, bz) if section is not None else 0

    def get_block_light(self, x: int, y: int, z: int) -> tuple[int, int]:
        section = self._section_at(x, y, z)
        return section.get_block_light(x, y, z) if section is not None else (0, 0)

    @staticmethod
    def _mark_dirty(column: Optional[ChunkColumn], y: int) -> None:
        if column is None or not _valid_section_y(y):
            return
        section = column.sections[y]
        if section is not None:
            section.dirty = True

    def set_block(self, bx: int, by: int, bz: int, block: int) -> None:
        """Set a block and mark the sections whose meshes it touches as dirty."""
        cx, cy, cz = _chunk_coord(bx, by, bz)
        rx, ry, rz = _truncated_rem16(bx), _truncated_rem16(by), _truncated_rem16(bz)

        column = self.chunks.get((cx, cz))
        if column is not None:
            if _valid_section_y(cy) and column.sections[cy] is not None:
                column.sections[cy].set_block(bx, by, bz, block)
            if ry == 0:
                self._mark_dirty(column, cy - 1)
            if ry == 15:
                self._mark_dirty(column, cy + 1)

        if rx == 0:
            self._mark_dirty(self.chunks.get((cx - 1, cz)), cy)
        if rx == 15:
            self._mark_dirty(self.chunks.get((cx + 1, cz)), cy)
        if rz == 0:
            self._mark_dirty(self.chunks.get((cx, cz - 1)), cy)
        if rz == 15:
            self._mark_dirty(self.chunks.get((cx, cz + 1)), cy)

    def get_neighbors(self, x: int, y: int, z: int) -> Neighbors:
        """Which of (up, down, left, right, front, back) hold a block, across chunks."""
        return tuple(  # type: ignore[return-value]
            self.get_block(x + dx, y + dy, z + dz) != 0 for dx, dy, dz in _NEIGHBOR_OFFSETS
        )