import struct

import pytest

from blockworld.world import (
    CHUNK_SECTION_SIZE,
    CHUNK_SIZE_2D,
    ChunkColumn,
    ChunkManager,
    ChunkSection,
)

NIBBLES = CHUNK_SECTION_SIZE // 2


def section5_payload(block=1, light=0x00, sky=None, meta=0x00):
    data = bytes([block]) * CHUNK_SECTION_SIZE + bytes([meta]) * NIBBLES
    data += bytes([light]) * NIBBLES
    if sky is not None:
        data += bytes([sky]) * NIBBLES
    return data


def loaded_manager(coords_list, block=1):
    manager = ChunkManager()
    for coords in coords_list:
        data = section5_payload(block=block)
        manager.load_chunk_5(coords, 0b11, 0, False, False, data[:CHUNK_SECTION_SIZE] * 2
                             + data[CHUNK_SECTION_SIZE:CHUNK_SECTION_SIZE + NIBBLES] * 2
                             + data[CHUNK_SECTION_SIZE + NIBBLES:] * 2)
    return manager


def test_empty_section():
    section = ChunkSection()
    assert section.dirty is True
    assert section.get_block(3, 4, 5) == 0
    assert section.get_block_light(3, 4, 5) == (0, 0)


def test_section_set_get_round_trip():
    section = ChunkSection()
    section.dirty = False
    section.set_block(3, 4, 5, 42)
    assert section.get_block(3, 4, 5) == 42
    assert section.dirty is True


def test_section_layout_is_y_z_x():
    section = ChunkSection()
    section.blocks[0x123] = 9
    assert section.get_block(3, 1, 2) == 9


def test_section_coordinates_wrap():
    section = ChunkSection()
    section.set_block(17, 3, 18, 5)
    assert section.get_block(1, 3, 2) == 5


def test_section_negative_y():
    section = ChunkSection()
    section.dirty = False
    section.set_block(0, -1, 0, 7)
    assert section.dirty is False
    assert not any(section.blocks)
    section.blocks[:] = bytes([3]) * CHUNK_SECTION_SIZE
    assert section.get_block(0, -1, 0) == 0
    assert section.get_block_light(0, -1, 0) == (0, 0)


def test_section_light_nibbles():
    section = ChunkSection()
    section.light[0] = 0x21
    section.skylight[0] = 0x43
    assert section.get_block_light(0, 0, 0) == (1, 3)
    assert section.get_block_light(1, 0, 0) == (2, 4)


def test_section_neighbors_inside():
    section = ChunkSection()
    section.set_block(1, 1, 1, 1)
    assert section.get_neighbors(1, 0, 1) == (True, False, False, False, False, False)
    assert section.get_neighbors(1, 1, 2) == (False, False, False, False, True, False)


def test_section_neighbors_edges_are_empty():
    section = ChunkSection()
    section.blocks[:] = bytes([1]) * CHUNK_SECTION_SIZE
    assert section.get_neighbors(0, 0, 0) == (True, False, False, True, False, True)
    assert section.get_neighbors(15, 15, 15) == (False, True, True, False, True, False)


def test_column_sections():
    column = ChunkColumn()
    assert column.get_section(4) is None
    section = column.get_section_or_insert(4)
    assert column.get_section(4) is section
    assert column.get_section_or_insert(4) is section
    with pytest.raises(IndexError):
        column.get_section(16)
    with pytest.raises(IndexError):
        column.get_section_or_insert(-1)


def test_load_chunk_5_single_section():
    manager = ChunkManager()
    data = section5_payload(block=7, light=0x5A)
    consumed = manager.load_chunk_5((2, 3), 0b1, 0, False, False, data + b"\xff" * 10)
    assert consumed == len(data)
    column = manager.get((2, 3))
    assert column.get_section(1) is None
    assert manager.get_block(32, 0, 48) == 7
    assert manager.get_block_light(32, 0, 48) == (0xA, 0)
    assert manager.get_block_light(33, 0, 48) == (0x5, 0)


def test_load_chunk_5_all_parts():
    manager = ChunkManager()
    biomes = bytes(range(CHUNK_SIZE_2D))
    data = section5_payload(block=4, light=0x11, sky=0xFF) + b"\x00" * NIBBLES + biomes
    consumed = manager.load_chunk_5((0, 0), 0b100, 0b1, True, True, data)
    assert consumed == len(data)
    column = manager.get((0, 0))
    assert column.biomes == bytearray(biomes)
    assert manager.get_block(0, 32, 0) == 4
    assert manager.get_block_light(0, 32, 0) == (1, 15)
    assert manager.get_block(0, 0, 0) == 0


def test_load_chunk_5_unloads_empty_continuous():
    manager = ChunkManager()
    manager.load_chunk_5((1, 1), 0b1, 0, False, False, section5_payload())
    assert manager.get((1, 1)) is not None
    assert manager.load_chunk_5((1, 1), 0, 0, False, True, b"") == 0
    assert manager.get((1, 1)) is None


def test_load_chunk_5_short_data():
    manager = ChunkManager()
    with pytest.raises(EOFError):
        manager.load_chunk_5((0, 0), 0b1, 0, False, False, b"\x01" * 100)


def test_load_chunk_47_truncates_block_ids():
    manager = ChunkManager()
    raw = bytearray(CHUNK_SECTION_SIZE * 2)
    struct.pack_into("<H", raw, 0, (1 << 4) | 3)
    struct.pack_into("<H", raw, 2, 0x1F5 << 4)
    data = bytes(raw) + bytes([0x32]) * NIBBLES + bytes([0x76]) * NIBBLES + b"\x02" * CHUNK_SIZE_2D
    consumed = manager.load_chunk_47((0, 0), 0b1, True, True, data)
    assert consumed == len(data)
    assert manager.get_block(0, 0, 0) == 1
    assert manager.get_block(1, 0, 0) == 0xF5
    assert manager.get_block(2, 0, 0) == 0
    assert manager.get_block_light(0, 0, 0) == (2, 6)
    assert manager.get((0, 0)).biomes == bytearray(b"\x02" * CHUNK_SIZE_2D)


def test_load_chunk_47_short_data():
    manager = ChunkManager()
    with pytest.raises(EOFError):
        manager.load_chunk_47((0, 0), 0b1, False, False, b"\x00" * CHUNK_SECTION_SIZE)


def test_get_block_unloaded_is_air():
    manager = ChunkManager()
    assert manager.get_block(100, 10, -100) == 0
    assert manager.get_block_light(100, 10, -100) == (0, 0)


def test_negative_world_coordinates():
    manager = ChunkManager()
    manager.load_chunk_5((-1, -1), 0b1, 0, False, False, section5_payload(block=0))
    manager.set_block(-1, 0, -1, 8)
    assert manager.get_block(-1, 0, -1) == 8
    assert manager.get((-1, -1)).get_section(0).get_block(15, 0, 15) == 8
    assert manager.get_block(-1, -1, -1) == 0


def test_set_block_in_missing_section_is_ignored():
    manager = ChunkManager()
    manager.load_chunk_5((0, 0), 0b1, 0, False, False, section5_payload(block=0))
    manager.set_block(0, 40, 0, 3)
    assert manager.get_block(0, 40, 0) == 0
    assert manager.get((0, 0)).get_section(2) is None


def test_set_block_marks_neighbours_dirty():
    manager = loaded_manager([(0, 0), (-1, 0), (1, 0), (0, -1), (0, 1)])
    for column in manager.chunks.values():
        for section in column.sections:
            if section is not None:
                section.dirty = False

    manager.set_block(0, 16, 0, 2)
    assert manager.get_block(0, 16, 0) == 2
    assert manager.get((0, 0)).get_section(1).dirty is True
    assert manager.get((0, 0)).get_section(0).dirty is True
    assert manager.get((-1, 0)).get_section(1).dirty is True
    assert manager.get((0, -1)).get_section(1).dirty is True
    assert manager.get((1, 0)).get_section(1).dirty is False
    assert manager.get((0, 1)).get_section(1).dirty is False


def test_set_block_at_bottom_and_top_edges():
    manager = loaded_manager([(0, 0)])
    manager.set_block(5, 0, 5, 9)
    manager.set_block(5, 31, 5, 9)
    assert manager.get_block(5, 0, 5) == 9
    assert manager.get_block(5, 31, 5) == 9


def test_manager_neighbors_cross_chunks():
    manager = loaded_manager([(0, 0), (1, 0)], block=0)
    manager.set_block(16, 5, 5, 1)
    manager.set_block(15, 6, 5, 1)
    assert manager.get_neighbors(15, 5, 5) == (True, False, False, True, False, False)
    assert manager.get_neighbors(0, 0, 0) == (False, False, False, False, False, False)