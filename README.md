# blockworld

This package provides client-side building blocks for a block-based voxel game. Each module covers one part:

- **`blockworld.varint`** reads and writes the protocol's variable-length integers (VarInt, VarLong) and its length-prefixed UTF-8 strings. It works with blocking binary streams and with asyncio streams.
- **`blockworld.world`** stores chunk columns made of sixteen 16×16×16 sections.
  - It loads chunk data in the protocol 5 and protocol 47 layouts.
  - It gives access to blocks, light and neighbours.
  - It tracks which sections need to be meshed again.
- **`blockworld.mesher`** turns a section and its one-block border into vertex words and 16-bit triangle indices. It skips hidden faces and applies per-vertex ambient occlusion.
- **`blockworld.debug_geometry`** gives vertex data for two debug overlays: chunk-border lines and a unit cube drawn as triangle strips.
- **`blockworld.camera`** provides:
  - a first-person camera;
  - `look_at` and `perspective` matrices;
  - an axis-aligned box frustum test;
  - a keyboard and mouse controller.

## Installation

```
pip install .
```

To install the test requirements and run the tests:

```
pip install .[test]
pytest
```

## Varints and strings

```python
import io
from blockworld.varint import (
    VarInt, encode_varint, read_varint, read_varstring, varint_len, write_varstring,
)

encode_varint(300)                      # b'\xac\x02'
encode_varint(-1)                       # b'\xff\xff\xff\xff\x0f'
read_varint(io.BytesIO(b"\xac\x02"))    # 300
varint_len(300)                         # 2

buf = io.BytesIO()
write_varstring(buf, "hello")
buf.seek(0)
read_varstring(buf)                     # 'hello'

VarInt.read_from(io.BytesIO(b"\x01")) == 1   # True
```

The functions raise errors in these cases:

- `encode_varint`, `encode_varlong` and `varint_len` raise `OverflowError` for values outside the signed 32-bit or 64-bit range.
- The blocking readers raise `EOFError` when the stream ends early.
- `read_varstring` raises `ValueError` when the length is negative.

The asyncio functions `async_read_varint`, `async_read_varstring`, `async_write_varint` and `async_write_varstring` take an `asyncio.StreamReader` or an `asyncio.StreamWriter`.

## World storage

```python
import struct
from blockworld.world import ChunkManager, CHUNK_SECTION_SIZE, CHUNK_SIZE_2D

# One section of stone (id 1) in the protocol 47 layout:
# u16 block states, block light, sky light, then biomes.
blocks = struct.pack(f"<{CHUNK_SECTION_SIZE}H", *([1 << 4] * CHUNK_SECTION_SIZE))
light = bytes([0xFF]) * (CHUNK_SECTION_SIZE // 2)
payload = blocks + light + light + bytes(CHUNK_SIZE_2D)

world = ChunkManager()
consumed = world.load_chunk_47((0, 0), 0b1, True, True, payload)   # == len(payload)

world.get_block(3, 4, 5)          # 1
world.get_block_light(3, 4, 5)    # (15, 15)
world.set_block(3, 4, 5, 0)
world.get_neighbors(3, 4, 5)      # (up, down, left, right, front, back)
```

The loaders return the number of bytes they consumed. If the data ends too soon they raise `EOFError`.

If `ground_up_continuous` is set and the bitmask is 0, the loader unloads the column and returns 0.

`set_block` marks the section it changes as dirty. When the block lies on a section border, it also marks the neighbouring sections as dirty.

## Meshing

```python
from blockworld.mesher import ChunkSectionContext, mesh_chunk, pack_mesh

context = ChunkSectionContext.from_world(world, (0, 0, 0))
vertices, indices = mesh_chunk(context)
vertex_bytes, index_bytes = pack_mesh(vertices, indices)   # little-endian u32 / u16
```

Each vertex is one 32-bit word, laid out as follows:

| Bits  | Content             |
|-------|---------------------|
| 0–4   | x                   |
| 5–9   | y                   |
| 10–14 | z                   |
| 15–22 | block id            |
| 23–24 | ambient occlusion (0–3) |
| 25–28 | light level         |

Each visible face adds 4 vertices and 6 indices.

A face is hidden in two cases:

- the neighbouring block is opaque (see `is_opaque`);
- the neighbouring block is of the same kind, except for leaves.

## Debug geometry

`chunk_lines()` returns a list of `DebugLineVertex` (position and colour) for a line list. `pack_line_vertices` packs those vertices as six little-endian floats each.

`cube_vertices()` returns the 16 corner positions of a unit cube, centred on the origin, as two triangle strips.

## Camera

```python
from blockworld.camera import Camera, CameraController, CameraUniform, Key

camera = Camera()
controller = CameraController(speed=10.0)
controller.process_key(Key.W, True)          # True: the key is handled
controller.process_mouse(camera, (4.0, -2.0))
controller.update_camera(camera, 1 / 60)     # sets controller.velocity

uniform = CameraUniform()
uniform.update_view_proj(camera)             # column-major float32 matrix
camera.is_in_frustum((0, 0, 0), (16, 16, 16))
```

`camera.orientation` holds (pitch, yaw) in degrees. `update_camera` clamps the pitch to ±89.9°.

Holding `Key.C` zooms: it scales the field of view by 0.25 and slows mouse turning. Shift doubles the speed.

`update_camera` computes `controller.velocity` but does not move the camera.

## What it does not do

The package produces data only. It does not:

- open a window or draw anything;
- create GPU buffers, textures or pipelines;
- connect to a server or decode whole packets.

The caller has to supply the chunk payloads, read the input events and upload the packed mesh bytes to a renderer.