"""Variable-length integers and length-prefixed strings of the network protocol."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import BinaryIO

_SEGMENT_BITS = 0x7F
_CONTINUE_BIT = 0x80
_VARINT_MAX_BYTES = 5
_VARLONG_MAX_BYTES = 9
_INT32_MIN, _INT32_MAX = -(1 << 31), (1 << 31) - 1
_INT64_MIN, _INT64_MAX = -(1 << 63), (1 << 63) - 1


def _to_signed(value: int, bits: int) -> int:
    value &= (1 << bits) - 1
    if value >= 1 << (bits - 1):
        value -= 1 << bits
    return value


def _check_range(value: int, low: int, high: int, kind: str) -> None:
    if not low <= value <= high:
        raise OverflowError(f"{value} does not fit in a {kind}")


def _encode(value: int, bits: int) -> bytes:
    remaining = value & ((1 << bits) - 1)
    out = bytearray()
    while True:
        segment = remaining & _SEGMENT_BITS
        remaining >>= 7
        if remaining:
            out.append(segment | _CONTINUE_BIT)
        else:
            out.append(segment)
            return bytes(out)


def _read_byte(stream: BinaryIO) -> int:
    data = stream.read(1)
    if not data:
        raise EOFError("unexpected end of stream")
    return data[0]


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    buffer = bytearray()
    while len(buffer) < size:
        part = stream.read(size - len(buffer))
        if not part:
            raise EOFError(f"expected {size} bytes, got {len(buffer)}")
        buffer.extend(part)
    return bytes(buffer)


def _decode_string(length: int, payload: bytes) -> str:
    return payload.decode("utf-8")


def _check_length(length: int) -> None:
    if length < 0:
        raise ValueError(f"negative string length {length}")


def encode_varint(value: int) -> bytes:
    """Encode a signed 32-bit integer as a VarInt."""
    _check_range(value, _INT32_MIN, _INT32_MAX, "32-bit integer")
    return _encode(value, 32)


def encode_varlong(value: int) -> bytes:
    """Encode a signed 64-bit integer as a VarLong."""
    _check_range(value, _INT64_MIN, _INT64_MAX, "64-bit integer")
    return _encode(value, 64)


def read_varint(stream: BinaryIO) -> int:
    """Read a VarInt of at most five bytes from a binary stream."""
    result = 0
    for shift in range(0, 7 * _VARINT_MAX_BYTES, 7):
        byte = _read_byte(stream)
        result |= (byte & _SEGMENT_BITS) << shift
        if not byte & _CONTINUE_BIT:
            break
    return _to_signed(result, 32)


def read_varlong(stream: BinaryIO) -> int:
    """Read a VarLong of at most nine bytes from a binary stream."""
    result = 0
    for shift in range(0, 7 * _VARLONG_MAX_BYTES, 7):
        byte = _read_byte(stream)
        result |= (byte & _SEGMENT_BITS) << shift
        if not byte & _CONTINUE_BIT:
            break
    return _to_signed(result, 64)


def read_varstring(stream: BinaryIO) -> str:
    """Read a UTF-8 string prefixed by its byte length as a VarInt."""
    length = read_varint(stream)
    _check_length(length)
    return _decode_string(length, _read_exact(stream, length))


def write_varint(stream: BinaryIO, value: int) -> None:
    stream.write(encode_varint(value))


def write_varlong(stream: BinaryIO, value: int) -> None:
    stream.write(encode_varlong(value))


def write_varstring(stream: BinaryIO, value: str) -> None:
    payload = value.encode("utf-8")
    stream.write(encode_varint(len(payload)) + payload)


def varint_len(value: int) -> int:
    """Number of bytes the VarInt encoding of ``value`` takes."""
    _check_range(value, _INT32_MIN, _INT32_MAX, "32-bit integer")
    bits = (value & 0xFFFFFFFF).bit_length()
    return max((bits + 6) // 7, 1)


async def async_read_varint(reader: asyncio.StreamReader) -> int:
    """Read a VarInt from an asyncio stream reader."""
    result = 0
    for shift in range(0, 7 * _VARINT_MAX_BYTES, 7):
        byte = (await reader.readexactly(1))[0]
        result |= (byte & _SEGMENT_BITS) << shift
        if not byte & _CONTINUE_BIT:
            break
    return _to_signed(result, 32)


async def async_read_varstring(reader: asyncio.StreamReader) -> str:
    length = await async_read_varint(reader)
    _check_length(length)
    return _decode_string(length, await reader.readexactly(length))


async def async_write_varint(writer: asyncio.StreamWriter, value: int) -> None:
    writer.write(encode_varint(value))
    await writer.drain()


async def async_write_varstring(writer: asyncio.StreamWriter, value: str) -> None:
    payload = value.encode("utf-8")
    writer.write(encode_varint(len(payload)) + payload)
    await writer.drain()


@dataclass(frozen=True, eq=False)
class VarInt:
    """A 32-bit integer serialized as a VarInt."""

    value: int = 0

    def __post_init__(self) -> None:
        _check_range(self.value, _INT32_MIN, _INT32_MAX, "32-bit integer")

    def __eq__(self, other: object) -> bool:
        if isinstance(other, VarInt):
            return self.value == other.value
        if isinstance(other, int):
            return self.value == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.value)

    def __int__(self) -> int:
        return self.value

    def __index__(self) -> int:
        return self.value

    def __repr__(self) -> str:
        return str(self.value)

    @classmethod
    def read_from(cls, stream: BinaryIO) -> VarInt:
        return cls(read_varint(stream))

    def write_to(self, stream: BinaryIO) -> None:
        write_varint(stream, self.value)


@dataclass(frozen=True)
class VarLong:
    """A 64-bit integer serialized as a VarLong."""

    value: int = 0

    def __post_init__(self) -> None:
        _check_range(self.value, _INT64_MIN, _INT64_MAX, "64-bit integer")

    def __int__(self) -> int:
        return self.value

    def __index__(self) -> int:
        return self.value

    def __repr__(self) -> str:
        return str(self.value)

    @classmethod
    def read_from(cls, stream: BinaryIO) -> VarLong:
        return cls(read_varlong(stream))

    def write_to(self, stream: BinaryIO) -> None:
        write_varlong(stream, self.value)