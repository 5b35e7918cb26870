"""Big-endian field encoding for the session message wire format."""

from __future__ import annotations

import struct
import uuid as _uuid
from typing import Union

_OUTSIDE = "Offset is outside the byte array."

_INT32 = struct.Struct(">i")
_UINT32 = struct.Struct(">I")
_INT64 = struct.Struct(">q")
_UINT64 = struct.Struct(">Q")

Buffer = Union[bytes, bytearray, memoryview]


class FieldError(ValueError):
    """Raised when a field cannot be read from or written to a buffer."""


def _check_span(data: Buffer, offset: int, length: int, message: str = _OUTSIDE) -> None:
    size = len(data)
    if offset < 0 or offset > size - 1 or offset + length > size:
        raise FieldError(message)


def _check_range(buffer: Buffer, start: int, end: int) -> None:
    size = len(buffer)
    if start < 0 or start > size - 1 or end > size - 1 or start > end:
        raise FieldError(_OUTSIDE)


def _pack(fmt: struct.Struct, value: int) -> bytes:
    try:
        return fmt.pack(value)
    except struct.error as exc:
        raise FieldError(f"Value {value} does not fit in {fmt.size} bytes.") from exc


def get_string(data: Buffer, offset: int, length: int) -> str:
    """Read a fixed-width string, dropping NUL padding and surrounding whitespace."""
    _check_span(data, offset, length)
    raw = bytes(data[offset:offset + length]).strip(b"\x00")
    return raw.decode("utf-8", errors="replace").strip()


def get_integer(data: Buffer, offset: int) -> int:
    """Read a signed 32-bit big-endian integer."""
    _check_span(data, offset, 4, "Offset is bigger than the byte array.")
    return _INT32.unpack_from(data, offset)[0]


def get_uinteger(data: Buffer, offset: int) -> int:
    """Read an unsigned 32-bit big-endian integer."""
    _check_span(data, offset, 4, "Offset is bigger than the byte array.")
    return _UINT32.unpack_from(data, offset)[0]


def get_long(data: Buffer, offset: int) -> int:
    """Read a signed 64-bit big-endian integer."""
    _check_span(data, offset, 8)
    return _INT64.unpack_from(data, offset)[0]


def get_ulong(data: Buffer, offset: int) -> int:
    """Read an unsigned 64-bit big-endian integer."""
    _check_span(data, offset, 8)
    return _UINT64.unpack_from(data, offset)[0]


def get_uuid(data: Buffer, offset: int) -> _uuid.UUID:
    """Read a UUID stored as its low eight bytes followed by its high eight bytes."""
    _check_span(data, offset, 16)
    low = bytes(data[offset:offset + 8])
    high = bytes(data[offset + 8:offset + 16])
    return _uuid.UUID(bytes=high + low)


def get_bytes(data: Buffer, offset: int, length: int) -> bytes:
    """Read ``length`` raw bytes starting at ``offset``."""
    _check_span(data, offset, length)
    return bytes(data[offset:offset + length])


def integer_to_bytes(value: int) -> bytes:
    """Encode a signed 32-bit integer big-endian."""
    return _pack(_INT32, value)


def long_to_bytes(value: int) -> bytes:
    """Encode a signed 64-bit integer big-endian."""
    return _pack(_INT64, value)


def put_string(buffer: bytearray, start: int, end: int, value: str) -> None:
    """Write a string into ``buffer[start:end + 1]``, padding the rest with spaces."""
    _check_range(buffer, start, end)
    encoded = value.encode("utf-8")
    width = end - start + 1
    if width < len(encoded):
        raise FieldError("Not enough space to save the string.")
    buffer[start:end + 1] = encoded + b" " * (width - len(encoded))


def put_bytes(buffer: bytearray, start: int, end: int, value: Buffer) -> None:
    """Write exactly ``end - start + 1`` bytes into ``buffer`` at ``start``."""
    _check_range(buffer, start, end)
    if end - start + 1 != len(value):
        raise FieldError("Not enough space to save the bytes.")
    buffer[start:end + 1] = bytes(value)


def _put(buffer: bytearray, offset: int, encoded: bytes) -> None:
    _check_span(buffer, offset, len(encoded))
    buffer[offset:offset + len(encoded)] = encoded


def put_integer(buffer: bytearray, offset: int, value: int) -> None:
    """Write a signed 32-bit big-endian integer at ``offset``."""
    _put(buffer, offset, integer_to_bytes(value))


def put_uinteger(buffer: bytearray, offset: int, value: int) -> None:
    """Write an unsigned 32-bit big-endian integer at ``offset``."""
    _put(buffer, offset, _pack(_UINT32, value))


def put_long(buffer: bytearray, offset: int, value: int) -> None:
    """Write a signed 64-bit big-endian integer at ``offset``."""
    _put(buffer, offset, long_to_bytes(value))


def put_ulong(buffer: bytearray, offset: int, value: int) -> None:
    """Write an unsigned 64-bit big-endian integer at ``offset``."""
    _put(buffer, offset, _pack(_UINT64, value))


def put_uuid(buffer: bytearray, offset: int, value: _uuid.UUID | str | None) -> None:
    """Write a UUID as its low eight bytes followed by its high eight bytes."""
    if isinstance(value, str):
        value = _uuid.UUID(value)
    if value is None or value.int == 0:
        raise FieldError("UUID input is null.")
    _check_span(buffer, offset, 16)
    raw = value.bytes
    buffer[offset:offset + 8] = raw[8:16]
    buffer[offset + 8:offset + 16] = raw[0:8]