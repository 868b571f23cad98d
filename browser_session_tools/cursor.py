"""
Little-endian read cursor over an in-memory byte buffer.

Strings follow Chromium's pickle layout: a u32 length prefix, then the payload
zero-padded to a 4-byte boundary.

Copyright (c) 2026 Andrew Hundt
Licensed under the Apache License, Version 2.0
"""

import struct

from .errors import UnexpectedEndOfData

_U8 = struct.Struct("<B")
_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")
_U64 = struct.Struct("<Q")


def _aligned(size: int) -> int:
    """Round size up to the next multiple of 4."""
    return (size + 3) & ~3


class ByteCursor:
    """Sequential reader; every read consumes exactly its width or raises UnexpectedEndOfData."""

    def __init__(self, data: bytes, offset: int = 0):
        self._data = memoryview(data)
        self._pos = offset

    @property
    def offset(self) -> int:
        return self._pos

    @property
    def remaining(self) -> int:
        return len(self._data) - self._pos

    @property
    def at_end(self) -> bool:
        return self._pos >= len(self._data)

    def read_bytes(self, size: int) -> bytes:
        """Consume and return exactly size bytes."""
        if size < 0 or size > self.remaining:
            raise UnexpectedEndOfData(size, self.remaining, self._pos)
        chunk = self._data[self._pos:self._pos + size].tobytes()
        self._pos += size
        return chunk

    def _unpack(self, fmt: struct.Struct) -> int:
        if fmt.size > self.remaining:
            raise UnexpectedEndOfData(fmt.size, self.remaining, self._pos)
        (value,) = fmt.unpack_from(self._data, self._pos)
        self._pos += fmt.size
        return value

    def read_uint8(self) -> int:
        return self._unpack(_U8)

    def read_uint16(self) -> int:
        return self._unpack(_U16)

    def read_uint32(self) -> int:
        return self._unpack(_U32)

    def read_uint64(self) -> int:
        return self._unpack(_U64)

    def read_string(self) -> str:
        """Read a length-prefixed 8-bit string.

        The stored payload is padded to a 4-byte boundary; only the first
        ``length`` bytes belong to the string.
        """
        length = self.read_uint32()
        data = self.read_bytes(_aligned(length))
        return data[:length].decode("utf-8", errors="replace")

    def read_string16(self) -> str:
        """Read a length-prefixed UTF-16LE string.

        The prefix counts code units, not bytes. Unpaired surrogates decode
        to U+FFFD.
        """
        length = self.read_uint32()
        byte_length = length * 2
        data = self.read_bytes(_aligned(byte_length))
        return data[:byte_length].decode("utf-16-le", errors="replace")
