"""
SNSS record stream reader.

File layout (little-endian)::

    offset 0:  4 bytes  magic "SNSS"
    offset 4:  4 bytes  version (1 or 3)
    offset 8:  records, each:
                 2 bytes  size S (type byte + payload)
                 1 byte   command type
                 S-1 bytes payload

There is no record count or checksum; the stream ends cleanly when the data
runs out exactly at a size field.

Copyright (c) 2026 Andrew Hundt
Licensed under the Apache License, Version 2.0
"""

from dataclasses import dataclass
from typing import Iterator

from .cursor import ByteCursor
from .errors import BadMagicHeader, TruncatedRecord, UnexpectedEndOfData, UnsupportedVersion

SNSS_MAGIC = b"SNSS"
SUPPORTED_VERSIONS = (1, 3)


@dataclass(frozen=True)
class Record:
    """One framed command: its type byte and raw payload."""

    offset: int
    command_type: int
    payload: bytes


def read_header(cursor: ByteCursor) -> int:
    """Validate the magic and version; return the version.

    Raises:
        TruncatedRecord: Fewer than 8 header bytes.
        BadMagicHeader: Magic is not "SNSS".
        UnsupportedVersion: Version is not 1 or 3.
    """
    try:
        magic = cursor.read_bytes(len(SNSS_MAGIC))
    except UnexpectedEndOfData as exc:
        raise TruncatedRecord("file too short for SNSS magic", exc.offset) from exc
    if magic != SNSS_MAGIC:
        raise BadMagicHeader(f"bad magic header {magic!r}", 0)

    version_offset = cursor.offset
    try:
        version = cursor.read_uint32()
    except UnexpectedEndOfData as exc:
        raise TruncatedRecord("file too short for SNSS version", exc.offset) from exc
    if version not in SUPPORTED_VERSIONS:
        raise UnsupportedVersion(version, version_offset)
    return version


def iter_records(cursor: ByteCursor) -> Iterator[Record]:
    """Yield records from the cursor's current position until clean end of data.

    Raises:
        TruncatedRecord: A size field, type byte or payload is cut short, or a
            record declares size 0.
    """
    while not cursor.at_end:
        offset = cursor.offset
        try:
            size = cursor.read_uint16()
        except UnexpectedEndOfData as exc:
            raise TruncatedRecord("partial record size field", offset) from exc
        if size == 0:
            raise TruncatedRecord("record size 0 leaves no room for a type byte", offset)
        try:
            command_type = cursor.read_uint8()
        except UnexpectedEndOfData as exc:
            raise TruncatedRecord("missing record type byte", offset) from exc
        try:
            payload = cursor.read_bytes(size - 1)
        except UnexpectedEndOfData as exc:
            raise TruncatedRecord(
                f"record declares {size - 1} payload bytes, {exc.available} remain", offset
            ) from exc
        yield Record(offset, command_type, payload)
