"""
Error taxonomy for session snapshot parsing.

Fatal failures derive from SessionParseError and abort a parse with no partial
result. UnexpectedEndOfData is the short-read condition raised by the byte
cursor; the command store contains it to a single command.

Copyright (c) 2026 Andrew Hundt
Licensed under the Apache License, Version 2.0
"""

from typing import Optional


class UnexpectedEndOfData(Exception):
    """Raised when a read needs more bytes than remain in the cursor."""

    def __init__(self, wanted: int, available: int, offset: int):
        self.wanted = wanted
        self.available = available
        self.offset = offset
        super().__init__(f"needed {wanted} bytes at offset {offset}, only {available} available")


class SessionParseError(ValueError):
    """Base class for fatal session parse failures.

    Attributes:
        kind: Short machine-readable failure name (e.g. "truncated_record").
        offset: Byte offset in the source where the failure was detected, or None.
    """

    kind = "parse_error"

    def __init__(self, message: str, offset: Optional[int] = None):
        self.offset = offset
        if offset is not None:
            message = f"{message} (offset {offset})"
        super().__init__(message)


class SourceUnavailable(SessionParseError):
    """The session file or directory cannot be opened or read."""

    kind = "source_unavailable"


class BadMagicHeader(SessionParseError):
    """The file does not start with the SNSS magic."""

    kind = "bad_magic_header"


class UnsupportedVersion(SessionParseError):
    """The header carries a version other than 1 or 3."""

    kind = "unsupported_version"

    def __init__(self, version: int, offset: Optional[int] = None):
        self.version = version
        super().__init__(f"unsupported SNSS version: {version}", offset)


class TruncatedRecord(SessionParseError):
    """A record's framing cannot be satisfied by the remaining bytes."""

    kind = "truncated_record"
