"""Record framing failures.

Every error carries a stable ``code`` so reports and CLIs can name it.
"""
from __future__ import annotations


class RecordError(ValueError):
    code = "E_RECORD"

    def __init__(self, message: str, offset: int):
        super().__init__(message)
        self.offset = offset


class TruncatedRecordError(RecordError):
    """Bytes remain at end of input that do not form a full record."""

    code = "E_TRUNCATED"

    def __init__(self, offset: int, available: int, needed: int | None = None):
        if needed is None:
            msg = f"Truncated record header at offset {offset} ({available} bytes remain)"
        else:
            msg = f"Truncated record at offset {offset} (have {available} of {needed} bytes)"
        super().__init__(msg, offset)
        self.available = available
        self.needed = needed


class ChecksumMismatchError(RecordError):
    """A stored masked checksum disagrees with the recomputed one."""

    def __init__(self, field: str, offset: int, expected: int, actual: int):
        super().__init__(
            f"{field.capitalize()} checksum mismatch at offset {offset}: "
            f"stored 0x{expected:08x}, computed 0x{actual:08x}",
            offset,
        )
        self.field = field
        self.expected = expected
        self.actual = actual

    @property
    def code(self) -> str:
        return "E_LENGTH_CRC" if self.field == "length" else "E_PAYLOAD_CRC"


class RecordSizeError(RecordError):
    """Length field exceeds the accepted record size."""

    code = "E_SIZE"

    def __init__(self, offset: int, length: int, limit: int):
        super().__init__(
            f"Record length {length} at offset {offset} exceeds limit {limit}",
            offset,
        )
        self.length = length
        self.limit = limit
