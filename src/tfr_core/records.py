"""TFRecord framing: encode payloads, decode them back out of a byte stream.

Record: [Length(8) | LengthCRC(4) | Payload(N) | PayloadCRC(4)]

Decoders walk a memoryview of the caller's buffer by offset. Only the
returned payloads are copied.
"""
from __future__ import annotations

import struct
from typing import Iterable, Iterator

from tfr_core.crc32c import masked_checksum, masked_crc32c
from tfr_core.errors import ChecksumMismatchError, RecordSizeError, TruncatedRecordError
from tfr_core.protocol import (
    CRC_FMT,
    DEFAULT_MAX_RECORD_SIZE,
    HEADER_LEN,
    LENGTH_FMT,
    LENGTH_LEN,
    RECORD_OVERHEAD,
)


def encode_record(payload: bytes) -> bytes:
    """Frame ``payload`` as a single record."""
    payload = bytes(memoryview(payload).cast("B"))
    length_bytes = struct.pack(LENGTH_FMT, len(payload))
    return b"".join(
        (
            length_bytes,
            masked_checksum(length_bytes),
            payload,
            masked_checksum(payload),
        )
    )


def encode_records(payloads: Iterable[bytes]) -> bytes:
    return b"".join(encode_record(p) for p in payloads)


def _check_crc(view: memoryview, start: int, end: int, field: str, record_offset: int) -> None:
    (stored,) = struct.unpack_from(CRC_FMT, view, end)
    computed = masked_crc32c(view[start:end])
    if stored != computed:
        raise ChecksumMismatchError(field, record_offset, stored, computed)


def decode_one(
    buffer: bytes,
    offset: int = 0,
    *,
    verify: bool = False,
    max_record_size: int = DEFAULT_MAX_RECORD_SIZE,
) -> tuple[bytes, int] | None:
    """Decode the record starting at ``offset``.

    Returns ``(payload, bytes_consumed)``, or None when the buffer does not
    yet hold a full record. With ``verify`` both checksums are checked and a
    mismatch raises ChecksumMismatchError. A length above ``max_record_size``
    raises RecordSizeError before anything is sliced.
    """
    if offset < 0:
        raise ValueError(f"Record offset must be non-negative, got {offset}")
    view = memoryview(buffer).cast("B")
    available = len(view) - offset
    if available < LENGTH_LEN:
        return None

    (length,) = struct.unpack_from(LENGTH_FMT, view, offset)

    # Length checksum first: a corrupt length must not drive the size checks.
    if verify and available >= HEADER_LEN:
        _check_crc(view, offset, offset + LENGTH_LEN, "length", offset)

    if length > max_record_size:
        raise RecordSizeError(offset, length, max_record_size)

    consumed = RECORD_OVERHEAD + length
    if available < consumed:
        return None

    start = offset + HEADER_LEN
    end = start + length
    if verify:
        _check_crc(view, start, end, "payload", offset)

    return bytes(view[start:end]), consumed


def verify_record(buffer: bytes, offset: int = 0, *, max_record_size: int = DEFAULT_MAX_RECORD_SIZE) -> bytes:
    """Strictly decode one record and return its payload.

    Raises TruncatedRecordError if the record is incomplete and
    ChecksumMismatchError if either checksum is wrong.
    """
    result = decode_one(buffer, offset, verify=True, max_record_size=max_record_size)
    if result is None:
        raise _truncation(memoryview(buffer).cast("B"), offset)
    return result[0]


def _truncation(view: memoryview, offset: int) -> TruncatedRecordError:
    available = len(view) - offset
    if available < LENGTH_LEN:
        return TruncatedRecordError(offset, available)
    (length,) = struct.unpack_from(LENGTH_FMT, view, offset)
    return TruncatedRecordError(offset, available, RECORD_OVERHEAD + length)


def iter_records(
    buffer: bytes,
    *,
    verify: bool = False,
    strict_eof: bool = False,
    max_record_size: int = DEFAULT_MAX_RECORD_SIZE,
) -> Iterator[bytes]:
    """Yield payloads in stream order.

    Stops cleanly when the buffer ends on a record boundary. A partial
    trailing record ends iteration silently, or raises TruncatedRecordError
    when ``strict_eof`` says the buffer is complete.
    """
    view = memoryview(buffer).cast("B")
    offset = 0
    end = len(view)
    while offset < end:
        result = decode_one(view, offset, verify=verify, max_record_size=max_record_size)
        if result is None:
            if strict_eof:
                raise _truncation(view, offset)
            return
        payload, consumed = result
        yield payload
        offset += consumed


def decode_all(
    buffer: bytes,
    *,
    verify: bool = False,
    strict_eof: bool = False,
    max_record_size: int = DEFAULT_MAX_RECORD_SIZE,
) -> list[bytes]:
    return list(
        iter_records(buffer, verify=verify, strict_eof=strict_eof, max_record_size=max_record_size)
    )
