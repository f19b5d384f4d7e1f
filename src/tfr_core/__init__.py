"""TFR Core - Record framing and masked CRC32C."""
from .crc32c import crc32c, mask, unmask, masked_crc32c, masked_checksum
from .errors import RecordError, TruncatedRecordError, ChecksumMismatchError, RecordSizeError
from .records import encode_record, encode_records, decode_one, verify_record, iter_records, decode_all

__all__ = [
    "crc32c",
    "mask",
    "unmask",
    "masked_crc32c",
    "masked_checksum",
    "RecordError",
    "TruncatedRecordError",
    "ChecksumMismatchError",
    "RecordSizeError",
    "encode_record",
    "encode_records",
    "decode_one",
    "verify_record",
    "iter_records",
    "decode_all",
]
