from __future__ import annotations

import hashlib
import os
import struct
from pathlib import Path
from typing import Iterable
from warnings import warn

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from tfr_core.errors import ChecksumMismatchError, RecordSizeError
from tfr_core.protocol import DEFAULT_MAX_RECORD_SIZE, LENGTH_FMT, RECORD_OVERHEAD
from tfr_core.records import decode_one, encode_record

INDEX_SCHEMA = pa.schema(
    [
        ("record_index", pa.int64()),
        ("offset", pa.int64()),
        ("length", pa.int64()),
        ("payload_length", pa.int64()),
        ("status", pa.string()),
        ("content_hash", pa.string()),
    ]
)


class StreamScanner:
    """Closed-stream scanner: the file on disk is complete.

    - Records are walked by offset; nothing after the last full record is waited for.
    - A torn tail or an untrustworthy length stops the scan with a warning.
    - A payload checksum failure is indexed and skipped, since its length verified.
    """

    def __init__(
        self,
        stream_path: Path,
        verify: bool = True,
        max_record_size: int = DEFAULT_MAX_RECORD_SIZE,
    ):
        self.stream_path = Path(stream_path)
        self.verify = verify
        self.max_record_size = max_record_size
        self.index: list[dict] = []
        self.scan_stats = {
            "records": 0,
            "checksum_failures": 0,
            "oversized": 0,
            "truncated_bytes": 0,
        }

        self._scan()

    def _add_row(self, offset: int, payload_length: int, status: str, content_hash: str | None) -> None:
        self.index.append(
            {
                "record_index": len(self.index),
                "offset": int(offset),
                "length": int(RECORD_OVERHEAD + payload_length),
                "payload_length": int(payload_length),
                "status": status,
                "content_hash": content_hash,
            }
        )

    def _scan(self) -> None:
        data = self.stream_path.read_bytes()
        view = memoryview(data)
        end = len(view)
        offset = 0

        while offset < end:
            try:
                result = decode_one(view, offset, verify=self.verify, max_record_size=self.max_record_size)
            except ChecksumMismatchError as e:
                self.scan_stats["checksum_failures"] += 1
                if e.field == "length":
                    warn(f"{e}. Stopping scan.")
                    break
                warn(str(e))
                (length,) = struct.unpack_from(LENGTH_FMT, view, offset)
                self._add_row(offset, length, e.code, None)
                offset += RECORD_OVERHEAD + length
                continue
            except RecordSizeError as e:
                self.scan_stats["oversized"] += 1
                warn(f"{e}. Stopping scan.")
                break

            # Torn tail
            if result is None:
                self.scan_stats["truncated_bytes"] = end - offset
                warn(f"Truncated record at offset {offset} ({end - offset} trailing bytes). Stopping scan.")
                break

            payload, consumed = result
            self._add_row(
                offset,
                len(payload),
                "VERIFIED" if self.verify else "UNCHECKED",
                hashlib.sha256(payload).hexdigest(),
            )
            self.scan_stats["records"] += 1
            offset += consumed

    def get_scan_stats(self) -> dict:
        return dict(self.scan_stats)


def pack_payloads(payload_paths: Iterable[Path], out_file: Path) -> int:
    """Frame each payload file, in order, into one stream file."""
    count = 0
    with open(out_file, "wb") as f:
        for p in payload_paths:
            f.write(encode_record(Path(p).read_bytes()))
            count += 1
        f.flush()  # Durability: commit the stream
        os.fsync(f.fileno())
    return count


def compile_stream_index(
    stream_path: Path,
    out_path: Path,
    verify: bool = True,
    max_record_size: int = DEFAULT_MAX_RECORD_SIZE,
) -> dict:
    """Build index/records.parquet for a closed stream and return scan stats."""
    scanner = StreamScanner(stream_path, verify=verify, max_record_size=max_record_size)

    (Path(out_path) / "index").mkdir(parents=True, exist_ok=True)

    df = pd.DataFrame(scanner.index, columns=INDEX_SCHEMA.names)
    if df.empty:
        return scanner.get_scan_stats()

    table = pa.Table.from_pandas(df, schema=INDEX_SCHEMA, preserve_index=False)
    pq.write_table(table, Path(out_path) / "index/records.parquet")
    return scanner.get_scan_stats()
