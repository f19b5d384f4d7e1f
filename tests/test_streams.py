import hashlib

import pyarrow.parquet as pq
import pytest

from tfr_core.records import decode_all, encode_record, encode_records
from tfr_pack.streams import StreamScanner, compile_stream_index, pack_payloads

PAYLOADS = [b"alpha", b"", b"gamma" * 100]


def write_stream(tmp_path, data: bytes):
    p = tmp_path / "stream.tfrecord"
    p.write_bytes(data)
    return p


def test_scan_clean_stream(tmp_path):
    p = write_stream(tmp_path, encode_records(PAYLOADS))
    scanner = StreamScanner(p)

    assert scanner.get_scan_stats() == {
        "records": 3,
        "checksum_failures": 0,
        "oversized": 0,
        "truncated_bytes": 0,
    }
    assert [row["status"] for row in scanner.index] == ["VERIFIED"] * 3
    assert [row["payload_length"] for row in scanner.index] == [5, 0, 500]
    assert scanner.index[1]["offset"] == 16 + 5
    assert scanner.index[2]["content_hash"] == hashlib.sha256(b"gamma" * 100).hexdigest()


def test_scan_torn_tail_warns(tmp_path):
    tail = encode_record(b"torn")[:9]
    p = write_stream(tmp_path, encode_records(PAYLOADS) + tail)

    with pytest.warns(UserWarning, match="Truncated record"):
        scanner = StreamScanner(p)

    stats = scanner.get_scan_stats()
    assert stats["records"] == 3
    assert stats["truncated_bytes"] == 9


def test_scan_skips_corrupt_payload(tmp_path):
    data = bytearray(encode_records(PAYLOADS))
    data[12] ^= 0x01  # first payload byte
    p = write_stream(tmp_path, bytes(data))

    with pytest.warns(UserWarning, match="Payload checksum mismatch"):
        scanner = StreamScanner(p)

    stats = scanner.get_scan_stats()
    assert stats["records"] == 2
    assert stats["checksum_failures"] == 1
    assert [row["status"] for row in scanner.index] == ["E_PAYLOAD_CRC", "VERIFIED", "VERIFIED"]
    assert scanner.index[0]["content_hash"] is None


def test_scan_stops_on_corrupt_length(tmp_path):
    data = bytearray(encode_records(PAYLOADS))
    second = len(encode_record(PAYLOADS[0]))
    data[second] ^= 0x01
    p = write_stream(tmp_path, bytes(data))

    with pytest.warns(UserWarning, match="Stopping scan"):
        scanner = StreamScanner(p)

    assert scanner.get_scan_stats()["records"] == 1
    assert scanner.get_scan_stats()["checksum_failures"] == 1
    assert len(scanner.index) == 1


def test_scan_unverified_accepts_corruption(tmp_path):
    data = bytearray(encode_records(PAYLOADS))
    data[12] ^= 0x01
    p = write_stream(tmp_path, bytes(data))

    scanner = StreamScanner(p, verify=False)
    assert scanner.get_scan_stats()["records"] == 3
    assert scanner.index[0]["status"] == "UNCHECKED"


def test_scan_oversized(tmp_path):
    p = write_stream(tmp_path, encode_record(b"x" * 64))
    with pytest.warns(UserWarning, match="exceeds limit"):
        scanner = StreamScanner(p, max_record_size=32)
    assert scanner.get_scan_stats()["oversized"] == 1
    assert scanner.index == []


def test_pack_payloads(tmp_path):
    paths = []
    for i, payload in enumerate(PAYLOADS):
        f = tmp_path / f"p{i}.bin"
        f.write_bytes(payload)
        paths.append(f)

    out = tmp_path / "out.tfrecord"
    assert pack_payloads(paths, out) == 3
    assert decode_all(out.read_bytes(), verify=True, strict_eof=True) == PAYLOADS


def test_compile_stream_index(tmp_path):
    p = write_stream(tmp_path, encode_records(PAYLOADS))
    out = tmp_path / "out"

    stats = compile_stream_index(p, out)
    assert stats["records"] == 3

    table = pq.read_table(out / "index" / "records.parquet")
    assert table.column_names == [
        "record_index",
        "offset",
        "length",
        "payload_length",
        "status",
        "content_hash",
    ]
    rows = table.to_pylist()
    assert [r["offset"] for r in rows] == [0, 21, 37]
    assert [r["length"] for r in rows] == [21, 16, 516]


def test_compile_stream_index_empty(tmp_path):
    p = write_stream(tmp_path, b"")
    out = tmp_path / "out"

    stats = compile_stream_index(p, out)
    assert stats["records"] == 0
    assert (out / "index").is_dir()
    assert not (out / "index" / "records.parquet").exists()
