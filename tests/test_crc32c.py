import struct
import threading

import pytest

from tfr_core.protocol import CRC32C_POLY
from tfr_core.crc32c import CRC32C_TABLE, crc32c, mask, masked_checksum, masked_crc32c, unmask


def test_table_shape():
    assert len(CRC32C_TABLE) == 256
    assert CRC32C_TABLE[0] == 0x00000000
    assert CRC32C_TABLE[1] == 0xF26B8303
    assert CRC32C_TABLE[128] == 0x82F63B78
    assert CRC32C_TABLE[255] == 0xAD7D5351


def test_table_matches_reflected_castagnoli():
    for i in (0, 1, 2, 77, 128, 200, 255):
        c = i
        for _ in range(8):
            c = (c >> 1) ^ CRC32C_POLY if c & 1 else c >> 1
        assert CRC32C_TABLE[i] == c


@pytest.mark.parametrize(
    "data,expected",
    [
        (b"", 0x00000000),
        (b"a", 0xC1D04330),
        (b"123456789", 0xE3069283),
        (b"abcdefghij", 0xE6599437),
        (b"ABC", 0x8839A97F),
    ],
)
def test_known_crc32c(data, expected):
    assert crc32c(data) == expected


def test_masked_empty_is_not_special_cased():
    assert masked_crc32c(b"") == 0xA282EAD8
    assert masked_checksum(b"") == bytes.fromhex("d8ea82a2")


def test_masked_abcdefghij():
    assert masked_crc32c(b"abcdefghij") == 0xCAF2B78B
    assert masked_checksum(b"abcdefghij") == struct.pack("<I", 0xCAF2B78B)


def test_mask_wraps_and_unmasks():
    for crc in (0, 1, 0x7FFF, 0x8000, 0xE3069283, 0xFFFFFFFF):
        m = mask(crc)
        assert 0 <= m <= 0xFFFFFFFF
        assert unmask(m) == crc


def test_chunked_equals_one_shot():
    data = bytes(range(256)) * 5
    for split in (0, 1, 255, 256, 700, len(data)):
        assert crc32c(data[split:], crc32c(data[:split])) == crc32c(data)


def test_accepts_bytes_like():
    data = b"abcdefghij"
    assert crc32c(bytearray(data)) == crc32c(data)
    assert crc32c(memoryview(data)) == crc32c(data)


def test_deterministic():
    data = b"\x00\xff" * 100
    assert masked_checksum(data) == masked_checksum(data)


@pytest.mark.parametrize("data", [b"abcdefghij", b"123456789"])
def test_single_bit_flip_changes_checksum(data):
    base = masked_checksum(data)
    for i in range(len(data)):
        for bit in range(8):
            flipped = bytearray(data)
            flipped[i] ^= 1 << bit
            assert masked_checksum(bytes(flipped)) != base


def test_concurrent_readers_agree():
    data = b"abcdefghij" * 50
    expected = masked_checksum(data)
    results = []

    def work():
        results.append(masked_checksum(data))

    threads = [threading.Thread(target=work) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert results == [expected] * 8


def test_resume_from_empty_result():
    # crc32c(b"") == 0, so resuming from it is the same as starting fresh.
    assert crc32c(b"") == 0
    assert crc32c(b"123456789", crc32c(b"")) == 0xE3069283
