import struct
import sys
from pathlib import Path

# Byte offsets inside the first record, relative to the start of the file.
# Record: [Length(8) | LengthCRC(4) | Payload(N) | PayloadCRC(4)]
FIELDS = ("length", "length_crc", "payload", "payload_crc")

def field_offset(b: bytes, field: str) -> int:
    (length,) = struct.unpack_from("<Q", b, 0)
    if field == "length":
        return 0
    if field == "length_crc":
        return 8
    if field == "payload":
        if length == 0:
            raise SystemExit("First record has an empty payload.")
        return 12
    return 12 + length

def main():
    if len(sys.argv) not in (2, 3) or (len(sys.argv) == 3 and sys.argv[2] not in FIELDS):
        print(f"Usage: corrupt_one_byte.py <file> [{'|'.join(FIELDS)}]")
        raise SystemExit(2)

    p = Path(sys.argv[1])
    field = sys.argv[2] if len(sys.argv) == 3 else "payload_crc"
    b = bytearray(p.read_bytes())
    if len(b) < 16:
        print("File too small to corrupt safely.")
        raise SystemExit(2)

    idx = field_offset(bytes(b), field)
    if idx >= len(b):
        print("First record is truncated; nothing to corrupt.")
        raise SystemExit(2)

    b[idx] ^= 0x01
    p.write_bytes(bytes(b))
    print(f"Corrupted 1 byte at offset {idx} ({field}) in {p}")

if __name__ == "__main__":
    main()
