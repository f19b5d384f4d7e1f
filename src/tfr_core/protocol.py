"""TFRecord framing protocol constants.

Single source of truth for on-disk record layout and checksum masking.
Keep this file stable. Writers and readers must remain synchronized.
"""

# Record: [Length(8) | LengthCRC(4) | Payload(N) | PayloadCRC(4)]
LENGTH_FMT = "<Q"
LENGTH_LEN = 8
CRC_FMT = "<I"
CRC_LEN = 4
HEADER_LEN = LENGTH_LEN + CRC_LEN  # 12
FOOTER_LEN = CRC_LEN
RECORD_OVERHEAD = HEADER_LEN + FOOTER_LEN  # 16

# CRC32C (Castagnoli 0x1EDC6F41), reflected
CRC32C_POLY = 0x82F63B78
CRC32C_INIT = 0xFFFFFFFF
CRC32C_XOROUT = CRC32C_INIT  # a finished value xored with this resumes the register

# Checksum masking: rotate right by 15, then add delta (mod 2**32)
MASK_DELTA = 0xA282EAD8
MASK_ROTATION = 15
U32_MASK = 0xFFFFFFFF

# Default safety bounds
DEFAULT_MAX_RECORD_SIZE = 1024 * 1024 * 1024  # 1 GiB
