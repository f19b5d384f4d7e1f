ERRORS = {
  "E_LAYOUT_MISSING": "Stream file missing",
  "E_TRUNCATED": "Stream ends inside a record",
  "E_LENGTH_CRC": "Length checksum invalid",
  "E_PAYLOAD_CRC": "Payload checksum invalid",
  "E_SIZE": "Record length exceeds limit",
}
