import json
from pathlib import Path
from tfr_core.errors import RecordError, ChecksumMismatchError, RecordSizeError, TruncatedRecordError
from tfr_core.protocol import DEFAULT_MAX_RECORD_SIZE
from tfr_core.records import iter_records
from .const import ERRORS

CANONICAL_JSON_KW = {"sort_keys": True, "separators": (",", ":"), "ensure_ascii": False}

def canonical_json(obj) -> str:
    return json.dumps(obj, **CANONICAL_JSON_KW)

def _error_entry(e: RecordError) -> dict:
    entry = {"code": e.code, "message": ERRORS[e.code], "offset": e.offset}
    if isinstance(e, ChecksumMismatchError):
        entry["stored"] = f"{e.expected:08x}"
        entry["computed"] = f"{e.actual:08x}"
    elif isinstance(e, RecordSizeError):
        entry["length"] = e.length
        entry["limit"] = e.limit
    elif isinstance(e, TruncatedRecordError):
        entry["available"] = e.available
        if e.needed is not None:
            entry["needed"] = e.needed
    return entry

def verify_buffer(data: bytes, max_record_size: int = DEFAULT_MAX_RECORD_SIZE) -> dict:
    records = 0
    try:
        for _ in iter_records(data, verify=True, strict_eof=True, max_record_size=max_record_size):
            records += 1
    except RecordError as e:
        errors = [_error_entry(e)]
        return {"status":"FAIL","error_count":len(errors),"errors":errors,"records":records}
    return {"status":"PASS","error_count":0,"errors":[],"records":records}

def verify_stream(stream_path: Path, max_record_size: int = DEFAULT_MAX_RECORD_SIZE) -> dict:
    stream_path = Path(stream_path)
    if not stream_path.is_file():
        errors = [{"code":"E_LAYOUT_MISSING","message":ERRORS["E_LAYOUT_MISSING"],"path":str(stream_path)}]
        return {"status":"FAIL","error_count":len(errors),"errors":errors,"records":0}
    return verify_buffer(stream_path.read_bytes(), max_record_size=max_record_size)
