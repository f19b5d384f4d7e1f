import hashlib
import json
import random
from pathlib import Path

from tfr_core.records import encode_record

# --- CONFIGURATION ---
DEFAULT_RECORDS = 20
MIN_PAYLOAD = 0
MAX_PAYLOAD = 4096

def generate_stream(out_dir, records=DEFAULT_RECORDS, seed=0, torn=False) -> Path:
    """Write stream.tfrecord plus a manifest of payload hashes.

    With torn=True the last record is cut in half, as after a crash mid-write.
    """
    rng = random.Random(seed)
    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)

    manifest = []
    blobs = []
    for i in range(records):
        payload = rng.randbytes(rng.randint(MIN_PAYLOAD, MAX_PAYLOAD))
        blobs.append(encode_record(payload))
        manifest.append({"record_index": i, "payload_length": len(payload), "content_hash": hashlib.sha256(payload).hexdigest()})

    if torn and blobs:
        blobs[-1] = blobs[-1][: len(blobs[-1]) // 2]
        manifest.pop()

    stream_path = out / "stream.tfrecord"
    stream_path.write_bytes(b"".join(blobs))
    (out / "manifest.json").write_text(json.dumps(manifest, indent=2) + "\n", encoding="utf-8")

    print(f"GENERATED: {stream_path} (Torn={torn})")
    return stream_path

if __name__ == "__main__":
    import sys

    # Usage:
    #   python tools/make_stream.py OUT_DIR [--records N] [--seed S] [--torn]

    args = [a for a in sys.argv[1:] if a]

    def pop_flag(arg_list: list[str], flag: str) -> tuple[bool, list[str]]:
        """Remove a boolean flag from an argv-style list."""
        if flag in arg_list:
            return True, [a for a in arg_list if a != flag]
        return False, arg_list

    def pop_int(arg_list: list[str], opt: str, default: int) -> tuple[int, list[str]]:
        if opt not in arg_list:
            return default, arg_list
        i = arg_list.index(opt)
        if i + 1 >= len(arg_list):
            raise SystemExit(f"{opt} requires a value")
        return int(arg_list[i + 1]), arg_list[:i] + arg_list[i + 2:]

    torn, args = pop_flag(args, "--torn")
    records, args = pop_int(args, "--records", DEFAULT_RECORDS)
    seed, args = pop_int(args, "--seed", 0)

    out = args[0] if len(args) > 0 else "demo_stream"
    generate_stream(out, records=records, seed=seed, torn=torn)
