"""TFR Pack - frame payload files into a record stream and index it."""
from __future__ import annotations

from pathlib import Path

import click

from tfr_core.protocol import DEFAULT_MAX_RECORD_SIZE
from tfr_pack.streams import compile_stream_index, pack_payloads


def _fail_closed(e: Exception) -> None:
    # Single-line reason, no stack trace in automated pipelines.
    click.echo(f"FATAL: {e}")
    raise SystemExit(1)


@click.group()
def main() -> None:
    pass


@main.command("pack")
@click.argument("payloads", nargs=-1, required=True, type=click.Path(exists=True, path_type=Path))
@click.option("-o", "--out", "out", required=True, type=click.Path(dir_okay=False, path_type=Path))
def pack_cmd(payloads: tuple[Path, ...], out: Path) -> None:
    """Frame PAYLOADS into one stream file.

    A directory argument contributes its regular files in sorted name order.
    """
    files: list[Path] = []
    for p in payloads:
        if p.is_dir():
            files.extend(sorted(f for f in p.iterdir() if f.is_file()))
        else:
            files.append(p)

    try:
        out.parent.mkdir(parents=True, exist_ok=True)
        count = pack_payloads(files, out)
    except Exception as e:
        _fail_closed(e)

    click.echo(f"PASS: Stream written at {out}")
    click.echo(f"  Records: {count}")


@main.command("index")
@click.argument("stream", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("out", type=click.Path(file_okay=False, path_type=Path))
@click.option("--no-verify", is_flag=True, help="Skip checksum verification while scanning")
@click.option("--max-record-size", type=int, default=DEFAULT_MAX_RECORD_SIZE, show_default=True)
def index_cmd(stream: Path, out: Path, no_verify: bool, max_record_size: int) -> None:
    """Scan STREAM and write OUT/index/records.parquet."""
    try:
        stats = compile_stream_index(stream, out, verify=not no_verify, max_record_size=max_record_size)
    except Exception as e:
        _fail_closed(e)

    click.echo(f"PASS: Index generated at {out}")
    click.echo(f"  Records: {stats['records']}")
    click.echo(f"  Checksum failures: {stats['checksum_failures']}")
    click.echo(f"  Truncated bytes: {stats['truncated_bytes']}")


if __name__ == "__main__":
    main()
