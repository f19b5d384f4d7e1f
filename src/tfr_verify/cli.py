from pathlib import Path
import click
from tfr_core.protocol import DEFAULT_MAX_RECORD_SIZE
from .logic import canonical_json, verify_stream

@click.group()
def main():
    pass

@main.command("stream")
@click.argument("path", type=click.Path(path_type=Path))
@click.option("--max-record-size", type=int, default=DEFAULT_MAX_RECORD_SIZE, show_default=True)
def stream_cmd(path: Path, max_record_size: int):
    result = verify_stream(path, max_record_size=max_record_size)
    click.echo(canonical_json(result))
    if result["status"] != "PASS":
        raise SystemExit(1)

if __name__ == "__main__":
    main()
