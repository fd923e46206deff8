"""influx2hny command line interface.

Reads Influx line protocol on stdin, typically from telegraf's ``execd``
output plugin, and forwards the metrics to Honeycomb.
"""

import asyncio
import signal
import sys
from typing import BinaryIO

import typer

from influx2hny import __version__
from influx2hny.adapters.emitters import HoneycombEmitter, NDJSONEmitter
from influx2hny.adapters.logging import enable_debug_logging
from influx2hny.core.config import (
    DEFAULT_API_HOST,
    DEFAULT_DATASET,
    DEFAULT_FLUSH_INTERVAL,
    DEFAULT_MAX_BUFFER_SIZE,
    HoneycombConfig,
    OutputConfig,
)
from influx2hny.core.errors import ConfigError, FatalEmitError
from influx2hny.core.ports import EmitterPort, LineSource
from influx2hny.output import Output

# Longest accepted input line, in bytes.
STDIN_LIMIT = 1024 * 1024

app = typer.Typer(
    name="influx2hny",
    help="Forward Influx line protocol metrics on stdin to Honeycomb.",
    add_completion=False,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"influx2hny version {__version__}")
        raise typer.Exit()


def split_tags(values: list[str] | None) -> frozenset[str]:
    """Flatten repeated, comma-separated tag options into a set."""
    tags: set[str] = set()
    for value in values or []:
        tags.update(t.strip() for t in value.split(",") if t.strip())
    return frozenset(tags)


class FileLineSource:
    """LineSource over a blocking binary file, read in a worker thread.

    Used when stdin is not a pipe (a regular file, or a test harness).
    """

    def __init__(self, file: BinaryIO) -> None:
        self._file = file

    async def readline(self) -> bytes:
        return await asyncio.to_thread(self._file.readline)


async def open_stdin() -> LineSource:
    """Return an async line source reading from stdin."""
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader(limit=STDIN_LIMIT)
    try:
        await loop.connect_read_pipe(
            lambda: asyncio.StreamReaderProtocol(reader), sys.stdin
        )
    except (OSError, ValueError):
        # Not a pipe, socket or character device.
        return FileLineSource(sys.stdin.buffer)
    return reader


async def serve(output: Output, emitter: EmitterPort) -> None:
    """Process stdin until EOF or SIGINT/SIGTERM, then close the emitter."""
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, output.stop)
        except (NotImplementedError, RuntimeError):
            # No signal support on this platform or thread; rely on EOF.
            break

    try:
        await output.process(await open_stdin())
    finally:
        aclose = getattr(emitter, "aclose", None)
        if aclose is not None:
            await aclose()


@app.command()
def main(
    api_key: str = typer.Option(
        "",
        "--api-key",
        "-k",
        envvar="HONEYCOMB_API_KEY",
        help="Honeycomb API Key (required unless --dry-run).",
    ),
    dataset: str = typer.Option(
        DEFAULT_DATASET,
        "--dataset",
        "-d",
        help="Honeycomb dataset to send to.",
    ),
    api_host: str = typer.Option(
        DEFAULT_API_HOST,
        "--api-host",
        hidden=True,
        help="Honeycomb API host.",
    ),
    unprefixed_tags: list[str] | None = typer.Option(
        None,
        "--unprefixed-tags",
        "-t",
        help=(
            "Tags to NOT prefix with the metric name when constructing the "
            "Honeycomb field key (comma-separated, repeatable). "
            '"host" is never prefixed.'
        ),
    ),
    flush_interval: float = typer.Option(
        DEFAULT_FLUSH_INTERVAL,
        "--flush-interval",
        help="Seconds between periodic flushes.",
    ),
    max_buffer_size: int = typer.Option(
        DEFAULT_MAX_BUFFER_SIZE,
        "--max-buffer-size",
        help="Number of buffered metrics that triggers an immediate flush.",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help=(
            "Enable debug logging on STDOUT (if running inside telegraf, "
            "you'll also want to run `telegraf --debug`)."
        ),
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Print events to STDOUT as NDJSON instead of sending them.",
    ),
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Forward Influx line protocol metrics on stdin to Honeycomb."""
    emitter: EmitterPort
    try:
        config = OutputConfig(
            flush_interval=flush_interval,
            max_buffer_size=max_buffer_size,
            unprefixed_tags=split_tags(unprefixed_tags),
        )
        if dry_run:
            emitter = NDJSONEmitter(sys.stdout)
        else:
            emitter = HoneycombEmitter(
                HoneycombConfig(api_key=api_key, dataset=dataset, api_host=api_host)
            )
    except ConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    if debug:
        enable_debug_logging(sys.stdout)

    output = Output(emitter, config)
    try:
        asyncio.run(serve(output, emitter))
    except FatalEmitError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    except (OSError, ValueError) as e:
        typer.echo(f"Error reading input: {e}", err=True)
        raise typer.Exit(1) from None
