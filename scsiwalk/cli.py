"""Typer CLI entrypoint."""

from __future__ import annotations

import contextlib
import logging
import sys
from collections.abc import Iterator
from pathlib import Path
from typing import TextIO

import typer

from scsiwalk.api import Client
from scsiwalk.core.errors import ScsiwalkError
from scsiwalk.core.walker import FAMILIES

app = typer.Typer(help="Walk a SCSI device's diagnostic surface and capture every exchange")

FAMILY_OPTION = typer.Option(None, "--family", "-f", help="Only walk this command family (repeatable)")
OUTPUT_OPTION = typer.Option(None, "--output", "-o", dir_okay=False, writable=True, help="Write records here instead of stdout")
CONFIG_OPTION = typer.Option(None, "--config", "-c", dir_okay=False, help="Config file (default: $XDG_CONFIG_HOME/scsiwalk/config.yaml)")
VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Log progress to stderr")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


@contextlib.contextmanager
def _output_stream(output: Path | None) -> Iterator[TextIO]:
    if output is None:
        yield sys.stdout
        return
    with open(output, "w", encoding="utf-8", newline="") as stream:
        yield stream


def _build_client(config: Path | None) -> Client:
    return Client(config_path=config)


@app.command("collect")
def collect(
    device: str = typer.Argument(..., help="SCSI generic device node, e.g. /dev/sg0"),
    family: list[str] | None = FAMILY_OPTION,
    output: Path | None = OUTPUT_OPTION,
    config: Path | None = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Walk DEVICE and write one record per exchange."""
    _configure_logging(verbose)
    try:
        client = _build_client(config)
        with _output_stream(output) as stream:
            count = client.collect(device, stream, families=family)
        logging.getLogger(__name__).info("Captured %d records from %s", count, device)
    except ScsiwalkError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("replay")
def replay(
    capture: Path = typer.Argument(..., dir_okay=False, help="Capture file written by 'collect'"),
    family: list[str] | None = FAMILY_OPTION,
    output: Path | None = OUTPUT_OPTION,
    config: Path | None = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Re-walk a capture offline, answering commands from its records."""
    _configure_logging(verbose)
    try:
        client = _build_client(config)
        with _output_stream(output) as stream:
            client.replay(capture, stream, families=family)
    except ScsiwalkError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("families")
def list_families() -> None:
    """List command families in walk order."""
    for family in FAMILIES:
        typer.echo(f"{family.tag}: {family.description}")


@app.command("config")
def show_config(config: Path | None = CONFIG_OPTION) -> None:
    """Print the effective configuration."""
    try:
        client = _build_client(config)
    except ScsiwalkError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None

    effective = client.config
    typer.echo(f"source: {effective.source or '<defaults>'}")
    typer.echo(f"transport.timeout_ms: {effective.transport.timeout_ms}")
    typer.echo(f"transport.sense_buffer_len: {effective.transport.sense_buffer_len}")
    typer.echo(f"transport.debug: {str(effective.transport.debug).lower()}")
    families = effective.walk.families or tuple(f.tag for f in FAMILIES)
    typer.echo(f"walk.families: {', '.join(families)}")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
