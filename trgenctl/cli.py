"""Typer CLI entrypoint."""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path

import typer

from trgenctl.core.config_loader import load_config
from trgenctl.core.errors import InstructionRangeError, TrgenError
from trgenctl.core.model import BitOrder
from trgenctl.core.pins import PINS_BY_CLASS, PinClass, parse_pin, pin_name
from trgenctl.core.session import DeviceSession

app = typer.Typer(help="Program and fire TrGEN trigger generator pins over TCP")

_RESETTABLE = ("all", "ns", "sa", "gpio", "tmso")


@app.callback()
def main(
    ctx: typer.Context,
    host: str | None = typer.Option(None, "--host", help="Device address"),
    port: int | None = typer.Option(None, "--port", help="Device TCP port"),
    timeout: float | None = typer.Option(None, "--timeout", help="Connect/read timeout in seconds"),
    config: Path | None = typer.Option(None, "--config", help="YAML config file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every frame sent"),
) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    ctx.obj = {"host": host, "port": port, "timeout": timeout, "config": config}


def _build_session(ctx: typer.Context, *, connect: bool = True) -> DeviceSession:
    opts = ctx.obj or {}
    settings = load_config(opts.get("config")).config
    overrides = {
        key: opts[opt]
        for key, opt in (("host", "host"), ("port", "port"), ("timeout_s", "timeout"))
        if opts.get(opt) is not None
    }
    session = DeviceSession(replace(settings, **overrides))
    if connect and not session.connect():
        raise session.last_error or TrgenError("Connect failed")
    return session


def _parse_mask(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value, 0)
    except ValueError:
        raise InstructionRangeError(f"Invalid mask '{value}'. Use decimal, 0x.. or 0b..") from None


def _parse_bit_order(value: str | None) -> BitOrder | None:
    if value is None:
        return None
    try:
        return BitOrder(value.lower())
    except ValueError:
        raise InstructionRangeError(f"Invalid bit order '{value}'. Use lsb or msb") from None


def _fail(exc: TrgenError) -> typer.Exit:
    typer.echo(f"Error: {exc}", err=True)
    return typer.Exit(code=1)


@app.command("probe")
def probe(ctx: typer.Context) -> None:
    """Check whether the device accepts TCP connections."""
    try:
        session = _build_session(ctx, connect=False)
    except TrgenError as exc:
        raise _fail(exc) from None
    endpoint = f"{session.config.host}:{session.config.port}"
    if not session.is_available():
        typer.echo(f"{endpoint} unreachable")
        raise typer.Exit(code=1)
    typer.echo(f"{endpoint} reachable")


@app.command("info")
def info(ctx: typer.Context) -> None:
    """Query and print the device capabilities."""
    try:
        session = _build_session(ctx)
    except TrgenError as exc:
        raise _fail(exc) from None
    caps = session.capabilities
    typer.echo(f"NeuroScan pins: {caps.ns_pin_count}")
    typer.echo(f"SynAmps pins:   {caps.sa_pin_count}")
    typer.echo(f"GPIO pins:      {caps.gpio_pin_count}")
    typer.echo(f"Sync outputs:   {caps.tms_out_count}")
    typer.echo(f"Sync inputs:    {caps.tms_in_count}")
    typer.echo(f"Memory length:  {caps.program_memory_length} (exponent {caps.memory_length_exponent})")


@app.command("status")
def status(ctx: typer.Context) -> None:
    """Print the raw device status word."""
    try:
        session = _build_session(ctx, connect=False)
        typer.echo(f"status={session.get_status()}")
    except TrgenError as exc:
        raise _fail(exc) from None


@app.command("start")
def start(
    ctx: typer.Context,
    pins: list[str] = typer.Argument(..., help="Pins to pulse, e.g. ns0 gpio3"),
    width_us: int | None = typer.Option(None, "--width-us", help="Pulse width in microseconds"),
) -> None:
    """Reset all pins, arm a pulse on PINS and start."""
    try:
        pin_ids = [parse_pin(p) for p in pins]
        session = _build_session(ctx)
        session.start_triggers(pin_ids, width_us)
    except TrgenError as exc:
        raise _fail(exc) from None
    typer.echo(f"Started {', '.join(pin_name(p) for p in pin_ids)}")


@app.command("marker")
def marker(
    ctx: typer.Context,
    ns: str | None = typer.Option(None, "--ns", help="NeuroScan 8-bit mask"),
    sa: str | None = typer.Option(None, "--sa", help="SynAmps 8-bit mask"),
    gpio: str | None = typer.Option(None, "--gpio", help="GPIO 8-bit mask"),
    bit_order: str | None = typer.Option(None, "--bit-order", help="lsb (bit i is pin i) or msb"),
    width_us: int | None = typer.Option(None, "--width-us", help="Pulse width in microseconds"),
) -> None:
    """Fire one marker as simultaneous pulses on every pin set in the masks."""
    try:
        masks = [_parse_mask(ns), _parse_mask(sa), _parse_mask(gpio)]
        if all(m is None for m in masks):
            typer.echo("No mask given; nothing sent")
            return
        order = _parse_bit_order(bit_order)
        session = _build_session(ctx)
        fired = session.send_marker(*masks, bit_order=order, active_us=width_us)
    except TrgenError as exc:
        raise _fail(exc) from None
    typer.echo(f"Marker on {', '.join(pin_name(p) for p in fired) or '<no pins>'}")


@app.command("stop")
def stop(
    ctx: typer.Context,
    reset: bool = typer.Option(False, "--reset", help="Also reset every pin class"),
) -> None:
    """Stop all running triggers."""
    try:
        session = _build_session(ctx, connect=reset)
        if reset:
            session.stop_and_reset_all()
        else:
            session.stop()
    except TrgenError as exc:
        raise _fail(exc) from None
    typer.echo("Stopped and reset" if reset else "Stopped")


@app.command("reset")
def reset(
    ctx: typer.Context,
    pin_class: str = typer.Argument("all", help=f"One of: {', '.join(_RESETTABLE)}"),
) -> None:
    """Silence every pin of a class (END in slot 0)."""
    if pin_class.lower() not in _RESETTABLE:
        typer.echo(f"Error: unknown pin class '{pin_class}'. Use one of: {', '.join(_RESETTABLE)}", err=True)
        raise typer.Exit(code=1)
    classes = (
        [PinClass.TMSO, PinClass.SYNAMPS, PinClass.GPIO, PinClass.NEUROSCAN]
        if pin_class.lower() == "all"
        else [PinClass(pin_class.lower())]
    )
    try:
        session = _build_session(ctx)
        for cls in classes:
            session.reset_class(cls)
    except TrgenError as exc:
        raise _fail(exc) from None
    count = sum(len(PINS_BY_CLASS[cls]) for cls in classes)
    typer.echo(f"Reset {count} pins")


@app.command("level")
def level(ctx: typer.Context, mask: str | None = typer.Argument(None)) -> None:
    """Read the level mask, or set it when MASK is given."""
    try:
        session = _build_session(ctx, connect=False)
        if mask is None:
            typer.echo(f"level=0x{session.get_level():08X}")
            return
        session.set_level(_parse_mask(mask))
    except TrgenError as exc:
        raise _fail(exc) from None
    typer.echo(f"Level set to {mask}")


@app.command("gpio")
def gpio(ctx: typer.Context, mask: str | None = typer.Argument(None)) -> None:
    """Read the GPIO mask, or set it when MASK is given."""
    try:
        session = _build_session(ctx, connect=False)
        if mask is None:
            typer.echo(f"gpio=0x{session.get_gpio():08X}")
            return
        session.set_gpio(_parse_mask(mask))
    except TrgenError as exc:
        raise _fail(exc) from None
    typer.echo(f"GPIO set to {mask}")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
