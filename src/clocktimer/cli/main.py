"""CLI entry point for clocktimer.

Uses Click to expose the ``clocktimer`` command group.  Every invocation
loads the timer from the state file, applies one action and saves it back,
so a countdown keeps going between invocations.
"""

from __future__ import annotations

import logging
import re
import sys
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, Optional, TypeVar

import click

import clocktimer
from clocktimer.core.alarm import LoggingAlarm
from clocktimer.core.display import DisplayState, format_remaining
from clocktimer.core.record import TimerStatus
from clocktimer.core.screen import TimerScreen
from clocktimer.core.sounds import SoundCatalog
from clocktimer.core.store import BackgroundStore, JsonTimerStore
from clocktimer.core.timer import InvalidStateError, TimerEngine, TimerSnapshot

T = TypeVar("T")

_DURATION_RE = re.compile(r"^(?:(?P<h>\d+)h)?(?:(?P<m>\d+)m)?(?:(?P<s>\d+)s)?$")


def parse_duration(text: str) -> float:
    """Parse ``90``, ``1:30``, ``1:00:00`` or ``1h30m`` into seconds."""
    text = text.strip()
    if ":" in text:
        parts = text.split(":")
        if len(parts) > 3 or not all(p.isdigit() for p in parts):
            raise ValueError(f"invalid duration: {text!r}")
        seconds = 0
        for part in parts:
            seconds = seconds * 60 + int(part)
        return float(seconds)
    if text.isdigit():
        return float(text)
    match = _DURATION_RE.match(text)
    if not text or match is None:
        raise ValueError(f"invalid duration: {text!r}")
    hours, minutes, seconds = (int(match.group(k) or 0) for k in ("h", "m", "s"))
    return float(hours * 3600 + minutes * 60 + seconds)


def _run(action: Callable[[], T]) -> T:
    """Execute *action*, converting ``InvalidStateError`` to a CLI error.

    On ``InvalidStateError`` the message is printed to stderr and the
    process exits with code 1.
    """
    try:
        return action()
    except InvalidStateError as exc:
        click.echo(str(exc), err=True)
        sys.exit(1)


@contextmanager
def _open_engine(ctx: click.Context) -> Iterator[TimerEngine]:
    """Yield an engine bound to the state file; pending saves are flushed on exit."""
    with BackgroundStore(JsonTimerStore(ctx.obj["config_dir"])) as store:
        yield TimerEngine(store, LoggingAlarm())


def _describe(snapshot: TimerSnapshot) -> str:
    status = snapshot.status
    remaining = format_remaining(snapshot.remaining)
    if status == TimerStatus.RUNNING:
        return f"{remaining} remaining"
    if status == TimerStatus.PAUSED:
        return f"{remaining} remaining (paused)"
    return f"Stopped, set to {format_remaining(snapshot.record.configured_duration)}"


@click.group()
@click.version_option(version=clocktimer.__version__, prog_name="clocktimer")
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="CLOCKTIMER_CONFIG_DIR",
    default=None,
    help="Directory holding timer.json (default ~/.config/clocktimer).",
)
@click.option("-v", "--verbose", is_flag=True, help="Log what the timer is doing.")
@click.pass_context
def cli(ctx: click.Context, config_dir: Optional[Path], verbose: bool) -> None:
    """clocktimer: a single countdown timer that survives restarts."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["config_dir"] = config_dir


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show the current timer status."""
    with _open_engine(ctx) as engine:
        snapshot = engine.tick_update(force=True)
    click.echo(_describe(snapshot))
    sys.exit(0 if snapshot.status != TimerStatus.STOPPED else 1)


@cli.command()
@click.pass_context
def start(ctx: click.Context) -> None:
    """Start the timer with the configured duration."""
    with _open_engine(ctx) as engine:
        if not engine.can_start():
            click.echo("Set a duration first", err=True)
            sys.exit(1)
        _run(engine.start)
        click.echo(f"Timer started: {format_remaining(engine.remaining)}")


@cli.command()
@click.pass_context
def pause(ctx: click.Context) -> None:
    """Pause the running timer."""
    with _open_engine(ctx) as engine:
        _run(engine.pause)
        click.echo(f"Timer paused at {format_remaining(engine.remaining)} remaining")


@cli.command()
@click.pass_context
def resume(ctx: click.Context) -> None:
    """Resume a paused timer."""
    with _open_engine(ctx) as engine:
        _run(engine.resume)
        click.echo(f"Timer resumed: {format_remaining(engine.remaining)} remaining")


@cli.command()
@click.pass_context
def reset(ctx: click.Context) -> None:
    """Stop the timer."""
    with _open_engine(ctx) as engine:
        _run(engine.reset)
        click.echo("Timer reset")


@cli.command(name="set")
@click.argument("duration")
@click.pass_context
def set_duration(ctx: click.Context, duration: str) -> None:
    """Set the DURATION of the next run (e.g. 90, 1:30, 1h30m)."""
    try:
        seconds = parse_duration(duration)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="DURATION") from exc
    with _open_engine(ctx) as engine:
        if engine.status != TimerStatus.STOPPED:
            click.echo("Reset the timer before changing its duration", err=True)
            sys.exit(1)
        engine.set_configured_duration(seconds)
    click.echo(f"Duration set to {format_remaining(seconds)}")


@cli.command()
@click.argument("sound_id", type=int, required=False)
@click.pass_context
def sound(ctx: click.Context, sound_id: Optional[int]) -> None:
    """Choose the alarm sound by SOUND_ID; omit it for no sound."""
    catalog = SoundCatalog()
    if sound_id is not None and catalog.name_for(sound_id) is None:
        raise click.BadParameter(f"unknown sound id {sound_id}", param_hint="SOUND_ID")
    with _open_engine(ctx) as engine:
        engine.set_sound_id(sound_id)
    click.echo(f"Sound: {catalog.label_for(sound_id)}")


@cli.command()
def sounds() -> None:
    """List the available alarm sounds."""
    for sound_id, name in SoundCatalog().items():
        click.echo(f"{sound_id:3d}  {name}")


@cli.command()
@click.pass_context
def watch(ctx: click.Context) -> None:
    """Show the countdown live until the timer stops (Ctrl-C to leave)."""
    done = threading.Event()

    def on_display(display: DisplayState, changed: frozenset) -> None:
        if "remaining_label" in changed or "due_paused" in changed:
            suffix = " (paused)" if display.due_paused else ""
            click.echo(f"\r{display.remaining_label}{suffix}   ", nl=False)
        if not display.left_enabled:
            done.set()

    def on_snapshot(snapshot: TimerSnapshot) -> None:
        if snapshot.expired:
            click.echo("\nTime's up!\a")

    with _open_engine(ctx) as engine:
        if engine.status == TimerStatus.STOPPED:
            click.echo("Timer is not running", err=True)
            sys.exit(1)
        engine.subscribe(on_snapshot)
        screen = TimerScreen(engine)
        on_display(screen.display, frozenset({"remaining_label"}))
        screen.subscribe(on_display)
        screen.view_appeared()
        try:
            while not done.wait(0.2):
                if engine.status == TimerStatus.PAUSED:
                    break
        except KeyboardInterrupt:
            pass
        finally:
            screen.view_disappeared()
            screen.close()
    click.echo()
