# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from pathlib import Path

import click

from mudnav.config import NavigationConfig
from mudnav.graph import RoomIndex
from mudnav.logging import configure_logging
from mudnav.router import LineFramer
from mudnav.settings import Settings
from mudnav.tracking import RoomTracker


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
def cli() -> None:
    """mudnav command line interface."""
    configure_logging(Settings())


@cli.command("replay")
@click.argument("transcript", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--rooms", type=click.Path(exists=True, dir_okay=False, path_type=Path), default=None)
@click.option("--chunk-size", type=int, default=0, show_default=True, help="Split input into chunks of N chars (0 = whole file).")
@click.option("--encoding", default="utf-8", show_default=True)
def replay(transcript: Path, rooms: Path | None, chunk_size: int, encoding: str) -> None:
    """Feed a captured session transcript through the room tracker.

    Examples:
        mudnav replay session.log --rooms rooms.yaml
        mudnav replay session.log --rooms rooms.json --chunk-size 64
    """
    index = RoomIndex.from_file(rooms) if rooms else RoomIndex()
    settings = Settings()
    tracker = RoomTracker(index, settings.navigation.tracker, log_sink=lambda msg: click.echo(f"  . {msg}"))

    tracker.room_display_detected.connect(
        lambda name, exits: click.echo(f"display: {name} [{', '.join(str(e) for e in exits) or 'none'}]")
    )
    tracker.room_changed.connect(lambda room: click.echo(f"room:    {room if room else '(unknown)'}"))

    text = transcript.read_text(encoding=encoding, errors="replace")
    size = chunk_size if chunk_size > 0 else max(len(text), 1)
    framer = LineFramer()
    for start in range(0, len(text), size):
        for line in framer.feed(text[start : start + size]):
            tracker.process_line(line)
    tail = framer.flush()
    if tail:
        tracker.process_line(tail)

    click.echo(f"final:   {tracker.current_room or tracker.current_room_name or '(unknown)'}")


@cli.command("search")
@click.argument("query")
@click.option("--rooms", type=click.Path(exists=True, dir_okay=False, path_type=Path), required=True)
@click.option("--limit", type=int, default=20, show_default=True)
def search(query: str, rooms: Path, limit: int) -> None:
    """Search a room file by (partial) room name."""
    index = RoomIndex.from_file(rooms)
    results = index.search_by_name(query, limit)
    if not results:
        click.echo("No rooms found.")
        return
    for room in results:
        exits = " ".join(sorted(room.exit_directions())) or "-"
        click.echo(f"{room}  exits: {exits}")


@cli.command("config")
@click.option("--path", type=click.Path(exists=True, dir_okay=False, path_type=Path), default=None)
def show_config(path: Path | None) -> None:
    """Print the effective navigation configuration as YAML."""
    config = NavigationConfig.from_yaml(path) if path else Settings().navigation
    click.echo(config.dump_yaml(), nl=False)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
