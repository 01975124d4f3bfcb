#!/usr/bin/env python3
"""
fsmp - file-system music player.
A small terminal front end over the playback controller.
"""

import argparse
import sys

from rich.markup import escape
from rich.prompt import Prompt
from rich.table import Table

from .components.audio_player import AudioPlayer
from .components.playback_controller import PlaybackController, Result
from .components.queue_manager import QueueManager
from .components.queue_state_store import QueueStateStore
from .components.track_catalog import TrackCatalog
from .config import console, load_config, setup_logging

HELP = "[n]ext [p]rev [t]oggle play/stop [s]huffle [r]epeat [j N] jump [q]uit"


def render_queue(controller: PlaybackController) -> Table:
    """Build the queue table shown after each command."""
    table = Table(expand=True, box=None, padding=(0, 1, 0, 1))
    table.add_column("#", justify="right", style="cyan", width=4)
    table.add_column("Title", style="white", ratio=3)
    table.add_column("Artist", style="green", ratio=2)
    table.add_column("Duration", justify="right", style="dim", width=8)

    for item in controller.get_queue_items():
        style = "bold yellow" if item.is_current else None
        if item.duration is None:
            duration = "--:--"
        else:
            duration = f"{int(item.duration) // 60}:{int(item.duration) % 60:02d}"
        table.add_row(str(item.index + 1), item.title, item.artist, duration, style=style)

    # Greyed-out transport keys mark moves that would go nowhere
    prev_key = escape("[p]rev") if controller.has_previous else "[dim]prev[/dim]"
    next_key = escape("[n]ext") if controller.has_next else "[dim]next[/dim]"
    table.caption = (
        f"{controller.queue_count} tracks | repeat: {controller.repeat_mode.value} | "
        f"shuffle: {'on' if controller.is_shuffled else 'off'} | {prev_key} {next_key}"
    )
    return table


def run_command(controller: PlaybackController, command: str):
    """
    Execute a single user command.

    Returns:
        The command Result, or None for quit
    """
    parts = command.strip().split()
    if not parts:
        return controller.toggle_play_stop()

    action = parts[0].lower()
    if action == "q":
        return None
    if action == "n":
        return controller.next_track()
    if action == "p":
        return controller.previous_track()
    if action == "t":
        return controller.toggle_play_stop()
    if action == "s":
        return controller.toggle_shuffle()
    if action == "r":
        return controller.toggle_repeat_mode()
    if action == "j" and len(parts) == 2 and parts[1].isdigit():
        return controller.jump_to(int(parts[1]) - 1)
    return Result.failure(f"Unknown command: {command!r}. {HELP}")


def main(argv=None):
    parser = argparse.ArgumentParser(prog="fsmp", description="Play local audio files from the terminal.")
    parser.add_argument("files", nargs="*", help="audio files to queue")
    parser.add_argument("--config", help="path to config.json")
    args = parser.parse_args(argv)

    config = load_config(args.config)
    setup_logging(config.log_level)

    catalog = TrackCatalog(config.catalog_path)
    track_ids = catalog.add_files(args.files)
    catalog.save()

    player = AudioPlayer()
    player.volume = config.default_volume / 100
    controller = PlaybackController(
        player, QueueManager(), catalog, QueueStateStore(config.queue_state_path)
    )
    controller.subscribe_to_track_end(controller.auto_advance)

    if track_ids:
        controller.set_queue(track_ids)
    elif config.remember_queue and controller.restore_state():
        console.print("[dim]Restored previous queue.[/dim]")

    try:
        while True:
            console.print(render_queue(controller))
            result = run_command(controller, Prompt.ask(escape(HELP), default="t"))
            if result is None:
                break
            if not result.success:
                console.print(f"[red]{escape(result.message)}[/red]")
            elif result.message:
                console.print(result.message)
    except (KeyboardInterrupt, EOFError):
        console.print("\nProgram terminated by user. Goodbye!")
    finally:
        if config.remember_queue:
            controller.save_state()
        player.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
