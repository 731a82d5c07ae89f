"""CLI entry point for item-blocker.

Invoked as::

    item-blocker [OPTIONS] COMMAND [ARGS]...

or during development::

    python -m item_blocker.cli.main

Commands run as the server console, which is always authorized.

Commands
--------
- init      Write a default configuration file
- list      Show all six block lists
- add       Add a name to a block list
- remove    Remove a name from a block list
- reload    Re-read the configuration and report list sizes
- loglist   Show the tail of the latest audit log
- check     Evaluate one access attempt offline
- help      Show command usage
- version   Show version information
"""
from __future__ import annotations

import logging
import sys
from datetime import timedelta
from pathlib import Path
from typing import TYPE_CHECKING

import click
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

if TYPE_CHECKING:
    from item_blocker.commands.handler import CommandReply

console = Console()
err_console = Console(stderr=True)

_DEFAULT_CONFIG = Path("item_blocker.json")

_config_option = click.option(
    "--config",
    "-c",
    "config_path",
    default=str(_DEFAULT_CONFIG),
    show_default=True,
    type=click.Path(),
    help="Path to the blocker configuration (JSON or YAML).",
)


def _run(config_path: str, args: list[str]) -> "CommandReply":
    from item_blocker.commands.handler import CommandHandler
    from item_blocker.plugin.blocker import ItemBlocker

    blocker = ItemBlocker.from_path(Path(config_path))
    blocker.initialize()
    return CommandHandler(blocker).execute(None, args)


def _print_reply(reply: "CommandReply") -> None:
    style = "green" if reply.ok else "red"
    console.print(Text(reply.message, style=style))
    if not reply.ok:
        sys.exit(1)


# ---------------------------------------------------------------------------
# Root command group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="item-blocker")
@click.option("--verbose", "-v", is_flag=True, help="Enable INFO-level diagnostics.")
def cli(verbose: bool) -> None:
    """Item Blocker CLI: manage permanent and post-wipe block lists."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from item_blocker import __version__

    console.print(
        Panel(
            f"[bold]item-blocker[/bold]  v[cyan]{__version__}[/cyan]\n"
            "Permanent and post-wipe timed blocking of items, clothing and ammo.",
            title="Version",
            border_style="blue",
        )
    )


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------


@cli.command(name="init")
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    default=str(_DEFAULT_CONFIG),
    show_default=True,
    help="Output configuration file path (.json or .yaml).",
)
@click.option("--hours", type=int, default=30, show_default=True, help="Timed block duration after a wipe.")
@click.option("--force", is_flag=True, help="Overwrite an existing file.")
def init_command(output: str, hours: int, force: bool) -> None:
    """Write a default blocker configuration."""
    from item_blocker.plugin.config_loader import BlockerConfig, ConfigLoader

    output_path = Path(output)
    if output_path.exists() and not force:
        err_console.print(f"[yellow]Refusing to overwrite[/yellow] {output_path} (use --force).")
        sys.exit(1)

    config = BlockerConfig.model_validate({"Block Duration (Hours) after Wipe": hours})
    ConfigLoader().save(config, output_path)

    console.print(f"[green]Initialised[/green] blocker config: [bold]{output_path}[/bold]")
    console.print(f"  Timed block duration: [cyan]{config.block_duration_hours}h[/cyan]")


# ---------------------------------------------------------------------------
# list
# ---------------------------------------------------------------------------


@cli.command(name="list")
@_config_option
def list_command(config_path: str) -> None:
    """Show all six block lists."""
    reply = _run(config_path, ["list"])

    table = Table(title="Block Lists", box=box.SIMPLE)
    table.add_column("List", style="cyan", no_wrap=True)
    table.add_column("Entries")
    for line in reply.lines:
        label, _, entries = line.partition(": ")
        table.add_row(Text(label), Text(entries))
    console.print(table)


# ---------------------------------------------------------------------------
# add / remove
# ---------------------------------------------------------------------------


@cli.command(name="add")
@click.argument("block_type", type=click.Choice(["permanent", "timed"], case_sensitive=False))
@click.argument("category")
@click.argument("name", nargs=-1, required=True)
@_config_option
def add_command(block_type: str, category: str, name: tuple[str, ...], config_path: str) -> None:
    """Add NAME to the BLOCK_TYPE list of CATEGORY (item, cloth, ammo)."""
    _print_reply(_run(config_path, ["add", block_type, category, *name]))


@cli.command(name="remove")
@click.argument("block_type", type=click.Choice(["permanent", "timed"], case_sensitive=False))
@click.argument("category")
@click.argument("name", nargs=-1, required=True)
@_config_option
def remove_command(block_type: str, category: str, name: tuple[str, ...], config_path: str) -> None:
    """Remove NAME from the BLOCK_TYPE list of CATEGORY."""
    _print_reply(_run(config_path, ["remove", block_type, category, *name]))


# ---------------------------------------------------------------------------
# reload
# ---------------------------------------------------------------------------


@cli.command(name="reload")
@_config_option
def reload_command(config_path: str) -> None:
    """Re-read the configuration and report what is active."""
    from item_blocker.plugin.blocker import ItemBlocker

    blocker = ItemBlocker.from_path(Path(config_path))
    blocker.initialize()
    blocker.reload()

    table = Table(title="Active Channels", box=box.SIMPLE)
    table.add_column("Channel", style="cyan")
    for channel in sorted(blocker.gate.subscribed, key=lambda c: c.value):
        table.add_row(channel.value)
    console.print(f"[green]Reloaded[/green] {len(blocker.store)} entries from [bold]{config_path}[/bold]")
    console.print(table)


# ---------------------------------------------------------------------------
# loglist
# ---------------------------------------------------------------------------


@cli.command(name="loglist")
@_config_option
def loglist_command(config_path: str) -> None:
    """Show the tail of the most recent audit log."""
    reply = _run(config_path, ["loglist"])
    if not reply.ok:
        err_console.print(Text(reply.message, style="yellow"))
        sys.exit(1)
    if not reply.lines:
        console.print("[yellow]No audit entries found.[/yellow]")
        return
    for line in reply.lines:
        console.print(Text(line))


# ---------------------------------------------------------------------------
# help
# ---------------------------------------------------------------------------


@cli.command(name="help")
@_config_option
def help_command(config_path: str) -> None:
    """Show in-game command usage."""
    console.print(Text(_run(config_path, ["help"]).message))


# ---------------------------------------------------------------------------
# check
# ---------------------------------------------------------------------------


@cli.command(name="check")
@click.option(
    "--kind",
    "-k",
    type=click.Choice(["equip", "wear", "reload", "deploy"]),
    default="equip",
    show_default=True,
    help="Kind of access attempt.",
)
@click.option("--display", "-d", "display_alias", default="", help="Display name, e.g. 'Assault Rifle'.")
@click.option("--short", "-s", "short_alias", default="", help="Short name, e.g. 'rifle.ak'.")
@click.option(
    "--hours-since-wipe",
    type=float,
    default=0.0,
    show_default=True,
    help="How long ago the last wipe happened.",
)
@_config_option
def check_command(
    kind: str,
    display_alias: str,
    short_alias: str,
    hours_since_wipe: float,
    config_path: str,
) -> None:
    """Evaluate one access attempt without writing to the audit log."""
    from item_blocker.plugin.access import AccessKind
    from item_blocker.plugin.blocker import ItemBlocker
    from item_blocker.policies.engine import Verdict
    from item_blocker.policies.window import utc_now

    if not display_alias and not short_alias:
        err_console.print("[red]Provide --display and/or --short.[/red]")
        sys.exit(2)

    blocker = ItemBlocker.from_path(Path(config_path))
    blocker.initialize(last_epoch_time=utc_now() - timedelta(hours=hours_since_wipe))
    access_kind = AccessKind(kind)
    verdict = blocker.engine.evaluate(display_alias, short_alias, access_kind.resource_class)

    if verdict is Verdict.ALLOW:
        status_str = "[green]ALLOWED[/green]"
    elif verdict is Verdict.TIMED_DENY:
        status_str = "[yellow]TIMED BLOCK[/yellow]"
    else:
        status_str = "[red]PERMANENT BLOCK[/red]"
    console.print(Panel(status_str, title="Access Check Result", border_style="blue"))
    console.print(f"  Class: [cyan]{access_kind.resource_class.value}[/cyan]")
    if verdict is Verdict.TIMED_DENY:
        console.print(f"  Remaining: [cyan]{blocker.window.remaining()}[/cyan]")

    sys.exit(0 if verdict is Verdict.ALLOW else 1)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    cli()
