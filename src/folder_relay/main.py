"""CLI entrypoint for folder-relay."""

from pathlib import Path

import rich_click as click

from folder_relay import __version__
from folder_relay.relay.controllers import (
    CommandOutput,
    RelayCliController,
    RelayPlanCommand,
    RelayRunCommand,
)

click.rich_click.USE_MARKDOWN = True
RELAY_CONTROLLER = RelayCliController()


@click.group()
@click.version_option(version=__version__, prog_name="folder-relay")
def folder_relay() -> None:
    """Folder relay CLI."""


@folder_relay.command("run")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Folder mapping JSON file.",
)
@click.option(
    "--once/--loop",
    default=False,
    show_default=True,
    help="Process every folder once, or poll until stopped.",
)
@click.option(
    "--max-cycles",
    type=click.IntRange(min=1),
    default=None,
    help="Optional cap for cycles in loop mode.",
)
def run(config_path: Path | None, once: bool, max_cycles: int | None) -> None:
    """Run the relay worker."""

    _emit(
        RELAY_CONTROLLER.run(
            RelayRunCommand(
                config_path=config_path,
                once=once,
                max_cycles=max_cycles,
            ),
        ),
    )


@folder_relay.command("plan")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Folder mapping JSON file.",
)
def plan(config_path: Path | None) -> None:
    """Show the resolved task chain of every folder."""

    _emit(RELAY_CONTROLLER.plan(RelayPlanCommand(config_path=config_path)))


def _emit(output: CommandOutput) -> None:
    for line in output.lines:
        click.echo(line)
    if output.failed:
        raise SystemExit(1)


if __name__ == "__main__":  # pragma: no cover
    folder_relay()
