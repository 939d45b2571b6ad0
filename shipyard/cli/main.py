"""Main CLI entry point for Shipyard."""

import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from shipyard import __version__
from shipyard.config import Settings, get_settings
from shipyard.exceptions import ShipyardError
from shipyard.logging_config import get_logger, setup_logging

app = typer.Typer(
    name="shipyard",
    help="Shipyard - Start linked containers for integration builds",
    add_completion=True,
    rich_markup_mode="rich",
    no_args_is_help=True,
)

console = Console()
console_err = Console(stderr=True)
logger = get_logger(__name__)

OUTPUT_FORMATS = ("table", "json")


class CLIState:
    """Global CLI state."""

    output_format: str = "table"
    verbose: bool = False
    settings: Optional[Settings] = None


state = CLIState()


def version_callback(value: bool) -> None:
    """Callback for --version flag."""
    if value:
        console.print(f"Shipyard version: {__version__}")
        console.print(f"Python: {sys.version.split()[0]}")
        raise typer.Exit(0)


@app.callback()
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version information and exit",
        callback=version_callback,
        is_eager=True,
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file path",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    output: str = typer.Option(
        "table",
        "--output",
        "-o",
        help="Output format: table, json",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging",
    ),
) -> None:
    """
    Shipyard - declarative container startup

    Starts the containers of a start file in order, waits for them to come
    up and publishes their port mappings as properties.
    """
    if output not in OUTPUT_FORMATS:
        console_err.print(f"[red]Error:[/red] Invalid output format: {output}")
        console_err.print(f"Valid formats: {', '.join(OUTPUT_FORMATS)}")
        raise typer.Exit(1)

    state.output_format = output
    state.verbose = verbose
    state.settings = get_settings(config_path=config, reload=config is not None)

    setup_logging(state.settings, verbose=verbose)

    ctx.obj = state


def handle_error(error: Exception) -> None:
    """Handle CLI errors with user-friendly messages.

    Args:
        error: Exception to handle
    """
    if isinstance(error, ShipyardError):
        console_err.print(f"\n[red]Error:[/red] {error.message}")

        if state.verbose and error.context:
            console_err.print("\n[yellow]Context:[/yellow]")
            for key, value in error.context.items():
                console_err.print(f"  {key}: {value}")
    else:
        console_err.print(f"\n[red]Unexpected Error:[/red] {str(error)}")

        if state.verbose:
            import traceback

            console_err.print("\n[yellow]Traceback:[/yellow]")
            console_err.print(traceback.format_exc())

    raise typer.Exit(1)


from shipyard.cli import config, containers  # noqa: E402

app.add_typer(containers.app, name="containers", help="Start and stop containers")
app.add_typer(config.app, name="config", help="Configuration management")


def main_cli() -> None:
    """Entry point for CLI application with error handling."""
    try:
        app()
    except ShipyardError as e:
        handle_error(e)
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(1)


if __name__ == "__main__":
    main_cli()
