"""Configuration management CLI commands."""

import json
from typing import Optional

import typer
import yaml
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from shipyard.cli.output import print_error, print_info, print_panel
from shipyard.config import Settings, get_settings
from shipyard.logging_config import get_logger

app = typer.Typer(help="Configuration management")
console = Console()
logger = get_logger(__name__)


def _settings_to_dict(settings: Settings) -> dict:
    """Group settings into the sections of the YAML config file."""
    return {
        "docker": {
            "binary": settings.docker_binary,
            "command_timeout_seconds": settings.docker_command_timeout_seconds,
        },
        "startup": {
            "poll_interval_seconds": settings.poll_interval_seconds,
            "default_timeout_seconds": settings.default_startup_timeout_seconds,
        },
        "output": {
            "property_prefix": settings.property_prefix,
            "state_file": str(settings.state_file),
        },
        "logging": {
            "level": settings.log_level,
            "format": settings.log_format,
        },
    }


@app.command("show")
def show_config(
    section: Optional[str] = typer.Option(
        None,
        "--section",
        "-s",
        help="Show specific section: docker, startup, output, logging",
    ),
    format: str = typer.Option(
        "table",
        "--format",
        "-f",
        help="Output format: table, yaml, json",
    ),
) -> None:
    """
    Show current configuration.
    """
    try:
        config_dict = _settings_to_dict(get_settings())
    except Exception as e:
        logger.exception("Failed to load configuration")
        print_error(f"Failed to load configuration: {str(e)}")
        raise typer.Exit(1)

    if section:
        if section not in config_dict:
            print_error(f"Unknown section: {section}")
            print_info(f"Available sections: {', '.join(config_dict.keys())}")
            raise typer.Exit(1)
        config_dict = {section: config_dict[section]}

    if format == "yaml":
        config_yaml = yaml.dump(config_dict, default_flow_style=False, sort_keys=False)
        console.print(Syntax(config_yaml, "yaml", theme="monokai", line_numbers=True))
    elif format == "json":
        console.print(Syntax(json.dumps(config_dict, indent=2), "json", theme="monokai"))
    else:
        console.print()
        print_panel("Shipyard Configuration", border_style="cyan")
        console.print()
        for section_name, values in config_dict.items():
            table = Table(
                title=f"{section_name.title()} Settings",
                show_header=True,
                header_style="bold cyan",
            )
            table.add_column("Setting", style="cyan", no_wrap=True)
            table.add_column("Value", style="white")
            for key, value in values.items():
                table.add_row(key, str(value) if value != "" else "(empty)")
            console.print(table)
            console.print()
