"""Container start/stop CLI commands."""

from pathlib import Path
from typing import List, Optional

import typer

from shipyard.cli.main import handle_error
from shipyard.cli.output import (
    console,
    print_error,
    print_info,
    print_json,
    print_success,
    print_table,
)
from shipyard.config import Settings, get_settings
from shipyard.docker.provider import DockerCliProvider
from shipyard.exceptions import ShipyardError
from shipyard.logging_config import bind_run_context, get_logger, log_error
from shipyard.start.loader import load_start_file
from shipyard.start.orchestrator import RunResult, StartOrchestrator
from shipyard.start.registry import BuiltImageRegistry, parse_built_image
from shipyard.start.state import clear_state, load_state, save_state

app = typer.Typer(help="Start and stop containers")
logger = get_logger(__name__)


def _settings(ctx: typer.Context) -> Settings:
    if ctx.obj is not None and ctx.obj.settings is not None:
        return ctx.obj.settings
    return get_settings()


def _output_format(ctx: typer.Context) -> str:
    return ctx.obj.output_format if ctx.obj is not None else "table"


def create_orchestrator(
    settings: Settings, registry: Optional[BuiltImageRegistry] = None
) -> StartOrchestrator:
    """Build an orchestrator wired to the docker CLI."""
    provider = DockerCliProvider(
        docker_binary=settings.docker_binary,
        command_timeout=settings.docker_command_timeout_seconds,
    )
    return StartOrchestrator(
        provider,
        registry=registry,
        poll_interval=settings.poll_interval_seconds,
        property_prefix=settings.property_prefix,
    )


def write_properties(path: Path, properties: dict[str, str]) -> None:
    """Write properties as sorted ``key=value`` lines."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("".join(f"{key}={value}\n" for key, value in sorted(properties.items())))


def _report(result: RunResult, output_format: str) -> None:
    if output_format == "json":
        print_json(
            {
                "success": result.success,
                "containers": [
                    {"id": o.config_id, "runtime_id": o.runtime_id} for o in result.outcomes
                ],
                "properties": result.properties,
                "errors": [error.to_dict() for error in result.errors],
            }
        )
        return

    if result.outcomes:
        print_table(
            [
                {"Container": o.config_id, "Runtime ID": o.runtime_id[:12]}
                for o in result.outcomes
            ],
            title="Started Containers",
        )
    if result.properties:
        print_table(
            [{"Property": key, "Value": value} for key, value in sorted(result.properties.items())],
            title="Properties",
        )
    for error in result.errors:
        print_error(error.message)


@app.command("start")
def start_containers(
    ctx: typer.Context,
    start_file: Path = typer.Argument(
        ...,
        help="YAML file declaring the containers to start",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    skip: bool = typer.Option(
        False,
        "--skip",
        help="Do not start anything",
    ),
    built_images: Optional[List[str]] = typer.Option(
        None,
        "--built-image",
        "-b",
        help="Built image mapping alias=image-id (repeatable)",
    ),
    properties_file: Optional[Path] = typer.Option(
        None,
        "--properties-file",
        "-p",
        help="Write published properties to this file",
    ),
    state_file: Optional[Path] = typer.Option(
        None,
        "--state-file",
        help="Where to record started containers (defaults to settings)",
    ),
) -> None:
    """
    Start the containers declared in START_FILE.

    Containers start in the order they are declared. Failures are reported
    at the end and make the command exit with status 1.
    """
    settings = _settings(ctx)
    state_path = state_file or settings.state_file
    bind_run_context(start_file=str(start_file), state_file=str(state_path))

    try:
        configurations, file_images = load_start_file(
            start_file, default_timeout=settings.default_startup_timeout_seconds
        )

        registry = BuiltImageRegistry(file_images)
        for value in built_images or []:
            registry.register(*parse_built_image(value))

        if skip:
            print_info("Skipping container start")

        recorded = load_state(state_path)
        if recorded:
            logger.warning("unstopped_containers_recorded", count=len(recorded))

        orchestrator = create_orchestrator(settings, registry)
        result = orchestrator.run(configurations, skip=skip)

        if result.outcomes:
            save_state(state_path, recorded + list(result.outcomes))
        if properties_file is not None:
            write_properties(properties_file, result.properties)

    except ShipyardError as e:
        log_error(logger, e, "containers_start", start_file=str(start_file))
        handle_error(e)

    _report(result, _output_format(ctx))

    if not result.success:
        console.print(
            f"\n[red]{len(result.errors)} error(s) while starting containers[/red]"
        )
        raise typer.Exit(1)

    if not skip:
        print_success(f"Started {len(result.outcomes)} container(s)")


@app.command("stop")
def stop_containers(
    ctx: typer.Context,
    state_file: Optional[Path] = typer.Option(
        None,
        "--state-file",
        help="State file written by 'containers start' (defaults to settings)",
    ),
) -> None:
    """
    Stop and remove the containers recorded by the last start.
    """
    settings = _settings(ctx)
    state_path = state_file or settings.state_file
    bind_run_context(state_file=str(state_path))

    try:
        outcomes = load_state(state_path)
        if not outcomes:
            print_info("No started containers recorded")
            return

        orchestrator = create_orchestrator(settings)
        errors = orchestrator.stop(outcomes)
    except ShipyardError as e:
        log_error(logger, e, "containers_stop")
        handle_error(e)

    for error in errors:
        print_error(error.message)

    if errors:
        # keep only what is left so a second stop retries it
        failed = {error.runtime_id for error in errors}
        save_state(state_path, [o for o in outcomes if o.runtime_id in failed])
        raise typer.Exit(1)

    clear_state(state_path)
    print_success(f"Removed {len(outcomes)} container(s)")
