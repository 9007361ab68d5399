"""Command line interface for Compose Teardown."""

import logging
import signal
import sys
import threading
from pathlib import Path
from typing import Optional, Tuple

import click
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import ConfigManager, TeardownConfig
from .errors import DiscoveryError, RuntimeUnavailableError
from .models import DownOptions, ImagePolicy, ResourceKind
from .services.project_descriptor import (
    ComposeFileDescriptor,
    ProjectDescriptor,
    StaticProjectDescriptor,
)
from .services.runtime_client import CliRuntimeClient
from .services.teardown_orchestrator import TeardownOrchestrator
from .services.teardown_result import TeardownResult

console = Console()


@click.group()
@click.option("--config", "-c", type=click.Path(exists=False), help="Config file path")
@click.option("--verbose", is_flag=True, help="Verbose output")
@click.version_option(version=__version__, prog_name="compose-teardown")
@click.pass_context
def cli(ctx, config: Optional[str], verbose: bool):
    """Remove every container, network, volume and image of a compose project.

    \b
    EXAMPLES:
      compose-teardown down myproject
      compose-teardown down -f compose.yaml --remove-orphans
      compose-teardown down myproject --volumes --rmi local
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    logging.basicConfig(
        level=logging.WARNING, format="%(levelname)s:%(name)s:%(message)s"
    )
    if verbose:
        logging.getLogger("compose_teardown").setLevel(logging.DEBUG)

    if config:
        ctx.obj["config_manager"] = ConfigManager(Path(config))
    else:
        ctx.obj["config_manager"] = ConfigManager.create_with_backtrack()


@cli.command()
@click.argument("project", required=False)
@click.option(
    "--file",
    "-f",
    "files",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Compose file declaring the project's services (repeatable)",
)
@click.option(
    "--service",
    "services",
    multiple=True,
    help="Declared service name, instead of reading compose files (repeatable)",
)
@click.option(
    "--remove-orphans",
    is_flag=True,
    help="Remove containers for services not declared in the compose files",
)
@click.option(
    "--volumes",
    "-v",
    "remove_volumes",
    is_flag=True,
    help="Remove named project volumes and anonymous container volumes",
)
@click.option(
    "--rmi",
    type=click.Choice([ImagePolicy.LOCAL.value, ImagePolicy.ALL.value]),
    default=None,
    help="Remove images: 'local' only those built by compose, 'all' every image used",
)
@click.option(
    "--runtime",
    type=click.Choice(["auto", "docker", "podman"]),
    default=None,
    help="Container runtime to use (overrides config)",
)
@click.pass_context
def down(
    ctx,
    project: Optional[str],
    files: Tuple[str, ...],
    services: Tuple[str, ...],
    remove_orphans: bool,
    remove_volumes: bool,
    rmi: Optional[str],
    runtime: Optional[str],
):
    """Stop and remove the resources of a compose project."""
    try:
        config = ctx.obj["config_manager"].load()
    except ValueError as e:
        console.print(f"❌ {e}", style="red")
        sys.exit(1)
    if runtime:
        config = config.model_copy(update={"runtime": runtime})

    descriptor: Optional[ProjectDescriptor] = None
    try:
        if files:
            descriptor = ComposeFileDescriptor([Path(f) for f in files])
        if services:
            # Explicit services replace the file's service list, not its name
            descriptor = StaticProjectDescriptor(
                services,
                project_name=descriptor.project_name if descriptor else None,
            )
        project_name = project or (descriptor.project_name if descriptor else None)
    except ValueError as e:
        console.print(f"❌ {e}", style="red")
        sys.exit(1)

    if not project_name:
        console.print(
            "❌ No project name given and none found in the compose files",
            style="red",
        )
        sys.exit(2)

    options = DownOptions(
        remove_orphans=remove_orphans,
        remove_volumes=remove_volumes,
        image_policy=ImagePolicy(rmi) if rmi else ImagePolicy.NONE,
    )

    result = _run_teardown(config, project_name, options, descriptor)
    _display_result(result, verbose=ctx.obj.get("verbose", False))
    if not result.ok or result.cancelled:
        sys.exit(1)


def _run_teardown(
    config: TeardownConfig,
    project_name: str,
    options: DownOptions,
    descriptor: Optional[ProjectDescriptor],
) -> TeardownResult:
    cancel_event = threading.Event()
    orchestrator = TeardownOrchestrator(
        CliRuntimeClient.from_config(config), config, cancel_event=cancel_event
    )

    def _handle_interrupt(signum, frame):
        console.print("⚠️  Cancelling: waiting for running operations", style="yellow")
        orchestrator.request_cancellation()

    previous_handler = None
    if threading.current_thread() is threading.main_thread():
        previous_handler = signal.signal(signal.SIGINT, _handle_interrupt)

    try:
        declared = descriptor.service_names() if descriptor else None
        with console.status(f"Tearing down project {project_name}..."):
            return orchestrator.down(project_name, options, declared)
    except (DiscoveryError, RuntimeUnavailableError, ValueError) as e:
        console.print(f"❌ {e}", style="red")
        sys.exit(1)
    finally:
        if previous_handler is not None:
            signal.signal(signal.SIGINT, previous_handler)


def _display_result(result: TeardownResult, verbose: bool = False) -> None:
    if result.orphans_left:
        console.print(
            f"⚠️  Orphan containers left in place: {', '.join(result.orphans_left)}",
            style="yellow",
        )

    if verbose:
        for warning in result.warnings:
            console.print(f"⚠️  {warning}", style="yellow")

    table = Table(title=f"Project {result.project}")
    table.add_column("Resource")
    table.add_column("Removed", justify="right")
    table.add_column("Already gone", justify="right")
    table.add_column("Failed", justify="right")
    for kind in ResourceKind:
        table.add_row(
            kind.value,
            str(sum(1 for ref in result.removed if ref.kind == kind)),
            str(sum(1 for ref in result.already_absent if ref.kind == kind)),
            str(sum(1 for failure in result.failures if failure.kind == kind)),
        )
    console.print(table)

    for failure in result.failures:
        console.print(f"❌ {failure}", style="red")

    if result.cancelled:
        console.print(
            f"⚠️  Cancelled: {len(result.skipped)} resource(s) not processed",
            style="yellow",
        )
    elif result.ok:
        console.print(f"✅ Project {result.project} torn down", style="green")


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
