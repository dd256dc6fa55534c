"""
Command-line interface for Salvo.

Main entry point for the Salvo CLI application.
"""
import logging
from typing import Optional

import typer
from pydantic import ValidationError
from rich.markup import escape
from rich.table import Table

from salvo import __version__
from salvo.config import load_config
from salvo.console import get_console_wrapper
from salvo.fetchers.base import SalvoError
from salvo.fetchers.kubernetes import resolve_kubeconfig_path
from salvo.pipeline import LogPipeline, RunOptions, RunResult
from salvo.utils.logging import configure_logging, get_logger, make_progress_callback

logger = get_logger(__name__)

app = typer.Typer(
    name="salvo",
    help="A CLI for getting Kubernetes logs fast.\n\n"
    "Uses your local machine's Kubernetes configuration in order to write "
    "your pod logs to a directory for local inspection.",
    add_completion=False,
    no_args_is_help=True,
)


@app.callback()
def main_callback() -> None:
    configure_logging(logging.WARNING)


def _print_error(message: str) -> None:
    get_console_wrapper().get_err_console().print(f"[red]Error: {escape(message)}[/red]")


def _print_failures(result: RunResult) -> None:
    console = get_console_wrapper().get_err_console()
    table = Table(title=f"Failed pods in namespace {escape(result.namespace)}")
    table.add_column("Pod", style="cyan")
    table.add_column("Error", style="red")
    for outcome in result.failed:
        table.add_row(escape(outcome.pod.name), escape(str(outcome.error)))
    console.print(table)
    console.print(
        f"Retrieved {len(result.succeeded)} of {len(result.outcomes)} pod logs into {escape(str(result.directory))}"
    )


@app.command()
def logs(
    namespace: Optional[str] = typer.Option(
        None, "--namespace", "-n", help="The namespace to get logs from [default: default]"
    ),
    directory: Optional[str] = typer.Option(
        None, "--directory", "-d", help="The file path to write the logs to [default: ./logs/<namespace>/]"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
    workers: Optional[int] = typer.Option(
        None, "--workers", "-w", help="Number of pods processed concurrently [default: 1]"
    ),
    fail_fast: Optional[bool] = typer.Option(
        None, "--fail-fast/--keep-going", help="Abort on the first pod that fails [default: keep going]"
    ),
    kubeconfig: Optional[str] = typer.Option(
        None, "--kubeconfig", help="Kubernetes config file [default: ~/.kube/config]"
    ),
    context: Optional[str] = typer.Option(None, "--context", help="Kubernetes context to use"),
    debug: bool = typer.Option(False, "--debug", help="Show diagnostic logging on stderr"),
) -> None:
    """Retrieve logs for all pods in a namespace.

    By default the "default" namespace is used and logs are written to
    ./logs/<namespace>/, one <pod-name>.log file per pod.

    \b
       salvo logs
       salvo logs -n my-namespace
       salvo logs -n my-namespace -d /tmp/logs
    """
    if debug:
        configure_logging(logging.DEBUG)

    try:
        config = load_config(
            namespace=namespace,
            directory=directory,
            workers=workers,
            fail_fast=fail_fast,
            kubeconfig=kubeconfig,
            context=context,
        )
    except ValidationError as e:
        _print_error(f"Invalid configuration: {e}")
        raise typer.Exit(1)

    options = RunOptions.from_config(config, verbose=verbose)
    console = get_console_wrapper().get_console()
    pipeline = LogPipeline(options, progress=make_progress_callback(verbose, console))

    try:
        result = pipeline.run()
    except SalvoError as e:
        logger.debug("cli::logs::run aborted", state=pipeline.state.value)
        _print_error(str(e))
        raise typer.Exit(1)

    if not result.ok:
        _print_failures(result)
        raise typer.Exit(result.exit_code)


@app.command("config")
def show_config() -> None:
    """Confirms your Kubernetes configuration is setup."""
    console = get_console_wrapper().get_console()
    console.print("Getting Kubernetes config", markup=False)

    try:
        kubeconfig_path = resolve_kubeconfig_path(load_config().kubeconfig)
    except ValidationError as e:
        _print_error(f"Invalid configuration: {e}")
        raise typer.Exit(1)
    except SalvoError as e:
        _print_error(str(e))
        raise typer.Exit(1)

    console.print(f"Using Kubernetes config file: {kubeconfig_path}", markup=False)


@app.command()
def version() -> None:
    """Print the version of the application."""
    typer.echo(__version__)


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
