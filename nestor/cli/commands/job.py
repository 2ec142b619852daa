"""
Job Commands.

Trigger, tail, stop and inspect individual jobs.
"""

import typer
from rich.console import Console
from rich.table import Table

from nestor.cli.client import get_jenkins_client, load_client_config, run_command
from nestor.cli.render import status_markup

app = typer.Typer(help="Job commands")
console = Console()


@app.command()
def build(
    name: str = typer.Argument(..., help="Job name"),
    params: str | None = typer.Argument(None, help="Build parameters: key1=value1&key2=value2"),
    follow: bool = typer.Option(False, "--console", "-c", help="Tail the console output after triggering"),
) -> None:
    """
    Trigger a build, optionally with parameters.

    Examples:
        nestor job build my-job
        nestor job build my-job "branch=main&clean=true" --console
    """
    run_command(_build(name, params, follow))


async def _build(name: str, params: str | None, follow: bool) -> None:
    async with get_jenkins_client() as jenkins:
        await jenkins.build(name, params)
        console.print(f"[green]Job {name} was started successfully[/green]")
        if follow:
            await jenkins.console(name, interval=load_client_config().console_interval)


@app.command("console")
def console_output(
    name: str = typer.Argument(..., help="Job name"),
    interval: float | None = typer.Option(None, "--interval", "-i", help="Seconds between polls"),
) -> None:
    """
    Display the live console output of a job's latest build.

    Examples:
        nestor job console my-job
    """
    run_command(_console(name, interval))


async def _console(name: str, interval: float | None) -> None:
    if interval is None:
        interval = load_client_config().console_interval
    async with get_jenkins_client() as jenkins:
        await jenkins.console(name, interval=interval)


@app.command()
def stop(name: str = typer.Argument(..., help="Job name")) -> None:
    """Stop the currently running build of a job."""
    run_command(_stop(name))


async def _stop(name: str) -> None:
    async with get_jenkins_client() as jenkins:
        await jenkins.stop(name)
    console.print(f"[green]Job {name} was stopped successfully[/green]")


@app.command()
def status(name: str = typer.Argument(..., help="Job name")) -> None:
    """Display a job's status and health reports."""
    run_command(_status(name))


async def _status(name: str) -> None:
    async with get_jenkins_client() as jenkins:
        report = await jenkins.job(name)

    console.print(f"{name} | {status_markup(report.status)}")
    for description in report.reports:
        console.print(f"  · {description}")


@app.command()
def rebuild(
    status_filter: str | None = typer.Option(
        None, "--status", "-s", help="Only jobs with this status (OK, WARN, FAIL, ABORTED)"
    ),
) -> None:
    """
    Trigger every job on the dashboard, or only those with a given status.

    Examples:
        nestor job rebuild --status FAIL
    """
    run_command(_rebuild(status_filter.upper() if status_filter else None))


async def _rebuild(status_filter: str | None) -> None:
    async with get_jenkins_client() as jenkins:
        names = await jenkins.build_by(status_filter)

    if not names:
        console.print("[yellow]No matching jobs[/yellow]")
        return

    table = Table(title="Triggered Builds", show_header=True)
    table.add_column("Job", style="cyan")
    for job_name in names:
        table.add_row(job_name)
    console.print(table)
