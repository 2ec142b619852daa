"""
Server Commands.

Dashboard, queue, executors, version, discovery, feed and monitoring.
"""

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from nestor.cli.client import get_jenkins_client, load_client_config, run_command
from nestor.cli.render import status_markup
from nestor.jenkins import Monitor, MonitorResult, aggregate, discover
from nestor.jenkins.monitor import validate_schedule

app = typer.Typer(help="Server commands")
console = Console()


@app.command()
def dashboard(
    view: str | None = typer.Option(None, "--view", help="Only jobs of this view"),
) -> None:
    """Display the status of all jobs."""
    run_command(_dashboard(view))


async def _dashboard(view: str | None) -> None:
    async with get_jenkins_client() as jenkins:
        jobs = await jenkins.dashboard(view_name=view)

    if not jobs:
        console.print("[yellow]Jenkins does not have any job[/yellow]")
        return

    table = Table(title="Dashboard", show_header=True)
    table.add_column("Status")
    table.add_column("Job", style="cyan")
    for job in jobs:
        table.add_row(status_markup(job.status), job.name)
    console.print(table)
    console.print(f"\nOverall: {status_markup(aggregate(jobs))}")


@app.command()
def queue() -> None:
    """Display the jobs waiting for an executor."""
    run_command(_queue())


async def _queue() -> None:
    async with get_jenkins_client() as jenkins:
        names = await jenkins.queue()

    if not names:
        console.print("Queue is empty")
        return
    for name in names:
        console.print(f"- {name}")


@app.command()
def executors() -> None:
    """Display executor status per node."""
    run_command(_executors())


async def _executors() -> None:
    async with get_jenkins_client() as jenkins:
        nodes = await jenkins.executors()

    table = Table(title="Executors", show_header=True)
    table.add_column("Node", style="cyan")
    table.add_column("State")
    table.add_column("Job")
    table.add_column("Progress")

    for node_name, node_executors in nodes.items():
        for executor in node_executors:
            if executor.idle:
                state = "[dim]idle[/dim]"
            elif executor.stuck:
                state = "[red]stuck[/red]"
            else:
                state = "[green]busy[/green]"
            progress = f"{executor.progress}%" if executor.progress is not None else "-"
            table.add_row(node_name, state, executor.running_job_name or "-", progress)

    console.print(table)


@app.command()
def version() -> None:
    """Display the Jenkins version."""
    run_command(_version())


async def _version() -> None:
    async with get_jenkins_client() as jenkins:
        jenkins_version = await jenkins.version()
    console.print(f"Jenkins ver. {jenkins_version}")


@app.command("discover")
def discover_command(
    host: str = typer.Argument("localhost", help="Host or broadcast address"),
) -> None:
    """
    Discover a Jenkins instance running on a host.

    Examples:
        nestor server discover
        nestor server discover 255.255.255.255
    """
    run_command(_discover(host))


async def _discover(host: str) -> None:
    config = load_client_config()
    reply = await discover(host, port=config.discovery_port, timeout=config.discovery_timeout)
    console.print(Panel(
        f"Jenkins ver. {reply.get('version', 'unknown')} is running on {reply.get('url', host)}",
        title="Discovery",
    ))


@app.command()
def feed(
    job: str | None = typer.Option(None, "--job", "-j", help="Job feed"),
    view: str | None = typer.Option(None, "--view", help="View feed"),
) -> None:
    """Display the latest builds from the Jenkins feed."""
    run_command(_feed(job, view))


async def _feed(job: str | None, view: str | None) -> None:
    async with get_jenkins_client() as jenkins:
        entries = await jenkins.feed(job_name=job, view_name=view)

    for entry in entries:
        console.print(entry.title)


@app.command()
def monitor(
    job: str | None = typer.Option(None, "--job", "-j", help="Only monitor this job"),
    view: str | None = typer.Option(None, "--view", help="Only monitor jobs of this view"),
    schedule: str | None = typer.Option(None, "--schedule", help="5-field cron expression, matched in local time"),
) -> None:
    """
    Monitor the aggregate build status on a schedule (Ctrl+C to stop).

    Examples:
        nestor server monitor
        nestor server monitor --job my-job --schedule "*/5 * * * *"
    """
    effective_schedule = schedule or load_client_config().monitor_schedule
    try:
        validate_schedule(effective_schedule)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--schedule") from e

    try:
        run_command(_monitor(job, view, effective_schedule))
    except KeyboardInterrupt:
        console.print("[dim]Monitor stopped[/dim]")


def _print_result(result: MonitorResult) -> None:
    timestamp = result.checked_at.strftime("%H:%M:%S UTC")
    if result.error is not None:
        console.print(f"[dim]{timestamp}[/dim] [red]Error: {result.error}[/red]")
    else:
        console.print(f"[dim]{timestamp}[/dim] {status_markup(result.status)}")


async def _monitor(job: str | None, view: str | None, schedule: str) -> None:
    async with get_jenkins_client() as jenkins:
        status_monitor = Monitor(
            jenkins,
            _print_result,
            job_name=job,
            view_name=view,
            schedule=schedule,
        )
        await status_monitor.run()
