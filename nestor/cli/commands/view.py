"""
View Commands.

Create, update and fetch views from raw config.xml documents.
"""

from pathlib import Path

import typer
from rich.console import Console

from nestor.cli.client import get_jenkins_client, run_command

app = typer.Typer(help="View commands")
console = Console()


def _read_config(config_file: Path) -> str:
    if not config_file.is_file():
        raise typer.BadParameter(f"{config_file} is not a file", param_hint="CONFIG_FILE")
    return config_file.read_text(encoding="utf-8")


@app.command()
def create(
    name: str = typer.Argument(..., help="View name"),
    config_file: Path = typer.Argument(..., help="View config.xml"),
) -> None:
    """Create a view from a config.xml file."""
    run_command(_create(name, _read_config(config_file)))


async def _create(name: str, config_xml: str) -> None:
    async with get_jenkins_client() as jenkins:
        await jenkins.create_view(name, config_xml)
    console.print(f"[green]View {name} was created successfully[/green]")


@app.command()
def update(
    name: str = typer.Argument(..., help="View name"),
    config_file: Path = typer.Argument(..., help="View config.xml"),
) -> None:
    """Replace a view's configuration with a config.xml file."""
    run_command(_update(name, _read_config(config_file)))


async def _update(name: str, config_xml: str) -> None:
    async with get_jenkins_client() as jenkins:
        await jenkins.update_view(name, config_xml)
    console.print(f"[green]View {name} was updated successfully[/green]")


@app.command()
def fetch(name: str = typer.Argument(..., help="View name")) -> None:
    """Print a view's config.xml."""
    run_command(_fetch(name))


async def _fetch(name: str) -> None:
    async with get_jenkins_client() as jenkins:
        config_xml = await jenkins.fetch_view_config(name)
    # Raw output so the result can be redirected to a file
    typer.echo(config_xml)
