"""
Jenkins Client Factory for CLI.

Builds the Jenkins client the commands share. Values come from, in order:
the --url option, JENKINS_URL (environment or config/.env), and
config/settings/application.yaml. Without a project configuration the
built-in defaults apply.
"""

import asyncio
from collections.abc import Coroutine
from dataclasses import dataclass
from typing import Any, TypeVar

import typer
from rich.console import Console

from nestor.core.config import get_app_config, get_jenkins_url, get_settings
from nestor.core.exceptions import ApplicationError
from nestor.core.logging import get_logger, log_with_source
from nestor.jenkins import Jenkins
from nestor.jenkins.client import DEFAULT_TRIGGER_TOKEN
from nestor.jenkins.console import DEFAULT_INTERVAL
from nestor.jenkins.discovery import DEFAULT_TIMEOUT as DEFAULT_DISCOVERY_TIMEOUT
from nestor.jenkins.discovery import DISCOVERY_PORT
from nestor.jenkins.monitor import DEFAULT_SCHEDULE
from nestor.jenkins.transport import DEFAULT_TIMEOUT, DEFAULT_URL

logger = get_logger(__name__)
error_console = Console(stderr=True)

T = TypeVar("T")


@dataclass(frozen=True)
class ClientConfig:
    """Resolved CLI settings."""

    url: str = DEFAULT_URL
    timeout: float = DEFAULT_TIMEOUT
    trigger_token: str = DEFAULT_TRIGGER_TOKEN
    console_interval: float = DEFAULT_INTERVAL
    monitor_schedule: str = DEFAULT_SCHEDULE
    discovery_port: int = DISCOVERY_PORT
    discovery_timeout: float = DEFAULT_DISCOVERY_TIMEOUT


def load_client_config() -> ClientConfig:
    """Load CLI settings from the project configuration, or defaults if absent."""
    try:
        app = get_app_config().application
        url = get_jenkins_url()
    except (RuntimeError, FileNotFoundError) as e:
        log_with_source(
            logger,
            "cli",
            "debug",
            "Project configuration unavailable, using defaults",
            error=str(e),
        )
        override = get_settings().jenkins_url
        return ClientConfig(url=override.rstrip("/")) if override else ClientConfig()

    return ClientConfig(
        url=url,
        timeout=float(app.timeouts.http),
        trigger_token=app.jenkins.trigger_token,
        console_interval=app.console.interval_seconds,
        monitor_schedule=app.monitor.schedule,
        discovery_port=app.discovery.port,
        discovery_timeout=app.discovery.timeout_seconds,
    )


# Set by the --url option of the root command.
_url_override: str | None = None


def set_url_override(url: str | None) -> None:
    global _url_override
    _url_override = url


def get_jenkins_client() -> Jenkins:
    """Create a Jenkins client for one command. Close it when done."""
    config = load_client_config()
    return Jenkins(
        url=_url_override or config.url,
        timeout=config.timeout,
        trigger_token=config.trigger_token,
    )


def run_command(coro: Coroutine[Any, Any, T]) -> T:
    """Run a command coroutine, rendering Jenkins errors and exiting 1 on failure."""
    try:
        return asyncio.run(coro)
    except ApplicationError as e:
        log_with_source(logger, "cli", "debug", "Command failed", code=e.code, error=e.message)
        error_console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(1) from e
