"""
CLI Commands.

Organized by domain/feature area.
"""

from nestor.cli.commands.job import app as job_app
from nestor.cli.commands.server import app as server_app
from nestor.cli.commands.view import app as view_app

__all__ = [
    "job_app",
    "server_app",
    "view_app",
]
