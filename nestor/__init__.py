"""
Nestor.

Jenkins API client library and command-line interface.

- core/: Configuration, logging, exceptions, concurrency limits
- jenkins/: Transport, status vocabulary, console streaming, discovery, monitor
- cli/: Command-line client (Typer + Rich)
"""

__version__ = "0.1.0"
