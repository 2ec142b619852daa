"""
CLI Module.

Command-line client built with Typer and Rich on top of nestor.jenkins.

Architecture:
- CLI is a thin presentation layer
- All Jenkins logic lives in nestor.jenkins
- Settings resolved once per command in nestor.cli.client

Usage:
    nestor --help
    nestor server dashboard
    nestor job build my-job --console
"""
