"""
Jenkins Client.

Async client for the Jenkins remote access API: build triggers, status
readers, live console streaming, UDP discovery and a cron-driven monitor.

Usage:
    from nestor.jenkins import Jenkins, aggregate

    async with Jenkins("http://localhost:8080") as jenkins:
        status = aggregate(await jenkins.dashboard())
"""

from nestor.jenkins.client import Jenkins, parse_build_parameters
from nestor.jenkins.console import ConsoleStream
from nestor.jenkins.discovery import discover
from nestor.jenkins.models import (
    BuildParameter,
    ConsoleCursor,
    ExecutorStatus,
    FeedEntry,
    JobReport,
    JobSummary,
    MonitorResult,
)
from nestor.jenkins.monitor import Monitor
from nestor.jenkins.status import StatusCode, UnknownStatus, aggregate, classify

__all__ = [
    "BuildParameter",
    "ConsoleCursor",
    "ConsoleStream",
    "ExecutorStatus",
    "FeedEntry",
    "Jenkins",
    "JobReport",
    "JobSummary",
    "Monitor",
    "MonitorResult",
    "StatusCode",
    "UnknownStatus",
    "aggregate",
    "classify",
    "discover",
    "parse_build_parameters",
]
