"""
Jenkins Data Types.

Transient values produced from a single response and handed to the caller.
Nothing here is persisted.
"""

from dataclasses import dataclass, field
from datetime import datetime

from nestor.jenkins.status import Status, StatusCode


@dataclass(frozen=True)
class JobSummary:
    """One dashboard row: job name and the status derived from its color."""

    name: str
    status: Status


@dataclass(frozen=True)
class JobReport:
    """Status and health report descriptions of a single job."""

    status: Status
    reports: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ExecutorStatus:
    """One executor slot on a compute node."""

    node_name: str
    idle: bool
    stuck: bool
    progress: int | None = None
    running_job_name: str | None = None


@dataclass(frozen=True)
class BuildParameter:
    """A name/value pair in the parameterised-build envelope."""

    name: str
    value: str


@dataclass(frozen=True)
class FeedEntry:
    """One entry of a Jenkins rssAll (Atom) feed."""

    title: str
    link: str | None = None
    published: datetime | None = None


@dataclass(frozen=True)
class ConsoleCursor:
    """Position in a progressive-text buffer, as reported by the server."""

    offset: int = 0
    has_more: bool = True


@dataclass(frozen=True)
class MonitorResult:
    """Outcome of one monitor check. Exactly one of status/error is meaningful."""

    status: StatusCode | None
    error: Exception | None
    checked_at: datetime
