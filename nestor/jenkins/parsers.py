"""
Response Parsers.

Map Jenkins JSON and XML payloads onto the types in nestor.jenkins.models.
Pure functions; no I/O.
"""

import functools
import xml.etree.ElementTree as et
from collections.abc import Callable
from datetime import datetime
from typing import Any, TypeVar

from nestor.core.exceptions import InvalidResponseError, NotAJenkinsServerError
from nestor.jenkins.models import ExecutorStatus, FeedEntry, JobReport, JobSummary
from nestor.jenkins.status import classify

ATOM_NS = "{http://www.w3.org/2005/Atom}"
JOB_SEGMENT = "/job/"

T = TypeVar("T")


def _payload_parser(parser: Callable[..., T]) -> Callable[..., T]:
    """Report a payload of the wrong shape as InvalidResponseError."""

    @functools.wraps(parser)
    def wrapper(payload: Any) -> T:
        try:
            return parser(payload)
        except (KeyError, TypeError, AttributeError, et.ParseError) as e:
            raise InvalidResponseError(f"{parser.__name__} could not read the payload ({e!r})") from e

    return wrapper


@_payload_parser
def parse_dashboard(data: dict[str, Any]) -> list[JobSummary]:
    """Jobs of ``/api/json`` (or a view's ``api/json``) in server order."""
    return [
        JobSummary(name=job["name"], status=classify(job.get("color")))
        for job in data.get("jobs") or []
    ]


@_payload_parser
def parse_job(data: dict[str, Any]) -> JobReport:
    return JobReport(
        status=classify(data.get("color")),
        reports=[report["description"] for report in data.get("healthReport") or []],
    )


@_payload_parser
def parse_queue(data: dict[str, Any]) -> list[str]:
    return [item["task"]["name"] for item in data.get("items") or []]


def running_job_name(url: str) -> str:
    """
    Best-effort job name from an executable URL.

    Heuristic: keep the path segment right after the first ``/job/``.
    ``http://ci/job/myjob/3/`` gives ``myjob``. For jobs inside folders,
    ``http://ci/job/folder/job/myjob/3/`` gives ``folder``, not ``myjob``.
    """
    _, found, rest = url.partition(JOB_SEGMENT)
    if not found:
        return url
    return rest.split("/", 1)[0]


@_payload_parser
def parse_executors(data: dict[str, Any]) -> dict[str, list[ExecutorStatus]]:
    """Executors of ``/computer/api/json?depth=1`` grouped by node display name."""
    nodes: dict[str, list[ExecutorStatus]] = {}
    for computer in data.get("computer") or []:
        node_name = computer["displayName"]
        executors = nodes.setdefault(node_name, [])
        for executor in computer.get("executors") or []:
            idle = bool(executor.get("idle"))
            current = executor.get("currentExecutable") or {}
            job_name = None
            if not idle and current.get("url"):
                job_name = running_job_name(current["url"])
            progress = executor.get("progress")
            executors.append(
                ExecutorStatus(
                    node_name=node_name,
                    idle=idle,
                    stuck=bool(executor.get("likelyStuck")),
                    progress=progress if isinstance(progress, int) and progress >= 0 else None,
                    running_job_name=job_name,
                )
            )
    return nodes


def _parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


@_payload_parser
def parse_feed(text: str) -> list[FeedEntry]:
    """Entries of a Jenkins ``rssAll`` Atom feed."""
    root = et.fromstring(text)
    entries = []
    for entry in root.iter(f"{ATOM_NS}entry"):
        link = entry.find(f"{ATOM_NS}link")
        published = entry.findtext(f"{ATOM_NS}published") or entry.findtext(f"{ATOM_NS}updated")
        entries.append(
            FeedEntry(
                title=(entry.findtext(f"{ATOM_NS}title") or "").strip(),
                link=link.get("href") if link is not None else None,
                published=_parse_timestamp(published),
            )
        )
    return entries


def parse_discovery_reply(payload: bytes) -> dict[str, str]:
    """
    Parse the XML a Jenkins instance sends back to a discovery broadcast.

    The reply looks like ``<hudson><version>2.426</version><url>...</url>
    <server-id>...</server-id><slave-port>...</slave-port></hudson>``.

    Returns:
        Child element tags of the root mapped to their text
    """
    try:
        root = et.fromstring(payload)
    except et.ParseError as e:
        raise NotAJenkinsServerError(f"Invalid discovery reply: {e}") from e
    return {child.tag: (child.text or "").strip() for child in root}
