"""
Status Vocabulary.

Maps Jenkins color tokens onto a small set of outcomes and derives one
aggregate status for a set of jobs.

Jenkins reports a job's last build as a color (``blue``, ``red``, ...). A job
that is currently building carries an ``_anime`` suffix (``red_anime``),
which says nothing about the outcome and is stripped before lookup. Tokens
outside the vocabulary are kept, uppercased, as ``UnknownStatus`` so newer
server tokens (``notbuilt``, ``disabled``) still surface to callers.
"""

from collections.abc import Iterable
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from nestor.jenkins.models import JobSummary

BUILDING_SUFFIX = "_anime"


class StatusCode(str, Enum):
    """Coarse outcome of a job's last build."""

    OK = "OK"
    WARN = "WARN"
    FAIL = "FAIL"
    ABORTED = "ABORTED"


class UnknownStatus(str):
    """A color token the vocabulary does not know, uppercased."""

    __slots__ = ()

    def __repr__(self) -> str:
        return f"UnknownStatus({str.__repr__(self)})"


Status = StatusCode | UnknownStatus

COLOR_STATUS: dict[str, StatusCode] = {
    "blue": StatusCode.OK,
    "green": StatusCode.OK,
    "grey": StatusCode.ABORTED,
    "red": StatusCode.FAIL,
    "yellow": StatusCode.WARN,
}

# Most severe first; the first one present wins.
SEVERITY_ORDER: tuple[StatusCode, ...] = (
    StatusCode.FAIL,
    StatusCode.WARN,
    StatusCode.ABORTED,
    StatusCode.OK,
)


def classify(color: str | None) -> Status:
    """
    Translate a Jenkins color token into a status.

    Args:
        color: Raw ``color`` field from the Jenkins API. ``None`` (folders,
            multibranch parents) is treated as an empty token.

    Returns:
        A StatusCode for known colors, otherwise UnknownStatus(token.upper())
    """
    token = (color or "").replace(BUILDING_SUFFIX, "")
    known = COLOR_STATUS.get(token)
    if known is not None:
        return known
    return UnknownStatus(token.upper())


def aggregate(
    jobs: Iterable["JobSummary"],
    job_name: str | None = None,
) -> StatusCode | None:
    """
    Derive one status for a collection of jobs.

    Args:
        jobs: Job summaries, usually the dashboard
        job_name: Only consider the job with exactly this name

    Returns:
        The most severe known status present, or None when there are no
        jobs (after filtering) or only unknown statuses.
    """
    if job_name is not None:
        jobs = [job for job in jobs if job.name == job_name]

    present = {job.status for job in jobs}
    for status in SEVERITY_ORDER:
        if status in present:
            return status
    return None
