"""
Jenkins Client.

High-level operations against one Jenkins server. Every method builds a
fresh JenkinsRequest, sends it through the transport and pattern-matches
the result; errors are raised as the typed exceptions of
nestor.core.exceptions.

Usage:
    async with Jenkins("http://user:token@ci:8080") as jenkins:
        await jenkins.build("my-job", "branch=main&clean=true")
        async for chunk in jenkins.console_stream("my-job"):
            print(chunk, end="")
        status = aggregate(await jenkins.dashboard())
"""

import asyncio
import json
import sys
from typing import Any, TextIO

import httpx

from nestor.core.concurrency import get_semaphore
from nestor.core.exceptions import (
    JobNotFoundError,
    NotAJenkinsServerError,
    ParametersRequiredError,
    ViewNotFoundError,
)
from nestor.core.logging import get_logger, log_with_source
from nestor.jenkins import parsers
from nestor.jenkins.console import DEFAULT_INTERVAL, ConsoleStream
from nestor.jenkins.models import BuildParameter, ExecutorStatus, FeedEntry, JobReport, JobSummary
from nestor.jenkins.status import Status
from nestor.jenkins.transport import (
    DEFAULT_TIMEOUT,
    DEFAULT_URL,
    JenkinsRequest,
    JenkinsTransport,
    MethodNotAllowed,
    NotFound,
    Success,
)

logger = get_logger(__name__)

DEFAULT_TRIGGER_TOKEN = "nestor"
VERSION_HEADER = "x-jenkins"


def parse_build_parameters(params: str | None) -> list[BuildParameter]:
    """
    Split ``key1=value1&key2=value2`` into ordered build parameters.

    No decoding is done; values containing ``=`` or ``&`` are not supported.
    A pair without ``=`` gets an empty value.
    """
    if not params:
        return []
    parameters = []
    for pair in params.split("&"):
        name, _, value = pair.partition("=")
        parameters.append(BuildParameter(name=name, value=value.split("=", 1)[0]))
    return parameters


class Jenkins:
    """
    Client for the Jenkins remote access API.

    Args:
        url: Jenkins base URL; credentials may be embedded as user:token@
        timeout: HTTP timeout in seconds
        trigger_token: Remote build trigger token sent with ``build``
        transport: Custom httpx transport (tests pass httpx.MockTransport)
    """

    def __init__(
        self,
        url: str = DEFAULT_URL,
        timeout: float = DEFAULT_TIMEOUT,
        trigger_token: str = DEFAULT_TRIGGER_TOKEN,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url.rstrip("/")
        self.trigger_token = trigger_token
        self._transport = JenkinsTransport(self.url, timeout=timeout, transport=transport)

    async def __aenter__(self) -> "Jenkins":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self._transport.close()

    # =========================================================================
    # Builds
    # =========================================================================

    async def build(self, job_name: str, params: str | None = None) -> None:
        """
        Trigger a build, optionally with parameters.

        Args:
            job_name: Jenkins job name
            params: Build parameters as ``key1=value1&key2=value2``

        Raises:
            JobNotFoundError: The job does not exist (404)
            ParametersRequiredError: Legacy Jenkins wants parameters (405)
        """
        envelope = {
            "parameter": [
                {"name": p.name, "value": p.value} for p in parse_build_parameters(params)
            ]
        }
        request = JenkinsRequest(
            "POST",
            f"/job/{job_name}/build",
            params={"token": self.trigger_token, "json": json.dumps(envelope)},
        )
        match await self._transport.send(request):
            case Success():
                log_with_source(logger, "library", "info", "Build triggered", job_name=job_name)
            case NotFound():
                raise JobNotFoundError(job_name)
            case MethodNotAllowed():
                raise ParametersRequiredError(job_name)
            case result:
                raise result.error()

    async def build_by(self, status: Status | str | None = None) -> list[str]:
        """
        Trigger every dashboard job whose status matches.

        All matching jobs are triggered concurrently and all triggers are
        awaited before returning, even when some fail.

        Args:
            status: Only build jobs with this status (e.g. "FAIL"); all jobs if None

        Returns:
            Names of the jobs triggered, in dashboard order

        Raises:
            The first error, in dashboard order, of any failed trigger
        """
        jobs = await self.dashboard()
        names = [job.name for job in jobs if status is None or job.status == status]
        semaphore = get_semaphore("build_trigger")

        async def _trigger(name: str) -> None:
            async with semaphore:
                await self.build(name)
            logger.info("Job was started successfully", extra={"job_name": name})

        outcomes = await asyncio.gather(*(_trigger(name) for name in names), return_exceptions=True)
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome
        return names

    async def stop(self, job_name: str) -> None:
        """Abort the latest build of a job."""
        request = JenkinsRequest("POST", f"/job/{job_name}/lastBuild/stop")
        match await self._transport.send(request):
            case Success():
                return
            case NotFound():
                raise JobNotFoundError(job_name)
            case result:
                raise result.error()

    # =========================================================================
    # Console
    # =========================================================================

    def console_stream(self, job_name: str, interval: float = DEFAULT_INTERVAL) -> ConsoleStream:
        """Stream the console output of a job's latest build. See ConsoleStream."""
        return ConsoleStream(self._transport, job_name, interval=interval)

    async def console(
        self,
        job_name: str,
        interval: float = DEFAULT_INTERVAL,
        out: TextIO | None = None,
    ) -> None:
        """Write a job's live console output to ``out`` (stdout) until the build ends."""
        out = out or sys.stdout
        async for chunk in self.console_stream(job_name, interval=interval):
            out.write(chunk)
            out.flush()

    # =========================================================================
    # Readers
    # =========================================================================

    async def _get_json(self, path: str, params: dict[str, str | int] | None = None) -> Any:
        match await self._transport.send(JenkinsRequest("GET", path, params=params or {})):
            case Success() as success:
                return success.json()
            case result:
                raise result.error()

    async def dashboard(self, view_name: str | None = None) -> list[JobSummary]:
        """All jobs with their status, optionally restricted to one view."""
        if view_name is None:
            return parsers.parse_dashboard(await self._get_json("/api/json"))

        request = JenkinsRequest("GET", f"/view/{view_name}/api/json")
        match await self._transport.send(request):
            case Success() as success:
                return parsers.parse_dashboard(success.json())
            case NotFound():
                raise ViewNotFoundError(view_name)
            case result:
                raise result.error()

    async def job(self, job_name: str) -> JobReport:
        """Status and health reports of one job."""
        match await self._transport.send(JenkinsRequest("GET", f"/job/{job_name}/api/json")):
            case Success() as success:
                return parsers.parse_job(success.json())
            case NotFound():
                raise JobNotFoundError(job_name)
            case result:
                raise result.error()

    async def queue(self) -> list[str]:
        """Names of queued jobs, in the order Jenkins lists them."""
        return parsers.parse_queue(await self._get_json("/queue/api/json"))

    async def executors(self) -> dict[str, list[ExecutorStatus]]:
        """Executor status grouped by node (master and agents)."""
        data = await self._get_json("/computer/api/json", params={"depth": 1})
        return parsers.parse_executors(data)

    async def version(self) -> str:
        """
        Jenkins version from the x-jenkins header.

        Raises:
            NotAJenkinsServerError: The server does not send x-jenkins
        """
        match await self._transport.send(JenkinsRequest("HEAD", "/")):
            case Success() as success:
                version = success.headers.get(VERSION_HEADER)
                if not version:
                    raise NotAJenkinsServerError()
                return version
            case result:
                raise result.error()

    async def feed(
        self,
        job_name: str | None = None,
        view_name: str | None = None,
    ) -> list[FeedEntry]:
        """Build feed of a job, a view, or the whole server (in that precedence)."""
        if job_name:
            path = f"/job/{job_name}/rssAll"
        elif view_name:
            path = f"/view/{view_name}/rssAll"
        else:
            path = "/rssAll"

        match await self._transport.send(JenkinsRequest("GET", path)):
            case Success() as success:
                return parsers.parse_feed(success.text)
            case NotFound() if job_name:
                raise JobNotFoundError(job_name)
            case NotFound() if view_name:
                raise ViewNotFoundError(view_name)
            case result:
                raise result.error()

    # =========================================================================
    # Views (raw config.xml passthrough)
    # =========================================================================

    async def create_view(self, view_name: str, config_xml: str) -> str:
        """Create a view from a config.xml document. Returns the response body."""
        request = JenkinsRequest(
            "POST",
            "/createView",
            params={"name": view_name},
            headers={"content-type": "application/xml"},
            content=config_xml,
        )
        match await self._transport.send(request):
            case Success() as success:
                return success.text
            case result:
                raise result.error()

    async def update_view(self, view_name: str, config_xml: str) -> str:
        """Replace a view's config.xml. Returns the response body."""
        request = JenkinsRequest(
            "POST",
            f"/view/{view_name}/config.xml",
            headers={"content-type": "application/xml"},
            content=config_xml,
        )
        match await self._transport.send(request):
            case Success() as success:
                return success.text
            case NotFound():
                raise ViewNotFoundError(view_name)
            case result:
                raise result.error()

    async def fetch_view_config(self, view_name: str) -> str:
        """Raw config.xml of a view."""
        match await self._transport.send(JenkinsRequest("GET", f"/view/{view_name}/config.xml")):
            case Success() as success:
                return success.text
            case NotFound():
                raise ViewNotFoundError(view_name)
            case result:
                raise result.error()
