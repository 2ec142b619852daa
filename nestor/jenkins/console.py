"""
Console Stream.

Tails the console output of a job's latest build through Jenkins'
progressive-text endpoint:

    GET /job/{name}/lastBuild/logText/progressiveText?start=<offset>

Each response carries the text from ``start`` on, plus two headers:
    x-more-data  - "true" while the build is still producing output
    x-text-size  - offset to request next (authoritative, never computed)

The stream is an async iterator of text chunks, yielded in request order as
soon as they arrive. Exactly one poll is in flight at a time; the next poll
is scheduled only after the previous response has been handed to the
consumer. Iteration ends when the server reports no more data, when
``stop()`` was requested, or with the error that broke a poll.

Usage:
    stream = client.console_stream("my-job")
    async for chunk in stream:
        print(chunk, end="")

    # elsewhere, to give up early
    stream.stop()
"""

import asyncio
from collections.abc import AsyncIterator

from nestor.core.exceptions import InvalidResponseError, JobNotFoundError
from nestor.core.logging import get_logger
from nestor.jenkins.models import ConsoleCursor
from nestor.jenkins.transport import JenkinsRequest, JenkinsTransport, NotFound, Success

logger = get_logger(__name__)

DEFAULT_INTERVAL = 1.0
MORE_DATA_HEADER = "x-more-data"
TEXT_SIZE_HEADER = "x-text-size"


def next_cursor(success: Success, current: ConsoleCursor) -> ConsoleCursor:
    """Read the polling decision out of a progressive-text response."""
    has_more = success.headers.get(MORE_DATA_HEADER, "").lower() == "true"
    size = success.headers.get(TEXT_SIZE_HEADER)
    if size is None:
        return ConsoleCursor(offset=current.offset + len(success.text.encode()), has_more=has_more)
    try:
        offset = int(size)
    except ValueError as e:
        raise InvalidResponseError(f"{TEXT_SIZE_HEADER} is not an offset: {size!r}") from e
    if offset < 0:
        raise InvalidResponseError(f"{TEXT_SIZE_HEADER} is negative: {size!r}")
    return ConsoleCursor(offset=offset, has_more=has_more)


class ConsoleStream:
    """
    Cancellable, single-use stream of console text for one job.

    Args:
        transport: Transport bound to the Jenkins server
        job_name: Job whose latest build is tailed
        interval: Seconds to wait between polls while more data is pending
    """

    def __init__(
        self,
        transport: JenkinsTransport,
        job_name: str,
        interval: float = DEFAULT_INTERVAL,
    ) -> None:
        self.job_name = job_name
        self.interval = interval
        self._transport = transport
        self._path = f"/job/{job_name}/lastBuild/logText/progressiveText"
        self._stop_requested = False
        self._consumed = False
        self.cursor = ConsoleCursor()
        self._polls = 0

    @property
    def stop_requested(self) -> bool:
        return self._stop_requested

    @property
    def polls(self) -> int:
        """Requests issued so far."""
        return self._polls

    def stop(self) -> None:
        """Request the stream to end before its next poll."""
        self._stop_requested = True

    def __aiter__(self) -> AsyncIterator[str]:
        if self._consumed:
            raise RuntimeError(f"Console stream for {self.job_name} has already been consumed")
        self._consumed = True
        return self._chunks()

    async def _poll(self) -> Success:
        self._polls += 1
        request = JenkinsRequest("GET", self._path, params={"start": self.cursor.offset})
        match await self._transport.send(request):
            case Success() as success:
                return success
            case NotFound():
                raise JobNotFoundError(self.job_name)
            case result:
                raise result.error()

    async def _chunks(self) -> AsyncIterator[str]:
        while True:
            success = await self._poll()
            self.cursor = next_cursor(success, self.cursor)

            if success.text:
                yield success.text

            if not self.cursor.has_more or self._stop_requested:
                break
            await asyncio.sleep(self.interval)
            if self._stop_requested:
                break

        logger.debug(
            "Console stream stopped" if self._stop_requested else "Console stream finished",
            extra={"job_name": self.job_name, "offset": self.cursor.offset, "polls": self._polls},
        )
