"""
Unit Test Fixtures.

Fixtures for unit tests - Jenkins is never contacted. HTTP traffic goes
through httpx.MockTransport backed by a scripted FakeJenkins.
"""

import httpx
import pytest

from nestor.jenkins import Jenkins

BASE_URL = "http://jenkins.test"


class FakeJenkins:
    """
    Scripted Jenkins server.

    Responses are queued per (method, path) and handed out in order, one per
    request. An exception queued in place of a response is raised instead,
    which httpx surfaces like a real network failure. Unscripted requests get
    a 500 so a test notices them.

    Usage:
        fake.add("GET", "/api/json", httpx.Response(200, json={"jobs": []}))
        jobs = await fake.client().dashboard()
        assert fake.requests[0].url.path == "/api/json"
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], list[httpx.Response | Exception]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, *responses: httpx.Response | Exception) -> None:
        self.routes.setdefault((method, path), []).extend(responses)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self.routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(500, text=f"unscripted {request.method} {request.url.path}")
        item = queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def requests_to(self, path: str) -> list[httpx.Request]:
        return [request for request in self.requests if request.url.path == path]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def client(self) -> Jenkins:
        return Jenkins(BASE_URL, transport=self.transport())


@pytest.fixture
def fake_jenkins() -> FakeJenkins:
    """Empty scripted Jenkins server."""
    return FakeJenkins()


@pytest.fixture
def dashboard_payload() -> dict:
    """``/api/json`` body with one job per interesting color."""
    return {
        "jobs": [
            {"name": "api", "color": "blue"},
            {"name": "web", "color": "red"},
            {"name": "docs", "color": "yellow_anime"},
            {"name": "nightly", "color": "red_anime"},
            {"name": "legacy", "color": "disabled"},
        ]
    }
