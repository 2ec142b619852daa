"""CLI Test Fixtures."""

import pytest

from nestor.cli.client import set_url_override


@pytest.fixture
def cli_jenkins(fake_jenkins, monkeypatch):
    """Route every command's Jenkins client to the scripted server."""
    for module in ("job", "server", "view"):
        monkeypatch.setattr(
            f"nestor.cli.commands.{module}.get_jenkins_client",
            fake_jenkins.client,
        )
    yield fake_jenkins
    set_url_override(None)
