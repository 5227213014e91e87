"""
Shared fixtures for the relay tests.
"""
import pytest
from fastapi.testclient import TestClient

from main import create_app
from tests.fakes import FakeUpstream, make_settings, sse_line


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream(chunks=[sse_line("Hel"), sse_line("lo")])


@pytest.fixture
def make_client():
    """Build TestClients with a running lifespan; closed after the test."""
    clients = []

    def _make(upstream: FakeUpstream, **overrides) -> TestClient:
        app = create_app(make_settings(**overrides), transport=upstream.transport())
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)
