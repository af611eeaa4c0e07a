"""
Shared fixtures for the Sun Resource test suite.

The sample response mirrors developer.nrel.gov solar_resource/v1.json for
lat=40, lon=-105. avg_ghi's monthly keys are deliberately alphabetical to
exercise calendar alignment.
"""

import copy
import json
import sys
from pathlib import Path
from types import SimpleNamespace

import httpx
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

FIXTURES = Path(__file__).parent / "fixtures"
TEST_API_KEY = "test-key-DO-NOT-LOG"


@pytest.fixture
def sample_body() -> str:
    return (FIXTURES / "solar_resource_sample.json").read_text(encoding="utf-8")


@pytest.fixture
def sample_data(sample_body) -> dict:
    return json.loads(sample_body)


@pytest.fixture
def sample_outputs(sample_data) -> dict:
    return copy.deepcopy(sample_data["outputs"])


@pytest.fixture
def mock_client_factory():
    """Build an httpx.Client whose requests are answered by handler(request)."""
    clients = []

    def factory(handler):
        client = httpx.Client(transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield factory

    for client in clients:
        client.close()


@pytest.fixture
def json_client(mock_client_factory, sample_body):
    """Client that answers every request with the sample response."""
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(
            200,
            content=sample_body.encode("utf-8"),
            headers={"content-type": "application/json; charset=utf-8"},
        )

    return SimpleNamespace(client=mock_client_factory(handler), requests=requests)
