"""
Shared pytest fixtures for all test modules.

No test touches the network: `http_session` replaces
http_client.request_session with a scripted MockSession, and the polling
loop gets a recording sleep so 30-attempt budgets finish instantly.
"""

import os

# Keep a developer's real token out of the test process.
os.environ["REPLICATE_API_TOKEN"] = ""

import random
from contextlib import asynccontextmanager

import pytest
from fastapi.testclient import TestClient

from deepguard.core.dependencies import get_pipeline
from deepguard.detection.mock import MockResultGenerator
from deepguard.detection.normalizer import ResultNormalizer
from deepguard.detection.pipeline import DetectionPipeline
from deepguard.detection.registry import build_default_registry
from deepguard.integrations.replicate import PredictionClient
from tests.mocks.http_mock import MockSession

from deepguard.main import app  # noqa: E402

API_URL = "https://api.replicate.test"
TOKEN = "r8_test_token"
IMAGE_URL = "https://example.com/photo.jpg"
DATA_URI = "data:image/png;base64,iVBORw0KGgo="


class RecordingSleep:
    """Async sleep replacement that records requested delays without waiting."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)

    @property
    def total(self) -> float:
        return sum(self.delays)


# ---------------------------------------------------------------------------
# Core infrastructure fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def http_session(monkeypatch):
    """Route every http_client.request_session() call to one MockSession."""
    from deepguard.integrations import http_client

    session = MockSession()

    @asynccontextmanager
    async def _fake_request_session():
        yield session

    monkeypatch.setattr(http_client, "request_session", _fake_request_session)
    return session


@pytest.fixture
def sleeper():
    return RecordingSleep()


@pytest.fixture
def registry():
    return build_default_registry()


@pytest.fixture
def prediction_client(sleeper):
    return PredictionClient(
        api_url=API_URL,
        poll_interval_ms=1000,
        max_attempts=30,
        submit_timeout_sec=5,
        poll_timeout_sec=5,
        sleep=sleeper,
    )


@pytest.fixture
def mock_generator():
    return MockResultGenerator(rng=random.Random(1234))


@pytest.fixture
def pipeline(registry, prediction_client, mock_generator):
    return DetectionPipeline(
        registry=registry,
        client=prediction_client,
        normalizer=ResultNormalizer(),
        mock_generator=mock_generator,
        credential=TOKEN,
    )


@pytest.fixture
def client(pipeline):
    """FastAPI TestClient with the pipeline swapped for the test one."""
    app.dependency_overrides[get_pipeline] = lambda: pipeline
    try:
        with TestClient(app, raise_server_exceptions=False) as c:
            yield c
    finally:
        app.dependency_overrides.clear()
