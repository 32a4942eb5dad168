"""
asyncllm - Pytest Configuration

Configures:
- Integration test markers (skip by default)
- Recorded provider streams from tests/samples
- httpx MockTransport serving those streams
"""

import os
from pathlib import Path
from typing import Callable, Dict, List, Optional

import httpx
import pytest
from prometheus_client import CollectorRegistry

from asyncllm.config import Settings
from asyncllm.core.http_client import parse_sse_lines
from asyncllm.core.models import RawEvent
from asyncllm.observability.metrics import StreamMetrics


SAMPLES_DIR = Path(__file__).parent / "samples"
BASE_URL = "http://llm.test"


# ============================================================
# Environment Configuration
# ============================================================

def _is_truthy(value: Optional[str]) -> bool:
    """Check if environment variable is truthy."""
    if value is None:
        return False
    return value.lower() in ("1", "true", "yes", "on")


RUN_INTEGRATION = _is_truthy(os.getenv("RUN_INTEGRATION"))


# ============================================================
# Pytest Markers
# ============================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (requires RUN_INTEGRATION=1)"
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless RUN_INTEGRATION=1."""
    skip_integration = pytest.mark.skip(
        reason="Integration test - set RUN_INTEGRATION=1 to run"
    )

    for item in items:
        if "integration" in item.keywords and not RUN_INTEGRATION:
            item.add_marker(skip_integration)


# ============================================================
# Recorded Streams
# ============================================================

def read_sample(name: str) -> bytes:
    return (SAMPLES_DIR / name).read_bytes()


def load_sample(name: str) -> List[RawEvent]:
    """Parse a recorded stream into transport records."""
    with open(SAMPLES_DIR / name, encoding="utf-8") as f:
        return list(parse_sse_lines(f))


@pytest.fixture
def sample_records() -> Callable[[str], List[RawEvent]]:
    """
    Transport records of a recorded stream.

    Usage:
        def test_something(sample_records):
            records = sample_records("openai.txt")
    """
    return load_sample


# ============================================================
# Mock HTTP Transport
# ============================================================

class SampleServer:
    """
    Serves tests/samples/<path> as text/event-stream and records requests.

    Unknown paths return 404.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.overrides: Dict[str, httpx.Response] = {}

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.lstrip("/")

        if path in self.overrides:
            return self.overrides[path]

        sample = SAMPLES_DIR / path
        if not path or not sample.is_file():
            return httpx.Response(404, text="not found")

        return httpx.Response(
            200,
            headers={"Content-Type": "text/event-stream"},
            content=sample.read_bytes(),
        )

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def sample_server() -> SampleServer:
    return SampleServer()


@pytest.fixture
async def sample_client(sample_server):
    """httpx.AsyncClient whose transport serves the recorded streams."""
    async with sample_server.client() as client:
        yield client


# ============================================================
# Settings / Metrics
# ============================================================

@pytest.fixture
def quiet_settings() -> Settings:
    """Settings with metrics off, so tests don't touch the global registry."""
    return Settings(metrics_enabled=False)


@pytest.fixture
def metrics() -> StreamMetrics:
    """Metrics on a private registry."""
    return StreamMetrics(CollectorRegistry())
