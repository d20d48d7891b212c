"""Test configuration and fixtures."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from unittest.mock import Mock

import httpx
import pytest

from prover_client.orchestrator.client import OrchestratorClient

Responder = Callable[[httpx.Request], httpx.Response]


@dataclass
class RecordingOrchestrator:
    """An `httpx.MockTransport` handler that records every request it sees."""

    responder: Responder = field(default=lambda request: httpx.Response(200))
    requests: list[httpx.Request] = field(default_factory=list)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def base_url() -> str:
    """Provide the base URL the fake orchestrator is mounted at."""
    return "http://orchestrator.test"


@pytest.fixture
def orchestrator() -> RecordingOrchestrator:
    """Provide a fake orchestrator; tests set `.responder` to shape replies."""
    return RecordingOrchestrator()


@pytest.fixture
def memory_probe() -> Mock:
    """Provide a memory probe reporting 64 MiB used of 16 GiB."""
    return Mock(return_value=(64 * 1024 * 1024, 16 * 1024 * 1024 * 1024))


@pytest.fixture
def flops_probe() -> Mock:
    """Provide a throughput probe reporting 1.5 GFLOP/s."""
    return Mock(return_value=1.5e9)


@pytest.fixture
def make_client(
    base_url: str,
    orchestrator: RecordingOrchestrator,
    memory_probe: Mock,
    flops_probe: Mock,
) -> Callable[[], OrchestratorClient]:
    """Provide a factory for clients wired to the fake orchestrator."""

    def _make() -> OrchestratorClient:
        return OrchestratorClient(
            base_url=base_url,
            transport=orchestrator.transport(),
            memory_probe=memory_probe,
            flops_probe=flops_probe,
        )

    return _make
