"""Async client for the orchestrator's protobuf-over-HTTP API.

Every call is a single request: encode the message, POST it as
`application/octet-stream`, then decode the body. Failures surface as
`OrchestratorError` subclasses; nothing is retried here.
"""

from __future__ import annotations

import asyncio
import logging
from types import TracebackType
from typing import Literal, TypeVar

import httpx
from google.protobuf.message import DecodeError

from prover_client import __version__
from prover_client.orchestrator.config import (
    DEFAULT_TIMEOUT_SECONDS,
    ClientSettings,
    Environment,
)
from prover_client.orchestrator.errors import (
    EmptyResponseError,
    InvalidRequestError,
    OrchestratorConnectionError,
    OrchestratorHTTPError,
    ResponseDecodeError,
    UnsupportedMethodError,
)
from prover_client.orchestrator.messages import (
    CLIENT_NODE_TYPE,
    DEFAULT_LOCATION,
    ProofSubmission,
    ProofTask,
    SubmitProofResponse,
    TaskRequest,
    WireMessage,
)
from prover_client.orchestrator.telemetry import (
    FlopsProbe,
    MemoryProbe,
    collect_telemetry,
    get_memory_info,
    measure_flops,
)

logger = logging.getLogger(__name__)

HttpMethod = Literal["GET", "POST"]

TASKS_PATH = "/tasks"
SUBMIT_PROOF_PATH = "/tasks/submit"

_SUPPORTED_METHODS: frozenset[str] = frozenset({"GET", "POST"})
_CONTENT_TYPE = "application/octet-stream"

ResponseT = TypeVar("ResponseT", bound=WireMessage)


class OrchestratorClient:
    """Fetches proof tasks from, and submits proofs to, the orchestrator.

    One `httpx.AsyncClient` is created per instance and reused for every call, so
    a single client can serve many concurrent requests. Close it with `aclose()`
    or use it as an async context manager.
    """

    def __init__(
        self,
        environment: Environment = Environment.BETA,
        *,
        base_url: str | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
        memory_probe: MemoryProbe = get_memory_info,
        flops_probe: FlopsProbe = measure_flops,
    ) -> None:
        """Initialize the client.

        Args:
            environment: Deployment environment; determines the orchestrator URL.
            base_url: Explicit orchestrator URL, overriding `environment`.
            timeout: Per-request timeout in seconds.
            transport: Custom httpx transport (tests use `httpx.MockTransport`).
            memory_probe: Returns (process bytes used, system bytes total).
            flops_probe: Returns a throughput estimate for this machine.
        """
        resolved = base_url if base_url is not None else environment.orchestrator_url
        self._base_url = resolved.rstrip("/")
        self._memory_probe = memory_probe
        self._flops_probe = flops_probe
        self._client = httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            headers={"User-Agent": f"prover-client/{__version__}"},
        )

    @classmethod
    def from_settings(
        cls,
        settings: ClientSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> OrchestratorClient:
        """Build a client from loaded settings."""

        return cls(
            settings.environment,
            base_url=settings.base_url,
            timeout=settings.request_timeout_seconds,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        """Return the orchestrator base URL every path is appended to."""

        return self._base_url

    async def aclose(self) -> None:
        """Release pooled connections."""
        await self._client.aclose()

    async def __aenter__(self) -> OrchestratorClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def _request(
        self,
        path: str,
        method: HttpMethod,
        request: WireMessage,
        response_type: type[ResponseT],
    ) -> ResponseT | None:
        """Send one encoded message and decode the reply.

        Returns:
            The decoded response, or None when the orchestrator replied 2xx with an
            empty body.

        Raises:
            UnsupportedMethodError: `method` is not GET or POST (no request is sent).
            OrchestratorConnectionError: the request could not be completed.
            OrchestratorHTTPError: the orchestrator answered with a non-2xx status.
            ResponseDecodeError: the body is not a valid `response_type` message.
        """
        if method not in _SUPPORTED_METHODS:
            raise UnsupportedMethodError(method)

        payload = request.to_bytes()
        url = f"{self._base_url}{path}"

        try:
            response = await self._client.request(
                method,
                url,
                content=payload,
                headers={"Content-Type": _CONTENT_TYPE},
            )
        except httpx.TransportError as e:
            # The transport's own message can include hosts and socket details; keep
            # it in local debug logs only.
            logger.debug(
                "Orchestrator request failed",
                extra={"url": url, "method": method, "error": repr(e)},
            )
            raise OrchestratorConnectionError() from None

        if not response.is_success:
            raise OrchestratorHTTPError(status_code=response.status_code, body=response.text)

        body = response.content
        if not body:
            return None

        try:
            return response_type.from_bytes(body)
        except (DecodeError, ValueError) as e:
            raise ResponseDecodeError(str(e)) from e

    async def get_proof_task(self, node_id: str) -> ProofTask:
        """Ask the orchestrator for the next proof task for `node_id`.

        Raises:
            InvalidRequestError: `node_id` is empty.
            EmptyResponseError: the orchestrator replied without a task.
            OrchestratorError: any transport failure from `_request`.
        """
        if not node_id:
            raise InvalidRequestError("Invalid node ID")

        request = TaskRequest(node_id=node_id, node_type=CLIENT_NODE_TYPE)
        task = await self._request(TASKS_PATH, "POST", request, ProofTask)
        if task is None:
            raise EmptyResponseError()

        logger.debug(
            "Fetched proof task",
            extra={"node_id": node_id, "program_id": task.program_id},
        )
        return task

    async def submit_proof(self, node_id: str, proof_hash: str, proof: bytes) -> None:
        """Submit a finished proof together with a telemetry snapshot.

        Raises:
            InvalidRequestError: `node_id` or `proof` is empty (no telemetry is
                collected).
            OrchestratorError: any transport failure from `_request`.
        """
        if not node_id:
            raise InvalidRequestError("Invalid node ID")
        if not proof:
            raise InvalidRequestError("Empty proof submitted")

        # The throughput benchmark is CPU-bound; keep it off the event loop.
        telemetry = await asyncio.to_thread(
            collect_telemetry,
            memory_probe=self._memory_probe,
            flops_probe=self._flops_probe,
            location=DEFAULT_LOCATION,
        )
        request = ProofSubmission(
            node_id=node_id,
            node_type=CLIENT_NODE_TYPE,
            proof_hash=proof_hash,
            proof=proof,
            node_telemetry=telemetry,
        )

        # The acknowledgement carries nothing we use.
        await self._request(SUBMIT_PROOF_PATH, "POST", request, SubmitProofResponse)

        logger.info(
            "Proof submitted successfully",
            extra={"node_id": node_id, "proof_hash": proof_hash, "proof_bytes": len(proof)},
        )
