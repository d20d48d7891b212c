"""Errors raised by the orchestrator client.

Every failure derives from `OrchestratorError`, so callers that only care about
"did the call work" can catch one type. Nothing here is retried automatically.
"""

from __future__ import annotations

CONNECTION_FAILED_MESSAGE = "Failed to connect to orchestrator"
EMPTY_RESPONSE_MESSAGE = "Empty response from orchestrator"


class OrchestratorError(Exception):
    """Base class for all orchestrator client failures."""


class InvalidRequestError(OrchestratorError, ValueError):
    """Raised before any I/O when call arguments are unusable."""


class UnsupportedMethodError(OrchestratorError, ValueError):
    """Raised when the transport is asked to use an HTTP verb it doesn't speak."""

    def __init__(self, method: str) -> None:
        super().__init__(f"Unsupported HTTP method: {method!r}")
        self.method = method


class OrchestratorConnectionError(OrchestratorError):
    """The request could not be completed (DNS, connect, timeout, broken read)."""

    def __init__(self) -> None:
        super().__init__(CONNECTION_FAILED_MESSAGE)


class OrchestratorHTTPError(OrchestratorError):
    """The orchestrator answered with a non-2xx status."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"HTTP {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class ResponseDecodeError(OrchestratorError):
    """A non-empty response body did not parse as the expected message."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"Protobuf decode error: {detail}")
        self.detail = detail


class EmptyResponseError(OrchestratorError):
    """The call succeeded but returned no body where one was required."""

    def __init__(self) -> None:
        super().__init__(EMPTY_RESPONSE_MESSAGE)
