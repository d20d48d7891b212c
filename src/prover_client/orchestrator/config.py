"""Configuration for the prover client.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

The orchestrator address is normally derived from the deployment environment;
`ORCHESTRATOR_URL` overrides it (useful for local mocks and self-hosted setups).
"""

from __future__ import annotations

from enum import Enum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TIMEOUT_SECONDS = 30.0


class Environment(str, Enum):
    """Deployment environment the client talks to."""

    LOCAL = "local"
    DEV = "dev"
    STAGING = "staging"
    BETA = "beta"

    @property
    def orchestrator_url(self) -> str:
        """Base address of the orchestrator for this environment."""

        return _ORCHESTRATOR_URLS[self]


_ORCHESTRATOR_URLS: dict[Environment, str] = {
    Environment.LOCAL: "http://localhost:50505",
    Environment.DEV: "https://dev.orchestrator.nexus.xyz",
    Environment.STAGING: "https://staging.orchestrator.nexus.xyz",
    Environment.BETA: "https://beta.orchestrator.nexus.xyz",
}


class ClientSettings(BaseSettings):
    """Settings for the prover client.

    Environment variables:
    - ORCHESTRATOR_ENVIRONMENT      (optional)
    - ORCHESTRATOR_URL              (optional)
    - ORCHESTRATOR_TIMEOUT_SECONDS  (optional)
    - NODE_ID                       (optional)
    - LOG_LEVEL                     (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `ClientSettings(_env_file=path_to_env)`.
    """

    environment: Environment = Field(
        default=Environment.BETA,
        validation_alias="ORCHESTRATOR_ENVIRONMENT",
        description="Deployment environment used to derive the orchestrator URL",
    )
    orchestrator_url: str | None = Field(
        default=None,
        validation_alias="ORCHESTRATOR_URL",
        description="Explicit orchestrator base URL (overrides the environment)",
    )
    request_timeout_seconds: float = Field(
        default=DEFAULT_TIMEOUT_SECONDS,
        gt=0,
        validation_alias="ORCHESTRATOR_TIMEOUT_SECONDS",
        description="Per-request timeout applied to every orchestrator call",
    )

    node_id: str = Field(
        default="",
        validation_alias="NODE_ID",
        description="Identifier of this prover node, as registered with the orchestrator",
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
    )

    @property
    def base_url(self) -> str:
        """Resolved orchestrator base URL."""

        if self.orchestrator_url and self.orchestrator_url.strip():
            return self.orchestrator_url.strip().rstrip("/")
        return self.environment.orchestrator_url
