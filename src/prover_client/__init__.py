"""Prover client for the orchestrator service.

Provides:
- configuration loaded from `.env`
- structured logging
- a protobuf-over-HTTP client for fetching proof tasks and submitting proofs
"""

__version__ = "0.1.0"

from prover_client.orchestrator.client import OrchestratorClient
from prover_client.orchestrator.config import ClientSettings, Environment

__all__ = ["__version__", "ClientSettings", "Environment", "OrchestratorClient"]
