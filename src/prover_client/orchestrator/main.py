"""CLI entrypoint for the prover client."""

from __future__ import annotations

import argparse
import asyncio
import hashlib
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from prover_client import __version__
from prover_client.orchestrator.client import OrchestratorClient
from prover_client.orchestrator.config import ClientSettings
from prover_client.orchestrator.errors import OrchestratorError
from prover_client.orchestrator.logging import configure_logging
from prover_client.orchestrator.telemetry import collect_telemetry

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="prover-client",
        description="Fetch proof tasks from and submit proofs to the orchestrator",
    )
    parser.add_argument("--version", action="version", version=f"prover-client {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    fetch_task = subparsers.add_parser("fetch-task", help="Request the next proof task")
    fetch_task.add_argument(
        "--node-id",
        default=None,
        help="Node identifier (defaults to NODE_ID from the environment/.env)",
    )

    submit_proof = subparsers.add_parser("submit-proof", help="Submit a finished proof")
    submit_proof.add_argument(
        "--node-id",
        default=None,
        help="Node identifier (defaults to NODE_ID from the environment/.env)",
    )
    submit_proof.add_argument(
        "--proof-file",
        required=True,
        help="Path to the binary proof to submit",
    )
    submit_proof.add_argument(
        "--proof-hash",
        default=None,
        help="Hash reported with the proof (defaults to the SHA-256 hex digest of the file)",
    )

    subparsers.add_parser(
        "telemetry",
        help="Print the telemetry snapshot that would accompany a submission",
    )

    return parser


async def _fetch_task(settings: ClientSettings, node_id: str) -> int:
    async with OrchestratorClient.from_settings(settings) as client:
        task = await client.get_proof_task(node_id)
    print(f"Program: {task.program_id}")
    print(f"Public inputs: {len(task.public_inputs)} bytes")
    return 0


async def _submit_proof(
    settings: ClientSettings,
    node_id: str,
    proof: bytes,
    proof_hash: str,
) -> int:
    async with OrchestratorClient.from_settings(settings) as client:
        await client.submit_proof(node_id, proof_hash, proof)
    print(f"Submitted proof {proof_hash} ({len(proof)} bytes)")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = ClientSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(settings.log_level)

    if args.command == "telemetry":
        telemetry = collect_telemetry()
        for key, value in telemetry.model_dump().items():
            print(f"{key}: {value if value is not None else 'unavailable'}")
        return 0

    node_id = args.node_id or settings.node_id
    if not node_id:
        print("A node id is required (pass --node-id or set NODE_ID)", file=sys.stderr)
        return 2

    try:
        if args.command == "fetch-task":
            return asyncio.run(_fetch_task(settings, node_id))

        # Only submit-proof is left; argparse rejects anything else.
        proof = Path(args.proof_file).read_bytes()
        proof_hash = args.proof_hash or hashlib.sha256(proof).hexdigest()
        return asyncio.run(_submit_proof(settings, node_id, proof, proof_hash))
    except OrchestratorError as e:
        logger.error(
            "Orchestrator call failed",
            extra={"command": args.command, "error": type(e).__name__},
        )
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
