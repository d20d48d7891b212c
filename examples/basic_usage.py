#!/usr/bin/env python3
"""Programmatic prover loop example.

This demonstrates using the client components directly:

* load settings from `.env`
* fetch one proof task for a node
* "prove" it (here: a placeholder digest of the public inputs)
* submit the result with telemetry attached

Retrying is the caller's job; this example gives up after one failed attempt.
"""

from __future__ import annotations

import argparse
import asyncio
import hashlib
from typing import Sequence

from prover_client.orchestrator.client import OrchestratorClient
from prover_client.orchestrator.config import ClientSettings
from prover_client.orchestrator.errors import OrchestratorError
from prover_client.orchestrator.logging import configure_logging


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fetch and submit a single proof task.")
    parser.add_argument("--node-id", required=True, help="Node identifier")
    return parser.parse_args(argv)


async def _run(settings: ClientSettings, node_id: str) -> int:
    async with OrchestratorClient.from_settings(settings) as client:
        try:
            task = await client.get_proof_task(node_id)
        except OrchestratorError as exc:
            print(f"Could not fetch a task: {exc}")
            return 1

        proof = hashlib.sha256(task.public_inputs).digest()
        proof_hash = hashlib.sha256(proof).hexdigest()

        try:
            await client.submit_proof(node_id, proof_hash, proof)
        except OrchestratorError as exc:
            print(f"Could not submit proof: {exc}")
            return 1

    print(f"Proved task for program {task.program_id!r}: {proof_hash}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    settings = ClientSettings()
    configure_logging(settings.log_level)

    return asyncio.run(_run(settings, args.node_id))


if __name__ == "__main__":
    raise SystemExit(main())
