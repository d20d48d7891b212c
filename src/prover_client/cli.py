"""Console entrypoint.

The CLI itself is implemented in `prover_client.orchestrator.main`.
"""

from __future__ import annotations

from prover_client.orchestrator.main import main

__all__ = ["main"]


if __name__ == "__main__":
    raise SystemExit(main())
