"""Local compute telemetry attached to proof submissions.

Telemetry is best-effort: a probe that fails is logged and its fields are left
unset, so a broken measurement never blocks a proof from being submitted.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

import psutil

from prover_client.orchestrator.messages import DEFAULT_LOCATION, INT64_MAX, NodeTelemetry

logger = logging.getLogger(__name__)

MemoryProbe = Callable[[], tuple[int, int]]
FlopsProbe = Callable[[], float]

# Each iteration of the benchmark loop performs one multiply and one add.
_FLOPS_PER_ITERATION = 2
_BENCHMARK_ITERATIONS = 200_000


def get_memory_info() -> tuple[int, int]:
    """Return (memory used by this process, total system memory), in bytes."""

    used = psutil.Process().memory_info().rss
    total = psutil.virtual_memory().total
    return int(used), int(total)


def measure_flops(iterations: int = _BENCHMARK_ITERATIONS) -> float:
    """Estimate floating-point throughput of this machine.

    Times a short multiply-add loop on one core and scales it by the logical CPU
    count. The number is only meant to be comparable between nodes.
    """

    if iterations <= 0:
        raise ValueError("iterations must be a positive integer")

    x = 1.0
    factor = 1.000001
    offset = 0.000001
    start = time.perf_counter()
    for _ in range(iterations):
        x = x * factor + offset
    elapsed = time.perf_counter() - start

    if elapsed <= 0:
        return 0.0
    cores = psutil.cpu_count(logical=True) or 1
    return (iterations * _FLOPS_PER_ITERATION / elapsed) * cores


def _clamp(value: float) -> int:
    return min(max(int(value), 0), INT64_MAX)


def collect_telemetry(
    *,
    memory_probe: MemoryProbe = get_memory_info,
    flops_probe: FlopsProbe = measure_flops,
    location: str = DEFAULT_LOCATION,
) -> NodeTelemetry:
    """Take a telemetry snapshot, leaving unset whatever can't be measured."""

    memory_used: int | None = None
    memory_capacity: int | None = None
    try:
        used, total = memory_probe()
        memory_used, memory_capacity = _clamp(used), _clamp(total)
    except Exception:
        logger.warning("Memory measurement failed; omitting from telemetry", exc_info=True)

    flops_per_sec: int | None = None
    try:
        flops_per_sec = _clamp(flops_probe())
    except Exception:
        logger.warning("Throughput measurement failed; omitting from telemetry", exc_info=True)

    telemetry = NodeTelemetry(
        flops_per_sec=flops_per_sec,
        memory_used=memory_used,
        memory_capacity=memory_capacity,
        location=location,
    )
    logger.debug("Collected node telemetry", extra={"telemetry": telemetry.model_dump()})
    return telemetry
