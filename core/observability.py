from __future__ import annotations

from dataclasses import dataclass

from core.db import SLOW_QUERY_MS, QueryStats

WARMUP_SAMPLES = 5
SLOW_QUERY_BUDGET = 10


@dataclass
class StatusStrip:
    status: str
    message: str


def system_status(stats: QueryStats) -> StatusStrip:
    """Coarse health from recent query timings."""
    if stats.total < WARMUP_SAMPLES:
        return StatusStrip("OK", f"Warmup ({stats.total} samples)")
    if stats.slow > SLOW_QUERY_BUDGET:
        return StatusStrip("WARN", f"{stats.slow} queries slower than {SLOW_QUERY_MS} ms")
    if stats.p95_ms > SLOW_QUERY_MS:
        return StatusStrip("WARN", f"p95 query time {stats.p95_ms} ms")
    return StatusStrip("OK", "Nominal")
