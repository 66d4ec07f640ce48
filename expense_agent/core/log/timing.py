"""Duration logging for agent runs, tool calls and file loads."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from time import perf_counter
from typing import Iterator, Optional


@dataclass
class _Stopwatch:
    label: str
    logger: logging.Logger
    level: int
    unit: str
    total: Optional[int] = None
    count: int = 0
    started_at: float = field(default_factory=perf_counter)

    def add(self, amount: int = 1) -> None:
        self.count += amount

    def finish(self, success: bool) -> None:
        elapsed = perf_counter() - self.started_at
        done = self.total if self.total is not None else self.count
        suffix = f" ({done:,} {self.unit})" if done else ""
        if success:
            self.logger.log(self.level, "%s completed in %.2fs%s", self.label, elapsed, suffix)
        else:
            self.logger.error("%s failed after %.2fs%s", self.label, elapsed, suffix)


@contextmanager
def timeit(
    label: str,
    *,
    logger: Optional[logging.Logger] = None,
    level: int = logging.INFO,
    unit: str = "items",
    total: Optional[int] = None,
) -> Iterator[_Stopwatch]:
    """Log how long the ``with`` block took.

    The reported count is ``total`` when given, otherwise whatever the block
    accumulated through ``add()``.
    """
    stopwatch = _Stopwatch(
        label=label,
        logger=logger or logging.getLogger("expense_agent.timer"),
        level=level,
        unit=unit,
        total=total,
    )
    try:
        yield stopwatch
    except Exception:
        stopwatch.finish(success=False)
        raise
    stopwatch.finish(success=True)
