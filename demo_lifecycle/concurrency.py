"""Bounded execution of one stage's independent units of work."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple

Worker = Callable[[int, Any], Awaitable[Any]]


@dataclass
class StageOutcome:
    completed: Dict[int, Any] = field(default_factory=dict)
    failures: Dict[int, Exception] = field(default_factory=dict)
    skipped: List[int] = field(default_factory=list)

    def ordered(self) -> List[Any]:
        return [self.completed[i] for i in sorted(self.completed)]

    def first_failure(self) -> Optional[Tuple[int, Exception]]:
        if not self.failures:
            return None
        index = min(self.failures)
        return index, self.failures[index]


async def run_bounded(
    items: Sequence[Any],
    worker: Worker,
    limit: int = 1,
    fail_fast: bool = True,
) -> StageOutcome:
    """Run ``worker(index, item)`` for every item with at most ``limit`` in flight.

    Units start in item order. With ``fail_fast`` a failure stops every unit
    that has not started yet; units already in flight finish. Without it every
    unit runs and failures are collected.
    """
    semaphore = asyncio.Semaphore(max(1, int(limit)))
    stop = asyncio.Event()
    outcome = StageOutcome()

    async def _one(index: int, item: Any):
        async with semaphore:
            if fail_fast and stop.is_set():
                outcome.skipped.append(index)
                return
            try:
                outcome.completed[index] = await worker(index, item)
            except Exception as exc:
                outcome.failures[index] = exc
                if fail_fast:
                    stop.set()

    await asyncio.gather(*(_one(i, item) for i, item in enumerate(items)))
    return outcome
