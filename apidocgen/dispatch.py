"""Rate-limited batch execution of inference calls."""

from __future__ import annotations

import asyncio
import math
from typing import Any, Awaitable, Callable, List, Optional, Sequence

from .logging import get_logger
from .models import ItemOutcome, OutcomeStatus, WorkItem

Worker = Callable[[WorkItem], Awaitable[Any]]
OutcomeHandler = Callable[[ItemOutcome], None]

DEFAULT_BATCH_SIZE = 10
DEFAULT_COOLDOWN_SECONDS = 60.0


class BatchDispatcher:
    """Runs a worker over work items in fixed-size, throttled batches.

    Items of one batch run concurrently. Once every item of the batch has
    settled, outcomes are handed to ``on_outcome`` one at a time in the
    original item order, then the dispatcher waits ``cooldown`` seconds
    before starting the next batch. With at most ``batch_size`` calls per
    cooldown window the aggregate call rate stays under the ceiling no
    matter how long individual calls take.
    """

    def __init__(
        self,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        cooldown: float = DEFAULT_COOLDOWN_SECONDS,
        item_timeout: Optional[float] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        if cooldown < 0:
            raise ValueError("cooldown must not be negative")
        if item_timeout is not None and item_timeout <= 0:
            raise ValueError("item_timeout must be positive")
        self.batch_size = batch_size
        self.cooldown = cooldown
        self.item_timeout = item_timeout
        self._sleep = sleep
        self.logger = get_logger("dispatch")

    async def run(
        self,
        items: Sequence[WorkItem],
        worker: Worker,
        *,
        on_outcome: OutcomeHandler | None = None,
    ) -> List[ItemOutcome]:
        """Process ``items`` and return one outcome per item, in input order."""
        if not items:
            return []

        total_batches = math.ceil(len(items) / self.batch_size)
        self.logger.info(
            "Processing %d file(s) in batches of %d", len(items), self.batch_size
        )

        outcomes: List[ItemOutcome] = []
        for index, start in enumerate(range(0, len(items), self.batch_size), start=1):
            batch = items[start : start + self.batch_size]
            self.logger.info(
                "Processing batch %d of %d (%d files)", index, total_batches, len(batch)
            )
            settled = await asyncio.gather(*(self._settle(item, worker) for item in batch))

            for outcome in settled:
                if on_outcome is not None:
                    on_outcome(outcome)
                outcomes.append(outcome)

            if index < total_batches:
                self.logger.info(
                    "Batch complete; waiting %.1fs before the next batch", self.cooldown
                )
                await self._sleep(self.cooldown)

        return outcomes

    async def _settle(self, item: WorkItem, worker: Worker) -> ItemOutcome:
        if item.is_empty:
            self.logger.info("Skipping empty file: %s", item.path)
            return ItemOutcome(item=item, status=OutcomeStatus.SKIPPED)

        self.logger.debug("Analyzing file: %s", item.path)
        try:
            if self.item_timeout is None:
                payload = await worker(item)
            else:
                payload = await asyncio.wait_for(worker(item), timeout=self.item_timeout)
        except asyncio.TimeoutError:
            message = f"Timed out after {self.item_timeout:g}s"
            self.logger.error("Error analyzing %s: %s", item.path, message)
            return ItemOutcome(item=item, status=OutcomeStatus.FAILED, error=message)
        except Exception as exc:
            message = str(exc) or exc.__class__.__name__
            self.logger.error("Error analyzing %s: %s", item.path, message)
            return ItemOutcome(item=item, status=OutcomeStatus.FAILED, error=message)
        return ItemOutcome(item=item, status=OutcomeStatus.SUCCESS, payload=payload)


__all__ = [
    "BatchDispatcher",
    "DEFAULT_BATCH_SIZE",
    "DEFAULT_COOLDOWN_SECONDS",
    "OutcomeHandler",
    "Worker",
]
