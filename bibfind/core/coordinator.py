"""
Search coordinator: owns the query texts and runs full-collection rescans.

Edits only mark a rescan as queued. Each tick launches at most one scan,
stamped with the next generation number, on its own worker thread. Workers
post their results into an inbox that poll() drains on the consumer side; a
result is accepted only if its generation is at least the newest one already
accepted, so a slow scan finishing late can never replace a fresher result.
Scans are never cancelled.
"""

import queue
import threading
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from loguru import logger

from .errors import CategoryMismatchError
from .matching import Matcher, default_matcher
from .models import (
    EMPTY_RESULT,
    CoordinatorState,
    RankedEntry,
    RankedResult,
    SearchableRecord,
)
from .scoring import scan

Job = Callable[[], None]
Launcher = Callable[[Job], None]


def spawn_worker(job: Job) -> None:
    """Run a job on a dedicated daemon thread."""
    worker = threading.Thread(target=job, name="bibfind-scan", daemon=True)
    worker.start()


@dataclass(frozen=True)
class ScanMessage:
    """What a worker posts back; entries is None when the scan failed."""
    generation: int
    entries: Optional[Tuple[RankedEntry, ...]]


class SearchCoordinator:
    """Queues, launches and arbitrates rescans of an immutable record list."""

    def __init__(
        self,
        records: Sequence[SearchableRecord],
        category_count: int,
        matcher: Matcher = default_matcher,
        weights: Optional[Sequence[float]] = None,
        launcher: Launcher = spawn_worker,
    ):
        if category_count < 1:
            raise CategoryMismatchError("category configuration", 1, category_count)
        for record in records:
            if len(record.categories) != category_count:
                raise CategoryMismatchError(
                    f"record {record.id}", category_count, len(record.categories)
                )
        if weights is not None and len(weights) != category_count:
            raise CategoryMismatchError("weights", category_count, len(weights))

        self._records: Tuple[SearchableRecord, ...] = tuple(records)
        self._matcher = matcher
        self._weights: Optional[Tuple[float, ...]] = (
            tuple(weights) if weights is not None else None
        )
        self._launch = launcher

        self._queries: List[str] = [""] * category_count
        self._queued = False
        self._generation = 0
        self._accepted_generation = 0
        # Newest generation whose worker has reported back, successfully or not
        self._settled_generation = 0
        self._in_flight = 0
        self._ranked: RankedResult = EMPTY_RESULT
        self._inbox: "queue.SimpleQueue[ScanMessage]" = queue.SimpleQueue()

        self.stats = {"launched": 0, "accepted": 0, "discarded": 0, "failed": 0}

    # -- query state ---------------------------------------------------------

    @property
    def category_count(self) -> int:
        return len(self._queries)

    @property
    def queries(self) -> Tuple[str, ...]:
        return tuple(self._queries)

    @property
    def records(self) -> Tuple[SearchableRecord, ...]:
        return self._records

    def edit(self, category_index: int, mutation: Callable[[str], str]) -> None:
        """Replace one query text with mutation(old_text) and queue a rescan."""
        if not 0 <= category_index < len(self._queries):
            raise IndexError(
                f"category index {category_index} out of range 0..{len(self._queries) - 1}"
            )
        self._queries[category_index] = mutation(self._queries[category_index])
        self._queued = True

    def set_query(self, category_index: int, text: str) -> None:
        self.edit(category_index, lambda _old: text)

    def clear_all(self) -> None:
        for i in range(len(self._queries)):
            self._queries[i] = ""
        self._queued = True

    def request_rescan(self) -> None:
        self._queued = True

    # -- scan lifecycle ------------------------------------------------------

    @property
    def queued(self) -> bool:
        return self._queued

    @property
    def generation(self) -> int:
        """Generation of the most recently launched scan."""
        return self._generation

    @property
    def accepted_generation(self) -> int:
        return self._accepted_generation

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def state(self) -> CoordinatorState:
        if self._queued:
            return CoordinatorState.QUEUED
        if self._generation > self._settled_generation:
            return CoordinatorState.RUNNING
        return CoordinatorState.IDLE

    @property
    def ranked(self) -> RankedResult:
        return self._ranked

    def tick(self) -> Optional[int]:
        """Launch a rescan if one is queued; return its generation."""
        if not self._queued:
            return None

        self._generation += 1
        self._queued = False
        self._in_flight += 1
        self.stats["launched"] += 1

        generation = self._generation
        queries = tuple(self._queries)
        records = self._records
        matcher = self._matcher
        weights = self._weights
        inbox = self._inbox

        def job() -> None:
            start = time.perf_counter()
            try:
                entries = scan(records, queries, matcher, weights)
            except Exception:
                logger.opt(exception=True).error(f"Scan {generation} failed")
                inbox.put(ScanMessage(generation, None))
                return
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.debug(
                f"Scan {generation} ranked {len(entries)}/{len(records)} records "
                f"in {elapsed_ms:.1f}ms"
            )
            inbox.put(ScanMessage(generation, entries))

        logger.debug(f"Launching scan {generation} for queries {queries!r}")
        self._launch(job)
        return generation

    def accept(self, message: ScanMessage) -> bool:
        """Apply the generation rule to one delivered message."""
        self._settled_generation = max(self._settled_generation, message.generation)
        if message.entries is None:
            self.stats["failed"] += 1
            return False
        if message.generation < self._accepted_generation:
            self.stats["discarded"] += 1
            logger.debug(
                f"Discarding stale scan {message.generation} "
                f"(accepted {self._accepted_generation})"
            )
            return False

        self._ranked = RankedResult(generation=message.generation, entries=message.entries)
        self._accepted_generation = message.generation
        self.stats["accepted"] += 1
        return True

    def poll(self) -> List[RankedResult]:
        """Drain the inbox without blocking; return the results accepted, in order."""
        accepted: List[RankedResult] = []
        while True:
            try:
                message = self._inbox.get_nowait()
            except queue.Empty:
                break
            self._in_flight -= 1
            if self.accept(message):
                accepted.append(self._ranked)
        return accepted
