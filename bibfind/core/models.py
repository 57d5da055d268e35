"""Data models shared by the search core and its adapters."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class SearchableRecord:
    """
    Fixed-shape searchable text for one library entry.

    `id` is the entry's index in the loaded library; `categories` holds one
    string per configured category, in configuration order.
    """
    id: int
    categories: Tuple[str, ...]

    def __len__(self) -> int:
        return len(self.categories)

    @property
    def title(self) -> str:
        """First line of the first category, used as the list label."""
        if not self.categories:
            return ""
        return self.categories[0].split("\n", 1)[0]


@dataclass(frozen=True)
class RankedEntry:
    """A record paired with its aggregate score."""
    record: SearchableRecord
    score: float


@dataclass(frozen=True)
class RankedResult:
    """Output of one scan, tagged with the generation that produced it."""
    generation: int
    entries: Tuple[RankedEntry, ...] = ()

    def __len__(self) -> int:
        return len(self.entries)

    def __getitem__(self, index: int) -> RankedEntry:
        return self.entries[index]


EMPTY_RESULT = RankedResult(generation=0)


class CoordinatorState(Enum):
    """Lifecycle of the search coordinator."""
    IDLE = "idle"
    QUEUED = "queued_for_rescan"
    RUNNING = "running"


class Direction(Enum):
    """Navigation direction through the ranked list."""
    NEXT = 1
    PREVIOUS = -1


@dataclass
class LibraryEntry:
    """One raw record loaded from the library, plus where it came from."""
    id: int
    data: Dict[str, Any]
    path: Optional[Path] = None
