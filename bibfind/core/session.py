"""The search session: coordinator plus selection, as seen by adapters."""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from .coordinator import Launcher, SearchCoordinator, spawn_worker
from .matching import Matcher, default_matcher
from .models import CoordinatorState, Direction, RankedEntry, RankedResult, SearchableRecord
from .selection import Selection

WORD_BREAKS = ("\n", "\t", " ")


def drop_last_word(text: str) -> str:
    """Remove trailing whitespace and then the last word before it."""
    stripped = text.rstrip("".join(WORD_BREAKS))
    cut = max(stripped.rfind(ch) for ch in WORD_BREAKS)
    return stripped[: cut + 1]


@dataclass(frozen=True)
class SessionView:
    """Everything a renderer needs for one frame."""
    queries: Tuple[str, ...]
    ranked: RankedResult
    selected: Optional[int]
    state: CoordinatorState

    @property
    def selected_entry(self) -> Optional[RankedEntry]:
        if self.selected is None:
            return None
        return self.ranked[self.selected]


class SearchSession:
    """
    Interactive search over a fixed list of searchable records.

    Adapters mutate query text through the edit methods, call tick() on every
    scheduling tick and poll() after every event, and use navigate()/commit()
    for the highlighted result. A rescan is queued on construction so the
    first tick lists whatever matches the empty queries.
    """

    def __init__(
        self,
        records: Sequence[SearchableRecord],
        category_count: int,
        matcher: Matcher = default_matcher,
        weights: Optional[Sequence[float]] = None,
        launcher: Launcher = spawn_worker,
    ):
        self.coordinator = SearchCoordinator(
            records,
            category_count,
            matcher=matcher,
            weights=weights,
            launcher=launcher,
        )
        self.selection = Selection()
        self.coordinator.request_rescan()

    # Editing

    def edit(self, category_index: int, mutation) -> None:
        self.coordinator.edit(category_index, mutation)

    def set_query(self, category_index: int, text: str) -> None:
        self.coordinator.set_query(category_index, text)

    def add_text(self, category_index: int, text: str) -> None:
        self.coordinator.edit(category_index, lambda old: old + text)

    def remove_letter(self, category_index: int) -> None:
        self.coordinator.edit(category_index, lambda old: old[:-1])

    def remove_word(self, category_index: int) -> None:
        self.coordinator.edit(category_index, drop_last_word)

    def clear_all(self) -> None:
        self.coordinator.clear_all()

    def request_rescan(self) -> None:
        self.coordinator.request_rescan()

    # Scheduling

    def tick(self) -> Optional[int]:
        return self.coordinator.tick()

    def poll(self) -> SessionView:
        """Apply delivered scan results and return the current view."""
        for result in self.coordinator.poll():
            self.selection.reconcile(len(result))
        return self.view()

    def view(self) -> SessionView:
        return SessionView(
            queries=self.coordinator.queries,
            ranked=self.coordinator.ranked,
            selected=self.selection.index,
            state=self.coordinator.state,
        )

    # Selection

    def navigate(self, direction: Direction) -> None:
        self.selection.navigate(direction, len(self.coordinator.ranked))

    def commit(self) -> Optional[int]:
        """Id of the highlighted record, or None when nothing is selected."""
        return self.selection.resolve(self.coordinator.ranked)
