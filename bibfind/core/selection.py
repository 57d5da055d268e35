"""Highlighted-result tracking for the ranked list."""

from typing import Optional

from .models import Direction, RankedResult


class Selection:
    """
    Either empty or pointing at a valid index of the current ranked result.

    The owner calls reconcile() with the length of every newly accepted
    result; navigation wraps around the ends of the list.
    """

    def __init__(self, index: Optional[int] = None):
        self.index = index

    @property
    def is_empty(self) -> bool:
        return self.index is None

    def reconcile(self, length: int) -> None:
        """Keep the index valid for a new result of the given length."""
        if length == 0:
            self.index = None
        elif self.index is None:
            self.index = 0
        elif self.index >= length:
            self.index = length - 1

    def next(self, length: int) -> None:
        if self.index is None or length == 0:
            return
        self.index = (self.index + 1) % length

    def previous(self, length: int) -> None:
        if self.index is None or length == 0:
            return
        self.index = (self.index - 1) % length

    def navigate(self, direction: Direction, length: int) -> None:
        if direction is Direction.NEXT:
            self.next(length)
        else:
            self.previous(length)

    def resolve(self, ranked: RankedResult) -> Optional[int]:
        """Return the id of the selected record, or None."""
        if self.index is None or self.index >= len(ranked):
            return None
        return ranked[self.index].record.id

    def __eq__(self, other) -> bool:
        if not isinstance(other, Selection):
            return NotImplemented
        return self.index == other.index

    def __repr__(self) -> str:
        if self.index is None:
            return "Selection(empty)"
        return f"Selection({self.index})"
