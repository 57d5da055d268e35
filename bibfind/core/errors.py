"""Exception types raised by the bibfind core."""


class BibfindError(Exception):
    """Base class for errors reported to the user."""


class CategoryMismatchError(BibfindError, ValueError):
    """A record, query list or weight list disagrees with the category count."""

    def __init__(self, what: str, expected: int, actual: int):
        self.what = what
        self.expected = expected
        self.actual = actual
        super().__init__(f"{what}: expected {expected} categories, got {actual}")


class LibraryError(BibfindError):
    """The record library could not be read."""
