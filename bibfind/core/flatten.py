"""Flattening of raw library records into searchable records."""

from typing import Any, Mapping, Sequence

from .models import SearchableRecord

# Longest haystack the fuzzy matcher accepts.
MAX_CATEGORY_LENGTH = 1024

FIELD_SEPARATOR = "\n"


def field_text(raw_record: Mapping[str, Any], field_name: str) -> str:
    """Return the string value of a field, or "" when absent or not a string."""
    value = raw_record.get(field_name) if isinstance(raw_record, Mapping) else None
    return value if isinstance(value, str) else ""


def category_text(raw_record: Mapping[str, Any], field_names: Sequence[str]) -> str:
    text = FIELD_SEPARATOR.join(field_text(raw_record, name) for name in field_names)
    return text[:MAX_CATEGORY_LENGTH]


def build(
    id: int,
    raw_record: Mapping[str, Any],
    categories: Sequence[Sequence[str]],
) -> SearchableRecord:
    """
    Build a searchable record from a raw record.

    Each category's listed fields are joined with newlines and truncated to
    MAX_CATEGORY_LENGTH characters. Missing data yields empty text, so the
    output always has exactly one string per category.
    """
    return SearchableRecord(
        id=id,
        categories=tuple(category_text(raw_record, names) for names in categories),
    )


flatten = build
