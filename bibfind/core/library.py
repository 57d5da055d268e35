"""Loading raw records from a directory of YAML documents."""

from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml
from loguru import logger

from .errors import LibraryError
from .flatten import build
from .models import LibraryEntry, SearchableRecord

DEFAULT_PATTERN = "**/*.yaml"


def _normalize(data: Dict[Any, Any], stringify_scalars: bool) -> Dict[str, Any]:
    normalized: Dict[str, Any] = {}
    for key, value in data.items():
        if stringify_scalars and isinstance(value, (int, float)) and not isinstance(value, bool):
            value = str(value)
        normalized[str(key)] = value
    return normalized


def load_library(
    path: Path,
    pattern: str = DEFAULT_PATTERN,
    stringify_scalars: bool = True,
) -> List[LibraryEntry]:
    """
    Load every YAML mapping under `path` matching `pattern`.

    Files are read in sorted path order and numbered from 0 in that order.
    Files that fail to parse, or whose top level is not a mapping, are
    skipped with a warning.
    """
    root = Path(path).expanduser()
    if not root.is_dir():
        raise LibraryError(f"Library directory does not exist: {root}")

    entries: List[LibraryEntry] = []
    for file_path in sorted(p for p in root.glob(pattern) if p.is_file()):
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
            logger.warning(f"Skipping unreadable library file {file_path}: {e}")
            continue

        if not isinstance(data, dict):
            logger.warning(f"Skipping {file_path}: top level is not a mapping")
            continue

        entries.append(LibraryEntry(
            id=len(entries),
            data=_normalize(data, stringify_scalars),
            path=file_path,
        ))

    logger.info(f"Loaded {len(entries)} library entries from {root}")
    return entries


def build_records(
    entries: Sequence[LibraryEntry],
    categories: Sequence[Sequence[str]],
) -> List[SearchableRecord]:
    """Flatten every entry once with the shared category configuration."""
    return [build(entry.id, entry.data, categories) for entry in entries]


def entry_values(entry: LibraryEntry, field_name: str) -> List[str]:
    """Return a field as a list of strings; lists are flattened one level."""
    value = entry.data.get(field_name)
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v is not None]
    return [str(value)]


def resolve_file(entry: LibraryEntry, reference: str) -> Path:
    """Resolve a file reference relative to the entry's YAML document."""
    target = Path(reference).expanduser()
    if target.is_absolute() or entry.path is None:
        return target
    return entry.path.parent / target


def find_entry(entries: Sequence[LibraryEntry], entry_id: int) -> Optional[LibraryEntry]:
    if 0 <= entry_id < len(entries) and entries[entry_id].id == entry_id:
        return entries[entry_id]
    for entry in entries:
        if entry.id == entry_id:
            return entry
    return None
