"""
Persisted input roots.

The input root set is stored in `<app home>/inputs.txt`, one canonical
(symlink-resolved, absolute) path per line, sorted and deduplicated.
"""

import glob
from pathlib import Path

from .config import AppHome
from .utils import write_text_atomic

INPUTS_FILE = "inputs.txt"


def inputs_file_path(home: AppHome) -> Path:
    return home.file_path(INPUTS_FILE)


def load_inputs(home: AppHome) -> list[Path]:
    """Load persisted input roots (one per line), in stored order."""
    path = inputs_file_path(home)
    if not path.exists():
        return []
    roots = []
    for line in path.read_text(encoding='utf-8').splitlines():
        line = line.strip()
        if line:
            roots.append(Path(line))
    return roots


def save_inputs(home: AppHome, roots) -> None:
    """Persist a set of canonical paths, sorted and deduplicated."""
    home.ensure_dir()
    unique = sorted({str(Path(p)) for p in roots})
    write_text_atomic(inputs_file_path(home), "".join(f"{p}\n" for p in unique))


def _canonical_matches(pattern: str, strict: bool) -> set[Path]:
    matches = set()
    for match in glob.glob(pattern, recursive=True):
        try:
            matches.add(Path(match).resolve(strict=True))
        except OSError as e:
            if strict:
                raise
            print(f"[WARN] Failed to canonicalize {match}: {e}")
    return matches


def add_from_glob(home: AppHome, pattern: str) -> list[Path]:
    """
    Add paths matched by a glob pattern to the input set.

    Args:
        home: App home holding inputs.txt.
        pattern: Glob pattern (a plain path is a pattern matching itself).

    Returns:
        The newly added canonical paths (empty if nothing new matched).
    """
    new = _canonical_matches(pattern, strict=True)
    if not new:
        return []

    current = set(load_inputs(home))
    added = sorted(new - current)
    if not added:
        return []

    save_inputs(home, current | set(added))
    return added


def remove_from_glob(home: AppHome, pattern: str) -> list[Path]:
    """
    Remove persisted paths matched by a glob pattern.

    Patterns that match nothing on disk are also compared literally against
    the stored paths, so roots that no longer exist can still be removed.

    Returns:
        The removed canonical paths.
    """
    to_remove = _canonical_matches(pattern, strict=False)
    current = set(load_inputs(home))
    literal = Path(pattern).expanduser()
    if literal.is_absolute() and literal in current:
        to_remove.add(literal)

    removed = sorted(current & to_remove)
    if not removed:
        return []

    save_inputs(home, current - set(removed))
    return removed
