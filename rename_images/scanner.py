"""
Input discovery.

Expands the input roots into a flat, deterministic list of image files.
"""

import os
from pathlib import Path
from typing import Callable, Iterable, Iterator

from .utils import is_image_file

# Folders to completely ignore
IGNORE_FOLDERS = {
    'System Volume Information', '$RECYCLE.BIN', '.fseventsd', '.Spotlight-V100', '.Trashes'
}


def scan_directory(root: Path) -> Iterator[Path]:
    """
    Recursively scan a directory and yield image files.

    Directories and files are visited in sorted order so repeated scans of
    an unchanged tree yield the same sequence. Hidden files and folders are
    skipped; directory symlinks are not descended into (os.walk default).

    Args:
        root: The directory to scan.

    Yields:
        Absolute image file paths.
    """
    for dirpath, dirnames, filenames in os.walk(root):
        # Prune ignored folders; sort for a stable walk order
        dirnames[:] = sorted(
            d for d in dirnames
            if d not in IGNORE_FOLDERS and not d.startswith('.')
        )

        for filename in sorted(filenames):
            if filename.startswith('.'):
                continue

            filepath = Path(dirpath) / filename
            if is_image_file(filepath):
                yield filepath


def discover_files(
    input_roots: Iterable[Path],
    progress_callback: Callable[[int, Path], None] | None = None,
) -> list[Path]:
    """
    Expand input roots into a flat list of image files.

    Roots that are files are included directly (if they are images); roots
    that are directories are scanned recursively. A file reachable from more
    than one root is listed once. When roots nest, the file belongs to the
    outermost root (see `find_owning_root`), so its output lands in that
    root's sibling `-output` tree and is not rediscovered by a later scan.

    Args:
        input_roots: Canonical input roots, in order.
        progress_callback: Optional `(count, path)` callback per file found.

    Returns:
        Discovered file paths.
    """
    seen: set[Path] = set()
    files: list[Path] = []

    for root in input_roots:
        root = Path(root)
        if root.is_file():
            candidates: Iterable[Path] = [root] if is_image_file(root) else []
        elif root.is_dir():
            candidates = scan_directory(root)
        else:
            print(f"[WARN] Input root not found: {root}")
            continue

        for path in candidates:
            if path in seen:
                continue
            seen.add(path)
            files.append(path)
            if progress_callback:
                progress_callback(len(files), path)

    return files
