"""
Output path mapping for the image rename tool.

Every input root gets a sibling output tree named `<root name>-output`.
Files keep their directory layout relative to their root; only the final
path component is replaced by the planned name.
"""

from pathlib import Path
from typing import Iterable

OUTPUT_SUFFIX = "-output"


def get_output_dir(input_root: Path) -> Path:
    """
    Get the output directory for an input root.

    Args:
        input_root: The input root directory (or file).

    Returns:
        `<parent>/<name>-output`, a sibling of the root.
    """
    input_root = Path(input_root)
    if not input_root.name:
        # Filesystem root or drive: nothing to suffix
        return input_root / OUTPUT_SUFFIX
    return input_root.with_name(f"{input_root.name}{OUTPUT_SUFFIX}")


def relative_to_root(file_path: Path, input_root: Path) -> Path | None:
    """Return file_path relative to input_root, or None if it is not under it."""
    try:
        return Path(file_path).relative_to(input_root)
    except ValueError:
        return None


def get_output_path(file_path: Path, input_root: Path, new_name: str) -> Path | None:
    """
    Get the destination path for a file.

    Args:
        file_path: The source file.
        input_root: The root the file was discovered under.
        new_name: The planned base name.

    Returns:
        `output_dir(input_root)/<relative dir>/<new_name>`, or None if the
        file is not under input_root.
    """
    relative = relative_to_root(file_path, input_root)
    if relative is None:
        return None

    output_path = get_output_dir(input_root)
    if relative.parent != Path("."):
        output_path = output_path / relative.parent
    return output_path / new_name


def find_owning_root(file_path: Path, input_roots: Iterable[Path]) -> Path | None:
    """
    Find the input root that contains a file.

    When roots nest, the shallowest root wins, so `/a/b/x.png` under roots
    `/a` and `/a/b` maps to `/a-output/b/x.png`. The output tree of the
    outer root is a sibling of it and so never lies inside another input.
    Ties keep the given order.

    Returns:
        The owning root, or None if no root contains the file.
    """
    best = None
    for root in input_roots:
        root = Path(root)
        if relative_to_root(file_path, root) is None:
            continue
        if best is None or len(root.parts) < len(best.parts):
            best = root
    return best
