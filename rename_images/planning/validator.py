"""
Plan validation for the image rename tool.

Detects entries that would be written to the same destination, so the
executor can refuse them before any file is written.
"""

from dataclasses import dataclass, field
from pathlib import Path

from ..output_paths import find_owning_root, get_output_path


@dataclass
class Collision:
    """Two or more sources planned onto the same destination."""
    destination: Path
    sources: list[Path] = field(default_factory=list)

    def describe(self) -> str:
        names = ", ".join(f"'{s}'" for s in self.sources)
        return f"{names} all target '{self.destination}'"

    def to_dict(self) -> dict:
        return {
            "destination": str(self.destination),
            "sources": [str(s) for s in self.sources],
        }


def _destination_key(entry, input_roots: list[Path] | None) -> Path:
    source = Path(entry.source)
    root = getattr(entry, "root", None)
    if root is None and input_roots:
        root = find_owning_root(source, input_roots)
    if root is not None:
        destination = get_output_path(source, root, entry.new_name)
        if destination is not None:
            return destination
    # No owning root: compare where the renamed file would sit next to its source
    return source.parent / entry.new_name


def find_collisions(entries, input_roots: list[Path] | None = None) -> list[Collision]:
    """
    Find destinations targeted by more than one distinct source.

    The same source listed twice is a duplicate, not a collision.

    Args:
        entries: Plan entries (anything with `source` and `new_name`, and
            optionally `root`).
        input_roots: Used to resolve the destination of entries without a root.

    Returns:
        Collisions in order of first appearance of each destination.
    """
    # Track destinations to detect collisions
    destinations: dict[Path, list[Path]] = {}

    for entry in entries:
        key = _destination_key(entry, input_roots)
        sources = destinations.setdefault(key, [])
        source = Path(entry.source)
        if source not in sources:
            sources.append(source)

    return [
        Collision(destination=dest, sources=sources)
        for dest, sources in destinations.items()
        if len(sources) > 1
    ]


def colliding_sources(collisions: list[Collision]) -> dict[Path, Collision]:
    """Map every source that takes part in a collision to its collision."""
    out = {}
    for collision in collisions:
        for source in collision.sources:
            out[source] = collision
    return out
