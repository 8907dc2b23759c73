"""
Rename planning.

Applies the ordered rule list to every discovered file's base name and
produces a deterministic plan. No files are touched here.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Iterable

from ..output_paths import find_owning_root, get_output_path, relative_to_root
from .rules import RenameRule
from .validator import Collision, find_collisions


@dataclass
class PlanEntry:
    """
    One file in a rename plan.

    `original_relative_path` and `new_relative_path` are POSIX-style and are
    relative to `root` when the file has an owning root; otherwise they are
    the source path itself. They differ only in the final component.
    """
    source: Path
    original_relative_path: str
    new_relative_path: str
    was_renamed: bool
    is_too_long: bool
    root: Path | None = None

    @property
    def original_name(self) -> str:
        return PurePosixPath(self.original_relative_path).name

    @property
    def new_name(self) -> str:
        return PurePosixPath(self.new_relative_path).name

    @property
    def destination(self) -> Path | None:
        """Output path for this entry, or None without an owning root."""
        if self.root is None:
            return None
        return get_output_path(self.source, self.root, self.new_name)

    def to_dict(self) -> dict:
        destination = self.destination
        return {
            "source": str(self.source),
            "root": str(self.root) if self.root else None,
            "old_rel": self.original_relative_path,
            "new_rel": self.new_relative_path,
            "destination": str(destination) if destination else None,
            "was_renamed": self.was_renamed,
            "is_too_long": self.is_too_long,
        }


@dataclass
class RenamePlan:
    """The full original -> final name mapping for a batch."""
    entries: list[PlanEntry] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    collisions: list[Collision] = field(default_factory=list)
    max_name_length: int = 0

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def renamed_count(self) -> int:
        return sum(1 for e in self.entries if e.was_renamed)

    @property
    def too_long_count(self) -> int:
        return sum(1 for e in self.entries if e.is_too_long)

    def to_dict(self) -> dict:
        return {
            "max_name_length": self.max_name_length,
            "entries": [e.to_dict() for e in self.entries],
            "warnings": list(self.warnings),
            "collisions": [c.to_dict() for c in self.collisions],
        }


def _is_valid_name(name: str) -> bool:
    """A usable base name: non-empty, not a dot entry, no path separators."""
    if name in ("", ".", ".."):
        return False
    if "/" in name or os.sep in name:
        return False
    return os.altsep is None or os.altsep not in name


def _rule_label(position: int, rule: RenameRule) -> str:
    return f'Rule {position} "{rule.find}"'


def check_rules(rules: list[RenameRule]) -> list[str]:
    """
    Describe enabled rules whose patterns do not compile.

    Such rules are inert during planning; the messages let users spot typos.
    """
    warnings = []
    for position, rule in enumerate(rules, start=1):
        if not rule.enabled:
            continue
        err = rule.compile_error()
        if err:
            warnings.append(f"{_rule_label(position, rule)} is not a valid pattern and was skipped: {err}")
    return warnings


def rename_name(
    name: str,
    rules: list[RenameRule],
    max_name_length: int,
    rejected: set[int] | None = None,
) -> str:
    """
    Apply rules in order to a single base name.

    Each rule sees the output of the previous ones, and the too-long
    condition is evaluated against the current intermediate name.

    Args:
        name: Original base name.
        rules: Rules in application order.
        max_name_length: Length threshold.
        rejected: If given, collects indexes of rules whose result was not a
            usable base name (empty, a dot entry, or containing a path
            separator). Those results are discarded.

    Returns:
        The final name.
    """
    cur = name
    for index, rule in enumerate(rules):
        new = rule.apply(cur, max_name_length)
        if new is None:
            continue
        if not _is_valid_name(new):
            if rejected is not None:
                rejected.add(index)
            continue
        cur = new
    return cur


def plan_renames(
    files: Iterable[Path],
    rules: list[RenameRule],
    max_name_length: int,
    rules_enabled: bool = True,
    roots: list[Path] | None = None,
) -> RenamePlan:
    """
    Build a rename plan for a batch of files.

    Args:
        files: Discovered files, in order. One entry is produced per file.
        rules: Rules in application order.
        max_name_length: Length threshold for `only_when_name_too_long` and
            for the `is_too_long` classification.
        rules_enabled: When False every name passes through unchanged.
        roots: Input roots. When given, each entry records its owning root
            and its paths are relative to it.

    Returns:
        The plan, with rule warnings and destination collisions attached.
    """
    rules = list(rules) if rules_enabled else []
    warnings = check_rules(rules)
    rejected: set[int] = set()
    entries = []

    for source in files:
        source = Path(source)
        root = find_owning_root(source, roots) if roots is not None else None

        relative = relative_to_root(source, root) if root is not None else None
        original_rel = PurePosixPath((relative if relative is not None else source).as_posix())
        original_name = source.name

        new_name = rename_name(original_name, rules, max_name_length, rejected)

        if original_rel.name and str(original_rel) != ".":
            new_rel = original_rel.with_name(new_name)
        else:
            # The root is the file itself
            new_rel = PurePosixPath(new_name)
            original_rel = PurePosixPath(original_name)

        entries.append(PlanEntry(
            source=source,
            original_relative_path=str(original_rel),
            new_relative_path=str(new_rel),
            was_renamed=new_name != original_name,
            is_too_long=len(new_name) > max_name_length,
            root=root,
        ))

    for index in sorted(rejected):
        warnings.append(
            f"{_rule_label(index + 1, rules[index])} produced an empty name or one containing a path separator; "
            "that change was ignored"
        )

    for w in warnings:
        print(f"[WARN] {w}")

    plan = RenamePlan(
        entries=entries,
        warnings=warnings,
        collisions=find_collisions(entries, roots),
        max_name_length=max_name_length,
    )
    if plan.collisions:
        print(f"[WARN] Plan has {len(plan.collisions)} destination collisions")
    return plan
