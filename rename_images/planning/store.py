"""
Persistent, ordered storage for rename rules.

Each rule lives in `<app home>/rename-rules/<id>.txt`. The application order is
kept in `order.txt` in the same directory, one id per line. Rule files that
are not listed there (e.g. copied in by hand) are appended in filename order.
"""

from pathlib import Path

from ..config import AppHome
from ..utils import write_text_atomic
from .rules import RenameRule, RuleFormatError

DIR_NAME = "rename-rules"
FILE_EXT = ".txt"
ORDER_FILE = "order.txt"


class RuleStore:
    """Ordered list of rename rules backed by a directory of text files."""

    def __init__(self, home: AppHome):
        self.dir = home.file_path(DIR_NAME)

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    def _ensure_dir(self) -> Path:
        self.dir.mkdir(parents=True, exist_ok=True)
        return self.dir

    def _rule_path(self, rule_id: str) -> Path:
        return self.dir / f"{rule_id}{FILE_EXT}"

    def _rule_files(self) -> list[Path]:
        if not self.dir.exists():
            return []
        return sorted(
            p for p in self.dir.iterdir()
            if p.suffix == FILE_EXT and p.name != ORDER_FILE and p.is_file()
        )

    def _read_order(self) -> list[str]:
        path = self.dir / ORDER_FILE
        if not path.exists():
            return []
        ids = []
        for line in path.read_text(encoding='utf-8').splitlines():
            line = line.strip()
            if line and line not in ids:
                ids.append(line)
        return ids

    def _write_order(self, ids: list[str]) -> None:
        self._ensure_dir()
        write_text_atomic(self.dir / ORDER_FILE, "".join(f"{i}\n" for i in ids))

    def _ordered_ids(self) -> list[str]:
        """Ids in application order, reconciled with the files on disk."""
        on_disk = [p.stem for p in self._rule_files()]
        present = set(on_disk)
        ordered = [i for i in self._read_order() if i in present]
        listed = set(ordered)
        ordered.extend(i for i in on_disk if i not in listed)
        return ordered

    def _write_rule(self, rule: RenameRule) -> None:
        self._ensure_dir()
        write_text_atomic(self._rule_path(rule.id), rule.to_file_text())

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def rules(self) -> list[RenameRule]:
        """Load all rules in application order. Unreadable files are skipped."""
        out = []
        for rule_id in self._ordered_ids():
            path = self._rule_path(rule_id)
            try:
                text = path.read_text(encoding='utf-8')
                out.append(RenameRule.from_file_text(text, rule_id=rule_id))
            except (OSError, UnicodeDecodeError, RuleFormatError) as e:
                print(f"[WARN] Skipping unreadable rule file {path}: {e}")
        return out

    def list_rules(self) -> list[tuple[int, RenameRule]]:
        """Return (1-based position, rule) pairs in application order."""
        return [(i + 1, r) for i, r in enumerate(self.rules())]

    def get(self, rule_id: str) -> RenameRule | None:
        for rule in self.rules():
            if rule.id == rule_id:
                return rule
        return None

    def id_at(self, position: int) -> str | None:
        """Return the id of the rule at a 1-based position."""
        ids = [r.id for r in self.rules()]
        if 1 <= position <= len(ids):
            return ids[position - 1]
        return None

    def add(self, rule: RenameRule) -> str:
        """Append a rule and return its id."""
        ids = self._ordered_ids()
        self._write_rule(rule)
        if rule.id not in ids:
            ids.append(rule.id)
        self._write_order(ids)
        return rule.id

    def update(self, rule: RenameRule) -> bool:
        """Overwrite an existing rule in place. Returns False if the id is unknown."""
        if not self._rule_path(rule.id).exists():
            return False
        self._write_rule(rule)
        return True

    def set_enabled(self, rule_id: str, enabled: bool) -> bool:
        rule = self.get(rule_id)
        if rule is None:
            return False
        return self.update(rule.with_changes(enabled=enabled))

    def remove(self, rule_id: str) -> bool:
        """Remove a rule by id. Returns False if it does not exist."""
        path = self._rule_path(rule_id)
        if not path.exists():
            return False
        ids = [i for i in self._ordered_ids() if i != rule_id]
        path.unlink()
        self._write_order(ids)
        return True

    def remove_at(self, position: int) -> bool:
        """Remove the rule at a 1-based position."""
        rule_id = self.id_at(position)
        if rule_id is None:
            return False
        return self.remove(rule_id)

    def move(self, rule_id: str, new_position: int) -> bool:
        """
        Move a rule to a new 1-based position.

        Positions past the end move the rule to the end.
        """
        ids = self._ordered_ids()
        if rule_id not in ids:
            return False
        ids.remove(rule_id)
        index = max(0, min(new_position - 1, len(ids)))
        ids.insert(index, rule_id)
        self._write_order(ids)
        return True
