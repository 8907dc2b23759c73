"""
Rename rules for the image rename tool.

A rule is a conditional regex find/replace over a file's base name. Rules are
persisted as small text files:

    <find pattern>
    <replacement>
    [disabled]
    [case-sensitive]
    [only-when-too-long]

Older rule files used `always`, `case-insensitive` and `when len > N` marker
lines instead; those are still read (see `RenameRule.from_file_text`).
"""

import re
import uuid
from dataclasses import dataclass, field, replace as dc_replace
from functools import lru_cache


class RuleFormatError(ValueError):
    """Raised when a rule file or one-line rule cannot be parsed."""


FLAG_DISABLED = "disabled"
FLAG_CASE_SENSITIVE = "case-sensitive"
FLAG_ONLY_WHEN_TOO_LONG = "only-when-too-long"

CURRENT_FLAGS = {FLAG_DISABLED, FLAG_CASE_SENSITIVE, FLAG_ONLY_WHEN_TOO_LONG}

_LEGACY_ALWAYS = {"always"}
_LEGACY_CASE_INSENSITIVE = {"case-insensitive", "case insensitive"}
_LEGACY_WHEN_LEN = re.compile(r"^(?:when\s+)?len\s*>\s*(\d+)$", re.IGNORECASE)

# $1, ${1}, $name, ${name}, $$
_TEMPLATE_REF = re.compile(r"\$(?:\$|\{([A-Za-z0-9_]+)\}|([A-Za-z0-9_]+))")


@lru_cache(maxsize=256)
def compile_pattern(find: str, case_sensitive: bool) -> re.Pattern:
    """
    Compile a rule pattern, caching by (pattern, case sensitivity).

    Raises:
        re.error: If the pattern is not a valid regular expression.
    """
    flags = 0 if case_sensitive else re.IGNORECASE
    return re.compile(find, flags)


def expand_template(match: re.Match, template: str) -> str:
    """
    Expand `$` capture-group references in a replacement template.

    Unknown groups and groups that did not participate expand to "".
    Backslashes are literal.
    """
    def _sub(ref: re.Match) -> str:
        if ref.group(0) == "$$":
            return "$"
        name = ref.group(1) or ref.group(2)
        try:
            key = int(name) if name.isdigit() else name
            value = match.group(key)
        except IndexError:
            # match.group() raises IndexError for unknown names and numbers
            return ""
        return value or ""

    return _TEMPLATE_REF.sub(_sub, template)


def replace_all(pattern: re.Pattern, text: str, template: str) -> str:
    """
    Replace every non-overlapping match of pattern in text.

    Unlike `re.sub`, an empty match that starts where the previous match
    ended is not replaced, so `x*` over "abxd" gives "-a-b-d-".
    """
    parts = []
    last = 0
    prev_end = None
    for match in pattern.finditer(text):
        start, end = match.span()
        if start == end and start == prev_end:
            continue
        parts.append(text[last:start])
        parts.append(expand_template(match, template))
        last = prev_end = end
    parts.append(text[last:])
    return "".join(parts)


@dataclass
class RenameRule:
    """
    A single conditional find/replace over a file's base name.

    Attributes:
        find: Regular expression to search for.
        replace: Replacement template (`$1`, `${name}`, `$$`).
        enabled: Disabled rules are skipped entirely.
        case_sensitive: Case-insensitive matching unless set.
        only_when_name_too_long: Only apply while the current name is longer
            than the max name length.
        id: Stable handle used for editing and removal.
    """
    find: str
    replace: str = ""
    enabled: bool = True
    case_sensitive: bool = False
    only_when_name_too_long: bool = False
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def compile(self) -> re.Pattern | None:
        """Return the compiled pattern, or None if it is empty or invalid."""
        if not self.find:
            return None
        try:
            return compile_pattern(self.find, self.case_sensitive)
        except re.error:
            return None

    def compile_error(self) -> str | None:
        """Return the regex error message for this rule, if any."""
        if not self.find:
            return None
        try:
            compile_pattern(self.find, self.case_sensitive)
        except re.error as e:
            return str(e)
        return None

    def apply(self, name: str, max_name_length: int) -> str | None:
        """
        Apply this rule to a file name.

        Args:
            name: The current (possibly already transformed) name.
            max_name_length: Length threshold for `only_when_name_too_long`.

        Returns:
            The new name if the rule applied and changed it, otherwise None.
        """
        if not self.enabled or not self.find:
            return None
        if self.only_when_name_too_long and len(name) <= max_name_length:
            return None

        pattern = self.compile()
        if pattern is None:
            return None

        replaced = replace_all(pattern, name, self.replace)
        if replaced == name:
            return None
        return replaced

    def with_changes(self, **changes) -> "RenameRule":
        """Return a copy with the given fields changed (id is kept)."""
        return dc_replace(self, **changes)

    # -------------------------------------------------------------------------
    # Text format
    # -------------------------------------------------------------------------

    def flags(self) -> list[str]:
        out = []
        if not self.enabled:
            out.append(FLAG_DISABLED)
        if self.case_sensitive:
            out.append(FLAG_CASE_SENSITIVE)
        if self.only_when_name_too_long:
            out.append(FLAG_ONLY_WHEN_TOO_LONG)
        return out

    def to_file_text(self) -> str:
        """Serialize the rule to its file text (current format)."""
        lines = [self.find, self.replace] + self.flags()
        return "\n".join(lines) + "\n"

    @classmethod
    def from_file_text(cls, text: str, rule_id: str | None = None) -> "RenameRule":
        """
        Parse a rule from file text.

        Files carrying any legacy marker (`always`, `case-insensitive`,
        `when len > N`) are decoded with the legacy semantics: case-sensitive
        unless `case-insensitive` is present, and any length marker means
        "only when too long" (N itself is ignored).

        Raises:
            RuleFormatError: On unknown flag lines or mixed formats.
        """
        lines = text.splitlines()
        find = lines[0] if lines else ""
        replace = lines[1] if len(lines) > 1 else ""
        markers = [l.strip() for l in lines[2:] if l.strip()]

        current = []
        legacy = []
        for marker in markers:
            low = marker.lower()
            if low in CURRENT_FLAGS:
                current.append(low)
            elif low in _LEGACY_ALWAYS or low in _LEGACY_CASE_INSENSITIVE or _LEGACY_WHEN_LEN.match(low):
                legacy.append(low)
            else:
                raise RuleFormatError(f"Unknown rule flag: {marker!r}")

        if current and legacy:
            raise RuleFormatError(
                f"Rule mixes current flags {current} with legacy markers {legacy}"
            )

        kwargs = {}
        if rule_id:
            kwargs["id"] = rule_id

        if legacy:
            return cls._from_legacy_markers(find, replace, legacy, **kwargs)

        return cls(
            find=find,
            replace=replace,
            enabled=FLAG_DISABLED not in current,
            case_sensitive=FLAG_CASE_SENSITIVE in current,
            only_when_name_too_long=FLAG_ONLY_WHEN_TOO_LONG in current,
            **kwargs,
        )

    @classmethod
    def _from_legacy_markers(cls, find: str, replace: str, markers: list[str], **kwargs) -> "RenameRule":
        case_insensitive = any(m in _LEGACY_CASE_INSENSITIVE for m in markers)
        too_long = any(_LEGACY_WHEN_LEN.match(m) for m in markers)
        return cls(
            find=find,
            replace=replace,
            enabled=True,
            case_sensitive=not case_insensitive,
            only_when_name_too_long=too_long,
            **kwargs,
        )

    @classmethod
    def from_cli(cls, text: str) -> "RenameRule":
        """
        Parse the one-line form `"find" "replace"` (replace optional).

        Raises:
            RuleFormatError: If no quoted find pattern is present.
        """
        parts = text.split('"')
        if len(parts) < 3:
            raise RuleFormatError(f"Failed to parse rule: {text!r}")
        find = parts[1]
        replace = parts[3] if len(parts) >= 5 else ""
        return cls(find=find, replace=replace)

    def __str__(self) -> str:
        flags = self.flags()
        suffix = f" [{', '.join(flags)}]" if flags else ""
        return f'"{self.find}" "{self.replace}"{suffix}'
