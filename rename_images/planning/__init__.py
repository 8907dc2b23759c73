"""
Planning module for the image rename tool.

Provides:
- Rename rules and their text format
- Persistent, ordered rule storage
- Rename planning over a batch of files
- Destination collision detection
"""

from .rules import RenameRule, RuleFormatError
from .store import RuleStore
from .planner import PlanEntry, RenamePlan, plan_renames, rename_name, check_rules
from .validator import Collision, find_collisions

__all__ = [
    "RenameRule",
    "RuleFormatError",
    "RuleStore",
    "PlanEntry",
    "RenamePlan",
    "plan_renames",
    "rename_name",
    "check_rules",
    "Collision",
    "find_collisions",
]
