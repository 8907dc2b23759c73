"""
Image Rename Tool
=================

Applies an ordered list of find/replace rules to image file names and writes
the renamed (and optionally content-cropped) images into a sibling
`-output` tree for every input root.
"""

__version__ = "1.0.0"

from .config import AppHome, load_max_name_length, set_max_name_length, reset_max_name_length
from .executor import ProcessAllResult, process_all, process_file
from .image_processing import (
    ProcessedImage,
    ProcessingSettings,
    crop_to_content,
    find_content_bounds,
    process_image,
)
from .inputs import add_from_glob, load_inputs, remove_from_glob
from .output_paths import find_owning_root, get_output_dir, get_output_path
from .planning import PlanEntry, RenamePlan, RenameRule, RuleFormatError, RuleStore, plan_renames
from .scanner import discover_files

__all__ = [
    "AppHome",
    "load_max_name_length",
    "set_max_name_length",
    "reset_max_name_length",
    "ProcessAllResult",
    "process_all",
    "process_file",
    "ProcessedImage",
    "ProcessingSettings",
    "crop_to_content",
    "find_content_bounds",
    "process_image",
    "add_from_glob",
    "load_inputs",
    "remove_from_glob",
    "find_owning_root",
    "get_output_dir",
    "get_output_path",
    "PlanEntry",
    "RenamePlan",
    "RenameRule",
    "RuleFormatError",
    "RuleStore",
    "plan_renames",
    "discover_files",
]
