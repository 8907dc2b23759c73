#!/usr/bin/env python3
"""
Image Rename Tool - CLI Entry Point
===================================

Usage:
    python -m rename_images input add "/photos/*"
    python -m rename_images rule add "IMG_" "Photo_"
    python -m rename_images rule add "\\s+" "_" --only-when-too-long
    python -m rename_images max-name-length set 60
    python -m rename_images plan
    python -m rename_images process --crop --report-out report.json
    python -m rename_images preview /photos/a.png --crop
"""

import argparse
import sys
from pathlib import Path

from .config import AppHome, load_max_name_length, reset_max_name_length, set_max_name_length
from .executor import process_all
from .image_processing import DEFAULT_JPEG_QUALITY, ProcessingSettings, process_image
from .inputs import add_from_glob, load_inputs, remove_from_glob
from .planning import RenameRule, RuleFormatError, RuleStore, plan_renames
from .scanner import discover_files
from .utils import (
    console,
    print_error,
    print_header,
    print_plan_table,
    print_success,
    print_warning,
    save_json,
)


def _home(args) -> AppHome:
    if args.config_dir:
        return AppHome(args.config_dir)
    return AppHome.resolve()


# =============================================================================
# input
# =============================================================================

def cmd_input_add(args) -> int:
    """Add input paths matched by a glob."""
    try:
        added = add_from_glob(_home(args), args.pattern)
    except OSError as e:
        print_error(f"Failed to add '{args.pattern}': {e}")
        return 1
    for p in added:
        console.print(f"Added: {p}")
    if not added:
        console.print(f"No matching paths were found for '{args.pattern}'.")
    return 0


def cmd_input_list(args) -> int:
    for p in load_inputs(_home(args)):
        console.print(str(p))
    return 0


def cmd_input_remove(args) -> int:
    removed = remove_from_glob(_home(args), args.pattern)
    for p in removed:
        console.print(f"Removed: {p}")
    if not removed:
        console.print(f"No stored inputs matched '{args.pattern}'.")
    return 0


# =============================================================================
# rule
# =============================================================================

def cmd_rule_add(args) -> int:
    """Append a rule, given as FIND [REPLACE] or as one quoted line."""
    find, replace = args.find, args.replace
    if args.replace == "" and args.find.startswith('"'):
        # One-line form: '"find" "replace"'
        try:
            parsed = RenameRule.from_cli(args.find)
        except RuleFormatError as e:
            print_error(str(e))
            return 1
        find, replace = parsed.find, parsed.replace

    rule = RenameRule(
        find=find,
        replace=replace,
        enabled=not args.disabled,
        case_sensitive=args.case_sensitive,
        only_when_name_too_long=args.only_when_too_long,
    )
    if not rule.find:
        print_error("Find pattern must not be empty")
        return 1
    err = rule.compile_error()
    if err:
        print_warning(f"'{rule.find}' is not a valid pattern ({err}); the rule will be skipped until fixed")
    store = RuleStore(_home(args))
    rule_id = store.add(rule)
    console.print(f"Added rule {rule_id}: {rule}", markup=False)
    return 0


def cmd_rule_list(args) -> int:
    listed = RuleStore(_home(args)).list_rules()
    print(f"[INFO] Found {len(listed)} rename rules")
    for i, rule in listed:
        console.print(f"{i}. {rule}", markup=False)
    return 0


def _rule_id_or_error(store: RuleStore, index: int) -> str | None:
    rule_id = store.id_at(index)
    if rule_id is None:
        print_error(f"No rule {index}")
    return rule_id


def cmd_rule_remove(args) -> int:
    store = RuleStore(_home(args))
    if store.remove_at(args.index):
        console.print(f"Removed rule {args.index}")
        return 0
    print_error(f"No rule {args.index}")
    return 1


def cmd_rule_enable(args) -> int:
    store = RuleStore(_home(args))
    rule_id = _rule_id_or_error(store, args.index)
    if rule_id is None:
        return 1
    enabled = args.rule_command == "enable"
    store.set_enabled(rule_id, enabled)
    console.print(f"{'Enabled' if enabled else 'Disabled'} rule {args.index}")
    return 0


def cmd_rule_move(args) -> int:
    store = RuleStore(_home(args))
    rule_id = _rule_id_or_error(store, args.index)
    if rule_id is None:
        return 1
    store.move(rule_id, args.new_index)
    console.print(f"Moved rule {args.index} to position {args.new_index}")
    return 0


# =============================================================================
# max-name-length
# =============================================================================

def cmd_max_show(args) -> int:
    console.print(str(load_max_name_length(_home(args))))
    return 0


def cmd_max_set(args) -> int:
    try:
        path = set_max_name_length(_home(args), args.value)
    except ValueError as e:
        print_error(str(e))
        return 1
    console.print(f"Set max name length to {args.value} ({path})")
    return 0


def cmd_max_reset(args) -> int:
    value = reset_max_name_length(_home(args))
    console.print(f"Reset max name length to {value}")
    return 0


# =============================================================================
# plan / process / preview
# =============================================================================

def _build_plan(args):
    """Load inputs, rules and settings, discover files and plan renames."""
    home = _home(args)
    roots = load_inputs(home)
    if not roots:
        print_error("No input paths configured (use: input add PATTERN)")
        return None, None

    max_name_length = load_max_name_length(home)
    rules = RuleStore(home).rules()

    with console.status("[bold green]Discovering files...[/bold green]"):
        files = discover_files(roots)
    print(f"[INFO] Found {len(files)} images under {len(roots)} inputs")

    plan = plan_renames(
        files,
        rules,
        max_name_length,
        rules_enabled=not args.no_rules,
        roots=roots,
    )
    return plan, roots


def cmd_plan(args) -> int:
    """Plan command - show what would be renamed."""
    plan, _ = _build_plan(args)
    if plan is None:
        return 1

    print_plan_table(plan, limit=args.limit)
    for w in plan.warnings:
        print_warning(w)
    for c in plan.collisions:
        print_warning(f"Collision: {c.describe()}")

    if args.output:
        save_json(plan.to_dict(), args.output)
    return 0


def cmd_process(args) -> int:
    """Process command - plan, then write renamed/cropped images."""
    if not 1 <= args.jpeg_quality <= 100:
        print_error(f"--jpeg-quality must be between 1 and 100, got {args.jpeg_quality}")
        return 1

    plan, roots = _build_plan(args)
    if plan is None:
        return 1

    settings = ProcessingSettings(
        crop_to_content=args.crop,
        jpeg_quality=args.jpeg_quality,
        description=args.description,
    )

    print_header(
        "Image Rename Tool",
        f"Inputs: {len(roots)}\nFiles: {len(plan)}\nCrop: {'on' if settings.crop_to_content else 'off'}",
    )
    for w in plan.warnings:
        print_warning(w)

    try:
        result = process_all(
            plan.entries,
            roots,
            settings,
            max_workers=args.workers,
            show_progress=True,
        )
    except KeyboardInterrupt:
        print("\n[ABORT] Operation cancelled by user")
        return 130

    print(
        f"\n[PROCESS] Complete: {result.processed_count} processed, "
        f"{result.skipped_count} skipped, {result.error_count} failed"
    )
    for err in result.errors[:10]:
        print_error(err)
    if len(result.errors) > 10:
        console.print(f"  ... and {len(result.errors) - 10} more")

    if args.report_out:
        save_json(result.to_dict(), args.report_out)

    if result.error_count:
        return 1
    print_success("All files processed")
    return 0


def cmd_preview(args) -> int:
    """Preview command - process one file in memory without writing."""
    path = args.file.resolve()
    settings = ProcessingSettings(crop_to_content=args.crop, jpeg_quality=args.jpeg_quality)
    try:
        processed = process_image(path, settings)
    except Exception as e:
        print_error(f"Failed to process {path}: {e}")
        return 1

    console.print(f"File:      {path}")
    console.print(f"Format:    {processed.format}")
    console.print(f"Original:  {processed.original_width}x{processed.original_height}")
    console.print(f"Output:    {processed.output_width}x{processed.output_height}")
    if processed.crop_bounds:
        x, y, w, h = processed.crop_bounds
        console.print(f"Crop:      x={x} y={y} w={w} h={h}")
    else:
        console.print("Crop:      none")
    console.print(f"Size:      {processed.estimated_size} bytes")
    return 0


# =============================================================================
# Main
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rename-images",
        description="Image Rename Tool - rename and crop images into a mirrored output tree",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config-dir", type=Path, default=None,
                        help="Config directory (default: $RENAME_IMAGES_CONFIG_DIR or the user config dir)")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- INPUT command ---
    input_parser = subparsers.add_parser("input", help="Manage input paths")
    input_sub = input_parser.add_subparsers(dest="input_command", required=True)
    p = input_sub.add_parser("add", help="Add paths matching a glob")
    p.add_argument("pattern", type=str)
    p.set_defaults(func=cmd_input_add)
    p = input_sub.add_parser("list", help="List input paths")
    p.set_defaults(func=cmd_input_list)
    p = input_sub.add_parser("remove", help="Remove paths matching a glob")
    p.add_argument("pattern", type=str)
    p.set_defaults(func=cmd_input_remove)

    # --- RULE command ---
    rule_parser = subparsers.add_parser("rule", help="Manage rename rules")
    rule_sub = rule_parser.add_subparsers(dest="rule_command", required=True)
    p = rule_sub.add_parser("add", help="Append a rename rule")
    p.add_argument("find", type=str, help="Find pattern (regex)")
    p.add_argument("replace", type=str, nargs="?", default="",
                   help="Replacement ($1 / ${name} for groups)")
    p.add_argument("--case-sensitive", action="store_true", help="Match case-sensitively")
    p.add_argument("--only-when-too-long", action="store_true",
                   help="Only apply while the name is longer than the max name length")
    p.add_argument("--disabled", action="store_true", help="Add the rule disabled")
    p.set_defaults(func=cmd_rule_add)
    p = rule_sub.add_parser("list", help="List rules in application order")
    p.set_defaults(func=cmd_rule_list)
    p = rule_sub.add_parser("remove", help="Remove a rule by 1-based index")
    p.add_argument("index", type=int)
    p.set_defaults(func=cmd_rule_remove)
    for name in ("enable", "disable"):
        p = rule_sub.add_parser(name, help=f"{name.capitalize()} a rule by 1-based index")
        p.add_argument("index", type=int)
        p.set_defaults(func=cmd_rule_enable)
    p = rule_sub.add_parser("move", help="Move a rule to a new 1-based position")
    p.add_argument("index", type=int)
    p.add_argument("new_index", type=int)
    p.set_defaults(func=cmd_rule_move)

    # --- MAX-NAME-LENGTH command ---
    max_parser = subparsers.add_parser("max-name-length", help="Show or change the max name length")
    max_sub = max_parser.add_subparsers(dest="max_command", required=True)
    p = max_sub.add_parser("show", help="Show the effective value")
    p.set_defaults(func=cmd_max_show)
    p = max_sub.add_parser("set", help="Persist a new value")
    p.add_argument("value", type=int)
    p.set_defaults(func=cmd_max_set)
    p = max_sub.add_parser("reset", help="Reset to the default")
    p.set_defaults(func=cmd_max_reset)

    # --- PLAN command ---
    plan_parser = subparsers.add_parser("plan", help="Show the rename plan")
    plan_parser.add_argument("--no-rules", action="store_true", help="Disable all rename rules")
    plan_parser.add_argument("--limit", type=int, default=10, help="Sample renames to show")
    plan_parser.add_argument("-o", "--output", type=Path, default=None, help="Save the plan as JSON")
    plan_parser.set_defaults(func=cmd_plan)

    # --- PROCESS command ---
    process_parser = subparsers.add_parser("process", help="Write renamed images to the output trees")
    process_parser.add_argument("--no-rules", action="store_true", help="Disable all rename rules")
    process_parser.add_argument("--crop", action="store_true", help="Crop images to their content")
    process_parser.add_argument("--jpeg-quality", type=int, default=DEFAULT_JPEG_QUALITY,
                                help=f"JPEG quality 1-100 (default: {DEFAULT_JPEG_QUALITY})")
    process_parser.add_argument("--description", type=str, default=None,
                                help="Write this text as the EXIF image description")
    process_parser.add_argument("--workers", type=int, default=8, help="Worker threads")
    process_parser.add_argument("--report-out", type=Path, default=None, help="Save a JSON report")
    process_parser.set_defaults(func=cmd_process)

    # --- PREVIEW command ---
    preview_parser = subparsers.add_parser("preview", help="Process one image in memory and show the result")
    preview_parser.add_argument("file", type=Path)
    preview_parser.add_argument("--crop", action="store_true", help="Crop to content")
    preview_parser.add_argument("--jpeg-quality", type=int, default=DEFAULT_JPEG_QUALITY)
    preview_parser.set_defaults(func=cmd_preview)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
