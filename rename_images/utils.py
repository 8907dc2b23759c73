"""
Utility functions for the image rename tool.

Includes:
- Console/UI helpers
- JSON report helper
- Image extension detection
- Atomic file writes
"""

import json
import os
import uuid
from pathlib import Path
from typing import Any
from rich.console import Console
from rich.table import Table
from rich.tree import Tree
from rich.panel import Panel
from rich.markup import escape

# Global console instance
console = Console()

def print_header(title: str, subtitle: str = ""):
    """Print a styled header."""
    console.print(Panel(f"[bold blue]{title}[/bold blue]\n[italic]{subtitle}[/italic]", expand=False))

def print_plan_table(plan, limit: int = 10):
    """Print a summary table of a rename plan."""
    entries = plan.entries

    table = Table(title="Plan Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Count", style="magenta")

    table.add_row("Files", str(len(entries)))
    table.add_row("Renamed", str(plan.renamed_count))
    table.add_row("Still too long", str(plan.too_long_count))
    table.add_row("Collisions", str(len(plan.collisions)))
    table.add_row("Rule warnings", str(len(plan.warnings)))

    console.print(table)

    renamed = [e for e in entries if e.was_renamed]
    if renamed:
        tree = Tree("[bold green]Sample Renames[/bold green]")
        for entry in renamed[:limit]:
            style = "red" if entry.is_too_long else "blue"
            tree.add(f"[yellow]{escape(entry.original_relative_path)}[/yellow] -> [{style}]{escape(entry.new_relative_path)}[/{style}]")
        if len(renamed) > limit:
            tree.add(f"[italic]... and {len(renamed)-limit} more[/italic]")
        console.print(tree)

def print_error(msg: str):
    console.print(f"[bold red]ERROR:[/bold red] {escape(msg)}")

def print_warning(msg: str):
    console.print(f"[bold yellow]WARNING:[/bold yellow] {escape(msg)}")

def print_success(msg: str):
    console.print(f"[bold green]SUCCESS:[/bold green] {escape(msg)}")


# -----------------------------------------------------------------------------
# Image extensions
# -----------------------------------------------------------------------------

IMAGE_EXTENSIONS = {
    ".png", ".jpg", ".jpeg", ".gif", ".bmp", ".webp", ".tiff", ".tif",
}


def is_image_file(path: Path) -> bool:
    """Check if a path has a known image extension (case-insensitive)."""
    return path.suffix.lower() in IMAGE_EXTENSIONS


def save_json(data: Any, path: Path) -> None:
    """
    Save data to a JSON file with pretty formatting.

    Args:
        data: The data to serialize.
        path: The output file path.
    """
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
    print(f"[INFO] Saved: {path}")


def write_bytes_atomic(path: Path, data: bytes) -> None:
    """
    Write bytes to a temp file next to the target, then rename over it.

    Either the complete file is at `path` afterwards or nothing new is.
    """
    # Temp name length does not depend on the destination name
    tmp = path.with_name(f".{uuid.uuid4().hex[:8]}.tmp")
    f = open(tmp, 'xb')
    try:
        with f:
            f.write(data)
        tmp.replace(path)
    except OSError:
        try:
            os.remove(tmp)
        except OSError:
            pass
        raise


def write_text_atomic(path: Path, text: str) -> None:
    """Text variant of write_bytes_atomic (UTF-8)."""
    write_bytes_atomic(path, text.encode('utf-8'))
