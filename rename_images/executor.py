"""
Batch execution for the image rename tool.

Processes every planned file into its output tree: resolve the owning input
root, derive the destination, optionally crop, re-encode and write. Each
file succeeds or fails on its own; the batch always completes with a report.
"""

import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable
from tqdm import tqdm

from .image_processing import ProcessingSettings, process_image
from .output_paths import find_owning_root, get_output_path
from .planning.validator import colliding_sources, find_collisions
from .utils import write_bytes_atomic

STATUS_PROCESSED = "processed"
STATUS_SKIPPED = "skipped"
STATUS_FAILED = "failed"

ProgressCallback = Callable[[int, int, Path], None]


@dataclass
class ProcessAllResult:
    """Aggregate outcome of a batch run."""
    processed_count: int = 0
    skipped_count: int = 0
    error_count: int = 0
    errors: list[str] = field(default_factory=list)
    results: list[dict] = field(default_factory=list)

    @property
    def failed_sources(self) -> list[Path]:
        """Sources that failed, for a selective re-run."""
        return [Path(r["source"]) for r in self.results if r["status"] == STATUS_FAILED]

    def to_dict(self) -> dict:
        return {
            "executed_at": datetime.now().isoformat(timespec='seconds'),
            "processed_count": self.processed_count,
            "skipped_count": self.skipped_count,
            "error_count": self.error_count,
            "errors": list(self.errors),
            "results": list(self.results),
        }


def process_file(entry, input_roots: list[Path], settings: ProcessingSettings) -> dict:
    """
    Process a single plan entry, safe for threads.

    Args:
        entry: A plan entry (`source`, `new_name`, optional `root`).
        input_roots: All input roots, used when the entry has no root.
        settings: Processing settings.

    Returns:
        Result dict with source, destination, status and error.
    """
    source = Path(entry.source)
    res = {"source": str(source), "destination": None, "status": STATUS_FAILED, "error": None}

    # Find which input root this file belongs to
    input_root = getattr(entry, "root", None) or find_owning_root(source, input_roots)
    if input_root is None:
        res["error"] = f"Could not find root for: {source}"
        return res

    output_path = get_output_path(source, input_root, entry.new_name)
    if output_path is None:
        res["error"] = f"Could not calculate output path for: {source}"
        return res
    res["destination"] = str(output_path)

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        res["error"] = f"Failed to create directory {output_path.parent}: {e}"
        return res

    try:
        processed = process_image(source, settings, output_path.name)
    except Exception as e:
        res["error"] = f"Failed to process {source}: {e}"
        return res

    try:
        write_bytes_atomic(output_path, processed.data)
    except OSError as e:
        res["error"] = f"Failed to write {output_path}: {e}"
        return res

    res["status"] = STATUS_PROCESSED
    res["was_cropped"] = processed.was_cropped
    res["size_bytes"] = processed.estimated_size
    return res


def process_all(
    entries: Iterable,
    input_roots: list[Path],
    settings: ProcessingSettings,
    progress_callback: ProgressCallback | None = None,
    cancel_event: threading.Event | None = None,
    max_workers: int = 8,
    show_progress: bool = False,
) -> ProcessAllResult:
    """
    Process and write all planned images.

    Files are processed in parallel. Progress callbacks are invoked from the
    calling thread as files finish, so their order need not match the input
    order. Entries that collide on a destination are refused up front and
    none of them is written.

    Args:
        entries: Plan entries in order (one per source file).
        input_roots: All input roots.
        settings: Processing settings for this run.
        progress_callback: Optional `(done, total, source)` callback.
        cancel_event: When set, files not yet started are skipped; files
            already in flight run to completion.
        max_workers: Thread pool size.
        show_progress: Show a tqdm progress bar.

    Returns:
        Aggregate counts, error strings and per-file results.
    """
    entries = list(entries)
    input_roots = [Path(r) for r in input_roots]
    total = len(entries)
    result = ProcessAllResult()

    def record(res: dict) -> None:
        result.results.append(res)
        if res["status"] == STATUS_PROCESSED:
            result.processed_count += 1
        elif res["status"] == STATUS_SKIPPED:
            result.skipped_count += 1
        else:
            result.error_count += 1
            result.errors.append(res["error"])

    # Refuse collisions before anything is written
    collided = colliding_sources(find_collisions(entries, input_roots))
    runnable = []
    done = 0
    for entry in entries:
        collision = collided.get(Path(entry.source))
        if collision is not None:
            record({
                "source": str(entry.source),
                "destination": str(collision.destination),
                "status": STATUS_FAILED,
                "error": f"Destination collision for {entry.source}: {collision.describe()}",
            })
            done += 1
            if progress_callback:
                progress_callback(done, total, Path(entry.source))
        else:
            runnable.append(entry)

    stop = cancel_event if cancel_event is not None else threading.Event()

    def run_one(entry) -> dict:
        if stop.is_set():
            return {"source": str(entry.source), "destination": None,
                    "status": STATUS_SKIPPED, "error": None}
        return process_file(entry, input_roots, settings)

    with tqdm(total=total, unit="file", disable=not show_progress) as pbar:
        pbar.update(done)
        with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
            futures = {executor.submit(run_one, entry): entry for entry in runnable}

            try:
                for future in as_completed(futures):
                    entry = futures[future]
                    res = future.result()
                    record(res)
                    if res["status"] == STATUS_FAILED and show_progress:
                        tqdm.write(f"[ERROR] {res['error']}")
                    done += 1
                    if progress_callback:
                        progress_callback(done, total, Path(entry.source))
                    pbar.update(1)
            except KeyboardInterrupt:
                # In-flight files finish, queued ones are skipped
                stop.set()
                raise

    # Report results in input order regardless of completion order
    order = {str(e.source): i for i, e in enumerate(entries)}
    result.results.sort(key=lambda r: order.get(r["source"], total))
    result.errors = [r["error"] for r in result.results if r["status"] == STATUS_FAILED]

    return result
