"""CLI entrypoint for the Visio -> shape table -> workbook pipeline.

Usage:
    python -m visio_pipeline
    python -m visio_pipeline --input-dir ./visio_files --output ./output/visio_data.xlsx
    python -m visio_pipeline --page-order index
    python -m visio_pipeline --fail-fast
    python -m visio_pipeline --manifest ./output/visio_manifest.json
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Optional

from .models import DiagramRecord

log = logging.getLogger(__name__)


_LOG_FMT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def _setup_logging(*, verbose: bool, log_file: Path | None) -> None:
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    formatter = logging.Formatter(_LOG_FMT, "%Y-%m-%d %H:%M:%S")
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    from .utils import DEFAULT_INPUT_DIR, DEFAULT_OUTPUT_PATH

    parser = argparse.ArgumentParser(
        description="Visio (.vsdx) shapes -> Excel workbook, one sheet per diagram"
    )
    parser.add_argument(
        "--input-dir",
        type=Path,
        default=Path(DEFAULT_INPUT_DIR),
        help=f"Folder holding .vsdx files (default: {DEFAULT_INPUT_DIR}/)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=Path(DEFAULT_OUTPUT_PATH),
        help=f"Workbook to write (default: {DEFAULT_OUTPUT_PATH})",
    )
    parser.add_argument(
        "--page-order",
        choices=["listing", "index"],
        default="listing",
        help=(
            "How to pick the page to read: first page file by name (listing) "
            "or first foreground page in pages.xml (index). Default: listing"
        ),
    )
    parser.add_argument(
        "--fail-fast",
        action="store_true",
        help="Abort the whole run on the first diagram that fails",
    )
    parser.add_argument(
        "--manifest",
        type=Path,
        default=None,
        help="Optional JSON summary of every diagram processed",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write the log to this file",
    )
    return parser.parse_args(argv)


def run_pipeline(
    input_dir: Path,
    output_path: Path,
    *,
    page_order: str = "listing",
    fail_fast: bool = False,
    manifest_path: Optional[Path] = None,
) -> tuple[list[DiagramRecord], Optional[Path]]:
    """Discover, extract and write. Returns (records, workbook path or None).

    No workbook is written when nothing was discovered or nothing succeeded.
    """
    from tqdm import tqdm

    from .extraction import collect_tables, extract_diagrams
    from .sources import discover_diagrams
    from .utils import save_manifest
    from .workbook import write_workbook

    overall_t0 = time.perf_counter()

    log.info("Using local diagrams from: %s", input_dir)
    diagram_files = discover_diagrams(input_dir)
    log.info("Total diagrams discovered: %s", len(diagram_files))
    if not diagram_files:
        log.warning("No diagrams found. Nothing written.")
        return [], None

    records = extract_diagrams(
        tqdm(diagram_files, desc="Extracting diagrams"),
        page_order,
        fail_fast=fail_fast,
    )
    tables = collect_tables(records)
    log.info("Tables built for the following files: %s", ", ".join(tables) or "-")

    workbook_path: Optional[Path] = None
    if tables:
        workbook_path = write_workbook(tables, output_path)
    else:
        log.warning("No diagram was extracted successfully. Nothing written.")
        if output_path.exists():
            output_path.unlink()
            log.warning("Removed stale workbook from a previous run: %s", output_path)

    if manifest_path is not None:
        save_manifest(manifest_path, records)
        log.info("Manifest: %s", manifest_path)

    success = [r for r in records if r.status == "success"]
    failed = [r for r in records if r.status == "error"]
    log.info("=" * 60)
    log.info("PIPELINE COMPLETE")
    log.info("  Diagrams discovered: %s", len(diagram_files))
    log.info("  Succeeded:           %s", len(success))
    log.info("  Failed:              %s", len(failed))
    log.info("  Shapes extracted:    %s", sum(r.shape_count for r in success))
    log.info("  Workbook:            %s", workbook_path or "-")
    log.info("  Total runtime:       %.1fs", time.perf_counter() - overall_t0)
    if failed:
        log.warning("Failed files:")
        for r in failed:
            last_line = (r.error or "unknown").strip().splitlines()[-1]
            log.warning("  - %s: %s", r.filename, last_line[:200])

    return records, workbook_path


def main(argv: list[str] | None = None) -> None:
    """Run the full pipeline."""
    args = parse_args(argv)
    _setup_logging(
        verbose=args.verbose,
        log_file=args.log_file,
    )
    log.debug("Logging setup: verbose=%s log_file=%s", args.verbose, args.log_file)

    records, _ = run_pipeline(
        args.input_dir,
        args.output,
        page_order=args.page_order,
        fail_fast=args.fail_fast,
        manifest_path=args.manifest,
    )
    if any(r.status == "error" for r in records):
        sys.exit(1)
