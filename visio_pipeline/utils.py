"""Cross-cutting helpers: constants, path utilities, manifest I/O."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from .models import DiagramRecord

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_INPUT_DIR = "visio_files"
DEFAULT_OUTPUT_PATH = "output/visio_data.xlsx"
DIAGRAM_EXTENSIONS = (".vsdx",)
SHEET_HEADER = ("ID", "Name", "NameU", "Text")


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------


def ensure_parent_dir(path: Path) -> Path:
    """Create the parent directory of *path* and return *path*."""
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


# ---------------------------------------------------------------------------
# Manifest I/O
# ---------------------------------------------------------------------------


def save_manifest(manifest_path: Path, records: list[DiagramRecord]) -> Path:
    """Write a JSON summary of every diagram processed and return its path."""
    manifest: list[dict[str, Any]] = []
    for record in records:
        manifest.append(
            {
                "filename": record.filename,
                "filepath": record.filepath,
                "sheet_name": record.sheet_name,
                "page_file": record.page_file,
                "shape_count": record.shape_count,
                "status": record.status,
                "extraction_time_s": record.extraction_time_s,
                "error": record.error,
            }
        )

    ensure_parent_dir(manifest_path)
    with open(manifest_path, "w", encoding="utf-8") as fh:
        json.dump(manifest, fh, indent=2, ensure_ascii=False, default=str)
    return manifest_path
