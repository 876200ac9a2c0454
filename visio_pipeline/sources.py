"""Visio diagram discovery on the local filesystem."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from .utils import DIAGRAM_EXTENSIONS

log = logging.getLogger(__name__)


def discover_diagrams(
    folder: Path,
    extensions: Iterable[str] = DIAGRAM_EXTENSIONS,
) -> list[Path]:
    """Find diagram files directly inside *folder*, sorted by name.

    Extensions match case-insensitively. Subfolders are not searched.
    """
    if not folder.exists():
        log.warning("Input folder does not exist: %s", folder)
        return []
    wanted = {ext.lower() for ext in extensions}
    return sorted(
        path
        for path in folder.iterdir()
        if path.is_file() and path.suffix.lower() in wanted
    )
