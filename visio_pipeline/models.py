"""Shared data models for the pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from vsdx_parser import ShapeRecord


@dataclass
class DiagramRecord:
    """Tracks extraction results for a single Visio diagram."""

    filename: str
    filepath: str
    sheet_name: str = ""
    page_file: str = ""
    shapes: list[ShapeRecord] = field(default_factory=list)
    shape_count: int = 0
    extraction_time_s: float = 0.0
    status: str = "pending"
    error: Optional[str] = None
