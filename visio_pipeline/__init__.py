"""Visio diagram -> shape table -> Excel workbook pipeline.

Public API -- all symbols that tests and external code import live here.
Internally the code is split across focused submodules; this file
re-exports the stable public surface so ``from visio_pipeline import X`` works.
"""

from vsdx_parser import (
    MissingPagesFolderError,
    NoPageFilesError,
    ShapeRecord,
    VisioDiagram,
    VisioFormatError,
    parse_vsdx,
)

from .extraction import collect_tables, extract_diagrams, extract_single_diagram
from .models import DiagramRecord
from .sources import discover_diagrams
from .utils import (
    DEFAULT_INPUT_DIR,
    DEFAULT_OUTPUT_PATH,
    DIAGRAM_EXTENSIONS,
    SHEET_HEADER,
    ensure_parent_dir,
    save_manifest,
)
from .workbook import (
    DuplicateSheetNameError,
    InvalidSheetNameError,
    check_sheet_name,
    write_workbook,
)

__all__ = [
    # Models
    "DiagramRecord",
    "ShapeRecord",
    "VisioDiagram",
    # Errors
    "VisioFormatError",
    "MissingPagesFolderError",
    "NoPageFilesError",
    "DuplicateSheetNameError",
    "InvalidSheetNameError",
    # Constants
    "DEFAULT_INPUT_DIR",
    "DEFAULT_OUTPUT_PATH",
    "DIAGRAM_EXTENSIONS",
    "SHEET_HEADER",
    # Utils
    "ensure_parent_dir",
    "save_manifest",
    # Sources
    "discover_diagrams",
    # Extraction
    "parse_vsdx",
    "extract_single_diagram",
    "extract_diagrams",
    "collect_tables",
    # Workbook
    "check_sheet_name",
    "write_workbook",
]
