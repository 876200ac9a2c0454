"""Workbook output with openpyxl."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path

from vsdx_parser import ShapeRecord

from .utils import SHEET_HEADER, ensure_parent_dir

log = logging.getLogger(__name__)

MAX_SHEET_TITLE = 31
FORBIDDEN_SHEET_CHARS = frozenset("[]:*?/\\")


class DuplicateSheetNameError(ValueError):
    """Two diagrams map to the same sheet name."""

    def __init__(self, sheet_name: str, source: str | Path | None = None) -> None:
        message = f"Duplicate sheet name {sheet_name!r}"
        if source is not None:
            message += f" (from {source})"
        super().__init__(message)
        self.sheet_name = sheet_name


class InvalidSheetNameError(ValueError):
    """A base name Excel refuses as a sheet title."""

    def __init__(self, sheet_name: str, reason: str) -> None:
        super().__init__(f"Invalid sheet name {sheet_name!r}: {reason}")
        self.sheet_name = sheet_name


def check_sheet_name(name: str) -> str:
    """Return *name* unchanged, or raise InvalidSheetNameError."""
    if not name:
        raise InvalidSheetNameError(name, "empty")
    if len(name) > MAX_SHEET_TITLE:
        raise InvalidSheetNameError(name, f"longer than {MAX_SHEET_TITLE} characters")
    bad = sorted({ch for ch in name if ch in FORBIDDEN_SHEET_CHARS})
    if bad:
        raise InvalidSheetNameError(name, f"contains {''.join(bad)!r}")
    if name.startswith("'") or name.endswith("'"):
        raise InvalidSheetNameError(name, "starts or ends with an apostrophe")
    return name


def _check_sheet_names(names: Sequence[str]) -> None:
    # Excel treats sheet names case-insensitively.
    seen: set[str] = set()
    for name in names:
        check_sheet_name(name)
        key = name.casefold()
        if key in seen:
            raise DuplicateSheetNameError(name)
        seen.add(key)


def _write_literal_row(ws, row: int, values: Sequence[str | None]) -> None:
    # Strings are stored as text so a leading "=" never becomes a formula.
    for col, value in enumerate(values, start=1):
        cell = ws.cell(row=row, column=col, value=value)
        if isinstance(value, str):
            cell.data_type = "s"


def write_workbook(
    tables: Mapping[str, Sequence[ShapeRecord]],
    output_path: Path,
) -> Path:
    """Write one sheet per table to *output_path* and return the path.

    Sheets appear in mapping order, each named exactly after its key, with
    the ``ID, Name, NameU, Text`` header in row 1. An existing file is
    overwritten.
    """
    from openpyxl import Workbook

    if not tables:
        raise ValueError("No tables to write; a workbook needs at least one sheet")
    _check_sheet_names(list(tables))

    wb = Workbook()
    wb.remove(wb.active)

    for sheet_name, shapes in tables.items():
        ws = wb.create_sheet(title=sheet_name)
        _write_literal_row(ws, 1, SHEET_HEADER)
        for row, shape in enumerate(shapes, start=2):
            _write_literal_row(ws, row, shape.as_row())
        log.debug("Sheet %s: %s row(s)", sheet_name, len(shapes))

    ensure_parent_dir(output_path)
    wb.save(str(output_path))
    log.info("Workbook saved: %s (%s sheet(s))", output_path, len(tables))
    return output_path
