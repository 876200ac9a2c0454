"""Per-diagram shape extraction and batch aggregation."""

from __future__ import annotations

import logging
import time
import traceback
from collections.abc import Iterable
from pathlib import Path

from vsdx_parser import ShapeRecord, parse_vsdx

from .models import DiagramRecord
from .workbook import DuplicateSheetNameError, check_sheet_name

log = logging.getLogger(__name__)


def extract_single_diagram(
    diagram_path: Path,
    page_order: str = "listing",
    *,
    reraise: bool = False,
) -> DiagramRecord:
    """Extract one diagram and return its DiagramRecord.

    Errors are captured inside the returned record unless *reraise* is set,
    in which case the record is still filled in before the error propagates.
    """
    log.info("Extracting data for: %s", diagram_path.stem)

    record = DiagramRecord(
        filename=diagram_path.name,
        filepath=str(diagram_path),
        sheet_name=diagram_path.stem,
    )
    t0 = time.time()

    try:
        check_sheet_name(record.sheet_name)
        diagram = parse_vsdx(diagram_path, page_order=page_order)
        record.page_file = diagram.page_file or ""
        record.shapes = diagram.shapes
        record.shape_count = diagram.shape_count
        record.status = "success"
    except Exception:
        record.status = "error"
        record.error = traceback.format_exc()
        log.error("extract_single_diagram: ERROR - %s\n%s", diagram_path, record.error)
        if reraise:
            raise
    finally:
        record.extraction_time_s = round(time.time() - t0, 2)
        log.debug(
            "extract_single_diagram: DONE - %s in %ss",
            diagram_path.name,
            record.extraction_time_s,
        )

    return record


def extract_diagrams(
    diagram_files: Iterable[Path],
    page_order: str = "listing",
    *,
    fail_fast: bool = False,
) -> list[DiagramRecord]:
    """Extract diagrams strictly in the given order.

    With *fail_fast* the first failure propagates and the remaining files
    are not touched.
    """
    records: list[DiagramRecord] = []
    for diagram_path in diagram_files:
        records.append(
            extract_single_diagram(diagram_path, page_order, reraise=fail_fast)
        )

    success = [r for r in records if r.status == "success"]
    failed = [r for r in records if r.status == "error"]
    log.info("Extraction: %s succeeded, %s failed", len(success), len(failed))
    return records


def collect_tables(records: list[DiagramRecord]) -> dict[str, list[ShapeRecord]]:
    """Map sheet name to shape rows for successful records, in encounter order."""
    tables: dict[str, list[ShapeRecord]] = {}
    for record in records:
        if record.status != "success":
            continue
        if record.sheet_name in tables:
            raise DuplicateSheetNameError(record.sheet_name, record.filepath)
        tables[record.sheet_name] = record.shapes
    return tables
