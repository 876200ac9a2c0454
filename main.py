import logging
from pathlib import Path

from visio_pipeline.cli import run_pipeline
from visio_pipeline.utils import DEFAULT_INPUT_DIR, DEFAULT_OUTPUT_PATH

log = logging.getLogger(__name__)


def extract_visio_data(
    visio_dir: str = DEFAULT_INPUT_DIR,
    output_path: str = DEFAULT_OUTPUT_PATH,
) -> Path | None:
    records, workbook_path = run_pipeline(Path(visio_dir), Path(output_path))
    log.info("Sheets written: %s", [r.sheet_name for r in records if r.status == "success"])
    return workbook_path


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    extract_visio_data()
