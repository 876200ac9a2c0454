"""
Visio .vsdx shape parser.

A ``.vsdx`` file is a ZIP archive of XML parts. Each drawing page lives under
``visio/pages/`` next to the ``pages.xml`` index. This module unpacks an
archive into a scratch directory, picks one page document and reads every
``<Shape>`` on it into :class:`ShapeRecord` rows.

Usage:
    from vsdx_parser import parse_vsdx, parse_vsdx_dir

    # Parse a single diagram
    diagram = parse_vsdx("path/to/diagram.vsdx")
    for shape in diagram.shapes:
        print(shape.id, shape.name, shape.text)

    # Parse every .vsdx file in a directory
    diagrams = parse_vsdx_dir("path/to/visio_files/")
"""

from __future__ import annotations

import logging
import shutil
import tempfile
import xml.etree.ElementTree as ET
import zipfile
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

log = logging.getLogger(__name__)

PAGES_SUBDIR = ("visio", "pages")
PAGE_INDEX_NAME = "pages.xml"
SHAPE_PREFIX = "d1"

_RELS_NS = "http://schemas.openxmlformats.org/package/2006/relationships"
_DOC_RELS_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"

PAGE_ORDERS = ("listing", "index")


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class VisioFormatError(ValueError):
  """The archive unpacked fine but does not look like a Visio drawing."""

  def __init__(self, message: str, source: str | Path) -> None:
    super().__init__(f"{message}: {source}")
    self.source = str(source)


class MissingPagesFolderError(VisioFormatError):
  def __init__(self, source: str | Path) -> None:
    super().__init__("No 'visio/pages' folder found in the vsdx file", source)


class NoPageFilesError(VisioFormatError):
  def __init__(self, source: str | Path) -> None:
    super().__init__("No page XML files found in file", source)


# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------

@dataclass
class ShapeRecord:
  """One ``<Shape>`` element: identifying attributes plus its label."""
  id: str | None = None
  name: str | None = None
  name_u: str | None = None
  text: str | None = None

  def as_row(self) -> tuple[str | None, str | None, str | None, str | None]:
    """Return the values in ``ID, Name, NameU, Text`` column order."""
    return (self.id, self.name, self.name_u, self.text)


@dataclass
class VisioDiagram:
  """Shapes read from the selected page of one ``.vsdx`` file."""
  source_file: str | None = None
  page_file: str | None = None
  shapes: list[ShapeRecord] = field(default_factory=list)

  @property
  def base_name(self) -> str:
    """File name without extension; used as the sheet name."""
    return Path(self.source_file or "unknown").stem

  @property
  def shape_count(self) -> int:
    return len(self.shapes)

  @property
  def text_shapes(self) -> list[ShapeRecord]:
    """Shapes that carry a ``<Text>`` element."""
    return [s for s in self.shapes if s.text is not None]


# ---------------------------------------------------------------------------
# Archive handling
# ---------------------------------------------------------------------------

@contextmanager
def extract_archive(path: str | Path) -> Iterator[Path]:
  """Unzip *path* into a fresh scratch directory and yield that directory.

  The directory is removed when the block exits, whether or not the work
  inside it raised.
  """
  path = Path(path)
  scratch = Path(tempfile.mkdtemp(prefix="vsdx_"))
  try:
    with zipfile.ZipFile(path) as zf:
      zf.extractall(scratch)
    yield scratch
  finally:
    shutil.rmtree(scratch, ignore_errors=True)
    log.info("Temporary files cleaned up for %s", path)


# ---------------------------------------------------------------------------
# Page selection
# ---------------------------------------------------------------------------

def _listed_page_files(pages_dir: Path) -> list[Path]:
  return sorted(
    p for p in pages_dir.iterdir()
    if p.is_file() and p.name.endswith(".xml") and p.name != PAGE_INDEX_NAME
  )


def _local_name(tag: str) -> str:
  return tag.split("}")[-1] if "}" in tag else tag


def read_page_index(pages_dir: Path) -> list[str]:
  """Return foreground page file names in the order authored in ``pages.xml``.

  Background pages are skipped. Pages whose relationship cannot be resolved
  are dropped. Missing or malformed index parts yield an empty list.
  """
  index_path = pages_dir / PAGE_INDEX_NAME
  rels_path = pages_dir / "_rels" / f"{PAGE_INDEX_NAME}.rels"
  try:
    index_root = ET.parse(index_path).getroot()
    rels_root = ET.parse(rels_path).getroot()
  except (OSError, ET.ParseError):
    return []

  targets = {
    rel.get("Id"): Path(rel.get("Target", "")).name
    for rel in rels_root.iter(f"{{{_RELS_NS}}}Relationship")
  }

  names: list[str] = []
  for page in index_root:
    if _local_name(page.tag) != "Page" or page.get("Background") == "1":
      continue
    for child in page:
      if _local_name(child.tag) != "Rel":
        continue
      target = targets.get(child.get(f"{{{_DOC_RELS_NS}}}id"))
      if target:
        names.append(target)
  return names


def locate_page_file(
  scratch_dir: str | Path,
  source: str | Path,
  page_order: str = "listing",
) -> Path:
  """Pick the page document to read from an unpacked archive.

  ``listing`` takes the first name-sorted ``*.xml`` file other than
  ``pages.xml``. ``index`` takes the first foreground page named in
  ``pages.xml`` and falls back to ``listing`` when the index is unusable.
  """
  if page_order not in PAGE_ORDERS:
    raise ValueError(f"Unknown page order {page_order!r}; expected one of {PAGE_ORDERS}")

  pages_dir = Path(scratch_dir).joinpath(*PAGES_SUBDIR)
  if not pages_dir.is_dir():
    raise MissingPagesFolderError(source)

  page_files = _listed_page_files(pages_dir)
  if not page_files:
    raise NoPageFilesError(source)

  page_file = page_files[0]
  if page_order == "index":
    available = {p.name: p for p in page_files}
    indexed = [name for name in read_page_index(pages_dir) if name in available]
    if indexed:
      page_file = available[indexed[0]]
    else:
      log.warning("Page index unusable in %s; using listing order", source)

  log.info("Processing page file: %s", page_file)
  return page_file


# ---------------------------------------------------------------------------
# Shape parsing
# ---------------------------------------------------------------------------

def _default_namespace(root: ET.Element) -> str | None:
  if root.tag.startswith("{"):
    return root.tag[1:].split("}", 1)[0]
  return None


def _text_content(elem: ET.Element | None) -> str | None:
  """Return every text node under *elem* joined together, or None."""
  if elem is None:
    return None
  return "".join(elem.itertext())


def _parse_shape(elem: ET.Element, ns: dict[str, str], text_path: str) -> ShapeRecord:
  return ShapeRecord(
    id=elem.get("ID"),
    name=elem.get("Name"),
    name_u=elem.get("NameU"),
    text=_text_content(elem.find(text_path, ns)),
  )


def parse_shapes(page_path: str | Path) -> list[ShapeRecord]:
  """Read every ``<Shape>`` of a page document, in document order.

  The root element's default namespace is bound to the ``d1`` prefix before
  querying, so ``.//d1:Shape`` matches Visio markup. Shapes nested inside
  groups are included.
  """
  root = ET.parse(str(page_path)).getroot()
  uri = _default_namespace(root)
  if uri is None:
    ns: dict[str, str] = {}
    shape_path, text_path = ".//Shape", ".//Text"
  else:
    ns = {SHAPE_PREFIX: uri}
    shape_path = f".//{SHAPE_PREFIX}:Shape"
    text_path = f".//{SHAPE_PREFIX}:Text"

  return [_parse_shape(elem, ns, text_path) for elem in root.findall(shape_path, ns)]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def parse_vsdx(path: str | Path, page_order: str = "listing") -> VisioDiagram:
  """Parse one ``.vsdx`` file and return a :class:`VisioDiagram`.

  Raises :class:`MissingPagesFolderError` or :class:`NoPageFilesError` for
  archives without page documents; ``zipfile.BadZipFile`` and
  ``ET.ParseError`` propagate unchanged. The scratch directory is removed
  in every case.
  """
  path = Path(path)
  diagram = VisioDiagram(source_file=str(path))
  with extract_archive(path) as scratch:
    page_file = locate_page_file(scratch, path, page_order=page_order)
    diagram.page_file = page_file.name
    diagram.shapes = parse_shapes(page_file)
  log.info("Found %s Shape element(s) in %s", diagram.shape_count, path)
  return diagram


def parse_vsdx_dir(directory: str | Path, page_order: str = "listing") -> list[VisioDiagram]:
  """Parse every ``.vsdx`` file in *directory* and return a list of diagrams."""
  directory = Path(directory)
  diagrams: list[VisioDiagram] = []
  for vsdx_path in sorted(directory.glob("*.vsdx")):
    diagrams.append(parse_vsdx(vsdx_path, page_order=page_order))
  return diagrams


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

def _cli() -> None:
  """Quick summary when run directly: ``python vsdx_parser.py [path]``."""
  import sys

  target = sys.argv[1] if len(sys.argv) > 1 else "visio_files"
  target_path = Path(target)

  if target_path.is_file():
    diagrams = [parse_vsdx(target_path)]
  elif target_path.is_dir():
    diagrams = parse_vsdx_dir(target_path)
  else:
    print(f"Error: {target} is not a file or directory", file=sys.stderr)
    sys.exit(1)

  total_shapes = 0

  for diagram in diagrams:
    total_shapes += diagram.shape_count
    print(f"\n{'─' * 60}")
    print(f"  File:       {diagram.source_file}")
    print(f"  Page:       {diagram.page_file}")
    print(f"  Shapes:     {diagram.shape_count}")
    print(f"  With text:  {len(diagram.text_shapes)}")

    print()
    for shape in diagram.shapes[:5]:
      label = (shape.text or "").strip().replace("\n", " ")[:60]
      print(f"    {shape.id}. {shape.name or shape.name_u or '-'}  {label}")

    if diagram.shape_count > 5:
      print(f"    ... and {diagram.shape_count - 5} more shapes")

  print(f"\n{'═' * 60}")
  print(f"  TOTAL: {total_shapes} shapes across {len(diagrams)} file(s)")
  print(f"{'═' * 60}\n")


if __name__ == "__main__":
  _cli()
