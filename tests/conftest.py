"""Shared fixtures for the Visio pipeline test suite.

Diagrams are built on the fly as small ``.vsdx`` archives inside ``tmp_path``.
"""

from __future__ import annotations

import logging
import sys
import tempfile
import types
import zipfile
from pathlib import Path
from typing import Callable, Optional

import pytest

# ---------------------------------------------------------------------------
# Configure verbose logging for test debugging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.DEBUG,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    stream=sys.stderr,
    force=True,
)

VISIO_NS = "http://schemas.microsoft.com/office/visio/2012/main"
REL_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"

CONTENT_TYPES = (
    '<?xml version="1.0" encoding="UTF-8"?>'
    '<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types"/>'
)


def page_xml(shapes: str, connects: str = "") -> str:
    """Wrap ``<Shape>`` markup in a namespaced ``PageContents`` document."""
    return (
        '<?xml version="1.0" encoding="utf-8"?>'
        f'<PageContents xmlns="{VISIO_NS}" xmlns:r="{REL_NS}" xml:space="preserve">'
        f"<Shapes>{shapes}</Shapes>{connects}</PageContents>"
    )


def pages_index_xml(*pages: tuple[str, str, bool]) -> str:
    """Build ``pages.xml`` from ``(name, rel_id, is_background)`` tuples."""
    body = ""
    for idx, (name, rel_id, background) in enumerate(pages):
        bg = ' Background="1"' if background else ""
        body += (
            f'<Page ID="{idx}" NameU="{name}" Name="{name}"{bg}>'
            f'<PageSheet/><Rel r:id="{rel_id}"/></Page>'
        )
    return (
        '<?xml version="1.0" encoding="utf-8"?>'
        f'<Pages xmlns="{VISIO_NS}" xmlns:r="{REL_NS}">{body}</Pages>'
    )


def pages_rels_xml(targets: dict[str, str]) -> str:
    """Build ``_rels/pages.xml.rels`` from ``{rel_id: target}``."""
    body = "".join(
        f'<Relationship Id="{rel_id}" '
        'Type="http://schemas.microsoft.com/visio/2010/relationships/page" '
        f'Target="{target}"/>'
        for rel_id, target in targets.items()
    )
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">'
        f"{body}</Relationships>"
    )


EXAMPLE_SHAPES = (
    '<Shape ID="1" NameU="RECT" Name="Rect" Type="Shape">'
    '<Cell N="PinX" V="1"/><Text><cp IX="0"/>Start</Text></Shape>'
    '<Shape ID="2" NameU="OVAL" Name="Oval" Type="Shape"><Cell N="PinX" V="2"/></Shape>'
)


@pytest.fixture
def make_vsdx(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a ``.vsdx`` archive and returning its path.

    *pages* maps file names under ``visio/pages/`` to XML text; ``None``
    leaves the folder out of the archive entirely.
    """

    def _make(
        name: str = "diagram1.vsdx",
        pages: Optional[dict[str, str]] = None,
        *,
        directory: Optional[Path] = None,
        rels: Optional[str] = None,
    ) -> Path:
        folder = directory or (tmp_path / "visio_files")
        folder.mkdir(parents=True, exist_ok=True)
        path = folder / name
        with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as zf:
            zf.writestr("[Content_Types].xml", CONTENT_TYPES)
            zf.writestr("docProps/app.xml", "<Properties/>")
            for page_name, xml in (pages or {}).items():
                zf.writestr(f"visio/pages/{page_name}", xml)
            if rels is not None:
                zf.writestr("visio/pages/_rels/pages.xml.rels", rels)
        return path

    return _make


@pytest.fixture
def example_vsdx(make_vsdx) -> Path:
    """``diagram1.vsdx`` with a Rect labelled Start and an unlabelled Oval."""
    return make_vsdx(
        "diagram1.vsdx",
        {
            "pages.xml": pages_index_xml(("Page-1", "rId1", False)),
            "page1.xml": page_xml(EXAMPLE_SHAPES),
        },
        rels=pages_rels_xml({"rId1": "page1.xml"}),
    )


@pytest.fixture
def scratch_root(tmp_path: Path, monkeypatch) -> Path:
    """Redirect ``tempfile`` to a directory the test can inspect."""
    root = tmp_path / "scratch"
    root.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(root))
    return root


@pytest.fixture
def no_tqdm(monkeypatch) -> None:
    tqdm_stub = types.SimpleNamespace(tqdm=lambda iterable, **kwargs: iterable)
    monkeypatch.setitem(sys.modules, "tqdm", tqdm_stub)
