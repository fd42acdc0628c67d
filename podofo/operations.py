# podofo/operations.py
import io
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Sequence, Tuple

import fitz  # PyMuPDF
from PIL import Image, UnidentifiedImageError
from PyPDF2 import PdfReader, PdfWriter

from podofo import config
from podofo.errors import InvalidInput, IOFailure, NoOutputProduced, ParseFailure
from podofo.ghostscript import QUALITY_PRESETS, ToolRunner, compress_args, raster_args, run_ghostscript
from podofo.pages import PageSelection, output_name, resolve_plan

logger = logging.getLogger(__name__)

# (source file, name inside the archive)
ArchiveEntry = Tuple[Path, str]

EMBEDDABLE_IMAGE_FORMATS = {"JPEG", "PNG"}
_PAGE_IMAGE_RE = re.compile(r"^page-(\d+)\.png$")


@dataclass
class CompressionResult:
    path: Path
    original_size: int
    compressed_size: int


# ----------------------------
# Parameter helpers
# ----------------------------
def normalize_quality(quality: Any) -> str:
    quality = str(quality or "ebook").strip().lower()
    if quality not in QUALITY_PRESETS:
        raise InvalidInput(f"Unsupported quality: {quality}. Use one of: {', '.join(QUALITY_PRESETS)}")
    return quality


def normalize_dpi(dpi: Any) -> int:
    """Positive DPI or the default; values above MAX_DPI are rejected.

    Only whole numbers count: "3.7" or "300dpi" fall back to the default.
    """
    try:
        value = int(dpi)
    except (TypeError, ValueError):
        return config.DEFAULT_DPI
    if value <= 0:
        return config.DEFAULT_DPI
    if value > config.MAX_DPI:
        raise InvalidInput(f"DPI too high. Max allowed is {config.MAX_DPI}.")
    return value


# ----------------------------
# PDF helpers
# ----------------------------
def _open_pdf(path: Path) -> PdfReader:
    try:
        reader = PdfReader(str(path))
        # Force the page tree to load so broken files fail here
        len(reader.pages)
    except OSError as e:
        raise IOFailure(f"Failed to read {path.name}: {e}")
    except Exception as e:
        raise ParseFailure(f"Failed to open PDF {path.name}: {e}")
    return reader


def _write_pdf(writer: PdfWriter, out_pdf: Path) -> None:
    out_pdf.parent.mkdir(parents=True, exist_ok=True)
    try:
        with out_pdf.open("wb") as fp:
            writer.write(fp)
    except OSError as e:
        raise IOFailure(f"Failed to write {out_pdf.name}: {e}")


def _require_source(source: Path) -> None:
    if not source.exists():
        raise IOFailure(f"Input file not found: {source.name}")


# ----------------------------
# Operations
# ----------------------------
def merge_pdfs(sources: Sequence[Path], out_pdf: Path) -> Path:
    if not sources:
        raise InvalidInput("No PDF files provided")

    writer = PdfWriter()
    for p in sources:
        reader = _open_pdf(p)
        for page in reader.pages:
            writer.add_page(page)

    _write_pdf(writer, out_pdf)
    logger.info("Merged %d PDFs into %d pages", len(sources), len(writer.pages))
    return out_pdf


def split_pdf(source: Path, selection: PageSelection, out_dir: Path) -> List[ArchiveEntry]:
    reader = _open_pdf(source)
    plan = resolve_plan(selection, len(reader.pages))

    out_dir.mkdir(parents=True, exist_ok=True)
    entries: List[ArchiveEntry] = []
    for position, group in enumerate(plan):
        w = PdfWriter()
        for idx in group:
            w.add_page(reader.pages[idx])
        name = output_name(position)
        one_path = out_dir / name
        _write_pdf(w, one_path)
        entries.append((one_path, name))

    logger.info("Split %d pages into %d documents (mode=%s)", len(reader.pages), len(entries), selection.mode)
    return entries


async def compress_pdf(runner: ToolRunner, source: Path, out_pdf: Path, quality: str = "ebook") -> CompressionResult:
    quality = normalize_quality(quality)
    _require_source(source)
    out_pdf.parent.mkdir(parents=True, exist_ok=True)

    original_size = source.stat().st_size
    await run_ghostscript(runner, compress_args(quality), source, str(out_pdf))

    if not out_pdf.exists():
        raise NoOutputProduced("Compressed PDF not produced")

    compressed_size = out_pdf.stat().st_size
    logger.info("Compressed PDF (%s): %d -> %d bytes", quality, original_size, compressed_size)
    return CompressionResult(path=out_pdf, original_size=original_size, compressed_size=compressed_size)


def collect_page_images(out_dir: Path) -> List[ArchiveEntry]:
    """Ghostscript page images in ascending page-number order."""
    numbered = []
    for p in out_dir.iterdir():
        m = _PAGE_IMAGE_RE.match(p.name)
        if m:
            numbered.append((int(m.group(1)), p))
    return [(p, p.name) for _, p in sorted(numbered)]


async def pdf_to_images(runner: ToolRunner, source: Path, out_dir: Path, dpi: Any = None) -> List[ArchiveEntry]:
    dpi = normalize_dpi(dpi)
    _require_source(source)
    out_dir.mkdir(parents=True, exist_ok=True)

    pattern = out_dir / "page-%d.png"
    await run_ghostscript(runner, raster_args(dpi), source, str(pattern))

    entries = collect_page_images(out_dir)
    if not entries:
        raise NoOutputProduced("No images were created")

    logger.info("Rendered %d page images at %d DPI", len(entries), dpi)
    return entries


def _load_image(path: Path) -> Tuple[bytes, int, int]:
    """Image bytes ready for embedding plus the pixel size.

    JPEG and PNG are embedded unchanged; anything else Pillow can read is
    re-encoded as PNG.
    """
    try:
        with Image.open(path) as img:
            width, height = img.size
            if img.format in EMBEDDABLE_IMAGE_FORMATS:
                return path.read_bytes(), width, height

            if img.mode in ("RGBA", "LA", "P"):
                img = img.convert("RGBA")
            else:
                img = img.convert("RGB")
            buf = io.BytesIO()
            img.save(buf, format="PNG")
            return buf.getvalue(), width, height
    except UnidentifiedImageError as e:
        raise ParseFailure(f"Unsupported or corrupt image {path.name}: {e}")
    except OSError as e:
        raise IOFailure(f"Failed to read image {path.name}: {e}")


def images_to_pdf(sources: Sequence[Path], out_pdf: Path) -> Path:
    if not sources:
        raise InvalidInput("No images to convert")

    out_pdf.parent.mkdir(parents=True, exist_ok=True)

    doc = fitz.open()
    try:
        for p in sources:
            data, width, height = _load_image(p)
            # 1 px == 1 pt, image anchored at the page origin
            page = doc.new_page(width=width, height=height)
            try:
                page.insert_image(page.rect, stream=data)
            except (RuntimeError, ValueError) as e:
                raise ParseFailure(f"Failed to embed image {p.name}: {e}")
        doc.save(str(out_pdf))
    except OSError as e:
        raise IOFailure(f"Failed to write {out_pdf.name}: {e}")
    finally:
        doc.close()

    if not out_pdf.exists():
        raise NoOutputProduced("Failed to create PDF")
    logger.info("Built PDF from %d images", len(sources))
    return out_pdf
