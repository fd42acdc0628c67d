"""Shared fixtures: sample PDFs/images and a stand-in for Ghostscript."""

import io
from pathlib import Path

import pytest
from PIL import Image
from PyPDF2 import PdfWriter

from podofo import config
from podofo.ghostscript import ToolResult, ToolRunner


def pdf_bytes(sizes):
    """A PDF with one blank page per (width, height)."""
    writer = PdfWriter()
    for width, height in sizes:
        writer.add_blank_page(width=width, height=height)
    buf = io.BytesIO()
    writer.write(buf)
    return buf.getvalue()


def make_pdf(path: Path, sizes) -> Path:
    path.write_bytes(pdf_bytes(sizes))
    return path


def image_bytes(size, fmt, mode="RGB"):
    buf = io.BytesIO()
    Image.new(mode, size).save(buf, format=fmt)
    return buf.getvalue()


class FakeRunner(ToolRunner):
    """Records calls and writes what Ghostscript would have written."""

    def __init__(self, exit_code=0, stderr="", pages=1, write_output=True):
        self.exit_code = exit_code
        self.stderr = stderr
        self.pages = pages
        self.write_output = write_output
        self.calls = []

    async def run(self, tool, args):
        self.calls.append((tool, list(args)))
        if self.write_output:
            out = next(a for a in args if a.startswith("-sOutputFile="))[len("-sOutputFile="):]
            if "%d" in out:
                for n in range(1, self.pages + 1):
                    Path(out.replace("%d", str(n))).write_bytes(image_bytes((10, 10), "PNG"))
            else:
                Path(out).write_bytes(b"%PDF-1.4\n% compressed\n%%EOF\n")
        return ToolResult(exit_code=self.exit_code, stderr=self.stderr)


@pytest.fixture(autouse=True)
def temp_root(tmp_path, monkeypatch):
    root = tmp_path / "work"
    monkeypatch.setattr(config, "TEMP_ROOT", root)
    return root


@pytest.fixture
def five_page_pdf(tmp_path):
    # Widths 101..105 identify each original page
    return make_pdf(tmp_path / "five.pdf", [(100 + n, 200) for n in range(1, 6)])
