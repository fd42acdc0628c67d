# podofo/main.py
import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import Depends, FastAPI, File, Form, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from podofo import config
from podofo.archive import ArchiveResponse, TransientFileResponse
from podofo.errors import PdfToolError
from podofo.ghostscript import SubprocessRunner, ToolRunner
from podofo.log_context import setup_logging
from podofo.operations import compress_pdf, images_to_pdf, merge_pdfs, pdf_to_images, split_pdf
from podofo.pages import PageSelection
from podofo.uploads import save_single_upload, save_uploads
from podofo.workspace import Workspace

logger = logging.getLogger(__name__)


# ----------------------------
# App
# ----------------------------
app = FastAPI(title="Podofo PDF Tools")


def cors_options() -> dict:
    options = {
        "allow_origins": config.ALLOWED_ORIGINS,
        "allow_credentials": True,
        "allow_methods": ["GET", "POST", "OPTIONS"],
        "allow_headers": ["Content-Type", "Authorization"],
        "expose_headers": ["X-Original-Size", "X-Compressed-Size"],
    }
    # In development, allow localhost even if not in ALLOWED_ORIGINS
    if not config.IS_PRODUCTION:
        options["allow_origin_regex"] = config.LOCALHOST_ORIGIN_REGEX
    return options


app.add_middleware(CORSMiddleware, **cors_options())


@app.on_event("startup")
def on_startup():
    setup_logging()
    config.TEMP_ROOT.mkdir(parents=True, exist_ok=True)
    logger.info("Allowed CORS origins: %s", ", ".join(config.ALLOWED_ORIGINS))


def get_tool_runner() -> ToolRunner:
    return SubprocessRunner()


# ----------------------------
# Errors
# ----------------------------
@app.exception_handler(PdfToolError)
async def pdf_tool_error_handler(request: Request, exc: PdfToolError):
    logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("%s %s crashed", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": str(exc) or exc.__class__.__name__})


@contextmanager
def cleanup_on_error(workspace: Workspace):
    """Delete the workspace before any failure reaches the client."""
    try:
        yield
    except BaseException:
        workspace.cleanup()
        raise


def _file_list(*fields: Optional[List[UploadFile]]) -> List[UploadFile]:
    # Clients send either "files" or "files[]"
    files: List[UploadFile] = []
    for f in fields:
        files.extend(f or [])
    return files


# ----------------------------
# Health
# ----------------------------
@app.get("/health")
def health():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


# ----------------------------
# PDF APIs
# ----------------------------
@app.post("/api/pdf/merge")
async def merge(
    files: Optional[List[UploadFile]] = File(None),
    files_brackets: Optional[List[UploadFile]] = File(None, alias="files[]"),
):
    workspace = Workspace.create()
    with cleanup_on_error(workspace):
        saved = await save_uploads(_file_list(files, files_brackets), workspace, ".pdf", minimum=2)
        out_pdf = await run_in_threadpool(merge_pdfs, saved, workspace.path("merged.pdf"))

    return TransientFileResponse(out_pdf, workspace, filename="merged.pdf")


@app.post("/api/pdf/split")
async def split(
    file: Optional[UploadFile] = File(None),
    mode: Optional[str] = Form(None),
    ranges: Optional[str] = Form(None),
    fixed_size: Optional[str] = Form(None, alias="fixedSize"),
):
    workspace = Workspace.create()
    with cleanup_on_error(workspace):
        selection = PageSelection.from_form(mode, ranges, fixed_size)
        in_path = await save_single_upload(file, workspace, ".pdf")
        entries = await run_in_threadpool(split_pdf, in_path, selection, workspace.subdir("split"))

    return ArchiveResponse(entries, workspace, filename="split-pages.zip")


@app.post("/api/pdf/compress")
async def compress(
    file: Optional[UploadFile] = File(None),
    quality: Optional[str] = Form(None),
    runner: ToolRunner = Depends(get_tool_runner),
):
    workspace = Workspace.create()
    with cleanup_on_error(workspace):
        in_path = await save_single_upload(file, workspace, ".pdf")
        result = await compress_pdf(runner, in_path, workspace.path("compressed.pdf"), quality)

    return TransientFileResponse(
        result.path,
        workspace,
        filename="compressed.pdf",
        headers={
            "X-Original-Size": str(result.original_size),
            "X-Compressed-Size": str(result.compressed_size),
        },
    )


@app.post("/api/pdf/pdf-to-images")
async def pdf_to_images_route(
    file: Optional[UploadFile] = File(None),
    dpi: Optional[str] = Form(None),
    runner: ToolRunner = Depends(get_tool_runner),
):
    workspace = Workspace.create()
    with cleanup_on_error(workspace):
        in_path = await save_single_upload(file, workspace, ".pdf")
        entries = await pdf_to_images(runner, in_path, workspace.subdir("images"), dpi)

    return ArchiveResponse(entries, workspace, filename="pdf-images.zip")


@app.post("/api/pdf/images-to-pdf")
async def images_to_pdf_route(
    files: Optional[List[UploadFile]] = File(None),
    files_brackets: Optional[List[UploadFile]] = File(None, alias="files[]"),
):
    workspace = Workspace.create()
    with cleanup_on_error(workspace):
        saved = await save_uploads(_file_list(files, files_brackets), workspace, ".img")
        out_pdf = await run_in_threadpool(images_to_pdf, saved, workspace.path("images.pdf"))

    return TransientFileResponse(out_pdf, workspace, filename="images.pdf")


def main():
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=config.PORT)


if __name__ == "__main__":
    main()
