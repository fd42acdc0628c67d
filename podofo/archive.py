# podofo/archive.py
import logging
import zipfile
from pathlib import Path
from typing import AsyncIterator, Iterator, Optional, Sequence, Tuple

from starlette.concurrency import iterate_in_threadpool
from starlette.responses import FileResponse, StreamingResponse
from zipstream import ZipStream

from podofo.workspace import Workspace

logger = logging.getLogger(__name__)


def build_archive(entries: Sequence[Tuple[Path, str]]) -> Iterator[bytes]:
    """Yield ZIP bytes, reading each file only as it is written out.

    Runs lazily: files are looked up on first iteration, and any that are
    gone by then are left out.
    """
    zs = ZipStream(compress_type=zipfile.ZIP_DEFLATED, compress_level=9)
    for path, name in entries:
        if Path(path).exists():
            zs.add_path(str(path), name)
    yield from zs


async def stream_archive(entries: Sequence[Tuple[Path, str]], workspace: Workspace) -> AsyncIterator[bytes]:
    try:
        async for chunk in iterate_in_threadpool(build_archive(entries)):
            yield chunk
    except Exception:
        logger.exception("Archive streaming failed")
        raise
    finally:
        # also runs under cancellation, so no awaits
        workspace.cleanup()


class ArchiveResponse(StreamingResponse):
    """ZIP download streamed straight from the workspace files.

    The workspace is removed once, whichever comes first: the last chunk,
    a client disconnect, or an error while archiving.
    """

    def __init__(self, entries: Sequence[Tuple[Path, str]], workspace: Workspace, filename: str):
        super().__init__(
            stream_archive(entries, workspace),
            media_type="application/zip",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )
        self.workspace = workspace

    async def __call__(self, scope, receive, send):
        try:
            await super().__call__(scope, receive, send)
        finally:
            self.workspace.cleanup()


class TransientFileResponse(FileResponse):
    """Single-file download that deletes the workspace when the response ends."""

    def __init__(
        self,
        path: Path,
        workspace: Workspace,
        filename: str,
        media_type: str = "application/pdf",
        headers: Optional[dict] = None,
    ):
        super().__init__(path=str(path), media_type=media_type, filename=filename, headers=headers)
        self.workspace = workspace

    async def __call__(self, scope, receive, send):
        try:
            await super().__call__(scope, receive, send)
        finally:
            self.workspace.cleanup()
