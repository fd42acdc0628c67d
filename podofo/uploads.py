# podofo/uploads.py
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from fastapi import UploadFile

from podofo import config
from podofo.errors import InvalidInput, IOFailure, UploadTooLarge
from podofo.workspace import Workspace

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


def _upload_suffix(file: UploadFile, default: str) -> str:
    suffix = Path(file.filename or "").suffix.lower()
    if suffix and suffix[1:].isalnum():
        return suffix
    return default


async def save_upload_limited(file: UploadFile, dst: Path, max_bytes: Optional[int] = None) -> int:
    """
    Streams UploadFile to disk and enforces max size while writing.
    Returns written byte count.
    """
    max_bytes = config.MAX_FILE_BYTES if max_bytes is None else max_bytes
    dst.parent.mkdir(parents=True, exist_ok=True)

    total = 0
    try:
        with dst.open("wb") as out:
            while True:
                chunk = await file.read(CHUNK_SIZE)
                if not chunk:
                    break
                total += len(chunk)
                if total > max_bytes:
                    raise UploadTooLarge(
                        f"File {file.filename or dst.name} too large. Max allowed is {config.MAX_FILE_MB}MB."
                    )
                out.write(chunk)
    except OSError as e:
        raise IOFailure(f"Failed to store upload {file.filename or dst.name}: {e}")
    finally:
        await file.close()

    return total


def check_file_count(files: Sequence[UploadFile], minimum: int = 1) -> None:
    if len(files) > config.MAX_FILES:
        raise UploadTooLarge(f"Too many files. Max allowed is {config.MAX_FILES}.")
    if len(files) < minimum:
        if minimum == 1:
            raise InvalidInput("No files uploaded")
        raise InvalidInput(f"Upload at least {minimum} files")


async def save_uploads(
    files: Sequence[UploadFile], workspace: Workspace, default_suffix: str, minimum: int = 1
) -> List[Path]:
    """Store uploads in submission order as ``inputs/000<ext>``, ``inputs/001<ext>``, ..."""
    check_file_count(files, minimum)
    in_dir = workspace.subdir("inputs")

    saved: List[Path] = []
    for i, f in enumerate(files):
        dst = in_dir / f"{i:03d}{_upload_suffix(f, default_suffix)}"
        written = await save_upload_limited(f, dst)
        logger.debug("Stored upload %s (%d bytes)", f.filename, written)
        saved.append(dst)
    return saved


async def save_single_upload(file: Optional[UploadFile], workspace: Workspace, default_suffix: str) -> Path:
    if file is None:
        raise InvalidInput("No file uploaded")
    paths = await save_uploads([file], workspace, default_suffix)
    return paths[0]
