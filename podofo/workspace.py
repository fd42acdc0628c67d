# podofo/workspace.py
import logging
import shutil
import threading
import uuid
from pathlib import Path
from typing import Optional

from podofo import config
from podofo.log_context import request_id_context

logger = logging.getLogger(__name__)


class Workspace:
    """Request-scoped temporary directory.

    Every upload and every generated file of one request lives under
    ``<root>/<job_id>/`` so concurrent requests never share a path.
    ``cleanup`` removes the whole tree once; later calls do nothing.
    """

    def __init__(self, root: Path, job_id: str):
        self.job_id = job_id
        self.dir = Path(root) / job_id
        self._lock = threading.Lock()
        self._cleaned = False

    @classmethod
    def create(cls, root: Optional[Path] = None) -> "Workspace":
        job_id = uuid.uuid4().hex
        ws = cls(root or config.TEMP_ROOT, job_id)
        ws.dir.mkdir(parents=True, exist_ok=True)
        request_id_context.set(job_id[:8])
        return ws

    def path(self, name: str) -> Path:
        return self.dir / name

    def subdir(self, name: str) -> Path:
        d = self.dir / name
        d.mkdir(parents=True, exist_ok=True)
        return d

    @property
    def cleaned(self) -> bool:
        return self._cleaned

    def cleanup(self) -> None:
        with self._lock:
            if self._cleaned:
                return
            self._cleaned = True

        try:
            shutil.rmtree(self.dir)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Failed to delete %s: %s", self.dir, e)

    def __enter__(self) -> "Workspace":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()
