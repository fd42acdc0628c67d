# podofo/ghostscript.py
import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from podofo import config
from podofo.errors import ExternalToolFailure, ExternalToolMissing

logger = logging.getLogger(__name__)

# Non-interactive, sandboxed; always passed ahead of the operation arguments
SAFETY_FLAGS = ["-dSAFER", "-dNOPAUSE", "-dQUIET", "-dBATCH"]

QUALITY_PRESETS = {
    "screen": "/screen",
    "ebook": "/ebook",
    "printer": "/printer",
}


@dataclass
class ToolResult:
    # None when the process was terminated by a signal
    exit_code: Optional[int]
    stderr: str = ""


class ToolRunner(ABC):
    """Launches an external tool and reports how it exited."""

    @abstractmethod
    async def run(self, tool: str, args: Sequence[str]) -> ToolResult:
        ...


class SubprocessRunner(ToolRunner):
    async def run(self, tool: str, args: Sequence[str]) -> ToolResult:
        try:
            proc = await asyncio.create_subprocess_exec(
                tool,
                *args,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except (FileNotFoundError, PermissionError) as e:
            raise ExternalToolMissing(f"Ghostscript not found. Please install Ghostscript: {e}")

        _, stderr = await proc.communicate()
        code = proc.returncode
        if code is not None and code < 0:
            code = None
        return ToolResult(exit_code=code, stderr=stderr.decode(errors="replace").strip())


def build_args(op_args: Sequence[str], input_path: Path, output: str) -> List[str]:
    return [*SAFETY_FLAGS, *op_args, f"-sOutputFile={output}", str(input_path)]


async def run_ghostscript(
    runner: ToolRunner,
    op_args: Sequence[str],
    input_path: Path,
    output: str,
    tool: Optional[str] = None,
) -> ToolResult:
    """Run Ghostscript and fail on a non-zero exit code.

    A signal-terminated run (``exit_code is None``) is returned as-is; the
    caller decides from the produced output whether it succeeded.
    """
    tool = tool or config.GHOSTSCRIPT_COMMAND
    args = build_args(op_args, input_path, output)
    logger.debug("Running %s %s", tool, " ".join(args))

    result = await runner.run(tool, args)
    if result.exit_code not in (0, None):
        logger.error("Ghostscript exited with %s: %s", result.exit_code, result.stderr)
        raise ExternalToolFailure(f"Ghostscript failed: {result.stderr or f'Exit code {result.exit_code}'}")
    if result.exit_code is None:
        logger.warning("Ghostscript terminated by a signal; checking for output")
    return result


def compress_args(quality: str) -> List[str]:
    return [
        "-sDEVICE=pdfwrite",
        "-dCompatibilityLevel=1.4",
        f"-dPDFSETTINGS={QUALITY_PRESETS[quality]}",
    ]


def raster_args(dpi: int) -> List[str]:
    return ["-sDEVICE=png16m", f"-r{dpi}"]
