# podofo/config.py
import os
import sys
import tempfile
from pathlib import Path


# ----------------------------
# Environment
# ----------------------------
APP_ENV = os.environ.get("APP_ENV", "development").lower()
IS_PRODUCTION = APP_ENV == "production"

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
PORT = int(os.environ.get("PORT", "5000"))


# ----------------------------
# CORS
# ----------------------------
DEFAULT_ALLOWED_ORIGINS = "http://localhost:5173,http://localhost:3000,https://podofo.vercel.app"


def parse_origins(raw: str) -> list[str]:
    return [o.strip() for o in (raw or "").split(",") if o.strip()]


ALLOWED_ORIGINS = parse_origins(os.environ.get("ALLOWED_ORIGINS", DEFAULT_ALLOWED_ORIGINS))

# Any port on localhost / 127.0.0.1, only honoured outside production
LOCALHOST_ORIGIN_REGEX = r"https?://(localhost|127\.0\.0\.1)(:\d+)?"


# ----------------------------
# Upload limits
# ----------------------------
MAX_FILE_MB = int(os.environ.get("MAX_FILE_MB", "100"))
MAX_FILE_BYTES = MAX_FILE_MB * 1024 * 1024
MAX_FILES = int(os.environ.get("MAX_FILES", "50"))


# ----------------------------
# Paths
# ----------------------------
TEMP_ROOT = Path(os.environ.get("TEMP_ROOT", Path(tempfile.gettempdir()) / "podofo"))


# ----------------------------
# Ghostscript
# ----------------------------
def default_gs_command() -> str:
    if sys.platform == "win32":
        return "gswin64c"
    return "gs"


GHOSTSCRIPT_COMMAND = os.environ.get("GHOSTSCRIPT_COMMAND", default_gs_command())

DEFAULT_DPI = int(os.environ.get("DEFAULT_DPI", "150"))
MAX_DPI = int(os.environ.get("MAX_DPI", "600"))
