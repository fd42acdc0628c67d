"""Error kinds raised by the PDF operations and the upload layer.

Every error carries a human-readable message and the HTTP status it maps to.
The application renders them all as ``{"error": message}``.
"""


class PdfToolError(Exception):
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidInput(PdfToolError):
    """Bad or missing parameters, or no files provided."""

    status_code = 400


class ParseFailure(PdfToolError):
    """Input bytes are not a valid PDF / image."""


class ExternalToolMissing(PdfToolError):
    """Ghostscript could not be launched."""


class ExternalToolFailure(PdfToolError):
    """Ghostscript ran and exited with an error."""


class NoOutputProduced(PdfToolError):
    """A transformation expected to yield files yielded none."""


class IOFailure(PdfToolError):
    """Filesystem read/write errors."""


class UploadTooLarge(PdfToolError):
    status_code = 413
