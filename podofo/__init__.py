"""
Podofo - HTTP backend for everyday PDF utilities.

Merge, split, compress (Ghostscript), PDF to images and images to PDF.
"""

__version__ = "1.0.0"
