# podofo/pages.py
import json
from dataclasses import dataclass, field
from typing import Any, List, Optional

from podofo.errors import InvalidInput

MODES = ("all", "range", "fixed")


def coerce_chunk_size(value: Any) -> int:
    """Chunk size for ``fixed`` mode; anything unusable becomes 1."""
    if isinstance(value, bool):
        return 1
    try:
        size = int(value)
    except (TypeError, ValueError):
        return 1
    return size if size > 0 else 1


def parse_ranges(raw: Optional[str]) -> List[Any]:
    """Decode the ``ranges`` form field: a JSON array of selector tokens."""
    if raw is None or not raw.strip():
        return []
    try:
        tokens = json.loads(raw)
    except json.JSONDecodeError as e:
        raise InvalidInput(f"ranges must be a JSON array: {e.msg}")
    if not isinstance(tokens, list):
        raise InvalidInput("ranges must be a JSON array")
    return tokens


@dataclass
class PageSelection:
    mode: str = "all"
    ranges: List[Any] = field(default_factory=list)
    fixed_size: int = 1

    @classmethod
    def from_form(cls, mode: Optional[str], ranges: Optional[str], fixed_size: Any) -> "PageSelection":
        mode = (mode or "all").strip().lower()
        if mode not in MODES:
            raise InvalidInput(f"Unknown split mode: {mode}")
        return cls(
            mode=mode,
            ranges=parse_ranges(ranges) if mode == "range" else [],
            fixed_size=coerce_chunk_size(fixed_size),
        )


def _page_number(token: Any) -> Optional[int]:
    if isinstance(token, bool):
        return None
    if isinstance(token, int):
        return token
    if isinstance(token, str) and token.strip().isdecimal():
        return int(token.strip())
    return None


def _token_indices(token: Any, total_pages: int) -> List[int]:
    # Malformed and out-of-range tokens contribute nothing
    n = _page_number(token)
    if n is not None:
        return [n - 1] if 1 <= n <= total_pages else []

    if not isinstance(token, str) or "-" not in token:
        return []
    a, b = token.split("-", 1)
    start, end = _page_number(a), _page_number(b)
    if start is None or end is None:
        return []
    if not 1 <= start <= end <= total_pages:
        return []
    return list(range(start - 1, end))


def resolve_plan(selection: PageSelection, total_pages: int) -> List[List[int]]:
    """Turn a page selection into the ordered page-index groups to extract.

    ``all`` yields one singleton group per page. ``range`` merges every
    token into one set and yields singletons in ascending page order, so the
    order in which tokens were given is not kept. ``fixed`` yields
    consecutive chunks of ``fixed_size`` pages, the last one possibly shorter.
    """
    if total_pages <= 0:
        raise InvalidInput("PDF has 0 pages")

    if selection.mode == "all":
        return [[i] for i in range(total_pages)]

    if selection.mode == "range":
        pages = set()
        for token in selection.ranges:
            pages.update(_token_indices(token, total_pages))
        return [[i] for i in sorted(pages)]

    if selection.mode == "fixed":
        k = coerce_chunk_size(selection.fixed_size)
        return [list(range(i, min(i + k, total_pages))) for i in range(0, total_pages, k)]

    raise InvalidInput(f"Unknown split mode: {selection.mode}")


def output_name(position: int, ext: str = "pdf") -> str:
    """1-based sequential name for the plan entry at ``position``."""
    return f"page-{position + 1}.{ext}"
