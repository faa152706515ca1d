from __future__ import annotations

import re

ELLIPSIS = "…"

_WHITESPACE_RE = re.compile(r"\s+")


def one_line(text: str) -> str:
    """Collapse every whitespace run to a single space and trim."""
    return _WHITESPACE_RE.sub(" ", text).strip()


def truncate(text: str, limit: int) -> str:
    """Cut `text` to `limit` characters, the last one becoming an ellipsis."""
    if len(text) <= limit:
        return text
    return text[: limit - 1] + ELLIPSIS
