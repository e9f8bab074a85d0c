"""
Text helpers for extracted document content.

``truncate_text`` caps extracted text before it is stored as an
artifact so oversized uploads cannot blow past downstream prompt and
column limits.
"""

from __future__ import annotations

TRUNCATION_MARKER = "\n\n[... 內容過長已截斷 ...]"


def truncate_text(
    text: str,
    max_chars: int,
    *,
    marker: str = TRUNCATION_MARKER,
) -> tuple[str, bool]:
    """Cut *text* to *max_chars* characters and append *marker*.

    Returns
    -------
    tuple[str, bool]
        The (possibly) shortened text and whether it was truncated.
        The marker is not counted against *max_chars*; a non-positive
        *max_chars* disables the cap.

    Examples
    --------
    >>> truncate_text("abcdef", 3, marker="…")
    ('abc…', True)
    >>> truncate_text("abc", 10)
    ('abc', False)
    """
    if max_chars <= 0 or len(text) <= max_chars:
        return text, False
    return text[:max_chars] + marker, True
