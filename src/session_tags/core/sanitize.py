"""Plain-text sanitisation for captured values."""

from __future__ import annotations

import re

_SCRIPT_STYLE_RE = re.compile(r"<(script|style)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]*>")
_OCTET_RE = re.compile(r"%[0-9a-fA-F]{2}")
_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")
_WHITESPACE_RE = re.compile(r"\s+")


def sanitize_text(value: str) -> str:
    """Reduce *value* to a single line of plain text.

    Script/style blocks and tags are removed, leftover percent-encoded
    octets dropped, control characters turned into spaces, stray angle
    brackets removed and whitespace collapsed. ``&`` and quotes survive;
    escaping them is left to the render step.
    """
    text = _SCRIPT_STYLE_RE.sub("", value)
    text = _TAG_RE.sub("", text)
    text = _OCTET_RE.sub("", text)
    text = _CONTROL_RE.sub(" ", text)
    text = text.replace("<", "").replace(">", "")
    return _WHITESPACE_RE.sub(" ", text).strip()
