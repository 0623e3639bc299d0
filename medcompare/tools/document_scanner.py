"""Pull one balanced JSON-like literal out of a larger document.

Pages often ship their data inside inline ``<script>`` state rather than a
clean response body. The scanner finds a marker, then walks forward from the
bracket it introduces, counting nesting and skipping quoted strings, until
the bracket closes. Only the target segment has to be well formed; the rest
of the document can be arbitrary markup.
"""
from __future__ import annotations

import json
import re
from typing import Any

from medcompare.errors import ExtractionError

CLOSERS = {"[": "]", "{": "}"}
QUOTE = '"'
ESCAPE = "\\"

Marker = str | re.Pattern[str]


def _find_opening(document: str, marker: Marker) -> int:
    """Index of the opening bracket introduced by the first marker match, or -1."""
    pattern = marker if isinstance(marker, re.Pattern) else re.compile(re.escape(marker))
    match = pattern.search(document)
    if match is None:
        return -1

    end = match.end()
    if end > match.start() and document[end - 1] in CLOSERS:
        return end - 1

    for index in range(end, len(document)):
        if document[index] in CLOSERS:
            return index
    return -1


def extract_balanced_segment(document: str, marker: Marker) -> str | None:
    """Return the balanced segment starting at the marker's bracket.

    ``marker`` is a literal string or a compiled regex. Returns ``None``
    when the marker is absent or the document ends before the bracket
    closes.
    """
    start = _find_opening(document, marker)
    if start < 0:
        return None

    opener = document[start]
    closer = CLOSERS[opener]
    depth = 0
    in_string = False
    escaped = False

    for index in range(start, len(document)):
        char = document[index]

        if in_string:
            if escaped:
                escaped = False
            elif char == ESCAPE:
                escaped = True
            elif char == QUOTE:
                in_string = False
            continue

        if char == QUOTE:
            in_string = True
        elif char == opener:
            depth += 1
        elif char == closer:
            depth -= 1
            if depth == 0:
                return document[start : index + 1]

    return None


def extract_json_segment(document: str, marker: Marker) -> Any:
    """Extract the segment at ``marker`` and decode it as JSON."""
    segment = extract_balanced_segment(document, marker)
    if segment is None:
        raise ExtractionError("Failed to find a balanced segment in document")
    try:
        return json.loads(segment)
    except json.JSONDecodeError as exc:
        raise ExtractionError(f"Failed to parse segment: {exc}") from exc
