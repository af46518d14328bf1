"""Extract a path -> content file map from a raw model completion.

Models are asked for ``{"files": {"path": "content", ...}}`` but do not
always comply. Strategies are tried in order and the first one that yields
a file map wins:

1. ``direct_json``   the whole completion is the JSON object
2. ``embedded_json`` the object is wrapped in prose or a code fence
3. ``file_markers``  ``File: <path>`` lines, each followed by content
4. ``raw_text``      nothing structured found; the text becomes one file

No strategy raises. Total failure is reported through
``ExtractionResult.structured``.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from json_repair import repair_json

logger = logging.getLogger(__name__)

FilesMap = dict[str, str]

RAW_FALLBACK_PATH = "index.tsx"

_OBJECT_SPAN = re.compile(r"\{.*\}", re.DOTALL)

# "File: src/app.tsx", optionally behind a comment leader, heading marks,
# bold or backticks: "// File: x", "### File: x", "**File:** `x`".
_FILE_MARKER = re.compile(
    r"^[ \t]*(?:(?://|#+|--)[ \t]*)?(?:\*\*)?File:(?:\*\*)?[ \t]*`?([^`\n*]+?)`?(?:\*\*)?[ \t]*$",
    re.MULTILINE,
)
_LEADING_FENCE = re.compile(r"\A\s*```[^\n]*\n(.*?)\n?[ \t]*```", re.DOTALL)


@dataclass
class ExtractionResult:
    """Outcome of ``extract_files``."""

    files: FilesMap
    strategy: str
    structured: bool = True
    message: str = ""
    raw: Optional[str] = field(default=None, repr=False)

    def to_response(self) -> dict[str, Any]:
        """JSON payload for route handlers."""
        if self.structured:
            return {"files": self.files}
        return {"files": self.files, "raw": self.raw, "message": self.message}


def _coerce_files(candidate: Any) -> Optional[FilesMap]:
    """Return the ``files`` mapping of a parsed object, values as strings."""
    if not isinstance(candidate, dict):
        return None
    files = candidate.get("files")
    if not isinstance(files, dict):
        return None

    result: FilesMap = {}
    for path, content in files.items():
        path = str(path).strip()
        if not path:
            continue
        if isinstance(content, str):
            result[path] = content
        elif isinstance(content, (dict, list)):
            result[path] = json.dumps(content, indent=2)
        else:
            result[path] = "" if content is None else str(content)
    return result


def _direct_json(text: str) -> Optional[FilesMap]:
    try:
        return _coerce_files(json.loads(text))
    except (ValueError, TypeError, RecursionError):
        return None


def _embedded_json(text: str) -> Optional[FilesMap]:
    match = _OBJECT_SPAN.search(text)
    if not match:
        return None
    span = match.group(0)

    files = _direct_json(span)
    if files is not None:
        return files

    # Unescaped newlines and trailing commas are common in long completions.
    try:
        return _coerce_files(json.loads(repair_json(span)))
    except (ValueError, TypeError, RecursionError):
        return None


def _file_markers(text: str) -> Optional[FilesMap]:
    markers = list(_FILE_MARKER.finditer(text))
    if not markers:
        return None

    files: FilesMap = {}
    for i, marker in enumerate(markers):
        path = marker.group(1).strip()
        end = markers[i + 1].start() if i + 1 < len(markers) else len(text)
        section = text[marker.end():end]

        fenced = _LEADING_FENCE.match(section)
        content = fenced.group(1) if fenced else section
        if path:
            files[path] = content.strip()

    return files or None


STRATEGIES: list[tuple[str, Callable[[str], Optional[FilesMap]]]] = [
    ("direct_json", _direct_json),
    ("embedded_json", _embedded_json),
    ("file_markers", _file_markers),
]


def extract_files(raw_text: str) -> ExtractionResult:
    """Parse a completion into a file map, falling back to the raw text."""
    text = raw_text or ""

    for name, strategy in STRATEGIES:
        files = strategy(text)
        if files is not None:
            logger.info(
                "Extracted %d file(s) from completion",
                len(files),
                extra={"strategy": name},
            )
            return ExtractionResult(files=files, strategy=name)

    logger.warning("No structured files found in completion; returning raw text")
    return ExtractionResult(
        files={RAW_FALLBACK_PATH: text},
        strategy="raw_text",
        structured=False,
        message="Could not extract structured files from the response; returning raw text.",
        raw=text,
    )
