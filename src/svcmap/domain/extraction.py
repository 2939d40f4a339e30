"""Operation-name extraction — find a traced operation name under the cursor.

Pure functions, no infrastructure dependencies. Consumed by the resolution
service before any remote lookup is made.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import PurePath

# Group 1 of every pattern captures the operation name.
_JS_TS_PATTERNS = [re.compile(r"""tracer\.trace\(\s*["'`](.*?)["'`]""")]

OPERATION_NAME_PATTERNS: dict[str, list[re.Pattern[str]]] = {
    "javascript": _JS_TS_PATTERNS,
    "typescript": _JS_TS_PATTERNS,
    "python": [
        re.compile(r"""tracer\.trace\(\s*["'](.*?)["']"""),
        re.compile(r"""tracer\.wrap\(\s*name\s*=\s*["'](.*?)["']"""),
    ],
    "go": [re.compile(r'tracer\.StartSpan(?:FromContext)?\([^"]*"(.*?)"')],
}

_EXTENSION_LANGUAGES: dict[str, str] = {
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".py": "python",
    ".go": "go",
}


@dataclass(frozen=True)
class TextPosition:
    """Zero-based line/character position in a document."""

    line: int
    character: int


@dataclass(frozen=True)
class TextRange:
    """Span of text on one or more lines; both ends are inclusive."""

    start: TextPosition
    end: TextPosition

    def contains(self, position: TextPosition) -> bool:
        after_start = (position.line, position.character) >= (self.start.line, self.start.character)
        before_end = (position.line, position.character) <= (self.end.line, self.end.character)
        return after_start and before_end

    def to_dict(self) -> dict[str, dict[str, int]]:
        return {
            "start": {"line": self.start.line, "character": self.start.character},
            "end": {"line": self.end.line, "character": self.end.character},
        }


@dataclass(frozen=True)
class OperationNameMatch:
    """An operation name and the range to highlight for it."""

    operation_name: str
    range: TextRange


def language_for_path(path: str) -> str | None:
    """Map a file path to a language id by extension, or None if unsupported."""
    return _EXTENSION_LANGUAGES.get(PurePath(path).suffix.lower())


def extract_operation_name(
    text: str,
    language: str,
    position: TextPosition,
) -> OperationNameMatch | None:
    """Return the operation name whose tracing call covers *position*.

    Patterns are tried in order against the hovered line; the first match
    whose full text covers the cursor wins. Returns None for unsupported
    languages, blank or out-of-range lines, and cursors outside any match.
    """
    patterns = OPERATION_NAME_PATTERNS.get(language)
    if not patterns:
        return None

    lines = text.split("\n")
    if position.line < 0 or position.line >= len(lines):
        return None
    hovered_line = lines[position.line]
    if not hovered_line:
        return None

    for pattern in patterns:
        for match in pattern.finditer(hovered_line):
            highlight = TextRange(
                start=TextPosition(position.line, match.start()),
                end=TextPosition(position.line, match.end()),
            )
            if highlight.contains(position):
                return OperationNameMatch(operation_name=match.group(1), range=highlight)
    return None
