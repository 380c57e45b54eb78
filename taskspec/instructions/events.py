"""Block-structure event tokenizer for spec documents.

Turns Markdown text into a flat list of events (heading start/end,
list-item start/end, inline text/code, soft/hard breaks) that the parser
consumes in a single left-to-right pass. Only the block structure the
spec format relies on is recognized:

- ATX headings (``#`` through ``######``)
- bullet and ordered list items, with indented or lazy continuation lines
- fenced code blocks (``` or ~~~), emitted verbatim (fence lines included)
  as code, so their lines are never headings or items
- thematic breaks, which produce no events
"""

import re
from enum import Enum
from typing import NamedTuple


class EventKind(str, Enum):
    """Kind of block-structure event."""

    HEADING_START = "heading_start"
    HEADING_END = "heading_end"
    ITEM_START = "item_start"
    ITEM_END = "item_end"
    TEXT = "text"
    CODE = "code"
    SOFT_BREAK = "soft_break"
    HARD_BREAK = "hard_break"


class BlockEvent(NamedTuple):
    """A single tokenizer event."""

    kind: EventKind
    text: str = ""
    level: int = 0


HEADING_PATTERN = re.compile(r"^ {0,3}(#{1,6})(?:[ \t]+(.*?))?[ \t]*$")
CLOSING_HASHES = re.compile(r"(?:^|[ \t]+)#+$")
FENCE_PATTERN = re.compile(r"^ {0,3}(`{3,}|~{3,})")
THEMATIC_BREAK = re.compile(r"^ {0,3}([-*_])(?:[ \t]*\1){2,}[ \t]*$")
LIST_ITEM_PATTERN = re.compile(r"^[ \t]*([-*+]|\d{1,9}[.)])(?:[ \t]+(.*)|[ \t]*)$")
CODE_SPAN = re.compile(r"(`+)(.+?)\1")


def tokenize(text: str) -> list[BlockEvent]:
    """Tokenize Markdown text into block-structure events.

    Args:
        text: Document text.

    Returns:
        Ordered list of BlockEvent objects.

    Example:
        >>> [e.kind.value for e in tokenize("## Model\\nsonnet")]
        ['heading_start', 'text', 'heading_end', 'text', 'soft_break']
    """
    return _Tokenizer(text).run()


class _Tokenizer:
    """Line scanner that tracks fence and list-item state."""

    def __init__(self, text: str) -> None:
        self.lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
        self.events: list[BlockEvent] = []
        self.fence: str | None = None
        self.in_item = False

    def run(self) -> list[BlockEvent]:
        for line in self.lines:
            self._line(line)
        self._close_item()
        return self.events

    def _line(self, line: str) -> None:
        if self.fence is not None:
            self._fenced_line(line)
            return

        fence_match = FENCE_PATTERN.match(line)
        if fence_match:
            self._close_item()
            self.fence = fence_match.group(1)
            self._emit(EventKind.CODE, line)
            self._emit(EventKind.SOFT_BREAK)
            return

        if not line.strip():
            self._close_item()
            self._emit(EventKind.SOFT_BREAK)
            return

        heading_match = HEADING_PATTERN.match(line)
        if heading_match:
            self._close_item()
            self._heading(len(heading_match.group(1)), heading_match.group(2) or "")
            return

        if THEMATIC_BREAK.match(line):
            self._close_item()
            return

        item_match = LIST_ITEM_PATTERN.match(line)
        if item_match:
            self._close_item()
            # Item start carries its marker ("-", "*", "1.")
            self._emit(EventKind.ITEM_START, item_match.group(1))
            self.in_item = True
            self._inline(item_match.group(2) or "")
            return

        if self.in_item:
            # Continuation of the current item
            self._emit(EventKind.SOFT_BREAK)
            self._inline(line.strip())
            return

        self._paragraph_line(line)

    def _fenced_line(self, line: str) -> None:
        marker = self.fence or ""
        stripped = line.strip()
        if stripped and set(stripped) == {marker[0]} and len(stripped) >= len(marker):
            self.fence = None
        if line:
            self._emit(EventKind.CODE, line)
        self._emit(EventKind.SOFT_BREAK)

    def _heading(self, level: int, content: str) -> None:
        content = CLOSING_HASHES.sub("", content).strip()
        self._emit(EventKind.HEADING_START, level=level)
        self._inline(content)
        self._emit(EventKind.HEADING_END, level=level)

    def _paragraph_line(self, line: str) -> None:
        hard = line.endswith("  ") or line.rstrip().endswith("\\")
        content = line.strip()
        if content.endswith("\\"):
            content = content[:-1].rstrip()
        self._inline(content)
        self._emit(EventKind.HARD_BREAK if hard else EventKind.SOFT_BREAK)

    def _inline(self, content: str) -> None:
        """Split a line into text and inline-code events."""
        position = 0
        for match in CODE_SPAN.finditer(content):
            if match.start() > position:
                self._emit(EventKind.TEXT, content[position:match.start()])
            self._emit(EventKind.CODE, match.group(2).strip())
            position = match.end()
        if position < len(content):
            self._emit(EventKind.TEXT, content[position:])

    def _close_item(self) -> None:
        if self.in_item:
            self._emit(EventKind.ITEM_END)
            self.in_item = False

    def _emit(self, kind: EventKind, text: str = "", level: int = 0) -> None:
        self.events.append(BlockEvent(kind, text, level))
