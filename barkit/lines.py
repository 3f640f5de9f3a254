"""Lines of terminal output and the vertical space they take up."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from wcwidth import wcwidth

_ANSI_ESCAPE = re.compile(
    r"""
    \x1b\[[0-?]*[ -/]*[@-~]              # CSI sequences (colours, cursor moves)
    | \x1b\][^\x07\x1b]*(?:\x07|\x1b\\)  # OSC sequences (titles, hyperlinks)
    | \x1b[@-Z\\-_]                      # two-character escapes
    """,
    re.VERBOSE,
)


def measure_text_width(text: str) -> int:
    """Return the number of terminal columns ``text`` occupies, ignoring ANSI codes."""
    visible = _ANSI_ESCAPE.sub("", text)
    return sum(max(wcwidth(char), 0) for char in visible)


class LineKind(Enum):
    """What a line of output holds."""

    TEXT = "text"
    BAR = "bar"
    EMPTY = "empty"


@dataclass(frozen=True)
class Line:
    """One line of output, which may contain ANSI codes but no newlines."""

    kind: LineKind
    content: str = ""

    @classmethod
    def text(cls, text: str) -> Line:
        """A line of plain printed text."""
        return cls(LineKind.TEXT, text)

    @classmethod
    def bar(cls, text: str) -> Line:
        """A line that shows progress information."""
        return cls(LineKind.BAR, text)

    @classmethod
    def empty(cls) -> Line:
        """A line with nothing on it."""
        return cls(LineKind.EMPTY, "")

    @property
    def is_bar(self) -> bool:
        return self.kind is LineKind.BAR

    def console_width(self) -> int:
        """Columns taken by the visible part of the line."""
        return measure_text_width(self.content)

    def wrapped_height(self, width: int) -> int:
        """Rows the line occupies on a terminal ``width`` columns wide.

        A line with no visible characters still takes one row.
        """
        if width <= 0:
            raise ValueError("terminal width must be positive")
        return max(math.ceil(self.console_width() / width), 1)

    def __str__(self) -> str:
        return self.content


def visual_line_count(lines: Iterable[Line], width: int) -> int:
    """Total rows the lines occupy once wrapped at ``width`` columns."""
    return sum(line.wrapped_height(width) for line in lines)