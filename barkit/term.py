"""A buffered terminal that progress output is drawn onto."""

from __future__ import annotations

import io
import os
import sys
from typing import TextIO

# Size reported when the stream is not attached to a terminal.
_FALLBACK_SIZE = (24, 79)


class Terminal:
    """Writes text and cursor movements to a stream.

    When ``buffered`` is true, output collects in memory until :meth:`flush`.
    ``size`` fixes the reported (rows, columns) instead of asking the stream.
    """

    def __init__(
        self,
        stream: TextIO,
        *,
        buffered: bool = True,
        size: tuple[int, int] | None = None,
    ) -> None:
        self._stream = stream
        self._buffered = buffered
        self._size = size
        self._pending: list[str] = []

    @classmethod
    def stdout(cls) -> Terminal:
        """A buffered terminal on standard output."""
        return cls(sys.stdout)

    @classmethod
    def stderr(cls) -> Terminal:
        """A buffered terminal on standard error."""
        return cls(sys.stderr)

    def is_term(self) -> bool:
        """True if the stream is attached to an interactive terminal."""
        isatty = getattr(self._stream, "isatty", None)
        if isatty is None:
            return False
        try:
            return bool(isatty())
        except (ValueError, OSError):
            return False

    def _dimensions(self) -> tuple[int, int]:
        if self._size is not None:
            return self._size
        try:
            size = os.get_terminal_size(self._stream.fileno())
        except (AttributeError, ValueError, OSError, io.UnsupportedOperation):
            return _FALLBACK_SIZE
        return size.lines, size.columns

    def width(self) -> int:
        """Number of columns."""
        return self._dimensions()[1]

    def height(self) -> int:
        """Number of rows."""
        return self._dimensions()[0]

    def _emit(self, text: str) -> None:
        if self._buffered:
            self._pending.append(text)
        else:
            self._stream.write(text)
            self._stream.flush()

    def move_cursor_up(self, n: int) -> None:
        """Move the cursor up ``n`` rows."""
        if n < 0:
            raise ValueError("row count must not be negative")
        if n > 0:
            self._emit(f"\x1b[{n}A")

    def move_cursor_down(self, n: int) -> None:
        """Move the cursor down ``n`` rows."""
        if n < 0:
            raise ValueError("row count must not be negative")
        if n > 0:
            self._emit(f"\x1b[{n}B")

    def clear_line(self) -> None:
        """Erase the current row and return to its start."""
        self._emit("\r\x1b[2K")

    def write_str(self, text: str) -> None:
        """Write ``text`` without a newline."""
        self._emit(text)

    def write_line(self, text: str) -> None:
        """Write ``text`` followed by a newline."""
        self._emit(text + "\n")

    def flush(self) -> None:
        """Send buffered output to the stream."""
        if self._pending:
            self._stream.write("".join(self._pending))
            self._pending.clear()
        self._stream.flush()