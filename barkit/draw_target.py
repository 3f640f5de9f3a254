"""Draw targets: where progress output goes and how often it is painted.

Clock readings passed as ``now`` are monotonic nanoseconds, as returned by
:func:`time.monotonic_ns`.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from barkit.lines import Line, LineKind, visual_line_count
from barkit.term import Terminal

MAX_BURST = 20
DEFAULT_REFRESH_RATE = 20

_NANOS_PER_MILLI = 1_000_000


class TermLike(Protocol):
    """What a draw target needs from a terminal."""

    def width(self) -> int: ...

    def height(self) -> int: ...

    def move_cursor_up(self, n: int) -> None: ...

    def move_cursor_down(self, n: int) -> None: ...

    def clear_line(self) -> None: ...

    def write_str(self, text: str) -> None: ...

    def write_line(self, text: str) -> None: ...

    def flush(self) -> None: ...


class MultiProgressAlignment(Enum):
    """Vertical alignment of a group of bars when some of them go away."""

    TOP = "top"
    BOTTOM = "bottom"


class RateLimiter:
    """Limits draws to a rate, allowing occasional bursts above it."""

    def __init__(self, rate: int, now: int | None = None) -> None:
        if rate <= 0:
            raise ValueError("refresh rate must be positive")
        self.interval = 1000 // rate  # milliseconds
        self.capacity = MAX_BURST
        self.prev = time.monotonic_ns() if now is None else now

    def allow(self, now: int) -> bool:
        """Return True if a draw at ``now`` is permitted, consuming capacity."""
        if now < self.prev:
            return False

        elapsed = now - self.prev
        interval_ns = self.interval * _NANOS_PER_MILLI
        if self.capacity == 0 and elapsed < interval_ns:
            return False

        new = (elapsed // _NANOS_PER_MILLI) // self.interval
        remainder = elapsed % interval_ns

        self.capacity = min(MAX_BURST, self.capacity + new - 1)
        self.prev = now - remainder
        return True


@dataclass
class DrawState:
    """The lines most recently rendered for an element."""

    lines: list[Line] = field(default_factory=list)
    move_cursor: bool = False
    alignment: MultiProgressAlignment = MultiProgressAlignment.TOP

    def reset(self) -> None:
        """Forget all lines."""
        self.lines.clear()

    def visual_line_count(self, width: int) -> int:
        """Rows the lines take on a terminal ``width`` columns wide."""
        return visual_line_count(self.lines, width)

    def draw_to_term(self, term: TermLike, last_line_count: int) -> int:
        """Paint the lines over the ``last_line_count`` rows drawn before.

        Returns the number of dynamic rows now on screen.
        """
        if self.lines and self.move_cursor:
            term.move_cursor_up(max(last_line_count - 1, 0))
            term.write_str("\r")
        else:
            n = last_line_count
            term.move_cursor_up(max(n - 1, 0))
            for i in range(n):
                term.clear_line()
                if i + 1 != n:
                    term.move_cursor_down(1)
            term.move_cursor_up(max(n - 1, 0))

        term_width = term.width()
        full_height = self.visual_line_count(term_width)

        shift = 0
        if self.alignment is MultiProgressAlignment.BOTTOM and full_height < last_line_count:
            shift = last_line_count - full_height
            for _ in range(shift):
                term.write_line("")

        real_height = 0
        term_height = term.height()
        last = len(self.lines) - 1
        for idx, line in enumerate(self.lines):
            line_height = line.wrapped_height(term_width)

            if line.is_bar:
                if real_height + line_height > term_height:
                    break
                real_height += line_height

            if idx != 0:
                term.write_line("")

            term.write_str(line.content)

            if idx == last:
                # Keep the cursor at the right edge so later prints start on a fresh row.
                filler = line_height * term_width - line.console_width()
                term.write_str(" " * filler)

        term.flush()
        return real_height + shift


@dataclass(frozen=True)
class LineAdjust:
    """A change to the remembered row count before the next draw."""

    clears: bool
    count: int

    @classmethod
    def clear(cls, count: int) -> LineAdjust:
        """Also clear ``count`` more rows on the next draw."""
        return cls(True, count)

    @classmethod
    def keep(cls, count: int) -> LineAdjust:
        """Leave ``count`` rows untouched on the next draw."""
        return cls(False, count)

    def apply(self, last_line_count: int) -> int:
        """The adjusted row count, never below zero."""
        if self.clears:
            return last_line_count + self.count
        return max(last_line_count - self.count, 0)


class DrawStateWrapper:
    """Context manager giving access to a draw state.

    When built with an orphan list, lines that carry no progress information
    are moved into that list on exit.
    """

    def __init__(self, state: DrawState, orphan_lines: list[Line] | None = None) -> None:
        self.state = state
        self.orphan_lines = orphan_lines

    def __enter__(self) -> DrawState:
        return self.state

    def __exit__(self, *exc_info: Any) -> None:
        if self.orphan_lines is None:
            return
        kept = []
        for line in self.state.lines:
            if line.kind in (LineKind.TEXT, LineKind.EMPTY):
                self.orphan_lines.append(line)
            else:
                kept.append(line)
        self.state.lines = kept


class _TargetKind(Enum):
    TERM = "term"
    TERM_LIKE = "term_like"
    MULTI = "multi"
    HIDDEN = "hidden"


@dataclass
class _TermSlot:
    term: Any
    rate_limiter: RateLimiter | None
    draw_state: DrawState = field(default_factory=DrawState)
    last_line_count: int = 0


class Drawable:
    """A target that is ready to be painted right now."""

    def __init__(
        self,
        *,
        slot: _TermSlot | None = None,
        multi_state: Any = None,
        idx: int = 0,
        force_draw: bool = False,
        now: int = 0,
    ) -> None:
        self._slot = slot
        self._multi_state = multi_state
        self._idx = idx
        self._force_draw = force_draw
        self._now = now

    def adjust_last_line_count(self, adjust: LineAdjust) -> None:
        """Change how many rows the next draw keeps or clears."""
        if self._slot is not None:
            self._slot.last_line_count = adjust.apply(self._slot.last_line_count)

    def state(self) -> DrawStateWrapper:
        """The draw state, emptied and ready to receive new lines."""
        if self._slot is not None:
            wrapper = DrawStateWrapper(self._slot.draw_state)
        else:
            wrapper = self._multi_state.draw_state(self._idx)
        wrapper.state.reset()
        return wrapper

    def clear(self) -> None:
        """Erase what was drawn."""
        with self.state():
            pass
        self.draw()

    def draw(self) -> None:
        """Paint the current state."""
        if self._slot is not None:
            slot = self._slot
            slot.last_line_count = slot.draw_state.draw_to_term(slot.term, slot.last_line_count)
        else:
            self._multi_state.draw(self._force_draw, None, self._now)

    def width(self) -> int | None:
        """Columns available, if known."""
        if self._slot is not None:
            return self._slot.term.width()
        return self._multi_state.width()


class ProgressDrawTarget:
    """Where a progress bar or group of bars paints, and how often."""

    def __init__(
        self,
        kind: _TargetKind,
        *,
        slot: _TermSlot | None = None,
        multi_state: Any = None,
        idx: int = 0,
    ) -> None:
        self._kind = kind
        self._slot = slot
        self._multi_state = multi_state
        self._idx = idx

    def __repr__(self) -> str:
        return f"ProgressDrawTarget(kind={self._kind.value})"

    @classmethod
    def stdout(cls, refresh_rate: int = DEFAULT_REFRESH_RATE) -> ProgressDrawTarget:
        """Draw to buffered standard output at most ``refresh_rate`` times a second."""
        return cls.term(Terminal.stdout(), refresh_rate)

    @classmethod
    def stderr(cls, refresh_rate: int = DEFAULT_REFRESH_RATE) -> ProgressDrawTarget:
        """Draw to buffered standard error at most ``refresh_rate`` times a second."""
        return cls.term(Terminal.stderr(), refresh_rate)

    @classmethod
    def term(cls, term: Terminal, refresh_rate: int = DEFAULT_REFRESH_RATE) -> ProgressDrawTarget:
        """Draw to a terminal; nothing is drawn if it is not interactive."""
        return cls(_TargetKind.TERM, slot=_TermSlot(term, RateLimiter(refresh_rate)))

    @classmethod
    def term_like(cls, term: TermLike, refresh_rate: int | None = None) -> ProgressDrawTarget:
        """Draw to any terminal-like object, rate limited only if a rate is given."""
        limiter = None if refresh_rate is None else RateLimiter(refresh_rate)
        return cls(_TargetKind.TERM_LIKE, slot=_TermSlot(term, limiter))

    @classmethod
    def hidden(cls) -> ProgressDrawTarget:
        """A target that never draws."""
        return cls(_TargetKind.HIDDEN)

    @classmethod
    def remote(cls, state: Any, idx: int) -> ProgressDrawTarget:
        """A target that forwards to member ``idx`` of a shared multi-bar state."""
        return cls(_TargetKind.MULTI, multi_state=state, idx=idx)

    @property
    def remote_target(self) -> tuple[Any, int] | None:
        """The shared state and member index for a remote target, else None."""
        if self._kind is _TargetKind.MULTI:
            return self._multi_state, self._idx
        return None

    def is_hidden(self) -> bool:
        """True if nothing drawn here would be seen."""
        if self._kind is _TargetKind.HIDDEN:
            return True
        if self._kind is _TargetKind.TERM:
            return not self._slot.term.is_term()
        if self._kind is _TargetKind.MULTI:
            return self._multi_state.is_hidden()
        return False

    def width(self) -> int | None:
        """Columns available, or None for a hidden target."""
        if self._slot is not None:
            return self._slot.term.width()
        if self._kind is _TargetKind.MULTI:
            return self._multi_state.width()
        return None

    def mark_zombie(self) -> None:
        """Tell the owning multi-bar state that this member's bar is gone."""
        if self._kind is _TargetKind.MULTI:
            self._multi_state.mark_zombie(self._idx)

    def set_move_cursor(self, move_cursor: bool) -> None:
        """Move the cursor over old output instead of clearing it."""
        if self._slot is not None:
            self._slot.draw_state.move_cursor = move_cursor

    def drawable(self, force_draw: bool, now: int) -> Drawable | None:
        """A drawable if painting is allowed at ``now``, else None."""
        if self._kind is _TargetKind.TERM:
            slot = self._slot
            if not slot.term.is_term():
                return None
            if force_draw or slot.rate_limiter.allow(now):
                return Drawable(slot=slot)
            return None
        if self._kind is _TargetKind.TERM_LIKE:
            slot = self._slot
            if force_draw or slot.rate_limiter is None or slot.rate_limiter.allow(now):
                return Drawable(slot=slot)
            return None
        if self._kind is _TargetKind.MULTI:
            return Drawable(
                multi_state=self._multi_state, idx=self._idx, force_draw=force_draw, now=now
            )
        return None

    def disconnect(self, now: int) -> None:
        """Detach cleanly, clearing this member's lines from a shared state."""
        if self._kind is _TargetKind.MULTI:
            Drawable(multi_state=self._multi_state, idx=self._idx, force_draw=True, now=now).clear()

    def adjust_last_line_count(self, adjust: LineAdjust) -> None:
        """Change how many rows the next draw keeps or clears."""
        if self._slot is not None:
            self._slot.last_line_count = adjust.apply(self._slot.last_line_count)