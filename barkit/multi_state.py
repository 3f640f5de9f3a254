"""Shared state behind a group of progress bars drawn together."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, TypeVar

from barkit.draw_target import (
    DrawState,
    DrawStateWrapper,
    LineAdjust,
    MultiProgressAlignment,
    ProgressDrawTarget,
)
from barkit.lines import Line, visual_line_count

R = TypeVar("R")


class _Where(Enum):
    END = "end"
    INDEX = "index"
    INDEX_FROM_BACK = "index_from_back"
    AFTER = "after"
    BEFORE = "before"


@dataclass(frozen=True)
class InsertLocation:
    """Where a new member goes in the visual order."""

    where: _Where
    value: int = 0

    @classmethod
    def end(cls) -> InsertLocation:
        """Below every existing member."""
        return cls(_Where.END)

    @classmethod
    def index(cls, pos: int) -> InsertLocation:
        """At visual position ``pos``, or at the end if past it."""
        return cls(_Where.INDEX, pos)

    @classmethod
    def index_from_back(cls, pos: int) -> InsertLocation:
        """``pos`` places before the end, or at the start if past it."""
        return cls(_Where.INDEX_FROM_BACK, pos)

    @classmethod
    def after(cls, idx: int) -> InsertLocation:
        """Right below the member with index ``idx``."""
        return cls(_Where.AFTER, idx)

    @classmethod
    def before(cls, idx: int) -> InsertLocation:
        """Right above the member with index ``idx``."""
        return cls(_Where.BEFORE, idx)


@dataclass
class MultiStateMember:
    """One slot of the group: its last drawn lines and whether its bar is gone."""

    draw_state: DrawState | None = None
    is_zombie: bool = False


class MultiState:
    """Members, their visual order and the target they are drawn to.

    ``lock`` guards the state when it is shared between threads.
    """

    def __init__(self, draw_target: ProgressDrawTarget) -> None:
        self.members: list[MultiStateMember] = []
        # Indices of removed members, reused by later inserts.
        self.free_set: list[int] = []
        # Member indices in the order they appear on screen.
        self.ordering: list[int] = []
        self.draw_target = draw_target
        self.alignment = MultiProgressAlignment.TOP
        # Lines printed through member bars, shown above everything else.
        self.orphan_lines: list[Line] = []
        # Rows of finished bars left on screen above the live ones.
        self.zombie_lines_count = 0
        self.lock = threading.RLock()

    def __len__(self) -> int:
        return len(self.members) - len(self.free_set)

    def _check_consistent(self) -> None:
        if len(self) != len(self.ordering):
            raise RuntimeError("Draw state is inconsistent")

    def mark_zombie(self, index: int) -> None:
        """Record that member ``index`` lost its bar.

        The first visible member is reaped at once, its rows left on screen;
        any other waits for the next draw.
        """
        width = self.width()
        member = self.members[index]

        if index != self.ordering[0]:
            member.is_zombie = True
            return

        line_count = 0
        if member.draw_state is not None and width is not None:
            line_count = member.draw_state.visual_line_count(width)

        self.zombie_lines_count += line_count
        self.draw_target.adjust_last_line_count(LineAdjust.keep(line_count))
        self.remove_idx(index)

    def draw(self, force_draw: bool, extra_lines: list[Line] | None, now: int) -> None:
        """Paint orphan lines, ``extra_lines`` and every member's lines."""
        width = self.width()
        if width is None:
            return

        reap_indices = []
        adjust = 0
        for index in self.ordering:
            member = self.members[index]
            if not member.is_zombie:
                break
            line_count = 0
            if member.draw_state is not None:
                line_count = member.draw_state.visual_line_count(width)
            self.zombie_lines_count += line_count
            adjust += line_count
            reap_indices.append(index)

        # A printed line must appear above everything, so zombie rows get erased.
        if extra_lines is not None:
            self.draw_target.adjust_last_line_count(LineAdjust.clear(self.zombie_lines_count))
            self.zombie_lines_count = 0

        if visual_line_count(self.orphan_lines, width) > 0:
            force_draw = True
        drawable = self.draw_target.drawable(force_draw, now)
        if drawable is None:
            return

        with drawable.state() as draw_state:
            draw_state.alignment = self.alignment
            if extra_lines is not None:
                draw_state.lines.extend(extra_lines)
            draw_state.lines.extend(self.orphan_lines)
            self.orphan_lines.clear()
            for index in self.ordering:
                member_state = self.members[index].draw_state
                if member_state is not None:
                    draw_state.lines.extend(member_state.lines)

        try:
            drawable.draw()
        finally:
            for index in reap_indices:
                self.remove_idx(index)
            # Zombie rows were drawn for the last time; leave them on screen.
            if extra_lines is None:
                self.draw_target.adjust_last_line_count(LineAdjust.keep(adjust))

    def println(self, msg: str, now: int) -> None:
        """Print ``msg`` above all bars; an empty message still prints a row."""
        if msg:
            parts = msg.split("\n")
            if parts[-1] == "":
                parts.pop()
            lines = [Line.text(part.removesuffix("\r")) for part in parts]
        else:
            lines = [Line.empty()]
        self.draw(True, lines, now)

    def draw_state(self, idx: int) -> DrawStateWrapper:
        """The draw state of member ``idx``; printed lines move to the orphans on exit."""
        member = self.members[idx]
        if member.draw_state is None:
            member.draw_state = DrawState()
        return DrawStateWrapper(member.draw_state, self.orphan_lines)

    def is_hidden(self) -> bool:
        """True if the group's target shows nothing."""
        return self.draw_target.is_hidden()

    def suspend(self, func: Callable[[], R], now: int) -> R:
        """Clear the bars, run ``func``, then draw the bars again."""
        self.clear(now)
        result = func()
        self.draw(True, None, time.monotonic_ns())
        return result

    def width(self) -> int | None:
        """Columns of the group's target, or None if hidden."""
        return self.draw_target.width()

    def insert(self, location: InsertLocation) -> int:
        """Create a member at ``location`` and return its index."""
        if self.free_set:
            idx = self.free_set.pop()
            self.members[idx] = MultiStateMember()
        else:
            self.members.append(MultiStateMember())
            idx = len(self.members) - 1

        where = location.where
        if where is _Where.END:
            self.ordering.append(idx)
        elif where is _Where.INDEX:
            self.ordering.insert(min(location.value, len(self.ordering)), idx)
        elif where is _Where.INDEX_FROM_BACK:
            self.ordering.insert(max(len(self.ordering) - location.value, 0), idx)
        elif where is _Where.AFTER:
            self.ordering.insert(self.ordering.index(location.value) + 1, idx)
        else:
            self.ordering.insert(self.ordering.index(location.value), idx)

        self._check_consistent()
        return idx

    def clear(self, now: int) -> None:
        """Erase every row the group has drawn, zombie rows included."""
        drawable = self.draw_target.drawable(True, now)
        if drawable is None:
            return
        drawable.adjust_last_line_count(LineAdjust.clear(self.zombie_lines_count))
        self.zombie_lines_count = 0
        drawable.clear()

    def remove_idx(self, idx: int) -> None:
        """Free member ``idx``; removing it twice does nothing."""
        if idx in self.free_set:
            return
        self.members[idx] = MultiStateMember()
        self.free_set.append(idx)
        self.ordering = [x for x in self.ordering if x != idx]
        self._check_consistent()