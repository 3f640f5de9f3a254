"""Several progress bars drawn together as one block of output."""

from __future__ import annotations

import time
from typing import Callable, TypeVar

from barkit.draw_target import MultiProgressAlignment, ProgressDrawTarget
from barkit.multi_state import InsertLocation, MultiState

R = TypeVar("R")


class MultiProgress:
    """Manages several progress bars, possibly updated from different threads.

    Each member is represented by the remote draw target that the group hands
    out when the member is added; a progress bar drawing to that target ends
    up in the shared block of output.
    """

    def __init__(self, draw_target: ProgressDrawTarget | None = None) -> None:
        if draw_target is None:
            draw_target = ProgressDrawTarget.stderr()
        self.state = MultiState(draw_target)
        # The target currently owning each member index.
        self._owners: dict[int, ProgressDrawTarget] = {}

    def __repr__(self) -> str:
        return f"MultiProgress(members={len(self.state)})"

    def set_draw_target(self, target: ProgressDrawTarget) -> None:
        """Replace the target the whole group is drawn to."""
        with self.state.lock:
            self.state.draw_target.disconnect(time.monotonic_ns())
            self.state.draw_target = target

    def set_move_cursor(self, move_cursor: bool) -> None:
        """Move the cursor over old output instead of clearing lines.

        Reduces flicker, but should not be used if the number of bars changes.
        """
        with self.state.lock:
            self.state.draw_target.set_move_cursor(move_cursor)

    def set_alignment(self, alignment: MultiProgressAlignment) -> None:
        """Choose how the block is aligned when members go away."""
        with self.state.lock:
            self.state.alignment = alignment

    def _internalize(self, location: InsertLocation) -> ProgressDrawTarget:
        with self.state.lock:
            idx = self.state.insert(location)
            target = ProgressDrawTarget.remote(self.state, idx)
            self._owners[idx] = target
        return target

    def _member_index(self, target: ProgressDrawTarget) -> int:
        remote = target.remote_target
        if remote is None:
            raise ValueError("draw target is not a member of any group")
        state, idx = remote
        if state is not self.state or self._owners.get(idx) is not target:
            raise ValueError("draw target is not a member of this group")
        return idx

    def add(self) -> ProgressDrawTarget:
        """Add a member below all others and return its draw target."""
        return self._internalize(InsertLocation.end())

    def insert(self, index: int) -> ProgressDrawTarget:
        """Add a member at visual position ``index``, or at the end if past it."""
        return self._internalize(InsertLocation.index(index))

    def insert_from_back(self, index: int) -> ProgressDrawTarget:
        """Add a member ``index`` places before the end, or at the start if past it."""
        return self._internalize(InsertLocation.index_from_back(index))

    def insert_before(self, before: ProgressDrawTarget) -> ProgressDrawTarget:
        """Add a member right above the member drawing to ``before``."""
        with self.state.lock:
            return self._internalize(InsertLocation.before(self._member_index(before)))

    def insert_after(self, after: ProgressDrawTarget) -> ProgressDrawTarget:
        """Add a member right below the member drawing to ``after``."""
        with self.state.lock:
            return self._internalize(InsertLocation.after(self._member_index(after)))

    def remove(self, target: ProgressDrawTarget) -> None:
        """Remove the member drawing to ``target``.

        Targets that belong to no group, or whose member was already removed,
        are ignored. A target belonging to a different group is an error.
        """
        remote = target.remote_target
        if remote is None:
            return
        state, idx = remote
        if state is not self.state:
            raise ValueError("draw target belongs to a different group")
        with self.state.lock:
            if self._owners.get(idx) is not target:
                return
            del self._owners[idx]
            self.state.remove_idx(idx)

    def println(self, msg: str) -> None:
        """Print a line above all bars; does nothing if the target is hidden."""
        with self.state.lock:
            self.state.println(msg, time.monotonic_ns())

    def suspend(self, func: Callable[[], R]) -> R:
        """Hide the bars, run ``func``, then draw the bars again.

        ``func`` runs even when the target is hidden. The group stays locked
        while it runs.
        """
        with self.state.lock:
            return self.state.suspend(func, time.monotonic_ns())

    def clear(self) -> None:
        """Erase everything the group has drawn."""
        with self.state.lock:
            self.state.clear(time.monotonic_ns())

    def is_hidden(self) -> bool:
        """True if the group's output would not be seen."""
        with self.state.lock:
            return self.state.is_hidden()