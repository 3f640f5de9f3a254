"""Human-readable formatting of durations, byte sizes and counts."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import ClassVar, Union

DurationLike = Union[timedelta, int, float]

_MICRO = timedelta(microseconds=1)

SECOND = timedelta(seconds=1)
MINUTE = timedelta(minutes=1)
HOUR = timedelta(hours=1)
DAY = timedelta(days=1)
WEEK = timedelta(days=7)
YEAR = timedelta(days=365)

# (unit, long name, short name), largest first.
UNITS: tuple[tuple[timedelta, str, str], ...] = (
    (YEAR, "year", "y"),
    (WEEK, "week", "w"),
    (DAY, "day", "d"),
    (HOUR, "hour", "h"),
    (MINUTE, "minute", "m"),
    (SECOND, "second", "s"),
)

_BINARY_PREFIXES = ("Ki", "Mi", "Gi", "Ti", "Pi", "Ei", "Zi", "Yi")
_DECIMAL_PREFIXES = ("k", "M", "G", "T", "P", "E", "Z", "Y")


def _as_timedelta(value: DurationLike) -> timedelta:
    duration = value if isinstance(value, timedelta) else timedelta(seconds=value)
    if duration < timedelta(0):
        raise ValueError("duration must not be negative")
    return duration


def _micros(duration: timedelta) -> int:
    return duration // _MICRO


def _group_thousands(digits: str) -> str:
    """Insert a comma before every group of three characters counted from the right."""
    out = []
    length = len(digits)
    for idx, char in enumerate(digits):
        out.append(char)
        pos = length - idx - 1
        if pos > 0 and pos % 3 == 0:
            out.append(",")
    return "".join(out)


class _Displayable:
    """Lets format specifications such as ``>12`` apply to the rendered text."""

    def __format__(self, spec: str) -> str:
        return format(str(self), spec)


@dataclass(frozen=True)
class FormattedDuration(_Displayable):
    """A duration rendered as ``HH:MM:SS``, with a day count when needed."""

    duration: timedelta

    def __post_init__(self) -> None:
        object.__setattr__(self, "duration", _as_timedelta(self.duration))

    def __str__(self) -> str:
        total = int(self.duration.total_seconds())
        minutes, seconds = divmod(total, 60)
        hours, minutes = divmod(minutes, 60)
        days, hours = divmod(hours, 24)
        clock = f"{hours:02}:{minutes:02}:{seconds:02}"
        return f"{days}d {clock}" if days > 0 else clock


@dataclass(frozen=True)
class HumanDuration(_Displayable):
    """A duration rounded to its most natural unit, e.g. ``3 minutes``.

    The format spec ``#`` selects the short form, e.g. ``3m``.
    """

    duration: timedelta

    def __post_init__(self) -> None:
        object.__setattr__(self, "duration", _as_timedelta(self.duration))

    def _render(self, alternate: bool) -> str:
        value = _micros(self.duration)
        last = len(UNITS) - 1
        idx = last
        for i, (unit, _, _) in enumerate(UNITS[:-1]):
            cur = _micros(unit)
            nxt = _micros(UNITS[i + 1][0])
            if value + nxt // 2 >= cur + cur // 2:
                idx = i
                break

        unit, name, alt = UNITS[idx]
        unit_us = _micros(unit)
        # Round half up.
        count = (2 * value + unit_us) // (2 * unit_us)
        if idx < last:
            count = max(count, 2)

        if alternate:
            return f"{count}{alt}"
        if count == 1:
            return f"{count} {name}"
        return f"{count} {name}s"

    def __str__(self) -> str:
        return self._render(alternate=False)

    def __format__(self, spec: str) -> str:
        if spec.startswith("#"):
            return format(self._render(alternate=True), spec[1:])
        return format(self._render(alternate=False), spec)


@dataclass(frozen=True)
class _Bytes(_Displayable):
    value: int

    _base: ClassVar[int] = 1024
    _prefixes: ClassVar[tuple[str, ...]] = _BINARY_PREFIXES

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError("byte count must not be negative")

    def __str__(self) -> str:
        amount = float(self.value)
        base = float(self._base)
        if amount < base:
            return f"{amount:.0f} B"
        level = 0
        while amount >= base and level < len(self._prefixes):
            amount /= base
            level += 1
        return f"{amount:.2f} {self._prefixes[level - 1]}B"


@dataclass(frozen=True)
class HumanBytes(_Bytes):
    """A byte count with binary prefixes, e.g. ``1.46 KiB``."""

    def __str__(self) -> str:
        return super().__str__()


@dataclass(frozen=True)
class BinaryBytes(_Bytes):
    """A byte count with ISO/IEC binary prefixes, e.g. ``1.46 KiB``."""

    def __str__(self) -> str:
        return super().__str__()


@dataclass(frozen=True)
class DecimalBytes(_Bytes):
    """A byte count with SI prefixes, e.g. ``1.50 kB``."""

    _base: ClassVar[int] = 1000
    _prefixes: ClassVar[tuple[str, ...]] = _DECIMAL_PREFIXES

    def __str__(self) -> str:
        return super().__str__()


@dataclass(frozen=True)
class HumanCount(_Displayable):
    """An integer count with comma thousands separators."""

    value: int

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError("count must not be negative")

    def __str__(self) -> str:
        return _group_thousands(str(self.value))


@dataclass(frozen=True)
class HumanFloatCount(_Displayable):
    """A float count with comma separators and at most four fraction digits."""

    value: float

    def __str__(self) -> str:
        text = f"{self.value:.4f}"
        int_part, dot, frac_part = text.partition(".")
        if not dot:
            int_part, frac_part = text, ""
        result = _group_thousands(int_part)
        frac_trimmed = frac_part.rstrip("0")
        if frac_trimmed:
            result += "." + frac_trimmed
        return result