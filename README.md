# barkit

Building blocks for command-line progress output:

- `barkit.format`: human-readable byte sizes, counts and durations.
- `barkit.lines`: lines of output and how many terminal rows they take,
  allowing for ANSI escape codes, wide characters and wrapping.
- `barkit.term`: a buffered `Terminal` that writes text and cursor movements
  to a stream.
- `barkit.draw_target`: `ProgressDrawTarget`, which decides where output is
  painted and how often, with a burst-tolerant `RateLimiter`.
- `barkit.multi_state` and `barkit.multi`: `MultiProgress`, which keeps
  several lines of progress output together as one block, ordered, with log
  lines printed above them.

## Installation

```
pip install barkit
```

Python 3.10 or newer is required. The only dependency is `wcwidth`.

## Formatting values

```python
from datetime import timedelta
from barkit.format import (
    BinaryBytes, DecimalBytes, FormattedDuration, HumanBytes,
    HumanCount, HumanDuration, HumanFloatCount,
)

str(HumanBytes(1_500))              # '1.46 KiB'
str(DecimalBytes(1_500_000))        # '1.50 MB'
str(BinaryBytes(1_500_000_000))     # '1.40 GiB'
str(HumanCount(1234567890))         # '1,234,567,890'
str(HumanFloatCount(7654.321))      # '7,654.321'
str(HumanDuration(timedelta(minutes=2)))   # '2 minutes'
format(HumanDuration(120), "#")            # '2m'
str(FormattedDuration(90_061))             # '1d 01:01:01'
```

Durations are given as a `timedelta` or a number of seconds. `HumanDuration`
rounds to the unit a person would say ("89 seconds", "2 minutes", "3 days")
and never says "1" of any unit larger than a second. The `#` format
specification gives the short form; other specifications such as `>12` pad
the text. Negative durations, byte sizes and counts raise `ValueError`.

## Measuring lines

```python
from barkit.lines import Line, measure_text_width, visual_line_count

measure_text_width("\x1b[1mbold\x1b[0m")  # 4: escape codes take no space
lines = [Line.text("1234567890"), Line.empty(), Line.text("1234567890")]
visual_line_count(lines, 5)              # 5 rows on a 5-column terminal
```

A `Line` is text (`Line.text`), progress information (`Line.bar`) or empty
(`Line.empty`). A line with no visible characters still takes one row.

## Draw targets

`ProgressDrawTarget` has these constructors:

- `stderr(refresh_rate=20)` and `stdout(refresh_rate=20)`: a buffered
  `Terminal` on a standard stream, painted at most `refresh_rate` times a
  second;
- `term(terminal, refresh_rate=20)`: a given `Terminal`;
- `term_like(obj, refresh_rate=None)`: any object with the `Terminal`
  drawing methods, rate limited only when a rate is given;
- `hidden()`: draws nothing.

A `term` target whose stream is not an interactive terminal counts as hidden
and paints nothing, so redirecting output to a file does not fill it with
escape codes. `Terminal(stream, buffered=True, size=None)` can be given a
fixed `(rows, columns)` size; otherwise it asks the stream and falls back to
24 by 79.

## Several lines at once

`MultiProgress(draw_target=None)` draws to standard error unless given a
target. Each member is added with `add`, `insert`, `insert_from_back`,
`insert_before` or `insert_after`, and is represented by the remote draw
target these return. Whatever is drawn to that target appears in the shared
block:

```python
import io
import time

from barkit.draw_target import MultiProgressAlignment, ProgressDrawTarget
from barkit.lines import Line
from barkit.multi import MultiProgress
from barkit.term import Terminal

out = io.StringIO()
multi = MultiProgress(ProgressDrawTarget.term_like(Terminal(out, size=(24, 80))))
multi.set_alignment(MultiProgressAlignment.BOTTOM)

first = multi.add()
second = multi.insert_before(first)

drawable = first.drawable(True, time.monotonic_ns())
with drawable.state() as state:
    state.lines.append(Line.bar("[#####     ] 50%"))
drawable.draw()

multi.println("starting!")
multi.remove(second)
multi.clear()
```

Text or empty lines drawn through a member target are moved above all
members on the next draw. `remove` ignores targets that belong to no group or
were already removed, and raises `ValueError` for a target of a different
group. `println` writes a message above all members and does nothing when the
target is hidden; `suspend(func)` clears the block, runs `func`, then draws
again, holding the group's lock meanwhile. `set_move_cursor(True)` moves the
cursor over old output instead of clearing it. `is_hidden()` reports whether
anything will be seen.

## What this package does not do

There is no progress bar object: nothing here tracks a position and length,
computes rates or estimates, expands templates or spinners, or wraps
iterators and streams. Callers render their own lines and hand them to a
draw target as shown above. There is no command-line program.

## Running the tests

```
pip install -e ".[test]"
pytest
```