import io

import pytest

from barkit.term import Terminal


def test_buffered_output_waits_for_flush():
    stream = io.StringIO()
    term = Terminal(stream)
    term.write_str("hello")
    assert stream.getvalue() == ""
    term.flush()
    assert stream.getvalue() == "hello"


def test_unbuffered_output_is_immediate():
    stream = io.StringIO()
    term = Terminal(stream, buffered=False)
    term.write_str("abc")
    assert stream.getvalue() == "abc"


def test_write_line_appends_newline():
    stream = io.StringIO()
    term = Terminal(stream, buffered=False)
    term.write_line("row")
    assert stream.getvalue() == "row\n"


def test_write_order_is_kept():
    stream = io.StringIO()
    term = Terminal(stream)
    term.write_str("a")
    term.write_line("b")
    term.write_str("c")
    term.flush()
    assert stream.getvalue() == "ab\nc"


def test_flush_twice_does_not_repeat():
    stream = io.StringIO()
    term = Terminal(stream)
    term.write_str("once")
    term.flush()
    term.flush()
    assert stream.getvalue() == "once"


def test_move_cursor_up_sequence():
    stream = io.StringIO()
    term = Terminal(stream, buffered=False)
    term.move_cursor_up(3)
    assert stream.getvalue() == "\x1b[3A"


def test_clear_line_sequence():
    stream = io.StringIO()
    term = Terminal(stream, buffered=False)
    term.clear_line()
    assert stream.getvalue() == "\r\x1b[2K"


def test_zero_moves_write_nothing():
    stream = io.StringIO()
    term = Terminal(stream, buffered=False)
    term.move_cursor_up(0)
    term.move_cursor_down(0)
    assert stream.getvalue() == ""


def test_up_and_down_differ():
    up, down = io.StringIO(), io.StringIO()
    Terminal(up, buffered=False).move_cursor_up(2)
    Terminal(down, buffered=False).move_cursor_down(2)
    assert up.getvalue().startswith("\x1b[2")
    assert down.getvalue().startswith("\x1b[2")
    assert up.getvalue() != down.getvalue()


def test_negative_moves_raise():
    term = Terminal(io.StringIO())
    with pytest.raises(ValueError):
        term.move_cursor_up(-1)
    with pytest.raises(ValueError):
        term.move_cursor_down(-1)


def test_string_stream_is_not_a_terminal():
    assert Terminal(io.StringIO()).is_term() is False


def test_explicit_size():
    term = Terminal(io.StringIO(), size=(30, 120))
    assert term.width() == 120
    assert term.height() == 30


def test_size_falls_back_without_terminal():
    term = Terminal(io.StringIO())
    assert term.width() > 0
    assert term.height() > 0