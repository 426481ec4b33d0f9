"""Tests for the terminal sink, the canvas and the tty module hooks."""

import io
import logging
import sys
from unittest.mock import MagicMock, patch

import pytest

from consoletrace import tty
from consoletrace.canvas import Canvas
from consoletrace.io import (
    BOLD,
    DEFAULT_WIDTH,
    EM,
    ERROR,
    IO,
    RESET,
    TtyIO,
    Verbosity,
)
from consoletrace.tty import load, tty_traceback, unload

from .errorcases import capture, chain_of_three, save


class TestVerbosity:
    def test_flags(self):
        normal = IO(Verbosity.NORMAL)
        assert not normal.is_verbose()
        assert not normal.is_very_verbose()

        verbose = IO(Verbosity.VERBOSE)
        assert verbose.is_verbose()
        assert not verbose.is_very_verbose()

        very = IO(Verbosity.VERY_VERBOSE)
        assert very.is_verbose() and very.is_very_verbose()
        assert not very.is_debug()
        assert IO(Verbosity.DEBUG).is_debug()

    def test_accepts_int(self):
        assert IO(2).verbosity is Verbosity.VERY_VERBOSE

    @pytest.mark.parametrize(
        "count, expected",
        [
            (-1, Verbosity.NORMAL),
            (0, Verbosity.NORMAL),
            (1, Verbosity.VERBOSE),
            (2, Verbosity.VERY_VERBOSE),
            (3, Verbosity.DEBUG),
            (7, Verbosity.DEBUG),
        ],
    )
    def test_from_count(self, count, expected):
        assert Verbosity.from_count(count) is expected

    def test_base_class_has_no_output(self):
        with pytest.raises(NotImplementedError):
            IO().error_line("x")


class TestTtyIO:
    def test_error_line_strips_colors_on_non_tty(self):
        output = io.StringIO()
        TtyIO(output).error_line("<b>bold</b> text")
        assert output.getvalue() == "bold text\n"

    def test_error_line_with_colors(self):
        output = io.StringIO()
        TtyIO(output, color=True).error_line("<error>x</error> <b>y</b>")
        assert output.getvalue() == f"{ERROR}x{RESET} {BOLD}y{RESET}\n"

    def test_tty_enables_colors(self):
        output = MagicMock()
        output.isatty.return_value = True
        assert TtyIO(output).color is True

    def test_defaults_to_stderr(self, capsys):
        TtyIO().error_line("to stderr")
        captured = capsys.readouterr()
        assert captured.err == "to stderr\n"
        assert captured.out == ""

    def test_format(self):
        sink = TtyIO(io.StringIO(), color=True)
        assert sink.format("<em>a</em> b") == f"{EM}a{RESET} b"
        assert TtyIO(io.StringIO(), color=False).format("<em>a</em> b") == "a b"

    def test_raw_line_is_written_verbatim(self):
        output = io.StringIO()
        line = "<b>not parsed</b> long line"
        TtyIO(output, color=False, width=5).error_line_raw(line)
        assert output.getvalue() == line + "\n"

    def test_wraps_plain_lines_to_width(self):
        output = io.StringIO()
        TtyIO(output, width=20).error_line("fatal: the quick brown fox jumps over")
        assert output.getvalue().split("\n")[:-1] == [
            "fatal: the quick",
            "brown fox jumps over",
        ]

    def test_does_not_wrap_styled_lines(self):
        output = io.StringIO()
        line = "<error>" + " " * 40 + "</error>"
        TtyIO(output, width=20).error_line(line)
        assert output.getvalue() == " " * 40 + "\n"

    def test_terminal_width_fallback(self):
        assert TtyIO(io.StringIO()).terminal_width() == DEFAULT_WIDTH

    def test_terminal_width_explicit(self):
        assert TtyIO(io.StringIO(), width=100).terminal_width() == 100

    def test_terminal_width_detected(self):
        size = MagicMock(columns=132)
        output = MagicMock()
        output.fileno.return_value = 2
        with patch("os.get_terminal_size", return_value=size):
            assert TtyIO(output).terminal_width() == 132


class TestCanvas:
    def test_width_from_sink(self):
        canvas = Canvas(TtyIO(io.StringIO(), width=60))
        assert canvas.width == 60

    def test_explicit_width(self):
        sink = TtyIO(io.StringIO())
        canvas = Canvas(sink, 120)
        assert canvas.width == 120
        assert canvas.io is sink


class TestTtyTraceback:
    def test_verbose_output(self):
        output = io.StringIO()
        tty_traceback(capture(save, b"x"), file=output)
        result = output.getvalue()
        assert "[OSError]" in result
        assert "disk full" in result
        assert "Storage.write()" in result
        assert "Caused by:" not in result

    def test_very_verbose_output(self):
        output = io.StringIO()
        tty_traceback(
            capture(chain_of_three), file=output, verbosity=Verbosity.VERY_VERBOSE
        )
        result = output.getvalue()
        assert result.count("Caused by:") == 2
        assert result.index("outermost") < result.index("middle")
        assert result.index("middle") < result.index("root cause")

    def test_message_line_comes_first(self):
        output = io.StringIO()
        tty_traceback(
            capture(save, b"x"),
            file=output,
            verbosity=Verbosity.NORMAL,
            msg="saving failed\n",
        )
        assert output.getvalue() == "saving failed\nfatal: disk full\n"

    def test_term_width(self):
        output = io.StringIO()
        tty_traceback(
            ValueError("one two three four five six"), file=output, term_width=16
        )
        lines = output.getvalue().split("\n")
        # 16 columns leave 11 for the message
        assert "  one two three  " not in lines
        assert f"  one two{' ' * 7}" in lines

    def test_current_exception(self):
        output = io.StringIO()
        try:
            raise KeyError("current")
        except KeyError:
            tty_traceback(file=output, verbosity=Verbosity.NORMAL)
        assert output.getvalue() == "fatal: 'current'\n"


class TestLoadUnload:
    def test_load_replaces_and_unload_restores(self):
        original = sys.excepthook
        load()
        try:
            assert sys.excepthook is not original
        finally:
            unload()
        assert sys.excepthook is original

    def test_double_load_keeps_original(self):
        original = sys.excepthook
        load()
        load()
        unload()
        assert sys.excepthook is original

    def test_reload_changes_verbosity(self, capsys):
        original = sys.excepthook
        load(capture_logging=False)
        load(Verbosity.VERBOSE, capture_logging=False)
        try:
            exc = capture(save, b"x")
            sys.excepthook(type(exc), exc, exc.__traceback__)
        finally:
            unload()
        assert "Exception trace:" in capsys.readouterr().err
        assert sys.excepthook is original

    def test_unload_without_load(self):
        original = sys.excepthook
        unload()
        assert sys.excepthook is original

    def test_excepthook_renders(self, capsys):
        load(Verbosity.VERBOSE, capture_logging=False)
        try:
            exc = capture(save, b"x")
            sys.excepthook(type(exc), exc, exc.__traceback__)
        finally:
            unload()
        err = capsys.readouterr().err
        assert "[OSError]" in err
        assert "Exception trace:" in err

    def test_excepthook_normal_verbosity(self, capsys):
        load(capture_logging=False)
        try:
            exc = capture(save, b"x")
            sys.excepthook(type(exc), exc, exc.__traceback__)
        finally:
            unload()
        assert capsys.readouterr().err == "fatal: disk full\n"

    def test_excepthook_falls_back_on_failure(self):
        original = MagicMock()
        with patch.object(sys, "excepthook", original):
            load(capture_logging=False)
            try:
                with patch.object(tty, "tty_traceback", side_effect=RuntimeError):
                    exc = ValueError("x")
                    sys.excepthook(ValueError, exc, None)
            finally:
                unload()
            original.assert_called_once_with(ValueError, exc, None)

    def test_logging_exception_is_rendered(self):
        stream = io.StringIO()
        handler = logging.StreamHandler(stream)
        log = logging.getLogger("consoletrace.tests.capture")
        log.addHandler(handler)
        log.propagate = False
        load(Verbosity.VERBOSE)
        try:
            try:
                save(b"x")
            except OSError:
                log.exception("saving failed")
        finally:
            unload()
            log.removeHandler(handler)
        result = stream.getvalue()
        assert result.startswith("saving failed\n")
        assert "[OSError]" in result
        assert "Traceback (most recent call last)" not in result

    def test_logging_without_exception_is_untouched(self):
        stream = io.StringIO()
        handler = logging.StreamHandler(stream)
        log = logging.getLogger("consoletrace.tests.plain")
        log.addHandler(handler)
        log.propagate = False
        load()
        try:
            log.warning("just a warning")
        finally:
            unload()
            log.removeHandler(handler)
        assert stream.getvalue() == "just a warning\n"
