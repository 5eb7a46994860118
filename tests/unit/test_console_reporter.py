"""
Tests for the console progress reporter.
"""

import io

import pytest

from blockreg.presenters import ConsoleReporter, NullReporter


@pytest.fixture
def out():
    return io.StringIO()


class TestConsoleReporter:
    """Test console output format."""

    def test_progress_ok(self, out):
        """Test a successful step prints START then OK and returns the result."""
        reporter = ConsoleReporter(file=out)
        assert reporter.progress("Building", lambda: 42) == 42
        assert out.getvalue().splitlines() == ["Building - START", "Building - OK"]

    def test_progress_failed(self, out):
        """Test a failing step prints FAILED and re-raises."""
        reporter = ConsoleReporter(file=out)

        def fail():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            reporter.progress("Building", fail)
        assert out.getvalue().splitlines()[-1] == "Building - FAILED"

    def test_nesting(self, out):
        """Test output inside a step is indented per level."""
        reporter = ConsoleReporter(file=out)

        def inner():
            reporter.info("step %d", 1)
            return reporter.progress("Inner", lambda: None)

        reporter.progress("Outer", inner)

        assert out.getvalue().splitlines() == [
            "Outer - START",
            " - step 1",
            " - Inner - START",
            " - Inner - OK",
            "Outer - OK",
        ]

    def test_check(self, out):
        """Test checks print a mark and return the flag."""
        reporter = ConsoleReporter(file=out)
        assert reporter.check("Working tree clean", True) is True
        assert reporter.check("Version check", False) is False
        assert out.getvalue().splitlines() == ["Working tree clean: ✔", "Version check: ✖"]

    def test_debug_only_when_verbose(self, out):
        """Test debug lines are hidden unless verbose."""
        reporter = ConsoleReporter(file=out)
        reporter.debug("hidden")
        reporter.verbose = True
        reporter.debug("shown")
        assert out.getvalue() == "shown\n"

    def test_no_color_for_non_tty(self, out):
        """Test ANSI codes are not written to plain files."""
        ConsoleReporter(file=out).error("bad")
        assert out.getvalue() == "bad\n"

    def test_format_mismatch(self, out):
        """Test messages that do not match their arguments are still printed."""
        ConsoleReporter(file=out).info("value", "extra")
        assert out.getvalue() == "value extra\n"


class TestNullReporter:
    """Test the silent reporter."""

    def test_runs_actions(self):
        """Test steps still run and checks pass through."""
        reporter = NullReporter()
        assert reporter.progress("x", lambda: "done") == "done"
        assert reporter.check("x", False) is False
        reporter.info("ignored")
