"""
Tests for storenudge.logging module.

Tests logger implementations including:
- Verbosity filtering and stream output
- In-memory recording
- Global logger replacement
"""

from __future__ import annotations

import io

from storenudge.logging import (
    RecordingLogger,
    SilentLogger,
    get_global_logger,
    get_logger,
    set_global_logger,
)


class TestDefaultLogger:
    """Tests for the printing logger."""

    def test_steps_always_written(self):
        """Test steps are written even without verbose."""
        stream = io.StringIO()
        logger = get_logger(stream=stream)

        logger.step(1, 3, "Fetching...")
        logger.verbose("GATE", "hidden")

        assert stream.getvalue() == "[1/3] Fetching...\n"

    def test_debug_implies_verbose(self):
        """Test debug mode also writes verbose messages."""
        stream = io.StringIO()
        logger = get_logger(debug=True, stream=stream)

        logger.verbose("STATE", "saved")
        logger.debug("FETCH", "payload")

        assert stream.getvalue().splitlines() == ["[STATE] saved", "[FETCH] payload"]

    def test_defaults_to_stdout(self, capsys):
        """Test output goes to the current stdout when no stream is given."""
        get_logger(verbose=True).verbose("UPDATER", "hello")
        assert capsys.readouterr().out == "[UPDATER] hello\n"


class TestRecordingLogger:
    """Tests for the in-memory logger."""

    def test_records_in_order(self):
        """Test every call is kept with its level and prefix."""
        logger = RecordingLogger()
        logger.step(2, 3, "Evaluating...")
        logger.verbose("GATE", "Suppressed: no_update")
        logger.debug("FETCH", "raw")

        assert logger.records == [
            ("step", "", "[2/3] Evaluating..."),
            ("verbose", "GATE", "Suppressed: no_update"),
            ("debug", "FETCH", "raw"),
        ]
        assert logger.messages("GATE") == ["Suppressed: no_update"]


class TestGlobalLogger:
    """Tests for the process-wide logger."""

    def test_default_is_silent(self):
        """Test the process-wide logger is silent out of the box."""
        assert isinstance(get_global_logger(), SilentLogger)

    def test_replace_global(self):
        """Test set_global_logger swaps the process-wide logger."""
        recorder = RecordingLogger()
        set_global_logger(recorder)
        try:
            get_global_logger().verbose("STATE", "x")
        finally:
            set_global_logger(SilentLogger())
        assert recorder.messages("STATE") == ["x"]
