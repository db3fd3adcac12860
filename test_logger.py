#!/usr/bin/env python3
"""
Test script for logging setup.
Tests handler installation, repeated setup and operation logging.
"""

import sys
import logging
import logging.handlers
import tempfile
from pathlib import Path

# Add the project root to the path
sys.path.insert(0, str(Path(__file__).parent))

from utils.logger import setup_logging, get_logger, log_operation, APP_LOGGER_NAMES


def _file_handlers(logger_name):
    return [h for h in logging.getLogger(logger_name).handlers
            if isinstance(h, logging.handlers.RotatingFileHandler)]


def _close_app_handlers():
    for name in APP_LOGGER_NAMES:
        app_logger = logging.getLogger(name)
        for handler in list(app_logger.handlers):
            app_logger.removeHandler(handler)
            handler.close()


def test_repeated_setup_closes_previous_handlers(tmp_path):
    print("Testing repeated logging setup...")
    try:
        setup_logging("INFO", str(tmp_path / "first.log"))
        first = _file_handlers("services")[0]
        assert first.stream is not None

        setup_logging("DEBUG", str(tmp_path / "second.log"))
        # The first session's log file is closed, not leaked
        assert first.stream is None
        for name in APP_LOGGER_NAMES:
            app_logger = logging.getLogger(name)
            assert len(app_logger.handlers) == 2
            assert app_logger.propagate is False
            assert first not in app_logger.handlers

        get_logger("pages").info("visible in the second file")
        for handler in _file_handlers("culinaria_legacy"):
            handler.flush()
        assert "visible in the second file" in (tmp_path / "second.log").read_text(encoding="utf-8")
    finally:
        _close_app_handlers()

    print("[OK] Previous handlers closed")


def test_log_operation_reports_failures(tmp_path):
    try:
        setup_logging("INFO", str(tmp_path / "ops.log"))
        logger = get_logger("ops")

        with log_operation(logger, "Loading week"):
            pass
        try:
            with log_operation(logger, "Saving meal"):
                raise RuntimeError("disk full")
        except RuntimeError:
            pass

        for handler in _file_handlers("culinaria_legacy"):
            handler.flush()
        content = (tmp_path / "ops.log").read_text(encoding="utf-8")
        assert "Completed: Loading week" in content
        assert "Failed: Saving meal" in content
    finally:
        _close_app_handlers()

    print("[OK] Operation logging working")


if __name__ == "__main__":
    try:
        with tempfile.TemporaryDirectory() as temp_dir:
            test_repeated_setup_closes_previous_handlers(Path(temp_dir))
        with tempfile.TemporaryDirectory() as temp_dir:
            test_log_operation_reports_failures(Path(temp_dir))
        print("\n[SUCCESS] All logging tests passed!")
        sys.exit(0)
    except Exception as e:
        print(f"[ERROR] Logging test failed with error: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)
