# tests/test_logging_config.py

"""Tests for per-process logging setup and console level selection."""

import io
import logging
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from dealscout.browser import worker
from dealscout.config.logging_config import resolve_level, setup_logging
from dealscout.config.settings import Settings


def _console_handlers(logger: logging.Logger) -> list[logging.Handler]:
    return [
        h
        for h in logger.handlers
        if isinstance(h, logging.StreamHandler)
        and not isinstance(h, logging.FileHandler)
    ]


class TestResolveLevel(unittest.TestCase):

    def test_names_and_numbers(self) -> None:
        self.assertEqual(resolve_level("info"), logging.INFO)
        self.assertEqual(resolve_level(" DEBUG "), logging.DEBUG)
        self.assertEqual(resolve_level(logging.ERROR), logging.ERROR)

    def test_unknown_falls_back_to_warning(self) -> None:
        self.assertEqual(resolve_level("chatty"), logging.WARNING)
        self.assertEqual(resolve_level(None), logging.WARNING)


class TestSetupLogging(unittest.TestCase):
    """setup_logging() handlers, file naming and level overrides."""

    def setUp(self) -> None:
        self.root_logger = logging.getLogger("dealscout")
        self._clear_handlers()
        self._tmp = tempfile.TemporaryDirectory()
        patcher = patch.object(Settings, "LOGS_DIR", Path(self._tmp.name))
        patcher.start()
        self.addCleanup(patcher.stop)

    def tearDown(self) -> None:
        self._clear_handlers()
        self._tmp.cleanup()

    def _clear_handlers(self) -> None:
        for handler in list(self.root_logger.handlers):
            handler.close()
            self.root_logger.removeHandler(handler)

    def test_run_log_written_to_logs_dir(self) -> None:
        log_path = setup_logging()
        self.assertTrue(log_path.exists())
        self.assertEqual(log_path.parent, Path(self._tmp.name))
        self.assertRegex(log_path.name, r"^run_\d{8}_\d{6}\.log$")

    def test_worker_prefix_names_file(self) -> None:
        log_path = setup_logging(prefix="worker_4242")
        self.assertRegex(log_path.name, r"^worker_4242_\d{8}_\d{6}\.log$")

    @patch.object(Settings, "CONSOLE_LOG_LEVEL", "ERROR")
    def test_console_level_from_settings(self) -> None:
        setup_logging()
        [console] = _console_handlers(self.root_logger)
        self.assertEqual(console.level, logging.ERROR)

    @patch.object(Settings, "CONSOLE_LOG_LEVEL", "ERROR")
    def test_explicit_level_overrides_settings(self) -> None:
        setup_logging("INFO")
        [console] = _console_handlers(self.root_logger)
        self.assertEqual(console.level, logging.INFO)

    def test_file_captures_debug(self) -> None:
        setup_logging()
        file_handlers = [
            h
            for h in self.root_logger.handlers
            if isinstance(h, logging.FileHandler)
        ]
        self.assertEqual(len(file_handlers), 1)
        self.assertEqual(file_handlers[0].level, logging.DEBUG)
        self.assertEqual(self.root_logger.level, logging.DEBUG)

    def test_repeat_call_retunes_console_without_new_handlers(self) -> None:
        setup_logging("WARNING")
        count_before = len(self.root_logger.handlers)
        setup_logging("DEBUG")
        self.assertEqual(len(self.root_logger.handlers), count_before)
        [console] = _console_handlers(self.root_logger)
        self.assertEqual(console.level, logging.DEBUG)


class TestWorkerLogging(unittest.TestCase):

    @patch("dealscout.browser.worker.run_task")
    @patch("dealscout.browser.worker.setup_logging")
    def test_worker_main_logs_to_own_file(self, mock_setup, mock_run) -> None:
        mock_run.return_value = {"platform": "jiji", "html": "<html></html>"}
        stdin = io.StringIO('{"url": "https://jiji.ng"}')
        with patch("sys.stdin", stdin), patch("sys.stdout", io.StringIO()):
            self.assertEqual(worker.main(), 0)

        prefix = mock_setup.call_args.kwargs["prefix"]
        self.assertRegex(prefix, r"^worker_\d+$")


if __name__ == "__main__":
    unittest.main()
