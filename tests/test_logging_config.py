"""
Tests for Logging Configuration

Run with:
    python -m pytest tests/test_logging_config.py -v
"""

import logging
import os
import tempfile
import unittest

from logging_config import LOG_FORMAT, configure_logging, get_logger, level_from_env


class TestLevelFromEnv(unittest.TestCase):
    """Test level selection from the environment."""

    def test_default(self):
        """Unset variable gives the default."""
        self.assertEqual(level_from_env(environ={}), logging.INFO)
        self.assertEqual(level_from_env(logging.WARNING, environ={}), logging.WARNING)

    def test_named_level(self):
        """Level names are case-insensitive."""
        self.assertEqual(level_from_env(environ={"LASER_DEORBIT_LOG_LEVEL": "debug"}), logging.DEBUG)
        self.assertEqual(level_from_env(environ={"LASER_DEORBIT_LOG_LEVEL": " ERROR "}), logging.ERROR)

    def test_unknown_level(self):
        """Unknown names are rejected."""
        with self.assertRaises(ValueError):
            level_from_env(environ={"LASER_DEORBIT_LOG_LEVEL": "CHATTY"})


class TestConfigureLogging(unittest.TestCase):
    """Test handler setup."""

    def setUp(self):
        """Save the root logger state."""
        root = logging.getLogger()
        self._handlers = root.handlers[:]
        self._level = root.level

    def tearDown(self):
        """Restore the root logger state."""
        root = logging.getLogger()
        root.handlers[:] = self._handlers
        root.setLevel(self._level)

    def test_configure(self):
        """Root logger gets the level and the standard format."""
        configure_logging(logging.DEBUG)
        root = logging.getLogger()

        self.assertEqual(root.level, logging.DEBUG)
        self.assertEqual(len(root.handlers), 1)
        self.assertEqual(root.handlers[0].formatter._fmt, LOG_FORMAT)

    def test_log_file(self):
        """A log file adds a second handler."""
        with tempfile.TemporaryDirectory() as directory:
            path = os.path.join(directory, "campaign.log")
            configure_logging(logging.INFO, log_file=path)
            get_logger("laser_deorbit.test").info("Campaign complete")

            root = logging.getLogger()
            self.assertEqual(len(root.handlers), 2)
            for handler in root.handlers:
                handler.flush()
            root.handlers[1].close()
            root.handlers[:] = root.handlers[:1]

            with open(path) as log:
                self.assertIn("Campaign complete", log.read())


if __name__ == "__main__":
    unittest.main()
