import logging
import tempfile
import unittest
from logging.handlers import RotatingFileHandler
from pathlib import Path

from peerstats.logging import UTCFormatter, setup_logging


class LoggingTests(unittest.TestCase):
    def tearDown(self) -> None:
        logger = logging.getLogger("peerstats")
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()

    def test_file_sink(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            log_file = Path(tmp) / "logs" / "peerstats.log"
            logger = setup_logging(log_file, level=logging.DEBUG)
            self.assertTrue(any(isinstance(h, RotatingFileHandler) for h in logger.handlers))
            logging.getLogger("peerstats.pipeline").info("hello %s", "world")
            for handler in logger.handlers:
                handler.flush()
                handler.close()
            text = log_file.read_text(encoding="utf-8")
        self.assertIn("INFO peerstats.pipeline hello world", text)

    def test_stdout_only(self) -> None:
        logger = setup_logging(None)
        self.assertEqual(len(logger.handlers), 1)
        self.assertEqual(logger.level, logging.INFO)

    def test_utc_timestamps(self) -> None:
        formatter = UTCFormatter()
        record = logging.LogRecord("peerstats", logging.INFO, __file__, 1, "msg", None, None)
        record.created = 0
        self.assertTrue(formatter.format(record).startswith("1970-01-01T00:00:00Z INFO peerstats msg"))


if __name__ == "__main__":
    unittest.main()
