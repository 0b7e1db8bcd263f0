"""
Logging Configuration Module

Queue-based logging for the web service. Request threads hand records to a
queue and a single listener thread writes them out, so lines from concurrent
requests never interleave.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from queue import Queue
from typing import List, Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"

# Third-party loggers that are only interesting when debugging
NOISY_LOGGERS = [
    "werkzeug",
    "urllib3",
    "httpx",
    "httpcore",
    "asyncio",
]


class ThreadSafeLoggingConfig:
    """Thread-safe logging configuration with queue-based logging."""

    def __init__(self):
        self._log_listener: Optional[logging.handlers.QueueListener] = None
        self._log_queue: Optional[Queue] = None

    def setup_logging(self, debug: bool = False, log_file: Optional[Path] = None) -> None:
        """
        Route all logging through a queue and start the listener.

        Args:
            debug: Whether to enable debug logging
            log_file: Optional file to write logs to in addition to stdout
        """
        # Calling twice would leave an orphaned listener thread
        self.stop()

        self._log_queue = Queue()
        queue_handler = logging.handlers.QueueHandler(self._log_queue)

        formatter = logging.Formatter(LOG_FORMAT)
        handlers: List[logging.Handler] = []

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

        if log_file:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                log_file, maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8"
            )
            file_handler.setFormatter(formatter)
            handlers.append(file_handler)

        self._log_listener = logging.handlers.QueueListener(
            self._log_queue, *handlers, respect_handler_level=True
        )
        self._log_listener.start()

        root_logger = logging.getLogger()
        root_logger.handlers.clear()
        root_logger.addHandler(queue_handler)
        root_logger.setLevel(logging.DEBUG if debug else logging.INFO)

        if not debug:
            self._silence_noisy_libraries()

    def _silence_noisy_libraries(self) -> None:
        """Raise the threshold of chatty third-party loggers."""
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    def stop(self) -> None:
        """Stop the logging listener and flush pending records."""
        if self._log_listener:
            self._log_listener.stop()
            self._log_listener = None
        self._log_queue = None


# Global logging configuration instance
logging_config = ThreadSafeLoggingConfig()


def setup_logging(debug: bool = False, log_file: Optional[Path] = None) -> None:
    """
    Setup thread-safe logging configuration.

    Args:
        debug: Whether to enable debug logging
        log_file: Optional log file path
    """
    logging_config.setup_logging(debug, log_file)


def stop_logging() -> None:
    """Stop the logging listener and cleanup."""
    logging_config.stop()
