import functools
import logging
import os
import sys
import time
from datetime import datetime
from typing import Any, Dict

from pythonjsonlogger.json import JsonFormatter

from buildguard.utils.file_utils import LOG_FILE_PREFIX, delete_old_logs

logger = logging.getLogger(__name__)


def setup_logging(config: Dict[str, Any]):
    """Configures the root logger from the `logging` section of the config.

    Console records go to stderr so that stdout stays reserved for the
    uncommitted-changes report and the build tool's own output.
    """
    log_config = config.get("logging", {})
    log_level_str = str(log_config.get("log_level", "WARNING")).upper()
    log_level = getattr(logging, log_level_str, logging.WARNING)
    log_to_console = log_config.get("log_to_console", True)
    run_timestamp = config.get(
        "run_timestamp", datetime.now().strftime("%Y%m%d_%H%M%S")
    )

    log_dir_path = log_config.get("log_dir")
    log_count = log_config.get("log_count", 5)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Clear any existing handlers to prevent duplicate logs
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    formatter = JsonFormatter("%(asctime)s %(name)s %(levelname)s %(message)s")

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    if log_dir_path:
        abs_log_dir = os.path.abspath(log_dir_path)
        os.makedirs(abs_log_dir, exist_ok=True)
        delete_old_logs(abs_log_dir, log_count)
        log_file_path = os.path.join(abs_log_dir, f"{LOG_FILE_PREFIX}{run_timestamp}.log")

        file_handler = logging.FileHandler(log_file_path, mode="a", encoding="utf-8")
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

        logger.info(f"Logging to file: {log_file_path}")

    if not root_logger.handlers:
        root_logger.addHandler(logging.NullHandler())


def log_execution_time(func):
    """A decorator to log the execution time of a function."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.info(
                "Function executed",
                extra={
                    "function_name": func.__name__,
                    "function_module": func.__module__,
                    "duration_ms": round(duration_ms, 2),
                },
            )

    return wrapper
