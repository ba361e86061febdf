"""Utility functions for managing the guard's log directory."""

import glob
import os

LOG_FILE_PREFIX = "buildguard_"


def delete_old_logs(log_path: str, max_files: int, prefix: str = LOG_FILE_PREFIX):
    """Keeps only the newest `max_files` guard logs in `log_path`.

    Only `<prefix>*.log` files take part in the rotation, so other logs kept
    in a shared directory are left alone.

    Args:
        log_path (str): Directory holding the log files.
        max_files (int): How many guard logs to keep.
        prefix (str): File name prefix of the guard's logs.
    """
    log_files = glob.glob(os.path.join(glob.escape(log_path), f"{prefix}*.log"))
    if len(log_files) <= max_files:
        return

    log_files.sort(key=os.path.getmtime)
    for stale in log_files[: len(log_files) - max_files]:
        os.remove(stale)
