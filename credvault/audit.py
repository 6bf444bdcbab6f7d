"""
Security audit log.

One line per action: ``timestamp | ACTION | details``. Details name entries
by id and service only; secrets never reach this file.
"""

import os
import datetime
import logging
from typing import Optional

from . import config

logger = logging.getLogger(__name__)


def get_audit_log_path(base_dir: Optional[str] = None) -> str:
    """Path of the audit log, under ~/.credvault/logs unless base_dir is given."""
    if base_dir is None:
        base_dir = os.path.join(os.path.expanduser("~"), config.CONFIG_DIR_NAME)
    return os.path.join(base_dir, config.LOG_DIR_NAME, config.AUDIT_LOG_FILE)


def log_action(action: str, details: str = "", base_dir: Optional[str] = None) -> None:
    """Append a security-relevant action to the audit log."""
    log_file = get_audit_log_path(base_dir)
    timestamp = datetime.datetime.now().isoformat()
    try:
        os.makedirs(os.path.dirname(log_file), exist_ok=True)
        with open(log_file, 'a', encoding='utf-8') as f:
            f.write(f"{timestamp} | {action} | {details}\n")
    except OSError as e:
        # Audit failures are logged, never raised.
        logger.warning(f"Could not write audit log {log_file}: {e}")
