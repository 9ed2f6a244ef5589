"""Provisioning activity logging.

Two sinks, both rotated by size:
- a human-readable log (standard logging, also echoed to stderr)
- JSON-lines status events, one per provisioned item, suitable for
  shipping to a log platform like Splunk or ELK

Secret values are never written to either sink.
"""

import json
import logging
import os
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from threading import Lock
from typing import Optional

from core.config import (
    EVENT_LOG_NAME,
    LOG_BACKUP_COUNT,
    LOG_DIR,
    LOG_LEVEL,
    LOG_MAX_BYTES,
    PROVISION_LOG_NAME,
)
from core.storage import ensure_directory


# Module-level state
_logging_configured = False
_configure_lock = Lock()

EVENT_LOGGER_NAME = "provisioner.events"


def configure_logging(
    log_dir: str = LOG_DIR,
    level: str = LOG_LEVEL,
    console: bool = True,
) -> None:
    """Configure standard logging with rotation on first use.

    Safe to call repeatedly; only the first call installs handlers.
    """
    global _logging_configured
    with _configure_lock:
        if _logging_configured:
            return

        ensure_directory(log_dir)
        log_file = os.path.join(log_dir, PROVISION_LOG_NAME)
        event_file = os.path.join(log_dir, EVENT_LOG_NAME)

        handler = RotatingFileHandler(
            log_file,
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
        )
        handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(name)s - %(message)s'))

        logger = logging.getLogger()
        logger.setLevel(level)
        logger.addHandler(handler)

        if console:
            stream = logging.StreamHandler(sys.stderr)
            stream.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
            stream.setLevel(logging.WARNING)
            logger.addHandler(stream)

        # Status events are raw JSON lines and stay out of the main log
        event_handler = RotatingFileHandler(
            event_file,
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
        )
        event_handler.setFormatter(logging.Formatter('%(message)s'))
        event_logger = logging.getLogger(EVENT_LOGGER_NAME)
        event_logger.setLevel(logging.INFO)
        event_logger.addHandler(event_handler)
        event_logger.propagate = False

        _logging_configured = True


def build_status_event(
    event_type: str,
    status: str,
    vault_name: str,
    details: Optional[dict] = None,
) -> dict:
    """Build a status event dictionary.

    Args:
        event_type: Kind of event (e.g., 'secret_provisioned', 'secret_listing')
        status: Event status (e.g., 'CREATED', 'SKIPPED', 'FAILED')
        vault_name: Key vault the event applies to
        details: Optional additional event details
    """
    event = {
        "timestamp": datetime.now().isoformat(),
        "event_type": event_type,
        "status": status,
        "vault": vault_name,
        "source": "vm_password_provisioner",
    }

    if details:
        event["details"] = details

    return event


def log_status_event(
    event_type: str,
    status: str,
    vault_name: str,
    details: Optional[dict] = None,
) -> dict:
    """Emit a status event as one JSON line and return it."""
    event = build_status_event(event_type, status, vault_name, details)
    logging.getLogger(EVENT_LOGGER_NAME).info(json.dumps(event))
    return event
