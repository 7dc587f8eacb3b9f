"""Logging setup for the quote builder.

Two rotating files are written under the log directory: ``<app>.log`` for
everything at INFO and above, and ``<app>_drafts.log`` for the draft
lifecycle (the ``quotebuilder.drafts`` logger), which keeps a record of
every load and save even when the main log is quiet.
"""
import logging
import logging.handlers
import os
import time
from pathlib import Path

import PyQt5.QtCore as QtCore
from PyQt5.QtCore import QtMsgType

from quotebuilder.infrastructure.app_constants import DRAFT_LOGGER_NAME, LOG_DIR
from quotebuilder.infrastructure.settings import coerce_bool, get_app_settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"
MAX_LOG_BYTES = 2 * 1024 * 1024
LOG_BACKUPS = 5

_QT_LEVELS = {
    QtMsgType.QtDebugMsg: logging.DEBUG,
    QtMsgType.QtInfoMsg: logging.INFO,
    QtMsgType.QtWarningMsg: logging.WARNING,
    QtMsgType.QtCriticalMsg: logging.ERROR,
    QtMsgType.QtFatalMsg: logging.CRITICAL,
}


def _rotating_handler(path: Path, level: int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return handler


def _reset_handlers(logger: logging.Logger) -> None:
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()


def setup_logging(log_dir=LOG_DIR, *, app_name="quote_builder", debug_mode=False, draft_log=True):
    """Install the main, draft and console handlers; returns the root logger."""
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    level = logging.DEBUG if debug_mode else logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    _reset_handlers(root_logger)
    root_logger.addHandler(_rotating_handler(log_path / f"{app_name}.log", level))

    console = logging.StreamHandler()
    console.setLevel(logging.DEBUG if debug_mode else logging.WARNING)
    console.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(console)

    draft_logger = logging.getLogger(DRAFT_LOGGER_NAME)
    _reset_handlers(draft_logger)
    if draft_log:
        # Draft records also propagate to the main log.
        draft_logger.addHandler(_rotating_handler(log_path / f"{app_name}_drafts.log", logging.DEBUG))
        draft_logger.setLevel(logging.DEBUG)
    else:
        draft_logger.setLevel(logging.NOTSET)

    root_logger.info("Logging initialized in %s (debug=%s)", log_path, debug_mode)
    return root_logger


def qt_message_handler(mode, context, message):
    logging.getLogger("qt").log(_QT_LEVELS.get(mode, logging.WARNING), message)


def cleanup_old_logs(log_dir=LOG_DIR, max_age_days=1):
    """Delete rotated or stale log files older than ``max_age_days``; returns the count."""
    logger = logging.getLogger(__name__)
    log_path = Path(log_dir)
    if not log_path.is_dir():
        return 0

    cutoff = time.time() - max(1, max_age_days) * 24 * 3600
    removed = 0
    for file_path in log_path.glob("*.log*"):
        if not file_path.is_file() or file_path.stat().st_mtime >= cutoff:
            continue
        try:
            file_path.unlink()
            removed += 1
        except OSError as exc:
            logger.warning("Could not remove old log file %s: %s", file_path, exc)
    if removed:
        logger.info("Removed %d log files older than %d days", removed, max_age_days)
    return removed


def get_log_config(settings=None):
    """Read logging options from settings; environment variables win."""
    if settings is None:
        settings = get_app_settings()

    if "QUOTEBUILDER_DEBUG" in os.environ:
        debug_mode = coerce_bool(os.environ["QUOTEBUILDER_DEBUG"])
    else:
        debug_mode = coerce_bool(settings.value("logging/debug_mode", False))

    try:
        cleanup_days = int(settings.value("logging/cleanup_days", 1))
    except (TypeError, ValueError):
        cleanup_days = 1

    return {
        "debug_mode": debug_mode,
        "log_dir": os.environ.get("QUOTEBUILDER_LOG_DIR", LOG_DIR),
        "draft_log": coerce_bool(settings.value("logging/draft_log", True), True),
        "auto_cleanup": coerce_bool(settings.value("logging/auto_cleanup", False)),
        "cleanup_days": max(1, min(cleanup_days, 365)),
    }


def configure_logging(settings=None, install_qt_handler=True):
    """Apply the stored logging config and route Qt messages into it."""
    config = get_log_config(settings)
    root_logger = setup_logging(
        config["log_dir"], debug_mode=config["debug_mode"], draft_log=config["draft_log"]
    )
    if config["auto_cleanup"]:
        cleanup_old_logs(config["log_dir"], config["cleanup_days"])
    if install_qt_handler:
        QtCore.qInstallMessageHandler(qt_message_handler)
    return root_logger
