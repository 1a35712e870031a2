from __future__ import annotations

import logging
import logging.config
from pathlib import Path

LOG_FILE_NAME = "auto_reply.log"


def configure_logging(log_dir: Path, level: str = "INFO") -> Path:
    """Send log records to a rotating file and to stderr."""

    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / LOG_FILE_NAME

    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            },
            "console": {
                "format": "%(asctime)s | %(levelname)s | %(message)s",
                "datefmt": "%H:%M:%S",
            },
        },
        "handlers": {
            "file": {
                "class": "logging.handlers.RotatingFileHandler",
                "formatter": "standard",
                "filename": str(log_path),
                "maxBytes": 1_000_000,
                "backupCount": 3,
                "encoding": "utf-8",
            },
            "stderr": {
                "class": "logging.StreamHandler",
                "formatter": "console",
                "stream": "ext://sys.stderr",
            },
        },
        "loggers": {
            # discovery cache and transport chatter
            "googleapiclient": {"level": "WARNING"},
        },
        "root": {
            "handlers": ["file", "stderr"],
            "level": level.upper(),
        },
    }

    logging.config.dictConfig(config)
    logging.getLogger(__name__).debug("Logging configured at %s", level)
    return log_path
