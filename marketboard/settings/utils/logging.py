import os
import sys
from pathlib import Path

# ─────────────────────────────────────────────────────
# "logs" directory next to this settings file
# ─────────────────────────────────────────────────────
LOG_DIR = Path(__file__).resolve().parent / "logs"

from .performance import PERFORMANCE_API_PREFIXES  # noqa: E402

PERFORMANCE_LOG_PATHS = {
    short_name: LOG_DIR / f"{short_name}_performance.log"
    for short_name in PERFORMANCE_API_PREFIXES.values()
}
ERROR_LOG_PATH = LOG_DIR / "error.log"
INFO_LOG_PATH = LOG_DIR / "info.log"
LIFECYCLE_LOG_PATH = LOG_DIR / "request_lifecycle.log"

if not os.environ.get("GITHUB_ACTIONS"):
    os.makedirs(LOG_DIR, exist_ok=True)

# ─────────────────────────────────────────────────────
# base logging config
# ─────────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "console": {"format": "%(name)-12s %(levelname)-8s %(message)s"},
        "file": {"format": "%(asctime)s %(name)-12s %(levelname)-8s %(message)s"},
        "verbose": {
            "format": "%(asctime)s %(levelname)s [%(name)s:%(lineno)d] %(message)s"
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "console",
            "stream": sys.stdout,
        },
        "info_file": {
            "level": "INFO",
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "file",
            "filename": str(INFO_LOG_PATH),
            "maxBytes": 1_000_000,
            "backupCount": 10,
        },
        "error_file": {
            "level": "ERROR",
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "file",
            "filename": str(ERROR_LOG_PATH),
            "maxBytes": 1_000_000,
            "backupCount": 10,
        },
        "lifecycle_file": {
            "level": "INFO",
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "verbose",
            "filename": str(LIFECYCLE_LOG_PATH),
            "maxBytes": 5 * 1024 * 1024,
            "backupCount": 5,
        },
        **{
            f"{short_name}_performance_file": {
                "class": "logging.handlers.RotatingFileHandler",
                "filename": str(path),
                "formatter": "file",
                "maxBytes": 10 * 1024 * 1024,
                "backupCount": 5,
                "level": "INFO",
            }
            for short_name, path in PERFORMANCE_LOG_PATHS.items()
        },
    },
    "loggers": {
        # root logger
        "": {
            "level": "INFO",
            "handlers": ["console", "info_file", "error_file"],
            "propagate": True,
        },
        # every request/negotiation status change
        "request_lifecycle": {
            "level": "INFO",
            "handlers": ["lifecycle_file"],
            "propagate": True,
        },
        **{
            f"{short_name}_performance": {
                "handlers": [f"{short_name}_performance_file"],
                "level": "INFO",
                "propagate": False,
            }
            for short_name in PERFORMANCE_API_PREFIXES.values()
        },
    },
}


def console_only(logging_config):
    """Point every logger at the console handler and drop the file handlers."""
    for name in list(logging_config["handlers"].keys()):
        if name.endswith("_file"):
            logging_config["handlers"].pop(name, None)
    for logger in logging_config["loggers"].values():
        logger["handlers"] = ["console"]
    return logging_config


# If running under CI (e.g. GitHub Actions), drop all file handlers
if os.environ.get("GITHUB_ACTIONS"):
    LOGGING = console_only(LOGGING)
