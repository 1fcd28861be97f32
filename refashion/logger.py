import logging
import os
import sys
from logging.handlers import RotatingFileHandler

_configured = False


def setup_logging(level: str = "INFO", log_file: str = ""):
    global _configured
    if _configured:
        return

    log_level = getattr(logging, level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(log_level)

    formatter = logging.Formatter(
        "%(asctime)s %(levelname)s [%(name)s] %(message)s"
    )

    # Avoid duplicate handlers (uvicorn and pytest install their own)
    if not root.handlers:
        ch = logging.StreamHandler(sys.stdout)
        ch.setLevel(log_level)
        ch.setFormatter(formatter)
        root.addHandler(ch)

    if log_file:
        try:
            os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
            fh = RotatingFileHandler(
                log_file,
                maxBytes=2 * 1024 * 1024,
                backupCount=3,
            )
            fh.setLevel(log_level)
            fh.setFormatter(formatter)
            root.addHandler(fh)
        except OSError as e:
            root.warning("Failed to initialize file logging: %s", e)

    _configured = True


def get_logger(name: str | None = None) -> logging.Logger:
    return logging.getLogger(name)
