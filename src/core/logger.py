import logging
import sys
from logging.handlers import RotatingFileHandler

from . import settings


def setup_logger(name: str | None = None, log_level: int = logging.INFO) -> logging.Logger:
    """
    Sets up a logger with both console (StreamHandler) and file (RotatingFileHandler) output.

    Call once from the entry point; library modules only use logging.getLogger(__name__).
    """
    logger = logging.getLogger(name)
    logger.setLevel(log_level)

    # Streamlit reruns the script on every interaction
    if logger.handlers:
        return logger

    console_format = logging.Formatter("%(levelname)s %(name)s: %(message)s")
    file_format = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(console_format)
    logger.addHandler(console_handler)

    settings.LOG_DIR.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        settings.LOG_DIR / "app.log",
        maxBytes=5 * 1024 * 1024,  # 5 MB
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setLevel(log_level)
    file_handler.setFormatter(file_format)
    logger.addHandler(file_handler)

    return logger
