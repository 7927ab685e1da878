import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(module)s - %(funcName)s - %(lineno)d - %(message)s"
LOG_FILE_NAME = "app.log"


def setup_logging(log_dir: Optional[Union[str, Path]] = None, level: str = "INFO") -> None:
    """
    Configures logging for the application.
    Outputs to console and, when ``log_dir`` is given, to a rotating file.
    Safe to call more than once: handlers are only added when missing.
    """
    log_formatter = logging.Formatter(LOG_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())

    has_console_handler = any(
        isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) is sys.stdout
        for h in root_logger.handlers
    )
    if not has_console_handler:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(log_formatter)
        root_logger.addHandler(console_handler)

    if log_dir is not None:
        has_file_handler = any(isinstance(h, logging.FileHandler) for h in root_logger.handlers)
        if not has_file_handler:
            try:
                os.makedirs(log_dir, exist_ok=True)
                # 5MB per file, 2 backups
                file_handler = RotatingFileHandler(
                    os.path.join(log_dir, LOG_FILE_NAME), maxBytes=1024 * 1024 * 5, backupCount=2
                )
            except OSError as exc:
                root_logger.warning("File logging disabled, cannot write to %s: %s", log_dir, exc)
            else:
                file_handler.setFormatter(log_formatter)
                root_logger.addHandler(file_handler)

    logging.getLogger("stt_starter").setLevel(level.upper())
    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("uvicorn.error").setLevel(logging.INFO)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    # httpx logs every request line at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

    logging.info("Logging configured successfully (console%s).", " and file" if log_dir is not None else "")
