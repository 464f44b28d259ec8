from __future__ import annotations

import logging
import sys
from pathlib import Path

# Third-party loggers that flood INFO with per-fit messages
NOISY_LIBRARIES = ("darts", "statsforecast", "pmdarima", "cmdstanpy", "matplotlib", "numba")

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: int = logging.INFO, log_file: str | Path | None = None) -> logging.Logger:
    """Configure the ``btcml`` logger: stdout, plus a file when ``log_file`` is given."""
    logger = logging.getLogger("btcml")
    formatter = logging.Formatter(_FORMAT, datefmt=_DATEFMT)

    # Avoid duplicate handlers if setup_logging is called multiple times
    if not any(type(h) is logging.StreamHandler for h in logger.handlers):
        stream = logging.StreamHandler(sys.stdout)
        stream.setFormatter(formatter)
        logger.addHandler(stream)

    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        if not any(isinstance(h, logging.FileHandler) and Path(h.baseFilename) == path.resolve()
                   for h in logger.handlers):
            file_handler = logging.FileHandler(path, encoding="utf-8")
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)

    return logger


def silence_libraries(level: int = logging.WARNING, names: tuple[str, ...] = NOISY_LIBRARIES) -> None:
    """Raise the threshold of chatty third-party loggers."""
    for name in names:
        logging.getLogger(name).setLevel(level)


def get_logger(name: str | None = None) -> logging.Logger:
    """Returns a logger below the ``btcml`` root."""
    base_logger = "btcml"
    if name:
        return logging.getLogger(f"{base_logger}.{name}")
    return logging.getLogger(base_logger)
