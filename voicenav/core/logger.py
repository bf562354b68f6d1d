# voicenav/core/logger.py

"""
Logging helper for VoiceNav.

- Logs to file and console
- Every module logs through a child of the "voicenav" logger
"""

import logging
from pathlib import Path


def setup_logging(log_dir: Path | None = None, level: int = logging.INFO) -> logging.Logger:
    if log_dir is None:
        log_dir = Path(__file__).resolve().parents[2] / "data" / "logs"

    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "voicenav.log"

    logger = logging.getLogger("voicenav")
    logger.setLevel(level)

    # Avoid duplicate handlers if called twice
    if logger.handlers:
        return logger

    fmt = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    fh = logging.FileHandler(log_file, encoding="utf-8")
    fh.setFormatter(fmt)
    fh.setLevel(level)
    logger.addHandler(fh)

    ch = logging.StreamHandler()
    ch.setFormatter(fmt)
    ch.setLevel(level)
    logger.addHandler(ch)

    logger.info("VoiceNav logging initialized.")
    return logger
