"""Logging initialization using loguru."""
import sys
from pathlib import Path
from typing import Optional, Union

from loguru import logger


def init_logging(level: str = "INFO", log_dir: Optional[Union[str, Path]] = None) -> None:
    """Log to stderr, and to rotating files under ``log_dir`` when given."""
    logger.remove()
    logger.add(sys.stderr, level=level, backtrace=False, diagnose=False)
    if log_dir is None:
        return

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    logger.add(
        str(log_path / "shotwell_{time:YYYYMMDD}.log"),
        rotation="10 MB",
        retention="10 days",
        enqueue=True,
        backtrace=False,
        diagnose=False,
        level=level,
    )
