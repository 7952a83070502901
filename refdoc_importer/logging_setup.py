"""
Loguru sink configuration for importer runs
"""

import sys
from pathlib import Path
from typing import Optional, Union

from loguru import logger


def configure_logging(level: str = "INFO", log_dir: Optional[Union[str, Path]] = None) -> Optional[Path]:
    """
    Replace loguru's default sink with the importer's console and file sinks

    Args:
        level: Console log level
        log_dir: If set, rotating log files are written here

    Returns:
        Path of the main log file, or None when logging to console only
    """
    logger.remove()

    # Console output (brief)
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
        level=level.upper()
    )

    if log_dir is None:
        return None

    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    # Main log file (rotating, detailed)
    main_log = log_dir / "import.log"
    logger.add(
        main_log,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {message}",
        level="DEBUG",
        rotation="10 MB",
        retention="30 days",
        compression="gz"
    )

    # Error-only log (for quick issue detection)
    logger.add(
        log_dir / "import.error.log",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {message}",
        level="WARNING",
        rotation="5 MB",
        retention="30 days"
    )

    return main_log
