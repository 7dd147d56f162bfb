import logging
import logging.handlers
from pathlib import Path
from typing import Optional

LOG_DIR = Path(__file__).parent.parent / "logs"
LOG_FILE_NAME = "balance_analysis.log"
LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 3


def _existing_log_file(root_logger: logging.Logger) -> Optional[Path]:
    for handler in root_logger.handlers:
        if isinstance(handler, logging.handlers.RotatingFileHandler):
            return Path(handler.baseFilename)
    return None


def setup_logging(log_level: str = "INFO", log_dir: Optional[Path] = None) -> Path:
    """Configure logging for the balance analysis tools.

    The file handler always records DEBUG, so per-season detail of a
    simulation lands in the log file while the console shows *log_level*.
    Handlers installed by someone else (a test runner, an embedding
    application) are left in place; only a second call is a no-op.

    Returns:
        Path of the log file in use.
    """
    root_logger = logging.getLogger()
    existing = _existing_log_file(root_logger)
    if existing is not None:
        return existing  # Already configured

    level = logging.getLevelName(log_level.upper())
    unknown_level = not isinstance(level, int)
    if unknown_level:
        level = logging.INFO

    log_dir = Path(log_dir) if log_dir is not None else LOG_DIR
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root_logger.setLevel(logging.DEBUG)

    # File handler with rotation (5MB max, keep 3 backups)
    file_handler = logging.handlers.RotatingFileHandler(
        log_file, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT, encoding="utf-8"
    )
    file_handler.setLevel(logging.DEBUG)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    file_handler.setFormatter(formatter)
    console_handler.setFormatter(formatter)

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    logger = logging.getLogger(__name__)
    if unknown_level:
        logger.warning("Unknown log level %r; using INFO", log_level)
    logger.info("Logging initialized (level=%s, file=%s)", logging.getLevelName(level), log_file)
    return log_file
