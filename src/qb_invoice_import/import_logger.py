"""
Structured Logging for the Invoice Import
Rotating file logs with immediate flush, plus a quiet console handler so
operator status lines are not printed twice.
"""
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from . import import_config as cfg

LOGGER_NAME = "qb_invoice_import"


class ImportLogger:
    """Configure the package logger with rotating file handlers"""

    def __init__(
        self,
        log_dir: Optional[str] = None,
        log_level: Optional[str] = None,
        max_mb: Optional[int] = None,
        backup_count: Optional[int] = None,
        console_level: int = logging.CRITICAL,
    ):
        """
        Args:
            log_dir: Directory for log files
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            max_mb: Size of the main log file before rotation
            backup_count: Rotated files to keep
            console_level: Minimum level echoed to the console; the reporter
                already prints every per-invoice outcome
        """
        self.log_dir = Path(log_dir or cfg.LOG_DIR)
        self.log_level = (log_level or cfg.LOG_LEVEL).upper()
        self.max_mb = max_mb or cfg.LOG_MAX_MB
        self.backup_count = backup_count or cfg.LOG_BACKUP_COUNT

        self.logger = logging.getLogger(LOGGER_NAME)
        self.logger.setLevel(getattr(logging, self.log_level, logging.INFO))

        # Clear any existing handlers
        for handler in list(self.logger.handlers):
            handler.close()
        self.logger.handlers.clear()

        self.log_dir.mkdir(parents=True, exist_ok=True)

        log_format = logging.Formatter(
            '[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        # 1. Main rotating file handler
        main_handler = RotatingFileHandler(
            self.main_log_file,
            maxBytes=self.max_mb * 1024 * 1024,
            backupCount=self.backup_count,
            encoding='utf-8'
        )
        main_handler.setLevel(logging.DEBUG)
        main_handler.setFormatter(log_format)
        self.logger.addHandler(main_handler)

        # 2. Error-only log file
        error_handler = RotatingFileHandler(
            self.error_log_file,
            maxBytes=5 * 1024 * 1024,
            backupCount=3,
            encoding='utf-8'
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(log_format)
        self.logger.addHandler(error_handler)

        # 3. Console handler
        console_handler = logging.StreamHandler()
        console_handler.setLevel(console_level)
        console_handler.setFormatter(log_format)
        self.logger.addHandler(console_handler)

    @property
    def main_log_file(self) -> Path:
        return self.log_dir / 'qb_invoice_import.log'

    @property
    def error_log_file(self) -> Path:
        return self.log_dir / 'errors.log'

    def flush(self):
        for handler in self.logger.handlers:
            handler.flush()

    def close(self):
        """Detach and close every handler"""
        for handler in list(self.logger.handlers):
            handler.close()
            self.logger.removeHandler(handler)


# Global logger instance
_global_logger: Optional[ImportLogger] = None


def get_logger(log_level: Optional[str] = None) -> ImportLogger:
    """Get or create global logger instance"""
    global _global_logger
    if _global_logger is None:
        _global_logger = ImportLogger(log_level=log_level)
    return _global_logger
