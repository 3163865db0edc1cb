"""
Logging utilities for the golden-image anomaly detection system.
Implements structured logging with console and rotating file handlers.
"""

import sys
import time
from functools import wraps
from pathlib import Path
from typing import Optional, Union
from loguru import logger
import yaml


class LoggerManager:
    """
    Centralized logger management with configurable handlers and formatters.
    File handlers are only attached when file logging is enabled.
    """

    def __init__(
        self,
        config_path: Optional[Union[str, Path]] = None,
        level: Optional[str] = None,
        file_logging: Optional[bool] = None
    ):
        """
        Initialize logger manager with configuration.

        Args:
            config_path: Path to configuration file
            level: Override for the log level
            file_logging: Override for attaching the file handlers
        """
        self.config = self._load_config(config_path)
        if level:
            self.config['level'] = level
        if file_logging is not None:
            self.config['file_logging'] = file_logging
        self._setup_logger()

    def _load_config(self, config_path: Optional[Union[str, Path]]) -> dict:
        """Load configuration from file or use defaults."""
        default_config = {
            "level": "INFO",
            "log_dir": "logs",
            "file_logging": False,
            "format": "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[name]}:{function}:{line} | {message}",
            "rotation": "10 MB",
            "retention": "30 days",
            "compression": "zip"
        }

        if config_path and Path(config_path).exists():
            try:
                with open(config_path, 'r') as f:
                    config = yaml.safe_load(f) or {}
                    return {**default_config, **config.get('logging', {})}
            except (OSError, yaml.YAMLError) as e:
                logger.warning(f"Failed to load logging config from {config_path}: {e}")

        return default_config

    def _setup_logger(self):
        """Setup logger with console and optional file handlers."""
        # Remove default handler
        logger.remove()
        logger.configure(extra={"name": "golden_anomaly"})

        # Console handler
        logger.add(
            sys.stdout,
            level=self.config["level"],
            format=self.config["format"],
            colorize=True,
            backtrace=True,
            diagnose=False
        )

        if not self.config["file_logging"]:
            return

        log_dir = Path(self.config["log_dir"])
        log_dir.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_dir / "app.log",
            level=self.config["level"],
            format=self.config["format"],
            rotation=self.config["rotation"],
            retention=self.config["retention"],
            compression=self.config["compression"],
            backtrace=True,
            diagnose=False
        )

        # Error file handler
        logger.add(
            log_dir / "errors.log",
            level="ERROR",
            format=self.config["format"],
            rotation=self.config["rotation"],
            retention=self.config["retention"],
            compression=self.config["compression"],
            backtrace=True,
            diagnose=False
        )

    def get_logger(self, name: str = __name__):
        """Get logger instance with specified name."""
        return logger.bind(name=name)


# Global logger instance
_logger_manager = LoggerManager()


def get_logger(name: str = __name__):
    """Get a logger bound to ``name`` from the active manager."""
    return _logger_manager.get_logger(name)


def setup_logging(
    config_path: Optional[Union[str, Path]] = None,
    level: Optional[str] = None,
    file_logging: Optional[bool] = None
):
    """Setup logging configuration."""
    global _logger_manager
    _logger_manager = LoggerManager(config_path, level=level, file_logging=file_logging)


class LoggerMixin:
    """Mixin class to add logging capabilities to any class."""

    @property
    def logger(self):
        """Get logger instance for this class."""
        return get_logger(self.__class__.__name__)


def log_execution_time(func):
    """Decorator to log function execution time."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.time()
        log = get_logger(func.__module__)
        log.info(f"Starting {func.__name__}")

        try:
            result = func(*args, **kwargs)
            execution_time = time.time() - start_time
            log.info(f"Completed {func.__name__} in {execution_time:.2f}s")
            return result
        except Exception as e:
            execution_time = time.time() - start_time
            log.error(f"Failed {func.__name__} after {execution_time:.2f}s: {e}")
            raise

    return wrapper
