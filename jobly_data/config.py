"""
Configuration for the Jobly data-access layer.

Settings are resolved once, from explicit arguments or from environment
variables (and an optional .env file), and then handed to collaborators at
construction time. Nothing below the configuration layer reads the process
environment.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

ENV_PREFIX = "JOBLY_"


def _parse_bool(value: Optional[str], default: bool) -> bool:
    """Parse a boolean flag value."""
    if value is None:
        return default
    return value.strip().lower() in ("true", "1", "t", "y", "yes")


def _parse_optional_float(value: Optional[str], default: Optional[float]) -> Optional[float]:
    if value is None or not value.strip():
        return default
    if value.strip().lower() == "none":
        return None
    return float(value)


@dataclass(frozen=True)
class Settings:
    """
    Data-access settings.

    Attributes:
        database_url: `sqlite:///path`, `sqlite:///:memory:` or `postgresql://...`
        pool_size: Maximum pooled connections
        pool_timeout: Seconds to wait for a free connection (None waits forever)
        log_level: Root log level used by `setup_logging`
        log_sql: Log statement text at DEBUG level
    """

    database_url: str = "sqlite:///jobly.db"
    pool_size: int = 5
    pool_timeout: Optional[float] = 30.0
    log_level: str = "INFO"
    log_sql: bool = False

    def __post_init__(self) -> None:
        if self.pool_size < 1:
            raise ValueError("pool_size must be >= 1.")
        object.__setattr__(self, "log_level", self.log_level.upper())

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> "Settings":
        """
        Build settings from `JOBLY_*` environment variables.

        Args:
            env_file: Optional .env file loaded first (existing variables win)

        Returns:
            Settings with defaults for anything unset
        """
        if env_file is not None:
            load_dotenv(dotenv_path=env_file)

        defaults = cls()
        pool_size = os.getenv(f"{ENV_PREFIX}POOL_SIZE")
        return cls(
            database_url=os.getenv(f"{ENV_PREFIX}DATABASE_URL", defaults.database_url),
            pool_size=int(pool_size) if pool_size else defaults.pool_size,
            pool_timeout=_parse_optional_float(
                os.getenv(f"{ENV_PREFIX}POOL_TIMEOUT"), defaults.pool_timeout
            ),
            log_level=os.getenv(f"{ENV_PREFIX}LOG_LEVEL", defaults.log_level),
            log_sql=_parse_bool(os.getenv(f"{ENV_PREFIX}LOG_SQL"), defaults.log_sql),
        )

    def setup_logging(self) -> None:
        """Configure the root logger with a stderr handler at `log_level`."""
        numeric_level = getattr(logging, self.log_level, logging.INFO)

        formatter = logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        root_logger = logging.getLogger()
        root_logger.setLevel(numeric_level)
        root_logger.handlers.clear()

        stderr_handler = logging.StreamHandler()
        stderr_handler.setLevel(numeric_level)
        stderr_handler.setFormatter(formatter)
        root_logger.addHandler(stderr_handler)

        logging.getLogger(__name__).info("Log level set to: %s", self.log_level)
