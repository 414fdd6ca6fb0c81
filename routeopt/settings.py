"""
Process-start settings.

Read once when the driver starts and handed to whatever needs them; nothing
here is changed while a run is in progress.
"""

import logging
import os
from dataclasses import dataclass

LOGGER_NAME = "routeopt"

LOG_LEVELS = {
    "off": logging.CRITICAL + 10,
    "critical": logging.CRITICAL,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


@dataclass(frozen=True)
class RuntimeSettings:
    """Settings from environment."""

    log_level: str = "off"
    # None keeps the run configuration's console progress setting
    show_progress: bool | None = None

    def __post_init__(self):
        if self.log_level.lower() not in LOG_LEVELS:
            raise ValueError(
                f"Unknown log level '{self.log_level}' "
                f"(choose from {', '.join(LOG_LEVELS)})"
            )

    @classmethod
    def from_env(cls) -> "RuntimeSettings":
        """Load settings from environment variables."""
        progress = os.getenv("ROUTEOPT_PROGRESS")
        return cls(
            log_level=os.getenv("ROUTEOPT_LOG_LEVEL", "off"),
            show_progress=(
                None
                if progress is None
                else progress.strip().lower() in ("1", "true", "yes")
            ),
        )

    @property
    def level(self) -> int:
        return LOG_LEVELS[self.log_level.lower()]


def configure_logging(settings: RuntimeSettings) -> logging.Logger:
    """
    Configure the ``routeopt`` logger hierarchy.

    Only the package logger is touched; the root logger and other libraries
    keep their configuration.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(settings.level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
        logger.addHandler(handler)
    return logger
