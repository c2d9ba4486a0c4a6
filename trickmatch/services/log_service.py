"""Logging service."""

import logging

logger = logging.getLogger(__name__)


class LogService:
    """Service for structured logging.

    Renders key=value audit lines for committed match transitions.
    """

    def info(self, data: dict[str, object]) -> None:
        """Log info message.

        Args:
            data: Log data as key-value pairs

        """
        logger.info(self._format(data))

    def error(self, data: dict[str, object]) -> None:
        """Log error message.

        Args:
            data: Log data as key-value pairs

        """
        logger.error(self._format(data))

    @staticmethod
    def _format(data: dict[str, object]) -> str:
        return " | ".join(f"{k}={v}" for k, v in data.items())
