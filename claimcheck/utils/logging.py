"""Structured logging setup for the claim verification service."""

import contextvars
import logging
from typing import Optional, Dict, Any
from pathlib import Path


_log_context: contextvars.ContextVar[Dict[str, Any]] = contextvars.ContextVar(
    "claimcheck_log_context", default={}
)

# Fields every record carries so format strings can always reference them
DEFAULT_CONTEXT_FIELDS = {"session_id": "-"}


class ContextFilter(logging.Filter):
    """Add context information to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Add context fields to log record."""
        fields = dict(DEFAULT_CONTEXT_FIELDS)
        fields.update(_log_context.get())
        for key, value in fields.items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


# Global context filter instance
_context_filter = ContextFilter()


def setup_logging(
    level: str = "INFO",
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Set up structured logging with optional file output.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Format string for log messages
        log_file: Optional path to log file

    Returns:
        Configured root logger
    """
    # Convert string level to logging constant
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Remove existing handlers
    root_logger.handlers.clear()

    # Create formatter
    formatter = logging.Formatter(log_format)

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(_context_filter)
    root_logger.addHandler(console_handler)

    # File handler (if specified)
    if log_file:
        # Create log directory if it doesn't exist
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(formatter)
        file_handler.addFilter(_context_filter)
        root_logger.addHandler(file_handler)

    return root_logger


def set_context(**kwargs) -> contextvars.Token:
    """
    Set context fields for all subsequent log messages in this context.

    Example:
        set_context(session_id="3f2a...")
        logger.info("Processing claim")  # Will include session_id

    Args:
        **kwargs: Context key-value pairs

    Returns:
        Token that can be passed to reset_context
    """
    context = dict(_log_context.get())
    context.update(kwargs)
    return _log_context.set(context)


def reset_context(token: contextvars.Token) -> None:
    """Restore the context that was active before set_context."""
    _log_context.reset(token)

