"""Secure logging utilities for the relay.

Provides sanitized logging that removes sensitive information like tokens,
emails, and API keys before outputting to logs.
"""
import json
import logging
import re
from typing import Any, Optional

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)

logger = logging.getLogger('agent-relay')


def configure_logging(level: str = "INFO", fmt: Optional[str] = None) -> None:
    """Apply the configured level and format to the relay logger.

    Args:
        level: Standard logging level name
        fmt: Optional log format string; the root handler's format is kept when None
    """
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    if fmt:
        formatter = logging.Formatter(fmt, datefmt='%Y-%m-%d %H:%M:%S')
        for handler in logging.getLogger().handlers:
            handler.setFormatter(formatter)


def sanitize_text(text: str) -> str:
    """Remove sensitive information from text.

    Args:
        text: Input text that may contain sensitive data

    Returns:
        Sanitized text with sensitive patterns replaced
    """
    if not text:
        return text

    # Email addresses
    text = re.sub(r'[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}', '<email>', text)

    # GitHub tokens (classic and fine-grained)
    text = re.sub(r'ghp_[a-zA-Z0-9]{36}', '<github-token>', text)
    text = re.sub(r'github_pat_[a-zA-Z0-9_]{20,}', '<github-token>', text)

    # Bearer headers
    text = re.sub(r'Bearer\s+[^\s"]+', 'Bearer <token>', text)

    # Query strings may carry credentials
    text = re.sub(r'(https?://[^\s"?]+)\?[^\s"]*', r'\1?<query>', text)

    return text


def safe_json(obj: Any, max_length: int = 1000) -> str:
    """Safely serialize object to JSON with sensitive data sanitized.

    Args:
        obj: Object to serialize
        max_length: Maximum length of output string

    Returns:
        Sanitized JSON string
    """
    try:
        json_str = json.dumps(obj, ensure_ascii=False, default=str)
        sanitized = sanitize_text(json_str)

        if len(sanitized) > max_length:
            sanitized = sanitized[:max_length] + "... [truncated]"

        return sanitized
    except (TypeError, ValueError):
        return "<unable to serialize>"


def log_info(message: str, **kwargs) -> None:
    """Log info message with optional sanitized context."""
    if kwargs:
        context = safe_json(kwargs)
        logger.info(f"{message} | Context: {context}")
    else:
        logger.info(message)


def log_warning(message: str, **kwargs) -> None:
    """Log warning message with optional sanitized context."""
    if kwargs:
        context = safe_json(kwargs)
        logger.warning(f"{message} | Context: {context}")
    else:
        logger.warning(message)


def log_error(message: str, **kwargs) -> None:
    """Log error message with optional sanitized context."""
    if kwargs:
        context = safe_json(kwargs)
        logger.error(f"{message} | Context: {context}")
    else:
        logger.error(message)


def log_debug(message: str, **kwargs) -> None:
    """Log debug message with optional sanitized context."""
    if kwargs:
        context = safe_json(kwargs)
        logger.debug(f"{message} | Context: {context}")
    else:
        logger.debug(message)


def log_signal_detected(channel: str, signal: str, **kwargs) -> None:
    """Log a new occurrence picked up on one of the channels.

    Args:
        channel: "local" or "remote"
        signal: Signal name
        **kwargs: Additional context
    """
    log_info(f"[{channel}] new flag detected: {signal}", **kwargs)


def log_dispatch(from_agent: str, channel: str, **kwargs) -> None:
    """Log the outcome of a notification fan-out.

    Args:
        from_agent: Agent the notification is attributed to
        channel: Channel that triggered the dispatch
        **kwargs: Additional context (clipboard provider, toast status, ...)
    """
    log_info(f"Notification dispatched for {from_agent}", channel=channel, **kwargs)
