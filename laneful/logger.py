import os
import sys
from loguru import logger as _loguru_logger


def _ensure_request_id(record):
    """Patch function to ensure request_id is always present in log records."""
    if "extra" not in record:
        record["extra"] = {}
    if "request_id" not in record["extra"]:
        record["extra"]["request_id"] = "system"
    if "security_event" not in record["extra"]:
        record["extra"]["security_event"] = False
    return record


# Patched at import so modules that log before setup_logging() still get the extras.
# Sinks are left alone until setup_logging() is called by the application.
_patched_logger = _loguru_logger.patch(_ensure_request_id)

DEVELOPMENT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[request_id]:<36}</cyan> | <level>{message}</level>"
)


def setup_logging(environment=None, level=None):
    """Initialize logging with environment-specific settings.

    Args:
        environment: Optional environment override. Falls back to LANEFUL_ENVIRONMENT.
        level: Optional level override. Falls back to LANEFUL_LOG_LEVEL.

    Returns:
        The patched logger instance.
    """
    global _patched_logger

    _loguru_logger.remove()
    _patched_logger = _loguru_logger.patch(_ensure_request_id)

    env = (environment or os.getenv("LANEFUL_ENVIRONMENT", "development")).lower()
    log_level = (level or os.getenv("LANEFUL_LOG_LEVEL", "INFO")).upper()

    if env == "production":
        # JSON lines so log shippers can pick up request_id/security_event
        _patched_logger.add(
            sys.stderr,
            serialize=True,
            level=log_level,
            backtrace=False,
            diagnose=False,
        )
    else:
        _patched_logger.add(
            sys.stderr,
            format=DEVELOPMENT_FORMAT,
            level=log_level,
            backtrace=True,
            diagnose=False,
        )

    return _patched_logger


logger = _patched_logger
