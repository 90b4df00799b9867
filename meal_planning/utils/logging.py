"""Shared logging configuration."""
import os
import sys
import json
import traceback
from aws_lambda_powertools import Logger


def format_exception(exc_info):
    """Format an exc_info tuple into a single line, or None without an active exception."""
    if exc_info[0] is None:
        return None
    trace = ''.join(traceback.format_exception(*exc_info))
    return trace.replace('\n', ' | ').strip()


def get_logger(service: str = None) -> Logger:
    """
    Create the engine logger.

    Args:
        service: Optional service name, defaults to POWERTOOLS_SERVICE_NAME or "meal_planning"

    Returns:
        Configured Logger emitting structured JSON
    """
    return Logger(
        service=service or os.environ.get('POWERTOOLS_SERVICE_NAME', 'meal_planning'),
        level=os.environ.get('LOG_LEVEL', 'INFO'),
        json_serializer=json.dumps,
        use_rfc3339=True
    )


logger = get_logger()


def log_exception(logger, message, **kwargs):
    """Log the exception being handled as an error with its trace on one line."""
    extra = kwargs.pop('extra', {})
    extra['exception'] = format_exception(sys.exc_info())
    logger.error(message, extra=extra, **kwargs)
