"""
Structured JSON Logging Configuration for the Kirana parser

Provides consistent, parseable logging for the parsing pipeline and the
HTTP API. Logs can be viewed with jq for easy filtering and analysis.
"""
import functools
import inspect
import json
import logging
import os
import sys
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional


# Fields the pipeline attaches through extra={}; printed by both formatters
CONTEXT_FIELDS = [
    'request_id', 'method', 'path', 'status_code', 'duration_ms',
    'stage', 'text_length', 'segments_count', 'items_count',
    'intent', 'confidence', 'source', 'operation', 'error_type',
]

_STANDARD_ATTRS = {
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'message', 'pathname', 'process', 'processName', 'relativeCreated',
    'thread', 'threadName', 'exc_info', 'exc_text', 'stack_info',
    'extra_data', 'getMessage', 'taskName',
}


class JSONFormatter(logging.Formatter):
    """
    Custom JSON formatter for structured logging.

    Outputs logs as single-line JSON objects. Malayalam text is written
    as-is (ensure_ascii=False) so transcripts stay readable in the log.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: Dict[str, Any] = {
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }

        for field in CONTEXT_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        if hasattr(record, 'extra_data'):
            log_data.update(record.extra_data)

        # Anything else passed via extra={} that serializes cleanly
        for attr_name, attr_value in record.__dict__.items():
            if attr_name in _STANDARD_ATTRS or attr_name in log_data:
                continue
            if isinstance(attr_value, (str, int, float, bool, type(None), dict, list)):
                log_data[attr_name] = attr_value

        return json.dumps(log_data, ensure_ascii=False, default=str)


class PrettyJSONFormatter(logging.Formatter):
    """
    Colored single-line formatter for development.

    Keeps the same field names as JSONFormatter so switching LOG_FORMAT
    does not change what is logged, only how it looks.
    """

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m',       # Reset
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as a readable line."""
        timestamp = datetime.now(timezone.utc).strftime('%H:%M:%S.%f')[:-3]
        color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        reset = self.COLORS['RESET']

        parts = [
            f"{color}[{record.levelname}]{reset}",
            timestamp,
            f"{record.name}:",
            record.getMessage(),
        ]

        extra_parts = []
        if getattr(record, 'request_id', None):
            extra_parts.append(f"req_id={record.request_id}")
        if hasattr(record, 'method') and hasattr(record, 'path'):
            extra_parts.append(f"{record.method} {record.path}")
        for field in ('status_code', 'stage', 'intent', 'confidence',
                      'items_count', 'duration_ms'):
            value = getattr(record, field, None)
            if value is not None:
                extra_parts.append(f"{field}={value}")

        if extra_parts:
            parts.append(f"({', '.join(extra_parts)})")

        result = ' '.join(parts)

        if record.exc_info:
            result += '\n' + self.formatException(record.exc_info)

        return result


def setup_logging(
    app_name: str = 'kirana',
    log_level: str = 'INFO',
    log_format: str = 'json',
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Configure structured logging for the application.

    Module loggers are created with logging.getLogger(__name__) under the
    ``kirana`` namespace, so configuring the ``kirana`` logger covers the
    whole package.

    Args:
        app_name: Name of the application logger
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Format type ('json' or 'pretty')
        log_file: Optional file path for file-based logging

    Returns:
        Configured logger instance

    Example:
        >>> logger = setup_logging('kirana', 'INFO', 'json')
        >>> logger.info('Server started', extra={'port': 9002})
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger(app_name)
    logger.setLevel(numeric_level)
    logger.handlers = []  # Clear any existing handlers

    if log_format == 'pretty':
        formatter = PrettyJSONFormatter()
    else:
        formatter = JSONFormatter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        try:
            log_dir = os.path.dirname(log_file)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)

            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(numeric_level)
            # Always use JSON for file logs
            file_handler.setFormatter(JSONFormatter())
            logger.addHandler(file_handler)
        except OSError as e:
            logger.warning(f"Failed to setup file logging: {e}")

    # Don't propagate to root logger
    logger.propagate = False

    return logger


def generate_request_id() -> str:
    """
    Generate a short request ID for tracing.

    Returns:
        8-character unique identifier
    """
    return str(uuid.uuid4())[:8]


# ============================================================================
# Function Call Logging Decorator
# ============================================================================

def log_function_call(
    level: str = 'DEBUG',
    log_args: bool = True,
    log_result: bool = True,
    truncate_at: int = 200
):
    """
    Decorator to log function input, output, and timing.

    Summaries go out at ``level``; full arguments and results only when the
    module logger is enabled for DEBUG.

    Args:
        level: Log level for summaries ('INFO' or 'DEBUG')
        log_args: Whether to log function arguments
        log_result: Whether to log function result
        truncate_at: Truncate long strings at this length

    Example:
        >>> @log_function_call()
        ... def process(self, text: str):
        ...     return result

        Produces logs:
        DEBUG: VoiceCommandPipeline.process() called (text_length=25)
        DEBUG: VoiceCommandPipeline.process() completed (duration_ms=0.4, intent=billing.add)
    """
    def decorator(func: Callable) -> Callable:
        logger = logging.getLogger(func.__module__)
        log_level = getattr(logging, level.upper(), logging.DEBUG)

        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            func_name = func.__qualname__
            enabled = logger.isEnabledFor(log_level)

            if enabled:
                logger.log(log_level, f"{func_name}() called",
                           extra=_summarize_args(func, args, kwargs))
            if log_args and logger.isEnabledFor(logging.DEBUG):
                logger.debug(f"{func_name}() input",
                             extra={'input': _debug_args(func, args, kwargs, truncate_at)})

            start_time = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                duration = round((time.perf_counter() - start_time) * 1000, 2)
                logger.error(
                    f"{func_name}() failed after {duration}ms",
                    extra={
                        'error_type': type(e).__name__,
                        'error_message': str(e),
                        'duration_ms': duration,
                    },
                    exc_info=True
                )
                raise

            duration = round((time.perf_counter() - start_time) * 1000, 2)
            if enabled:
                result_info = _summarize_result(result)
                result_info['duration_ms'] = duration
                logger.log(log_level, f"{func_name}() completed", extra=result_info)
            if log_result and logger.isEnabledFor(logging.DEBUG):
                logger.debug(f"{func_name}() output",
                             extra={'output': _debug_result(result, truncate_at)})

            return result

        return wrapper
    return decorator


def _bound_arguments(func, args, kwargs) -> Dict[str, Any]:
    try:
        bound = inspect.signature(func).bind_partial(*args, **kwargs)
    except (TypeError, ValueError):
        return {}
    return {k: v for k, v in bound.arguments.items() if k != 'self'}


def _summarize_args(func, args, kwargs) -> Dict[str, Any]:
    """Argument summary: string lengths and collection sizes, never content."""
    info: Dict[str, Any] = {}
    for name, value in _bound_arguments(func, args, kwargs).items():
        if isinstance(value, str):
            info[f'{name}_length'] = len(value)
        elif isinstance(value, (list, tuple, dict)):
            info[f'{name}_count'] = len(value)
        elif isinstance(value, (int, float, bool)) or value is None:
            info[name] = value
    return info


def _debug_args(func, args, kwargs, truncate_at) -> Dict[str, Any]:
    debug_info: Dict[str, Any] = {}
    for name, value in _bound_arguments(func, args, kwargs).items():
        if isinstance(value, str) and len(value) > truncate_at:
            debug_info[name] = value[:truncate_at] + '...'
        elif isinstance(value, (str, int, float, bool, type(None), dict, list)):
            debug_info[name] = value
        else:
            debug_info[name] = repr(value)[:truncate_at]
    return debug_info


def _summarize_result(result) -> Dict[str, Any]:
    """Pull the fields worth seeing at a glance out of a pipeline result."""
    info: Dict[str, Any] = {}
    if result is None:
        info['result'] = 'None'
        return info

    intent = getattr(result, 'intent', None)
    if intent is not None:
        # CommandResult carries a ClassifiedIntent, ClassifiedIntent a str
        info['intent'] = getattr(intent, 'intent', intent)
        confidence = getattr(intent, 'confidence', getattr(result, 'confidence', None))
        if confidence is not None:
            info['confidence'] = round(confidence, 3)

    items = getattr(result, 'items', None)
    if isinstance(items, list):
        info['items_count'] = len(items)
    elif isinstance(result, (list, tuple)):
        info['items_count'] = len(result)

    action = getattr(result, 'action', None)
    if action is not None and hasattr(action, 'operation'):
        info['operation'] = action.operation

    return info


def _debug_result(result, truncate_at):
    if hasattr(result, 'to_dict'):
        return result.to_dict()
    if isinstance(result, (list, tuple)):
        return [item.to_dict() if hasattr(item, 'to_dict') else repr(item)[:truncate_at]
                for item in result]
    if isinstance(result, (dict, str, int, float, bool)) or result is None:
        return result
    return repr(result)[:truncate_at]
