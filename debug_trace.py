"""
debug_trace.py

Opt-in debug instrumentation for following edits through the geometry core.
Enable by setting the environment variable PIXELOID_TRACE=1 (or calling
set_tracing(True)).  Messages go to the "pixeloid.trace" logger at DEBUG level.
"""

import logging
import os
from functools import wraps

# Enabled from the environment at import time
DEBUG_TRACE = os.environ.get("PIXELOID_TRACE", "") == "1"

# Set to True to trace per-pointer-move events (very verbose)
TRACE_POINTER = os.environ.get("PIXELOID_TRACE_POINTER", "") == "1"

_logger = logging.getLogger("pixeloid.trace")


def set_tracing(enabled: bool, pointer: bool = False) -> None:
    """Turn tracing on or off at runtime."""
    global DEBUG_TRACE, TRACE_POINTER
    DEBUG_TRACE = enabled
    TRACE_POINTER = pointer


def trace(msg: str, category: str = "INFO"):
    """Emit a trace message tagged with a category."""
    if not DEBUG_TRACE:
        return
    if category == "POINTER" and not TRACE_POINTER:
        return
    _logger.debug("[%s] %s", category, msg)


def trace_call(category: str = "CALL"):
    """Decorator to trace entry, exit and exceptions of a function.

    The enabled flag is checked per call so tracing can be switched on
    after import.
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            if not DEBUG_TRACE:
                return func(*args, **kwargs)
            func_name = func.__qualname__
            trace(f">>> {func_name}", category)
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                trace(f"!!! {func_name} raised {type(e).__name__}: {e}", "ERROR")
                raise
            trace(f"<<< {func_name}", category)
            return result
        return wrapper
    return decorator
