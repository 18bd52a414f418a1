"""Debug output that can be redirected to a handler of the caller's choosing."""

from __future__ import annotations

import sys
from typing import Any, Callable

DebugHandler = Callable[[str], None]


def _default_handler(message: str) -> None:
    sys.stderr.write(f"DEBUG: {message}\n")


class _DebugRouter:
    """Holds the handler that debug messages currently go to."""

    def __init__(self) -> None:
        self.handler: DebugHandler = _default_handler

    def emit(self, message: str) -> None:
        self.handler(message)

    def route(self, handler: DebugHandler) -> None:
        if not callable(handler):
            raise TypeError("debug handler must be callable")
        self.handler = handler

    def reset(self) -> None:
        self.handler = _default_handler


_router = _DebugRouter()


def debug_str(message: str) -> None:
    """Send a debug message to the current handler."""
    _router.emit(message)


def debug(fmt: str, *args: Any, **kwargs: Any) -> None:
    """Format a message with ``str.format`` and send it, unless optimised out."""
    if __debug__:
        debug_str(fmt.format(*args, **kwargs))


def set_debug_handler(handler: DebugHandler) -> None:
    """Route debug messages to ``handler``."""
    _router.route(handler)


def reset_debug_handler() -> None:
    """Route debug messages back to standard error."""
    _router.reset()