"""Encoding-safe Console wrapper for Rich library.

Wraps Rich's Console so that identifier names and source lines echoed from
arbitrary files never crash a terminal that cannot encode them.
"""
from typing import Any

from rich.console import Console

from .logger import is_utf8_capable, sanitize_for_terminal


class SafeConsole(Console):
    """Console that sanitizes string output on non-UTF-8 streams.

    The stream is re-examined on every print, so a console created at import
    time still behaves when stdout/stderr are swapped later (e.g. in tests).
    """

    def print(self, *objects: Any, **kwargs) -> None:
        """Print with automatic sanitization of string objects.

        Args:
            *objects: Objects to print (same as Rich Console.print)
            **kwargs: Keyword arguments (same as Rich Console.print)
        """
        if is_utf8_capable(self.file):
            super().print(*objects, **kwargs)
            return

        sanitized = [
            sanitize_for_terminal(obj, self.file) if isinstance(obj, str) else obj
            for obj in objects
        ]
        super().print(*sanitized, **kwargs)


def plain_console(stderr: bool = False, **kwargs) -> SafeConsole:
    """Console for machine-readable output: no markup, emoji, highlighting or wrapping."""
    kwargs.setdefault('highlight', False)
    kwargs.setdefault('emoji', False)
    kwargs.setdefault('markup', False)
    kwargs.setdefault('soft_wrap', True)
    return SafeConsole(stderr=stderr, **kwargs)
