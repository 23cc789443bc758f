"""Error message formatting for CLI output.

Some exceptions stringify to nothing (TimeoutError(), CancelledError), which
would print as "Error: ". Loader errors carry the offending path; collaborator
errors are shown as raised.
"""

from __future__ import annotations

import asyncio

from rich.markup import escape as _escape_markup

from ..errors import LoaderError

FRIENDLY_MESSAGES: dict[type, str] = {
    TimeoutError: "Fetching the module timed out.",
    asyncio.CancelledError: "Module loading was cancelled.",
    FileNotFoundError: "Module file not found.",
    KeyboardInterrupt: "Operation interrupted by user.",
}


def format_error_message(e: BaseException, *, include_type: bool = True) -> str:
    """Format an exception into a non-empty display message.

    Examples:
        >>> format_error_message(TimeoutError())
        'TimeoutError: Fetching the module timed out.'

        >>> format_error_message(ValueError("bad json"))
        'ValueError: bad json'

        >>> format_error_message(ValueError("bad json"), include_type=False)
        'bad json'
    """
    error_str = str(e)
    error_type = type(e).__name__

    if error_str:
        # Loader errors already read as sentences
        if isinstance(e, LoaderError) or not include_type or error_type in error_str:
            return error_str
        return f"{error_type}: {error_str}"

    for exc_type, friendly_msg in FRIENDLY_MESSAGES.items():
        if isinstance(e, exc_type):
            return f"{error_type}: {friendly_msg}"

    return f"{error_type}: (no additional details)"


def escape_markup(value: object) -> str:
    """Escape a value for interpolation into Rich markup strings."""
    return _escape_markup(str(value))
