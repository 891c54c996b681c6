"""Helpers for printing exception text through Rich."""

from rich.markup import escape as _escape_markup


def escape_markup(value: object) -> str:
    """Escape a value for safe interpolation into Rich markup strings.

    Exception messages routinely carry file paths and ``[Errno N]`` prefixes
    that Rich would otherwise try to parse as tags.

    Args:
        value: Any value to escape (will be converted to str)

    Returns:
        String safe for interpolation into Rich markup f-strings
    """
    return _escape_markup(str(value))
