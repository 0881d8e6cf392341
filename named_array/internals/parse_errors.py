"""Shared parse exception handling for the loader, CLI and library API."""
from __future__ import annotations

from lark import UnexpectedInput, UnexpectedCharacters, UnexpectedToken, UnexpectedEOF

from named_array.internals.report import Span


def _describe(exc: UnexpectedInput) -> str:
    """One-line summary of a lark parse failure."""
    if isinstance(exc, UnexpectedCharacters):
        return f"unexpected character {exc.char!r}"
    if isinstance(exc, UnexpectedToken):
        expected = sorted(exc.accepts or exc.expected)
        hint = f"; expected one of: {', '.join(expected)}" if expected else ""
        if exc.token.type == "$END":
            return f"unexpected end of input{hint}"
        return f"unexpected {exc.token.type} {str(exc.token)!r}{hint}"
    if isinstance(exc, UnexpectedEOF):
        return "unexpected end of input"
    return str(exc).splitlines()[0]


def handle_parse_exception(exc: Exception, reporter) -> bool:
    """Handle a parse exception by emitting diagnostics through the reporter.

    Returns:
        True if the exception was handled, False otherwise.
    """
    from named_array.internals import errors as er

    if isinstance(exc, UnexpectedInput):
        line = getattr(exc, "line", -1)
        col = getattr(exc, "column", -1)
        span = Span(line, col, line, col + 1) if line and line > 0 else None
        er.emit(reporter, er.ERR.CE1000, span, detail=_describe(exc))
        return True

    return False
