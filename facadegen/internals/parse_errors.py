"""Shared parse exception handling for loader and host."""
from __future__ import annotations

from lark import UnexpectedInput

from facadegen.internals.report import Span


def handle_parse_exception(exc: Exception, reporter, source_path=None) -> bool:
    """Handle a parse exception by emitting diagnostics through the reporter.

    Args:
        exc: The exception to handle.
        reporter: Reporter for error/warning collection.
        source_path: Optional path the diagnostic is attributed to.

    Returns:
        True if the exception was handled, False otherwise.
    """
    from facadegen.internals import errors as er
    from facadegen.internals.parser import improve_parse_error

    if isinstance(exc, UnexpectedInput):
        line = getattr(exc, "line", -1)
        col = getattr(exc, "column", -1)
        span = Span(line, col, line, col) if line and line > 0 else None
        er.emit(reporter, er.ERR.FG1001, span, filename=str(source_path) if source_path else None,
                message=improve_parse_error(exc))
        return True

    return False
