"""
Diagnostic records shared by the rules, the driver and the CLI.

A `Span` is a best-effort source position: file, line and column when known,
plus the raw location object it was built from. A `Diagnostic` is a message
with a stable code, a severity and a span.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Optional, Tuple

PARSE_CODE = "E-PARSE"
READ_CODE = "E-READ"


@dataclass(frozen=True)
class Span:
    """Represents a source span (best-effort file/line/column plus raw parser loc)."""

    file: Optional[str] = None
    line: Optional[int] = None
    column: Optional[int] = None
    end_line: Optional[int] = None
    end_column: Optional[int] = None
    raw: Any = None

    @classmethod
    def from_loc(cls, loc: Any, file: Optional[str] = None) -> "Span":
        """
        Construct a Span from a tree `Located`, a lark error, or another Span.

        Fields the object does not carry are left as None; `file` fills in the
        file name when the location itself has none.
        """
        if loc is None:
            return cls(file=file)
        if isinstance(loc, cls):
            if file is not None and loc.file is None:
                return replace(loc, file=file)
            return loc
        return cls(
            file=getattr(loc, "file", None) or file,
            line=getattr(loc, "line", None),
            column=getattr(loc, "column", None),
            end_line=getattr(loc, "end_line", None),
            end_column=getattr(loc, "end_column", None),
            raw=loc,
        )


@dataclass
class Diagnostic:
    """A single finding. Rule findings are warnings; unreadable input is an error."""

    message: str
    code: Optional[str] = None
    severity: str = "warning"
    span: Span = field(default_factory=Span)
    notes: list[str] = field(default_factory=list)


def format_diagnostic(diag: Diagnostic) -> str:
    span = diag.span
    file = span.file or "<unknown>"
    line = span.line if span.line is not None else "?"
    column = span.column if span.column is not None else "?"
    return f"{file}:{line}:{column}: {diag.severity}: {diag.message}"


def diagnostic_to_json(diag: Diagnostic) -> dict:
    """Render a Diagnostic to a structured JSON-friendly dict."""
    return {
        "code": diag.code,
        "message": diag.message,
        "severity": diag.severity,
        "file": diag.span.file,
        "line": diag.span.line,
        "column": diag.span.column,
        "notes": list(diag.notes),
    }


def sort_key(diag: Diagnostic) -> Tuple[str, int, int, str]:
    span = diag.span
    return (span.file or "", span.line or 0, span.column or 0, diag.message)


__all__ = [
    "PARSE_CODE",
    "READ_CODE",
    "Diagnostic",
    "Span",
    "diagnostic_to_json",
    "format_diagnostic",
    "sort_key",
]
