from __future__ import annotations

from oplint.ast import Located
from oplint.diagnostics import Diagnostic, Span, diagnostic_to_json, format_diagnostic, sort_key


def test_default_span_is_unknown_location() -> None:
    diag = Diagnostic(message="boom")
    assert diag.span == Span()
    assert format_diagnostic(diag) == "<unknown>:?:?: warning: boom"


def test_span_from_loc_fills_file() -> None:
    span = Span.from_loc(Located(line=3, column=5), file="a.go")
    assert (span.file, span.line, span.column) == ("a.go", 3, 5)
    assert Span.from_loc(Span(line=1), file="b.go").file == "b.go"
    assert Span.from_loc(None, file="c.go") == Span(file="c.go")


def test_json_and_ordering() -> None:
    late = Diagnostic(message="b", code="E-X", span=Span(file="a.go", line=9, column=1))
    early = Diagnostic(message="a", code="E-X", span=Span(file="a.go", line=2, column=4), notes=["n"])
    assert sorted([late, early], key=sort_key) == [early, late]
    assert diagnostic_to_json(early) == {
        "code": "E-X",
        "message": "a",
        "severity": "warning",
        "file": "a.go",
        "line": 2,
        "column": 4,
        "notes": ["n"],
    }
