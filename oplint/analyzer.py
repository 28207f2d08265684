"""
Analysis driver: find Go files, parse them, and run the op rules over every
function declaration.

Failures to read or parse a file are reported as diagnostics for that file;
the remaining files are still analysed. Results are always sorted so repeated
runs over the same input produce identical output.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

from lark import UnexpectedInput

from . import parser
from .ast import File
from .collect import collect_func_decls
from .diagnostics import PARSE_CODE, READ_CODE, Diagnostic, Span, sort_key
from .extract import extract_function
from .rules import evaluate

GO_SUFFIX = ".go"


@dataclass(frozen=True)
class Config:
    report_missing: bool = False
    package: Optional[str] = None  # overrides the package clause when set


def analyze_file(file: File, config: Config, filename: Optional[str] = None) -> List[Diagnostic]:
    package_name = config.package or file.package.name
    diags: List[Diagnostic] = []
    for decl in collect_func_decls(file):
        record = extract_function(decl, package_name)
        diags.extend(evaluate(record, report_missing=config.report_missing, filename=filename))
    diags.sort(key=sort_key)
    return diags


def analyze_source(source: str, config: Config, filename: str = "<input>") -> List[Diagnostic]:
    try:
        file = parser.parse_file(source)
    except UnexpectedInput as exc:
        return [_parse_error(exc, filename)]
    except parser.ParseError as exc:
        return [
            Diagnostic(
                message=f"parse error: {exc}",
                code=PARSE_CODE,
                severity="error",
                span=Span.from_loc(exc.loc, file=filename),
            )
        ]
    return analyze_file(file, config, filename=filename)


def collect_files(paths: Iterable[str | Path]) -> List[Path]:
    seen = set()
    found: List[Path] = []
    for target in paths:
        base = Path(target)
        if base.is_file():
            candidates: Iterable[Path] = [base] if base.suffix == GO_SUFFIX else []
        elif base.is_dir():
            candidates = base.rglob(f"*{GO_SUFFIX}")
        else:
            candidates = []
        for path in candidates:
            if not path.is_file():
                continue
            resolved = path.resolve()
            if resolved not in seen:
                seen.add(resolved)
                found.append(path)
    return sorted(found)


def analyze_paths(paths: Iterable[str | Path], config: Config) -> List[Diagnostic]:
    diags: List[Diagnostic] = []
    for path in collect_files(paths):
        diags.extend(_analyze_path(path, config))
    diags.sort(key=sort_key)
    return diags


def _analyze_path(path: Path, config: Config) -> List[Diagnostic]:
    filename = str(path)
    try:
        source = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        return [
            Diagnostic(
                message=f"cannot read file: {exc}",
                code=READ_CODE,
                severity="error",
                span=Span(file=filename),
            )
        ]
    return analyze_source(source, config, filename=filename)


def _parse_error(exc: UnexpectedInput, filename: str) -> Diagnostic:
    text = str(exc).strip()
    summary = text.splitlines()[0] if text else exc.__class__.__name__
    # lark reports -1 when the error has no position (end of input)
    line = exc.line if getattr(exc, "line", -1) > 0 else None
    column = exc.column if getattr(exc, "column", -1) > 0 else None
    return Diagnostic(
        message=f"parse error: {summary}",
        code=PARSE_CODE,
        severity="error",
        span=Span(file=filename, line=line, column=column, raw=exc),
    )
